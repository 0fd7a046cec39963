"""Pydantic models for match records, search options and API responses"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rgstream.config import DEFAULT_CONTEXT_WIDTH, PER_SPAN


class LineMatch(BaseModel):
    """A single located occurrence inside a file.

    Attributes:
        origin: Full path as reported by ripgrep's file header
        filename: Last path segment of origin
        line_number: 0-based line number
        left_context: Text before the match, at most context-width characters
        match_text: The highlighted text, unbounded
        right_context: Text after the match, at most context-width characters
    """

    model_config = ConfigDict(frozen=True)

    origin: str = Field(..., examples=['/var/log/app.log'], description='Path reported by ripgrep')
    filename: str = Field(..., examples=['app.log'], description='Last path segment of origin')
    line_number: int = Field(..., examples=[41], description='Line number (0-based)')
    left_context: str = Field(default='', description='Text preceding the match')
    match_text: str = Field(..., examples=['error'], description='The matched text')
    right_context: str = Field(default='', description='Text following the match')

    @classmethod
    def create(
        cls, origin: str, line_number: int, left_context: str, match_text: str, right_context: str
    ) -> 'LineMatch':
        return cls(
            origin=origin,
            filename=origin.split('/')[-1],
            line_number=line_number,
            left_context=left_context,
            match_text=match_text,
            right_context=right_context,
        )


class SearchOptions(BaseModel):
    """Options that shape the ripgrep command line and the context slices"""

    regex: bool = Field(default=False, description='Treat the query as a regex (otherwise --fixed-strings)')
    usecase: bool = Field(default=False, description='Case-sensitive search (otherwise --ignore-case)')
    word: bool = Field(default=False, description='Match whole words only (--word-regexp)')
    context: int = Field(
        default=DEFAULT_CONTEXT_WIDTH, ge=0, description='Characters of context kept on each side of a match'
    )
    per_span: bool = Field(default=PER_SPAN, description='Emit one record per highlighted run instead of per line')


class SearchRequest(BaseModel):
    query: str = Field(..., description='Search term passed verbatim to ripgrep')
    paths: list[str] = Field(..., description='Corpus root paths')
    options: SearchOptions = Field(default_factory=SearchOptions)


class SearchResponse(BaseModel):
    """Result of a single search invocation"""

    query: str = Field(..., examples=['error'])
    paths: list[str] = Field(..., examples=[['/var/log']])
    options: SearchOptions
    time: float = Field(..., description='Search time in seconds')
    exit_code: int | None = Field(None, description='ripgrep exit code (None if cancelled before exit)')
    matches: list[LineMatch] = Field(default_factory=list, description='Matches in ripgrep output order')

    def to_cli(self, colorize: bool = False) -> str:
        """Format search response for CLI output."""
        GREY = '\033[90m'
        CYAN = '\033[36m'
        YELLOW = '\033[33m'
        BOLD_RED = '\033[1;31m'
        BOLD_GREEN = '\033[1;32m'
        RESET = '\033[0m'

        lines = []
        if colorize:
            lines.append(f'{GREY}Query:{RESET} {self.query}')
            lines.append(f'{GREY}Paths:{RESET} {", ".join(self.paths)}')
            lines.append(f'{GREY}Time:{RESET} {YELLOW}{self.time:.3f}s{RESET}')
            lines.append(f'{GREY}Matches:{RESET} {BOLD_GREEN}{len(self.matches)}{RESET}')
        else:
            lines.append(f'Query: {self.query}')
            lines.append(f'Paths: {", ".join(self.paths)}')
            lines.append(f'Time: {self.time:.3f}s')
            lines.append(f'Matches: {len(self.matches)}')

        if self.matches:
            lines.append('')
        for match in self.matches:
            # Displayed line numbers are 1-based like ripgrep's own output
            if colorize:
                lines.append(
                    f'  {CYAN}{match.origin}{RESET}{GREY}:{RESET}{YELLOW}{match.line_number + 1}{RESET}'
                    f'{GREY}:{RESET} {match.left_context}{BOLD_RED}{match.match_text}{RESET}{match.right_context}'
                )
            else:
                lines.append(
                    f'  {match.origin}:{match.line_number + 1}: '
                    f'{match.left_context}[{match.match_text}]{match.right_context}'
                )

        return '\n'.join(lines)


class HealthResponse(BaseModel):
    """Health check response with system introspection data"""

    status: str = Field(..., examples=['ok'])
    ripgrep_available: bool = Field(..., examples=[True])
    ripgrep_path: str | None = Field(None, description='Resolved ripgrep binary')
    app_version: str = Field(..., examples=['0.1.0'])
    python_version: str = Field(..., examples=['3.13.1'])
    os_info: dict[str, str] = Field(default_factory=dict)
    system_resources: dict[str, Any] = Field(default_factory=dict)
    python_packages: dict[str, str] = Field(default_factory=dict)
    constants: dict[str, Any] = Field(default_factory=dict)
    environment: dict[str, str] = Field(default_factory=dict)
