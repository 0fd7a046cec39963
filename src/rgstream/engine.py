"""Streaming parser that turns chunked ripgrep output into LineMatch records"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from rgstream import prometheus as prom
from rgstream.classify import LineKind, classify_line
from rgstream.decoder import TextDecoder
from rgstream.extract import MatchExtractor
from rgstream.lines import LineReassembler
from rgstream.models import LineMatch

logger = logging.getLogger(__name__)


class ProtocolError(RuntimeError):
    """ripgrep output violated the heading protocol (a match line came before any file header)."""


@dataclass
class ParserState:
    origin: str | None = None
    finished: bool = False
    failed: bool = False


class MatchAccumulator:
    """Append-only, insertion-ordered collection of LineMatch records"""

    def __init__(self):
        self._matches: list[LineMatch] = []

    def append(self, match: LineMatch) -> None:
        self._matches.append(match)

    def extend(self, matches: list[LineMatch]) -> None:
        self._matches.extend(matches)

    @property
    def matches(self) -> list[LineMatch]:
        return list(self._matches)

    def __len__(self) -> int:
        return len(self._matches)

    def __iter__(self) -> Iterator[LineMatch]:
        return iter(self._matches)


class MatchSink(Protocol):
    """Receiver of search results"""

    def update_matches(self, matches: list[LineMatch]) -> None: ...

    def stop(self) -> None: ...


class CollectingSink:
    """In-memory MatchSink, used by the CLI, the web API and tests"""

    def __init__(self):
        self.matches: list[LineMatch] = []
        self.stopped = False

    def update_matches(self, matches: list[LineMatch]) -> None:
        self.matches = list(matches)

    def stop(self) -> None:
        self.stopped = True


class StreamParser:
    """
    Incremental parser for `rg --heading --line-number --color ansi` output.

    One instance serves exactly one search. Chunks must be fed in arrival order
    and `finish()` called once when the process exits. After `finish()`, or
    after a ProtocolError, the parser ignores further input.
    """

    def __init__(self, context_width: int, per_span: bool = False, encoding: str = 'utf-8'):
        self.decoder = TextDecoder(encoding)
        self.reassembler = LineReassembler()
        self.extractor = MatchExtractor(context_width, per_span=per_span)
        self.accumulator = MatchAccumulator()
        self.state = ParserState()

    @property
    def matches(self) -> list[LineMatch]:
        return self.accumulator.matches

    @property
    def finished(self) -> bool:
        return self.state.finished

    def feed(self, chunk: bytes | str) -> list[LineMatch]:
        """Consume one stdout chunk. Returns the records completed by this chunk."""
        if self.state.finished:
            logger.debug('[PARSER] Ignoring chunk received after stream end')
            return []
        if isinstance(chunk, bytes):
            prom.record_chunk(len(chunk))
        text = self.decoder.decode(chunk)
        return self._handle_lines(self.reassembler.feed(text))

    def finish(self) -> list[LineMatch]:
        """Flush the decoder and parse any unterminated final line. Safe to call repeatedly."""
        if self.state.finished:
            return []
        produced = self._handle_lines(self.reassembler.feed(self.decoder.flush()))
        tail = self.reassembler.drain()
        if tail:
            produced.extend(self._handle_lines([tail]))
        self.state.finished = True
        logger.debug(f'[PARSER] Stream finished with {len(self.accumulator)} match(es)')
        return produced

    def _handle_lines(self, lines: list[str]) -> list[LineMatch]:
        produced = []
        for line in lines:
            classified = classify_line(line)
            if classified.kind is LineKind.MATCH_RESULT:
                if self.state.origin is None:
                    self._fail()
                    raise ProtocolError('Got match line for unknown file')
                records = self.extractor.extract(self.state.origin, classified.line_number, classified.payload)
                self.accumulator.extend(records)
                produced.extend(records)
            elif classified.kind is LineKind.FILE_HEADER:
                self.state.origin = classified.path
            # LineKind.OTHER: separators, context lines and notices are dropped
        return produced

    def _fail(self) -> None:
        prom.protocol_errors_total.inc()
        self.reassembler.reset()
        self.state.failed = True
        self.state.finished = True
