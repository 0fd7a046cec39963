"""Extraction of highlighted match spans from a ripgrep match payload"""

from dataclasses import dataclass

from rgstream.models import LineMatch

# ripgrep with `--colors match:fg:red --colors match:style:nobold` brackets every
# highlighted run as <reset><red>text<reset>. Older releases spell the reset
# ESC[m, current ones ESC[0m. Every end marker is a prefix of a start marker, so
# start markers must always be tested first.
MATCH_END_MARKER = '\x1b[m'
MATCH_START_MARKER = '\x1b[m\x1b[31m'
END_MARKERS = (MATCH_END_MARKER, '\x1b[0m')
START_MARKERS = tuple(reset + '\x1b[31m' for reset in END_MARKERS)


@dataclass(frozen=True)
class MatchSpan:
    """One highlighted run inside a payload, with its surrounding context already trimmed"""

    left_context: str
    match_text: str
    right_context: str


def trim_left(text: str, width: int) -> str:
    """Keep the last `width` characters (closest to the match)."""
    return text[-width:] if width > 0 else ''


def trim_right(text: str, width: int) -> str:
    """Keep the first `width` characters (closest to the match)."""
    return text[:width] if width > 0 else ''


def _marker_at(payload: str, i: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if payload.startswith(marker, i):
            return marker
    return None


def _scan(payload: str) -> tuple[list[tuple[str, int, int, int]], list[int]]:
    """
    Walk the payload once and locate every closed highlighted run.

    Returns:
        Tuple of (closed, opened) where closed holds (raw_left, match_start, match_end, after_end)
        per run, match_start/match_end delimiting the match text and after_end pointing past the
        end marker, and opened lists the offset of every start marker seen.
    """
    closed = []
    opened = []
    boundary = 0
    match_start = -1
    raw_left = ''

    # No end marker can begin in the last len(shortest END) - 1 characters
    limit = len(payload) - (len(MATCH_END_MARKER) - 1)
    i = 0
    while i < limit:
        start_marker = _marker_at(payload, i, START_MARKERS)
        if start_marker:
            raw_left = payload[boundary:i]
            opened.append(i)
            i += len(start_marker)
            match_start = i
            continue

        end_marker = _marker_at(payload, i, END_MARKERS)
        if end_marker:
            if match_start >= 0:
                closed.append((raw_left, match_start, i, i + len(end_marker)))
                match_start = -1
                i += len(end_marker)
                boundary = i
            else:
                # stray reset outside a highlighted run
                i += len(end_marker)
        else:
            i += 1
    return closed, opened


def extract_spans(payload: str, context_width: int) -> list[MatchSpan]:
    """
    Split a match payload into (left, match, right) spans.

    The right context of a span runs from its end marker to the next start
    marker, or to the end of the payload for the last span.
    """
    closed, opened = _scan(payload)
    spans = []
    for raw_left, match_start, match_end, right_start in closed:
        right_stop = next((pos for pos in opened if pos >= right_start), len(payload))
        spans.append(
            MatchSpan(
                left_context=trim_left(raw_left, context_width),
                match_text=payload[match_start:match_end],
                right_context=trim_right(payload[right_start:right_stop], context_width),
            )
        )
    return spans


class MatchExtractor:
    """Builds LineMatch records from match payloads.

    By default a line produces at most one record: the last highlighted run on
    the line, with the right context taken from everything after the last end
    marker. This mirrors how the search UI has always displayed results. With
    ``per_span=True`` every highlighted run becomes its own record.
    """

    def __init__(self, context_width: int, per_span: bool = False):
        if context_width < 0:
            raise ValueError(f"context_width must be non-negative, got {context_width}")
        self.context_width = context_width
        self.per_span = per_span

    def extract(self, origin: str, line_number: int, payload: str) -> list[LineMatch]:
        if self.per_span:
            return [
                LineMatch.create(origin, line_number, span.left_context, span.match_text, span.right_context)
                for span in extract_spans(payload, self.context_width)
            ]

        closed, _ = _scan(payload)
        if not closed:
            return []
        raw_left, match_start, match_end, boundary = closed[-1]
        return [
            LineMatch.create(
                origin,
                line_number,
                trim_left(raw_left, self.context_width),
                payload[match_start:match_end],
                trim_right(payload[boundary:], self.context_width),
            )
        ]
