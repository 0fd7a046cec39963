"""Classification of ripgrep --heading output lines"""

import re
from dataclasses import dataclass
from enum import Enum

from rgstream.extract import MATCH_END_MARKER

# <RESET>42<RESET>:payload  - RESET is ESC[m or ESC[0m; the payload stops at the first carriage return
RESULT_REGEX = re.compile(r'^\x1b\[0?m([0-9]+)\x1b\[0?m:([^\r\n]*)(\r?)')
# <RESET>/path/to/file<RESET>  - nothing may follow the closing reset
FILE_REGEX = re.compile(r'\x1b\[0?m([^\r\n]+)\x1b\[0?m')


class LineKind(Enum):
    FILE_HEADER = 'file_header'
    MATCH_RESULT = 'match_result'
    OTHER = 'other'


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    path: str | None = None
    line_number: int | None = None  # 0-based
    payload: str | None = None


OTHER_LINE = ClassifiedLine(LineKind.OTHER)


def classify_line(line: str) -> ClassifiedLine:
    """
    Decide what a single trimmed output line is.

    Match lines are tried first, then file headers. Everything else
    (separators, context lines, truncation notices) is OTHER.

    A carriage return right after the payload means ripgrep left the
    highlighted run open to the end of the line, so an end marker is appended
    to close it.
    """
    result = RESULT_REGEX.match(line)
    if result:
        payload = result.group(2)
        if result.group(3):
            payload += MATCH_END_MARKER
        return ClassifiedLine(
            LineKind.MATCH_RESULT,
            line_number=int(result.group(1)) - 1,
            payload=payload,
        )

    header = FILE_REGEX.fullmatch(line)
    if header:
        return ClassifiedLine(LineKind.FILE_HEADER, path=header.group(1))

    return OTHER_LINE
