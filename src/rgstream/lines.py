"""Reassembly of complete lines from a chunked text stream"""

import re

LINE_TERMINATOR = re.compile(r'\r\n|\n')


class LineReassembler:
    """Splits incoming text into complete lines.

    The trailing fragment of a chunk (text after the last terminator) is held
    back as carry-over and prepended to the next chunk. ``\\r\\n`` and ``\\n``
    terminate a line, a lone ``\\r`` does not.
    """

    def __init__(self):
        self._carry_over: str | None = None

    @property
    def carry_over(self) -> str | None:
        return self._carry_over

    def feed(self, text: str) -> list[str]:
        data = self._carry_over + text if self._carry_over else text
        parts = LINE_TERMINATOR.split(data)
        # Last segment is either '' (data ended on a terminator) or an unterminated fragment
        tail = parts.pop()
        self._carry_over = tail or None
        return [part.strip() for part in parts]

    def drain(self) -> str | None:
        """Return the pending fragment as a final line and forget it."""
        tail, self._carry_over = self._carry_over, None
        return tail.strip() if tail is not None else None

    def reset(self) -> None:
        self._carry_over = None
