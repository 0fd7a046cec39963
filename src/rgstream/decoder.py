"""Incremental text decoding of process output"""

import codecs
import logging

logger = logging.getLogger(__name__)


class TextDecoder:
    """Turns raw stdout chunks into well-formed text.

    A chunk that ends in the middle of a multi-byte character keeps the
    incomplete tail buffered until the next call. Invalid bytes are replaced
    with U+FFFD instead of raising. Chunks that are already ``str`` are passed
    through untouched, so the rest of the pipeline works with either transport.
    """

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors='replace')

    def decode(self, chunk: bytes | str) -> str:
        if isinstance(chunk, str):
            return chunk
        return self._decoder.decode(chunk, final=False)

    def flush(self) -> str:
        """Emit whatever is still buffered. Called once at end of stream."""
        pending, _ = self._decoder.getstate()
        if pending:
            logger.debug(f"[DECODER] Flushing {len(pending)} incomplete trailing byte(s)")
        text = self._decoder.decode(b'', final=True)
        self._decoder.reset()
        return text

    @property
    def pending_bytes(self) -> int:
        pending, _ = self._decoder.getstate()
        return len(pending)
