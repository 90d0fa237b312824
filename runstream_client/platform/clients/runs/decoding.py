"""Incremental text decoding for chunked run streams.

Chunk boundaries are arbitrary: a chunk may end inside a multi-byte UTF-8
character or in the middle of a line. Both decoders here keep the incomplete
tail buffered until the next call.
"""

import codecs


class ByteDecoder:
    """Decodes byte chunks to text, holding back incomplete UTF-8 sequences."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def decode(self, chunk: bytes, *, final: bool = False) -> str:
        """Decode a chunk.

        Args:
            chunk: Raw bytes from the transport.
            final: True on the last call; flushes buffered bytes, replacing
                any invalid trailing sequence with U+FFFD.

        Returns:
            Text for every complete character available so far.
        """
        text = self._decoder.decode(chunk, final)
        if final:
            self._decoder.reset()
        return text


class LineAccumulator:
    """Splits a text stream into lines across feed() calls.

    Lines are terminated by ``\\n`` or ``\\r\\n``; the terminator is not part
    of the returned line.
    """

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, text: str) -> list[str]:
        if not text:
            return []

        parts = (self._pending + text).split("\n")
        self._pending = parts.pop()
        return [_strip_cr(line) for line in parts]

    def flush(self) -> str | None:
        """Drain the pending partial line, treating end of stream as a terminator."""
        line = _strip_cr(self._pending)
        self._pending = ""
        return line or None


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line
