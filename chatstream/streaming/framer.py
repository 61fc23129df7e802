"""Newline framing over a UTF-8 byte stream."""

import codecs
import logging

logger = logging.getLogger(__name__)


class LineFramer:
    """Split incoming byte chunks into complete text lines.

    Bytes go through an incremental UTF-8 decoder, so a multi-byte
    character split across two chunks is decoded only once both halves
    have arrived. Text after the last newline is carried over to the
    next chunk.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._carry = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return every line it completes, without newlines."""
        text = self._carry + self._decoder.decode(chunk)
        *lines, self._carry = text.split("\n")
        return [line.removesuffix("\r") for line in lines]

    def close(self) -> str:
        """End the stream and return the discarded unterminated remainder."""
        remainder = self._carry + self._decoder.decode(b"", final=True)
        self._carry = ""
        self._decoder.reset()
        if remainder:
            logger.debug(f"Discarding unterminated trailing frame ({len(remainder)} chars)")
        return remainder
