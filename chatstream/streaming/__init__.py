"""Streaming pipeline from response bytes to session snapshots.

Stages:
    - transport: cancellable byte-chunk source over httpx
    - framer: newline framing with UTF-8 carry-over
    - parser: marker detection and event classification
    - reconciler: pure fold of events into SessionState
"""

from chatstream.streaming.framer import LineFramer
from chatstream.streaming.parser import EVENT_PREFIX, parse_line
from chatstream.streaming.transport import (
    CancellationToken,
    StreamCancelled,
    StreamError,
    TransportError,
    open_stream,
)

__all__ = [
    "EVENT_PREFIX",
    "CancellationToken",
    "LineFramer",
    "StreamCancelled",
    "StreamError",
    "TransportError",
    "open_stream",
    "parse_line",
]
