from __future__ import annotations
import sys
from typing import List, Optional, Protocol, TextIO


class Sink(Protocol):
    """
    Write only destination for formatted lines.

    Backends hold a reference only. Opening and closing the underlying
    channel is the owner's job.
    """

    def write_line(self, line: str) -> None:
        ...


class StreamSink:
    """
    Writes each line to a text stream and flushes right away.

    With no stream given, writes to whatever sys.stdout is at call time.
    Errors from the stream are not caught here, a broken output channel
    must reach the caller.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def write_line(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()


class MemorySink:
    """
    Collects lines in a list. Useful for tests and embedding hosts.
    """

    def __init__(self):
        self.lines: List[str] = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)
