"""
brainf Streams

The three byte collaborators the engine talks to:

- SourceStream: seekable program text, backed by a KaitaiStream so the
  engine can read a byte, ask for its offset and seek back to a loop start.
- InputStream: one byte at a time from any binary reader.
- OutputStream: one byte at a time to any binary writer.

Opening files and defaulting to the standard streams is the harness's job;
`open_source` and `open_input` are the helpers the CLI uses for that.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Union

from kaitaistruct import KaitaiStream

from brainf.errors import EngineError, ErrorKind


class SourceStream:
    """Seekable program source."""

    def __init__(self, stream: BinaryIO) -> None:
        if hasattr(stream, "seekable") and not stream.seekable():
            raise EngineError(ErrorKind.IO_FAULT, 0, "Source could not be read: stream is not seekable")
        self._stream = KaitaiStream(stream)

    @classmethod
    def of(cls, source: Union[str, bytes, bytearray, BinaryIO, SourceStream]) -> SourceStream:
        """Wrap program text, raw bytes or an open binary file."""
        if isinstance(source, SourceStream):
            return source
        if isinstance(source, str):
            return cls(io.BytesIO(source.encode("utf-8")))
        if isinstance(source, (bytes, bytearray)):
            return cls(io.BytesIO(bytes(source)))
        if isinstance(source, io.TextIOBase):
            raise TypeError(f"Cannot read program source from {type(source)}; open it in binary mode")
        if hasattr(source, "read") and hasattr(source, "seek"):
            return cls(source)
        raise TypeError(f"Cannot read program source from {type(source)}")

    def read_one_byte(self) -> Optional[int]:
        if self._stream.is_eof():
            return None
        return self._stream.read_u1()

    def current_offset(self) -> int:
        return self._stream.pos()

    def seek_to(self, offset: int) -> None:
        self._stream.seek(offset)

    def close(self) -> None:
        self._stream.close()


class InputStream:
    """Program input; need not be seekable."""

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream

    @classmethod
    def of(cls, source: Union[None, bytes, bytearray, str, BinaryIO, InputStream]) -> InputStream:
        if isinstance(source, InputStream):
            return source
        if source is None:
            return cls(None)
        if isinstance(source, str):
            return cls(io.BytesIO(source.encode("utf-8")))
        if isinstance(source, (bytes, bytearray)):
            return cls(io.BytesIO(bytes(source)))
        return cls(source)

    def read_one_byte(self) -> Optional[int]:
        if self._stream is None:
            return None
        data = self._stream.read(1)
        if not data:
            return None
        return data[0]


class OutputStream:
    """Program output sink."""

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream if stream is not None else io.BytesIO()

    @classmethod
    def of(cls, sink: Union[None, BinaryIO, OutputStream]) -> OutputStream:
        if isinstance(sink, OutputStream):
            return sink
        return cls(sink)

    def write_one_byte(self, byte: int) -> None:
        self._stream.write(bytes((byte,)))

    def flush(self) -> None:
        self._stream.flush()

    def getvalue(self) -> bytes:
        """Bytes written so far, when the sink is an in-memory buffer."""
        if isinstance(self._stream, io.BytesIO):
            return self._stream.getvalue()
        return b""


# ============================================================================
# Harness helpers
# ============================================================================

def open_source(path: Union[str, Path]) -> SourceStream:
    """Open a program file, or raise SOURCE_UNAVAILABLE."""
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise EngineError(ErrorKind.SOURCE_UNAVAILABLE, 0,
                          f"Source file doesn't exist. ({e.strerror}: {path})")
    try:
        return SourceStream(handle)
    except EngineError:
        handle.close()
        raise


def open_input(path: Optional[str]) -> BinaryIO:
    """Program input: a named file, or stdin for None / "stdin"."""
    if path is None or path == "stdin":
        return sys.stdin.buffer
    try:
        return open(path, "rb")
    except OSError as e:
        raise EngineError(ErrorKind.SOURCE_UNAVAILABLE, 0,
                          f"Program input file doesn't exist. ({e.strerror}: {path})")


def open_output(path: Optional[str]) -> BinaryIO:
    """Program output: a named file, or stdout for None / "stdout"."""
    if path is None or path == "stdout":
        return sys.stdout.buffer
    try:
        return open(path, "wb")
    except OSError as e:
        raise EngineError(ErrorKind.IO_FAULT, 0,
                          f"Output file could not be opened. ({e.strerror}: {path})")
