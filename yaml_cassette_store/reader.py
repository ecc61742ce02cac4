from __future__ import annotations
import io
from typing import Optional, Protocol

from .errors import DecodeError


class LineSource(Protocol):
    def readline(self) -> bytes: ...
    def seek(self, offset: int, whence: int = ...) -> int: ...
    def tell(self) -> int: ...


class ScanState:
    """
    Transient scan position shared by the raw reader and the index build.
    Each RecordStore owns exactly one instance.
    """
    __slots__ = ("eof", "latest_byte_position")

    def __init__(self) -> None:
        self.eof = False
        self.latest_byte_position: Optional[int] = None

    def reset(self) -> None:
        self.eof = False
        self.latest_byte_position = None

    def __repr__(self) -> str:
        return f"ScanState(eof={self.eof}, latest_byte_position={self.latest_byte_position})"


def is_marker_line(line: bytes) -> bool:
    """A top-level sequence item: '-' in column zero followed by blank or line end."""
    if not line.startswith(b"-"):
        return False
    return len(line) == 1 or line[1:2] in (b" ", b"\t", b"\n", b"\r")


def read_raw_record(fh: LineSource, state: ScanState, start_byte: Optional[int] = None,
                    encoding: str = "utf-8") -> str:
    """
    Return the raw text of the next whole record.

    Lines before the first marker line are skipped. The record runs up to, but
    not including, the next marker line, which is pushed back so that the
    handle is left exactly at the start of the following record. At end of
    file state.eof is set and whatever was accumulated (possibly '') is
    returned.
    """
    if start_byte is not None:
        fh.seek(start_byte, io.SEEK_SET)

    in_record = False
    chunks = []
    while True:
        line = fh.readline()
        if not line:
            state.eof = True
            break
        marker = is_marker_line(line)
        if in_record and marker:
            fh.seek(-len(line), io.SEEK_CUR)
            break
        if not in_record and marker:
            in_record = True
            state.latest_byte_position = fh.tell() - len(line)
        if in_record:
            chunks.append(line)

    try:
        return b"".join(chunks).decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(f"record is not valid {encoding}: {e}") from e
