from __future__ import annotations
import io
import logging
import os
from typing import BinaryIO, Optional

from .errors import CassetteIOError, StoreClosedError

log = logging.getLogger(__name__)

_MODES = {"+": "r+b", "r": "rb"}


class FileStorage:
    """
    Byte-level I/O over one cassette file.

    The handle is binary so that every offset returned by tell() and every
    length of a readline() result is an exact byte count. All OSErrors are
    re-raised as CassetteIOError with the path attached.
    """
    def __init__(self, path: str) -> None:
        self.path = path
        self._fh: Optional[BinaryIO] = None
        self.mode: Optional[str] = None
        self.created = False

    def open(self, mode: str = "+") -> None:
        """
        Open the file. '+' is read/write and creates the file (and its
        directory) when absent; 'r' is read-only and requires the file.
        """
        if mode not in _MODES:
            raise ValueError(f"unsupported mode {mode!r}; expected one of {sorted(_MODES)}")
        if self._fh is not None:
            return
        try:
            if mode == "+":
                parent = os.path.dirname(self.path)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
                    # Create the file without truncating existing content
                    with open(self.path, "ab"):
                        pass
                    self.created = True
            elif os.path.getsize(self.path) == 0:
                self.created = True
            self._fh = open(self.path, _MODES[mode])
        except OSError as e:
            raise CassetteIOError(e.errno, f"cannot open cassette: {e.strerror}", self.path) from e
        self.mode = mode
        log.debug("opened cassette %s (mode=%s, new=%s)", self.path, mode, self.created)

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.close()
        finally:
            self._fh = None
            log.debug("closed cassette %s", self.path)

    @property
    def closed(self) -> bool:
        return self._fh is None

    @property
    def writable(self) -> bool:
        return self.mode == "+"

    def _handle(self) -> BinaryIO:
        if self._fh is None:
            raise StoreClosedError(f"cassette {self.path} is closed")
        return self._fh

    def _fail(self, e: OSError, what: str) -> CassetteIOError:
        return CassetteIOError(e.errno, f"cannot {what} cassette: {e.strerror}", self.path)

    # ----- Line-oriented reads -----

    def readline(self) -> bytes:
        """Return the next line including its terminator, or b'' at end of file."""
        try:
            return self._handle().readline()
        except OSError as e:
            raise self._fail(e, "read") from e

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        try:
            return self._handle().seek(offset, whence)
        except OSError as e:
            raise self._fail(e, "seek") from e

    def tell(self) -> int:
        try:
            return self._handle().tell()
        except OSError as e:
            raise self._fail(e, "seek") from e

    def rewind(self) -> None:
        self.seek(0, io.SEEK_SET)

    def size(self) -> int:
        try:
            return os.fstat(self._handle().fileno()).st_size
        except OSError as e:
            raise self._fail(e, "stat") from e

    # ----- Writes -----

    def write(self, data: bytes) -> int:
        try:
            return self._handle().write(data)
        except OSError as e:
            raise self._fail(e, "write") from e

    def flush(self, fsync: bool = True) -> None:
        fh = self._handle()
        try:
            fh.flush()
            if fsync:
                os.fsync(fh.fileno())
        except OSError as e:
            raise self._fail(e, "flush") from e

    def read_at(self, offset: int, length: int) -> bytes:
        """Read raw bytes at offset; the current position is left after them."""
        self.seek(offset)
        try:
            return self._handle().read(length)
        except OSError as e:
            raise self._fail(e, "read") from e
