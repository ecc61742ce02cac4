from __future__ import annotations
import errno
import io
import logging
import os
from typing import Any, Dict, Iterator, Optional, Tuple

from .codec import DEFAULT_INDENT, YamlCodec
from .errors import CassetteIOError, EncodeError, IOCorruptionError, StoreClosedError
from .index import IndexEntry, LookupIndex
from .progress import Progress, ProgressCallback
from .reader import ScanState, read_raw_record
from .storage import FileStorage

log = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "indent": DEFAULT_INDENT,
    "encoding": "utf-8",
    "fsync": True,
}


def _resolve_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    resolved = dict(DEFAULT_OPTIONS)
    for key, value in (options or {}).items():
        if key not in DEFAULT_OPTIONS:
            raise ValueError(f"unknown cassette option {key!r}")
        resolved[key] = value
    indent = resolved["indent"]
    if not isinstance(indent, int) or isinstance(indent, bool) or not 2 <= indent <= 9:
        raise ValueError(f"indent must be an int between 2 and 9, got {indent!r}")
    return resolved


class RecordStore:
    """
    Append-only YAML cassette with a forward cursor.

    Records are appended at the end of a YAML list. Reading goes through a
    lookup index of byte offsets that is built by one scan on first access
    and dropped on every append, so each current() call parses only one
    record and memory stays bounded by the largest record.

    The iteration protocol mirrors an external iterator:

        store.rewind()
        while store.valid():
            rec = store.current()
            store.next()

    rewind() returns the cursor to the last position reached by next(), not
    to zero. A store that has been fully iterated stays exhausted after
    rewind(); recording harnesses rely on this to continue where playback
    stopped.
    """

    def __init__(
        self,
        path: str,
        *,
        mode: str = "+",
        codec: Optional[YamlCodec] = None,
        on_progress: Optional[ProgressCallback] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.path = path
        self._options = _resolve_options(options)
        self._codec = codec or YamlCodec()
        self._fs = FileStorage(path)
        self._progress = Progress(on_progress)
        self._state = ScanState()
        self._index: Optional[LookupIndex] = None
        self._position = 0
        self._latest_position = 0
        self._broken = False
        self._fs.open(mode)

    @classmethod
    def open(cls, cassette_path: str, cassette_name: str, **kwargs: Any) -> "RecordStore":
        """Open cassette_name inside an existing cassette_path directory."""
        if not os.path.isdir(cassette_path):
            raise CassetteIOError(
                errno.ENOENT,
                f"cassette path {cassette_path!r} does not exist or is not a directory",
                cassette_path,
            )
        return cls(os.path.join(cassette_path, cassette_name), **kwargs)

    # ----- Lifecycle -----

    def close(self) -> None:
        self._reset_lookup_cache()
        self._fs.close()

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_new(self) -> bool:
        """True when the cassette file was missing or empty at open time."""
        return self._fs.created

    @property
    def closed(self) -> bool:
        return self._fs.closed

    def __repr__(self) -> str:
        state = "closed" if self.closed else ("broken" if self._broken else "open")
        return f"<RecordStore {self.path!r} {state} position={self._position}>"

    # ----- Writes -----

    def append(self, record: Dict[str, Any]) -> None:
        """
        Write one record at the end of the cassette.

        The new block overwrites the file's trailing newline with its own
        leading newline and ends with a newline itself, so the file keeps
        exactly one trailing byte after the last record.
        """
        self._check_usable()
        if not self._fs.writable:
            raise CassetteIOError(errno.EBADF, "cassette was opened read-only", self.path)

        encoding = self._options["encoding"]
        try:
            data = ("\n" + self._codec.encode([record], self._options["indent"])).encode(encoding)
        except UnicodeEncodeError as e:
            raise EncodeError(f"record cannot be encoded as {encoding}: {e}") from e

        self._progress.emit("append.start", 0)
        size = self._fs.size()
        offset = size
        if size > 0 and self._fs.read_at(size - 1, 1) == b"\n":
            offset = size - 1
        self._fs.seek(offset, io.SEEK_SET)
        try:
            self._fs.write(data)
            self._fs.flush(fsync=self._options["fsync"])
        except CassetteIOError as e:
            self._broken = True
            raise IOCorruptionError(
                e.errno, f"append did not complete, cassette may be corrupt: {e.strerror}", self.path
            ) from e
        finally:
            # Every write invalidates the byte offsets
            self._reset_lookup_cache()
        self._progress.emit("append.done", 100, f"{len(data)} bytes at {offset}")
        log.debug("appended %d bytes to %s at offset %d", len(data), self.path, offset)

    # ----- Index lifecycle -----

    def ensure_indexed(self) -> LookupIndex:
        self._check_usable()
        if self._index is None:
            self._index = LookupIndex.build(
                self._fs,
                self._state,
                self._codec,
                encoding=self._options["encoding"],
                total_bytes=self._fs.size(),
                progress=self._progress,
            )
        return self._index

    @property
    def indexed(self) -> bool:
        return self._index is not None

    @property
    def entries(self) -> Tuple[IndexEntry, ...]:
        return tuple(self.ensure_indexed())

    def _reset_lookup_cache(self) -> None:
        if self._index is not None:
            log.debug("lookup index for %s invalidated", self.path)
        self._index = None
        self._state.latest_byte_position = None

    def _reset_file_position(self) -> None:
        self._fs.rewind()
        self._state.reset()

    def _check_usable(self) -> None:
        if self._fs.closed:
            raise StoreClosedError(f"cassette {self.path} is closed")
        if self._broken:
            raise IOCorruptionError(
                errno.EIO, "a previous append failed; cassette is no longer usable", self.path
            )

    # ----- Iteration protocol -----

    def valid(self) -> bool:
        return self.ensure_indexed().has(self._position)

    def current(self) -> Optional[Dict[str, Any]]:
        """
        Decode the record under the cursor.

        Returns {} when the cursor has no index entry (including before the
        index has been built by valid()), and None when the record decodes to
        nothing.
        """
        self._check_usable()
        entry = self._index.get(self._position) if self._index is not None else None
        if entry is None:
            return {}
        raw = read_raw_record(self._fs, self._state, entry.byte_pos, encoding=self._options["encoding"])
        decoded = self._codec.decode(raw)
        if not decoded or not decoded[0]:
            return None
        return decoded[0]

    def key(self) -> int:
        return self._position

    def next(self) -> None:
        self._check_usable()
        self._position += 1
        self._latest_position = self._position

    def rewind(self) -> None:
        self._reset_file_position()
        self._position = self._latest_position

    def __iter__(self) -> Iterator[Optional[Dict[str, Any]]]:
        self.rewind()
        while self.valid():
            yield self.current()
            self.next()
