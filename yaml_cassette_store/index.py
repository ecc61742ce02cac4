from __future__ import annotations
import io
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from .codec import YamlCodec
from .progress import Progress
from .reader import LineSource, ScanState, read_raw_record

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    request: Any
    byte_pos: int


class LookupIndex:
    """
    Position -> byte offset of every record in a cassette, in file order.

    Instances are immutable once built; the owning store drops the whole
    index on mutation and builds a new one on next access.
    """
    def __init__(self, entries: Sequence[IndexEntry] = ()) -> None:
        self._entries: List[IndexEntry] = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries)

    def get(self, position: int) -> Optional[IndexEntry]:
        if 0 <= position < len(self._entries):
            return self._entries[position]
        return None

    def has(self, position: int) -> bool:
        return 0 <= position < len(self._entries)

    @property
    def offsets(self) -> List[int]:
        return [e.byte_pos for e in self._entries]

    @classmethod
    def build(
        cls,
        fh: LineSource,
        state: ScanState,
        codec: YamlCodec,
        *,
        encoding: str = "utf-8",
        total_bytes: int = 0,
        progress: Optional[Progress] = None,
    ) -> "LookupIndex":
        """
        One linear scan from the start of the file. Any exception aborts the
        build before an index object exists, so callers never see a partial one.
        """
        progress = progress or Progress()
        progress.emit("index.start", 0, f"{total_bytes} bytes")

        state.reset()
        fh.seek(0, io.SEEK_SET)
        entries: List[IndexEntry] = []
        while True:
            raw = read_raw_record(fh, state, encoding=encoding)
            if not raw:
                break
            decoded = codec.decode(raw)
            first = decoded[0] if decoded else None
            request = first.get("request") if isinstance(first, dict) else None
            entries.append(IndexEntry(request=request, byte_pos=state.latest_byte_position or 0))
            state.latest_byte_position = None
            progress.step("index.scan", fh.tell(), total_bytes)

        fh.seek(0, io.SEEK_SET)
        state.reset()
        progress.emit("index.done", 100, f"{len(entries)} records")
        log.debug("built lookup index: %d records", len(entries))
        return cls(entries)
