from .store import RecordStore, DEFAULT_OPTIONS
from .index import IndexEntry, LookupIndex
from .reader import ScanState, read_raw_record, is_marker_line
from .codec import YamlCodec
from .storage import FileStorage
from .progress import Progress
from .errors import (
    CassetteError,
    CassetteIOError,
    IOCorruptionError,
    DecodeError,
    EncodeError,
    StoreClosedError,
)

__all__ = [
    "RecordStore",
    "DEFAULT_OPTIONS",
    "IndexEntry",
    "LookupIndex",
    "ScanState",
    "read_raw_record",
    "is_marker_line",
    "YamlCodec",
    "FileStorage",
    "Progress",
    "CassetteError",
    "CassetteIOError",
    "IOCorruptionError",
    "DecodeError",
    "EncodeError",
    "StoreClosedError",
]

__version__ = "0.1.0"
