from __future__ import annotations


class CassetteError(Exception):
    """Base class for all cassette store errors."""


class CassetteIOError(CassetteError, OSError):
    """The cassette file could not be opened, read, written or seeked."""


class IOCorruptionError(CassetteIOError):
    """
    An append failed part way through. The file may no longer end with its
    single trailing newline, so the store refuses any further use.
    """


class DecodeError(CassetteError, ValueError):
    """Malformed YAML where a record was expected."""


class EncodeError(CassetteError, ValueError):
    """A record could not be represented as YAML. Nothing was written."""


class StoreClosedError(CassetteError):
    pass
