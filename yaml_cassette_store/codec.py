from __future__ import annotations
from typing import Any, Dict, List, Sequence

import yaml

from .errors import DecodeError, EncodeError

DEFAULT_INDENT = 4


class YamlCodec:
    """
    Block-style YAML codec for lists of records.

    encode() always emits a top-level sequence whose items start at column
    zero with "- ", and whose nested content is indented; the raw record
    reader relies on nothing else.
    """
    def __init__(self, *, allow_unicode: bool = True) -> None:
        self.allow_unicode = allow_unicode

    def encode(self, records: Sequence[Dict[str, Any]], indent: int = DEFAULT_INDENT) -> str:
        try:
            text = yaml.safe_dump(
                list(records),
                default_flow_style=False,
                indent=indent,
                allow_unicode=self.allow_unicode,
                sort_keys=False,
                width=float("inf"),
            )
        except yaml.YAMLError as e:
            raise EncodeError(f"record cannot be encoded as YAML: {e}") from e
        if not text.endswith("\n"):
            text += "\n"
        return text

    def decode(self, text: str) -> List[Any]:
        if not text.strip():
            return []
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DecodeError(f"malformed cassette YAML: {e}") from e
        if data is None:
            return []
        if isinstance(data, list):
            return data
        return [data]
