"""
Concrete value codecs.
"""

import json
import pickle
from typing import Any

from kvs.interfaces.codec import Codec


class PickleCodec(Codec):
    """
    Codec for arbitrary picklable Python objects.

    Only open stores you trust: unpickling runs code chosen by whoever
    wrote the file.
    """

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        if not 0 <= protocol <= pickle.HIGHEST_PROTOCOL:
            raise ValueError(
                f"pickle protocol must be between 0 and {pickle.HIGHEST_PROTOCOL}, got {protocol}"
            )
        self.protocol = protocol

    def encode(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def decode(self, data: bytes) -> Any:
        return pickle.loads(data)

    def __repr__(self) -> str:
        return f"PickleCodec(protocol={self.protocol})"


class JSONCodec(Codec):
    """
    Codec for JSON-compatible values (dict, list, str, int, float, bool).

    Tuples come back as lists and non-string dict keys as strings.
    """

    name = "json"

    def __init__(self, sort_keys: bool = False) -> None:
        self.sort_keys = sort_keys

    def encode(self, value: Any) -> bytes:
        return json.dumps(
            value, sort_keys=self.sort_keys, separators=(",", ":")
        ).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))

    def __repr__(self) -> str:
        return f"JSONCodec(sort_keys={self.sort_keys})"
