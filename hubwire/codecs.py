from __future__ import annotations
from typing import Any, Dict, Protocol as TypingProtocol, Union

import json

import msgpack

from .converter import WireValue
from .errors import DecodingError, SerializationError

class Codec(TypingProtocol):
    name: str
    def dumps(self, obj: Any) -> bytes: ...
    def loads(self, data: Union[bytes, str]) -> WireValue: ...

class JSONCodec:
    name = "json"
    def dumps(self, obj: Any) -> bytes:
        try:
            return json.dumps(obj, separators=(",", ":"), allow_nan=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(f"JSON serialization failed: {e}") from e
    def loads(self, data: Union[bytes, str]) -> WireValue:
        try:
            return json.loads(data)
        except (ValueError, RecursionError) as e:  # JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise DecodingError(f"invalid JSON: {e}") from e

class MsgPackCodec:
    name = "msgpack"
    def dumps(self, obj: Any) -> bytes:
        try:
            return msgpack.packb(obj, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            raise SerializationError(f"MessagePack serialization failed: {e}") from e
    def loads(self, data: Union[bytes, str]) -> WireValue:
        try:
            return msgpack.unpackb(data, raw=False)
        except (TypeError, ValueError, msgpack.exceptions.UnpackException) as e:
            raise DecodingError(f"invalid MessagePack: {e}") from e

class Codecs:
    _registry: Dict[str, Codec] = {"json": JSONCodec(), "msgpack": MsgPackCodec()}

    @classmethod
    def get(cls, name: str) -> 'Codec':
        if name not in cls._registry:
            raise ValueError(f"Unknown codec: {name}")
        return cls._registry[name]
