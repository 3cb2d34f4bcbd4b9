from __future__ import annotations
import math
import types
from typing import Any, Dict, List, Optional, Protocol as TypingProtocol, Set, Type, TypeVar, Union, get_args, get_origin

from .errors import UnsupportedTypeError

# What the document parsers hand back, and all a converter may hand to them
WireValue = Union[None, bool, int, float, str, List["WireValue"], Dict[str, "WireValue"]]

T = TypeVar("T")


class TypeConverter(TypingProtocol):
    def convert_to_wire(self, obj: Any) -> WireValue: ...
    def convert_from_wire(self, obj: WireValue, target_type: Type[T]) -> Optional[T]: ...


class JSONTypeConverter:
    """
    Admits scalars (None, bool, int, finite float, str), flat arrays of them,
    and, as a fallback, any nested list/dict tree that JSON can represent.
    Subclass or replace it to flatten application types before they reach the codec.
    """
    scalar_types: tuple = (bool, int, float, str)

    def is_admissible(self, obj: Any) -> bool:
        try:
            return self._is_known_type(obj) or self._is_document(obj, set())
        except RecursionError:
            return False  # nested deeper than the interpreter allows

    def convert_to_wire(self, obj: Any) -> WireValue:
        if self.is_admissible(obj):
            return obj
        raise UnsupportedTypeError(type(obj))

    def convert_from_wire(self, obj: WireValue, target_type: Type[T]) -> Optional[T]:
        if obj is None:
            return None
        if target_type is Any:
            return obj
        if self._matches(obj, target_type):
            return obj
        # int -> float is the only widening allowed
        if target_type is float and isinstance(obj, int) and not isinstance(obj, bool):
            return float(obj)
        raise UnsupportedTypeError(type(obj), f"cannot be read as {target_type!r}")

    def _is_scalar(self, obj: Any) -> bool:
        if isinstance(obj, float):
            return math.isfinite(obj)
        return isinstance(obj, self.scalar_types)

    def _is_known_type(self, obj: Any) -> bool:
        if obj is None or self._is_scalar(obj):
            return True
        if isinstance(obj, (list, tuple)):
            return all(x is None or self._is_scalar(x) for x in obj)
        return False

    def _is_document(self, obj: Any, seen: Set[int]) -> bool:
        if obj is None or self._is_scalar(obj):
            return True
        if not isinstance(obj, (list, tuple, dict)):
            return False
        if id(obj) in seen:
            return False  # cycle
        seen.add(id(obj))
        try:
            if isinstance(obj, dict):
                return all(isinstance(k, str) and self._is_document(v, seen) for k, v in obj.items())
            return all(self._is_document(x, seen) for x in obj)
        finally:
            seen.discard(id(obj))

    def _matches(self, obj: Any, target_type: Any) -> bool:
        origin = get_origin(target_type)
        if origin is Union or origin is types.UnionType:
            return any(a is Any or self._matches(obj, a) for a in get_args(target_type) if a is not type(None))
        if origin is not None:
            target_type = origin
        try:
            return isinstance(obj, target_type)
        except TypeError:
            return False


class MessagePackTypeConverter(JSONTypeConverter):
    """Same rules as JSON, plus raw bytes which msgpack carries natively."""
    scalar_types = (bool, int, float, str, bytes, bytearray)
