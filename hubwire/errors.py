from __future__ import annotations
from typing import Any, Optional


class HubProtocolError(Exception):
    """Base class for every error raised by the hub codec."""


class UnsupportedTypeError(HubProtocolError):
    """Value cannot be put on the wire, or cannot be cast to the requested type."""
    def __init__(self, value_type: Any, error_msg: str = ""):
        name = getattr(value_type, "__name__", repr(value_type))
        super().__init__(f"Unsupported type: {name} {error_msg}".rstrip())
        self.value_type = value_type
        self.error_msg = error_msg


class UnknownMessageTypeError(HubProtocolError):
    def __init__(self, raw_type: Any = None):
        super().__init__(f"Unknown message type: {raw_type!r}")
        self.raw_type = raw_type


class InvalidMessageError(HubProtocolError):
    """A required field of a message is missing or has the wrong type."""
    def __init__(self, message_type: Any, field: str, reason: str = "missing or malformed"):
        label = getattr(message_type, "name", message_type)
        super().__init__(f"Invalid {label} message: '{field}' {reason}")
        self.message_type = message_type
        self.field = field
        self.reason = reason


class InvalidOperationError(HubProtocolError):
    pass


class DecodingError(HubProtocolError):
    def __init__(self, error_msg: str, frame_index: Optional[int] = None):
        if frame_index is not None:
            error_msg = f"frame {frame_index}: {error_msg}"
        super().__init__(error_msg)
        self.frame_index = frame_index


class SerializationError(HubProtocolError):
    pass
