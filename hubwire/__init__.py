"""
Public API:
- JSONHubProtocol, MessagePackHubProtocol: decode frames into hub messages, encode invocations
- hub_protocol: pick a protocol by name ("json" | "messagepack")
- MessageReader: keeps unfinished frames between reads of one connection
- MessageBuilder: fluent builder for valid hub messages
- InvocationMessage, StreamItemMessage, CompletionMessage, MessageType: message types
- JSONTypeConverter, TypeConverter: argument admissibility checks (replaceable)
- split_records, frame_record: 0x1E record-separator framing
"""

# Protocols
from .protocol import HubProtocol, JSONHubProtocol, MessagePackHubProtocol
from .factory import available_protocols, hub_protocol
from .reader import MessageReader

# Messages
from .builder import MessageBuilder
from .message import (
    CompletionMessage,
    HubMessage,
    InvocationMessage,
    MessageType,
    StreamItemMessage,
    TransferFormat,
)

# Values
from .converter import JSONTypeConverter, MessagePackTypeConverter, TypeConverter, WireValue

# Framing helpers
from .framing import RECORD_SEPARATOR, frame_record, split_records

# Errors
from .errors import (
    DecodingError,
    HubProtocolError,
    InvalidMessageError,
    InvalidOperationError,
    SerializationError,
    UnknownMessageTypeError,
    UnsupportedTypeError,
)

__all__ = [
    "HubProtocol",
    "JSONHubProtocol",
    "MessagePackHubProtocol",
    "available_protocols",
    "hub_protocol",
    "MessageReader",
    "MessageBuilder",
    "CompletionMessage",
    "HubMessage",
    "InvocationMessage",
    "MessageType",
    "StreamItemMessage",
    "TransferFormat",
    "JSONTypeConverter",
    "MessagePackTypeConverter",
    "TypeConverter",
    "WireValue",
    "RECORD_SEPARATOR",
    "frame_record",
    "split_records",
    "DecodingError",
    "HubProtocolError",
    "InvalidMessageError",
    "InvalidOperationError",
    "SerializationError",
    "UnknownMessageTypeError",
    "UnsupportedTypeError",
]

__version__ = "0.1.0"
