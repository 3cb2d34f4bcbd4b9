from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from .codecs import Codec, Codecs
from .converter import JSONTypeConverter, MessagePackTypeConverter, TypeConverter, WireValue
from .errors import (
    DecodingError,
    InvalidMessageError,
    InvalidOperationError,
    UnknownMessageTypeError,
)
from .framing import (
    FrameBuffer,
    LengthPrefixedFrameBuffer,
    RecordFrameBuffer,
    frame_length_prefixed,
    frame_record,
    split_length_prefixed,
    split_records,
)
from .message import (
    CompletionMessage,
    HubMessage,
    InvocationMessage,
    MessageType,
    StreamItemMessage,
    TransferFormat,
)

log = logging.getLogger(__name__)


class HubProtocol(ABC):

    # Notes:
    # - parse_messages() decodes every complete frame or raises; never a partial list
    # - write_message() only encodes invocations, the client never sends anything else
    # - Instances hold no per-call state; share them freely across threads
    # Subclasses choose the codec and the framing

    name: str
    transfer_format: TransferFormat

    def __init__(self, type_converter: Optional[TypeConverter] = None, *, codec: Codec):
        self.type_converter = type_converter or self._default_converter()
        self.codec = codec

    # ---- framing (per subclass) ----
    @abstractmethod
    def _default_converter(self) -> TypeConverter:
        raise NotImplementedError

    @abstractmethod
    def _split(self, data: Union[bytes, str]) -> Sequence[Union[bytes, str]]:
        raise NotImplementedError

    @abstractmethod
    def _frame(self, payload: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def frame_buffer(self) -> FrameBuffer:
        """A fresh carry-over buffer matching this protocol's framing."""
        raise NotImplementedError

    # ---- decode ----
    def parse_messages(self, data: Union[bytes, str]) -> List[HubMessage]:
        """
        Decode every complete frame in `data`, in order.
        An unterminated tail is ignored (see frame_buffer() to keep it).
        The first bad frame aborts the call.
        """
        messages: List[HubMessage] = []
        for index, payload in enumerate(self._split(data)):
            try:
                document = self.codec.loads(payload)
                messages.append(self._create_hub_message(document))
            except DecodingError as e:
                log.debug("%s: frame %d is not a valid document", self.name, index)
                raise DecodingError(str(e), frame_index=index) from e
            except (UnknownMessageTypeError, InvalidMessageError) as e:
                log.debug("%s: frame %d rejected: %s", self.name, index, e)
                raise
        if messages:
            log.debug("%s: parsed %d message(s)", self.name, len(messages))
        return messages

    def _create_hub_message(self, document: WireValue) -> HubMessage:
        if not isinstance(document, dict):
            raise UnknownMessageTypeError(None)
        raw_type = document.get("type")
        if isinstance(raw_type, bool) or not isinstance(raw_type, int):
            raise UnknownMessageTypeError(raw_type)
        try:
            message_type = MessageType(raw_type)
        except ValueError:
            raise UnknownMessageTypeError(raw_type) from None

        if message_type == MessageType.INVOCATION:
            return self._create_invocation_message(document)
        if message_type == MessageType.STREAM_ITEM:
            return self._create_stream_item_message(document)
        if message_type == MessageType.COMPLETION:
            return self._create_completion_message(document)
        raise UnknownMessageTypeError(raw_type)

    def _create_invocation_message(self, document: Dict[str, Any]) -> InvocationMessage:
        invocation_id = _invocation_id(MessageType.INVOCATION, document)

        target = document.get("target")
        if not isinstance(target, str):
            raise InvalidMessageError(MessageType.INVOCATION, "target")

        non_blocking = document.get("nonBlocking")
        if not isinstance(non_blocking, bool):
            non_blocking = False

        # resolving argument types against a hub method is left to the dispatcher
        arguments = document.get("arguments")
        if not isinstance(arguments, list):
            arguments = []

        return InvocationMessage(invocation_id, target, tuple(arguments), non_blocking)

    def _create_stream_item_message(self, document: Dict[str, Any]) -> StreamItemMessage:
        invocation_id = _invocation_id(MessageType.STREAM_ITEM, document)
        return StreamItemMessage(invocation_id, document.get("item"))

    def _create_completion_message(self, document: Dict[str, Any]) -> CompletionMessage:
        invocation_id = _invocation_id(MessageType.COMPLETION, document)

        error = document.get("error")
        if isinstance(error, str):
            if not error:
                raise InvalidMessageError(MessageType.COMPLETION, "error", "is empty")
            return CompletionMessage.with_error(invocation_id, error)

        if "result" in document:
            return CompletionMessage.with_result(invocation_id, document["result"])

        return CompletionMessage.void(invocation_id)

    # ---- encode ----
    def write_message(self, message: HubMessage) -> bytes:
        if not isinstance(message, InvocationMessage):
            kind = getattr(message, "message_type", type(message).__name__)
            raise InvalidOperationError(f"Unexpected message type: {kind}")

        document = {
            "type":         int(MessageType.INVOCATION),
            "invocationId": message.invocation_id,
            "target":       message.target,
            "arguments":    [self.type_converter.convert_to_wire(arg) for arg in message.arguments],
            "nonBlocking":  message.non_blocking,
        }
        frame = self._frame(self.codec.dumps(document))
        log.debug("%s: wrote invocation %s (%d bytes)", self.name, message.invocation_id, len(frame))
        return frame


class JSONHubProtocol(HubProtocol):
    """JSON documents, each terminated by the 0x1E record separator."""
    name = "json"
    transfer_format = TransferFormat.TEXT

    def __init__(self, type_converter: Optional[TypeConverter] = None):
        super().__init__(type_converter, codec=Codecs.get("json"))

    def _default_converter(self) -> TypeConverter:
        return JSONTypeConverter()

    def _split(self, data: Union[bytes, str]) -> Sequence[str]:
        return split_records(data)

    def _frame(self, payload: bytes) -> bytes:
        return frame_record(payload)

    def frame_buffer(self) -> FrameBuffer:
        return RecordFrameBuffer()


class MessagePackHubProtocol(HubProtocol):
    """MessagePack maps with the same fields as JSON, each prefixed by a varint length."""
    name = "messagepack"
    transfer_format = TransferFormat.BINARY

    def __init__(self, type_converter: Optional[TypeConverter] = None):
        super().__init__(type_converter, codec=Codecs.get("msgpack"))

    def _default_converter(self) -> TypeConverter:
        return MessagePackTypeConverter()

    def _split(self, data: Union[bytes, str]) -> Sequence[bytes]:
        if isinstance(data, str):
            raise DecodingError("binary protocol expects bytes, got str")
        return split_length_prefixed(data)

    def _frame(self, payload: bytes) -> bytes:
        return frame_length_prefixed(payload)

    def frame_buffer(self) -> FrameBuffer:
        return LengthPrefixedFrameBuffer()


def _invocation_id(message_type: MessageType, document: Dict[str, Any]) -> str:
    invocation_id = document.get("invocationId")
    if not isinstance(invocation_id, str) or not invocation_id:
        raise InvalidMessageError(message_type, "invocationId")
    return invocation_id
