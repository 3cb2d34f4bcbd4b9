from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any, Iterable, Optional, Tuple, Union

from .errors import InvalidMessageError

# Wire discriminant ("type" field)
class MessageType(IntEnum):
    INVOCATION  = 1
    STREAM_ITEM = 2
    COMPLETION  = 3

# Reported to the transport so it can pick text or binary frames
class TransferFormat(StrEnum):
    TEXT   = "text"
    BINARY = "binary"


def _check_invocation_id(message_type: MessageType, invocation_id: Any) -> None:
    if not isinstance(invocation_id, str) or not invocation_id:
        raise InvalidMessageError(message_type, "invocationId")


@dataclass(frozen=True)
class InvocationMessage:
    """
    Request to run `target` on the remote hub.
    non_blocking=True means the caller expects no completion.
    """
    invocation_id: str
    target: str
    arguments: Tuple[Any, ...] = ()
    non_blocking: bool = False

    def __post_init__(self):
        _check_invocation_id(MessageType.INVOCATION, self.invocation_id)
        if not isinstance(self.target, str):
            raise InvalidMessageError(MessageType.INVOCATION, "target")
        if not isinstance(self.non_blocking, bool):
            raise InvalidMessageError(MessageType.INVOCATION, "nonBlocking")
        if isinstance(self.arguments, (str, bytes, bytearray, dict)) or not isinstance(self.arguments, Iterable):
            raise InvalidMessageError(MessageType.INVOCATION, "arguments")
        # frozen: normalise lists into tuples in place
        object.__setattr__(self, "arguments", tuple(self.arguments))

    @property
    def message_type(self) -> MessageType:
        return MessageType.INVOCATION


@dataclass(frozen=True)
class StreamItemMessage:
    invocation_id: str
    item: Any = None

    def __post_init__(self):
        _check_invocation_id(MessageType.STREAM_ITEM, self.invocation_id)

    @property
    def message_type(self) -> MessageType:
        return MessageType.STREAM_ITEM


@dataclass(frozen=True)
class CompletionMessage:
    """
    Terminal response to an invocation. Exactly one of:
      - error set         -> failed
      - has_result=True   -> succeeded with `result` (which may be None for a wire null)
      - neither           -> succeeded without a payload
    """
    invocation_id: str
    error: Optional[str] = None
    result: Any = None
    has_result: bool = field(default=False)

    def __post_init__(self):
        _check_invocation_id(MessageType.COMPLETION, self.invocation_id)
        if self.error is not None:
            if not isinstance(self.error, str) or not self.error:
                raise InvalidMessageError(MessageType.COMPLETION, "error")
            if self.has_result or self.result is not None:
                raise InvalidMessageError(MessageType.COMPLETION, "result",
                                          "must not be set together with 'error'")
        elif self.result is not None and not self.has_result:
            raise InvalidMessageError(MessageType.COMPLETION, "result",
                                      "set without has_result")

    @classmethod
    def with_result(cls, invocation_id: str, result: Any) -> "CompletionMessage":
        return cls(invocation_id, result=result, has_result=True)

    @classmethod
    def with_error(cls, invocation_id: str, error: str) -> "CompletionMessage":
        return cls(invocation_id, error=error)

    @classmethod
    def void(cls, invocation_id: str) -> "CompletionMessage":
        return cls(invocation_id)

    @property
    def message_type(self) -> MessageType:
        return MessageType.COMPLETION


HubMessage = Union[InvocationMessage, StreamItemMessage, CompletionMessage]
