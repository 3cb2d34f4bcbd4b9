from __future__ import annotations
import uuid
from typing import Any, Dict, Optional

from .message import (
    CompletionMessage,
    HubMessage,
    InvocationMessage,
    MessageType,
    StreamItemMessage,
)

class MessageBuilder:
    """
    Builder that always produces a valid hub message.
     - invoke() starts an invocation with a fresh id (override with id())
     - stream_item()/result()/error()/complete() answer an existing invocation id
    """
    def __init__(self):
        self._type: MessageType = MessageType.INVOCATION
        self._fields: Dict[str, Any] = {
            "invocation_id": _uuid(),
            "target":        None,
            "arguments":     (),
            "non_blocking":  False,
        }

    def invoke(self, target: str, *arguments: Any):
        self._type = MessageType.INVOCATION
        self._fields["target"]    = target
        self._fields["arguments"] = arguments
        return self

    def non_blocking(self, flag: bool = True):
        self._fields["non_blocking"] = flag
        return self

    def id(self, invocation_id: str):
        self._fields["invocation_id"] = invocation_id
        return self

    def stream_item(self, invocation_id: str, item: Any):
        self._type = MessageType.STREAM_ITEM
        self._fields["invocation_id"] = invocation_id
        self._fields["item"]          = item
        return self

    def result(self, invocation_id: str, value: Any):
        self._type = MessageType.COMPLETION
        self._fields["invocation_id"] = invocation_id
        self._fields["result"]        = value
        self._fields["has_result"]    = True
        self._fields.pop("error", None)
        return self

    def error(self, invocation_id: str, error: str):
        self._type = MessageType.COMPLETION
        self._fields["invocation_id"] = invocation_id
        self._fields["error"]         = error
        self._fields.pop("result", None)
        self._fields.pop("has_result", None)
        return self

    def complete(self, invocation_id: str):
        self._type = MessageType.COMPLETION
        self._fields["invocation_id"] = invocation_id
        for k in ("error", "result", "has_result"):
            self._fields.pop(k, None)
        return self

    def build(self) -> HubMessage:
        f = self._fields
        if self._type == MessageType.INVOCATION:
            if f["target"] is None:
                raise ValueError("An invocation requires a target; call invoke() first.")
            return InvocationMessage(f["invocation_id"], f["target"], f["arguments"], f["non_blocking"])
        if self._type == MessageType.STREAM_ITEM:
            return StreamItemMessage(f["invocation_id"], f.get("item"))
        return CompletionMessage(
            f["invocation_id"],
            error=f.get("error"),
            result=f.get("result"),
            has_result=f.get("has_result", False),
        )

def _uuid() -> str:
    return uuid.uuid4().hex
