from __future__ import annotations
from typing import List
import logging

from .message import HubMessage
from .protocol import HubProtocol

log = logging.getLogger(__name__)


class MessageReader:
    """
    Incremental decoder for one connection.

        reader = MessageReader(JSONHubProtocol())
        for chunk in socket_reads:
            for msg in reader.feed(chunk):
                dispatch(msg)

    Bytes of a frame that has not been terminated yet are held until a later feed().
    If a complete region fails to decode, the error propagates and that region is dropped;
    the unfinished tail stays buffered.
    """

    def __init__(self, protocol: HubProtocol):
        self.protocol = protocol
        self._buffer = protocol.frame_buffer()

    @property
    def pending(self) -> int:
        return self._buffer.pending

    def feed(self, data: bytes) -> List[HubMessage]:
        complete = self._buffer.feed(data)
        if not complete:
            return []
        return self.protocol.parse_messages(complete)

    def reset(self) -> None:
        if self._buffer.pending:
            log.debug("Discarding %d buffered bytes", self._buffer.pending)
        self._buffer.clear()
