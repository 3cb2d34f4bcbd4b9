from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Tuple, Union
import logging

from .errors import DecodingError, SerializationError

log = logging.getLogger(__name__)

RECORD_SEPARATOR = "\x1e"
_RS = RECORD_SEPARATOR.encode("utf-8")

# varint length prefix: 7 bits per byte, at most 5 bytes, < 2GB
_MAX_PREFIX_BYTES = 5
_MAX_FRAME_LENGTH = 2**31 - 1


def frame_record(payload: bytes) -> bytes:
    return payload + _RS


def split_records(data: Union[bytes, str]) -> List[str]:
    """
    Return the separator-terminated payloads in `data`, in order.
    Anything after the last separator is an unfinished frame and is not returned;
    empty payloads are skipped.
    """
    if isinstance(data, (bytes, bytearray)):
        # cut before decoding: the tail may end inside a multi-byte character
        end = data.rfind(_RS)
        if end < 0:
            return []
        try:
            text = bytes(data[:end + 1]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(f"invalid UTF-8 input: {e}") from e
    else:
        text = data

    end = text.rfind(RECORD_SEPARATOR)
    if end < 0:
        return []
    return [p for p in text[:end].split(RECORD_SEPARATOR) if p]


def frame_length_prefixed(payload: bytes) -> bytes:
    length = len(payload)
    if length > _MAX_FRAME_LENGTH:
        raise SerializationError(f"Frame too large: {length}")
    prefix = bytearray()
    while True:
        b = length & 0x7F
        length >>= 7
        if length:
            prefix.append(b | 0x80)
        else:
            prefix.append(b)
            break
    return bytes(prefix) + payload


def _read_length_prefixed(data: bytes) -> Tuple[List[bytes], int]:
    # -> (payloads, offset just past the last complete frame)
    payloads: List[bytes] = []
    pos = 0
    while pos < len(data):
        length = 0
        shift = 0
        i = pos
        while True:
            if i >= len(data):
                return payloads, pos  # prefix not complete yet
            b = data[i]
            i += 1
            length |= (b & 0x7F) << shift
            shift += 7
            if not b & 0x80:
                break
            if i - pos >= _MAX_PREFIX_BYTES:
                raise DecodingError("length prefix longer than 5 bytes")
        if length > _MAX_FRAME_LENGTH:
            raise DecodingError("messages over 2GB are not supported")
        if i + length > len(data):
            return payloads, pos
        if length:
            payloads.append(data[i:i + length])
        pos = i + length
    return payloads, pos


def split_length_prefixed(data: bytes) -> List[bytes]:
    """Return every complete length-prefixed payload in `data`; an incomplete tail is left out."""
    payloads, _ = _read_length_prefixed(bytes(data))
    return payloads


class FrameBuffer(ABC):
    """
    Carries an unfinished frame over to the next read.
    feed() returns the complete region buffered so far (possibly b"") and keeps the rest.
    One buffer per connection; not thread-safe.
    """

    def __init__(self):
        self._buf = bytearray()

    @property
    def pending(self) -> int:
        return len(self._buf)

    def clear(self) -> None:
        self._buf.clear()

    def feed(self, data: bytes) -> bytes:
        self._buf += data
        end = self._complete_end()
        if end <= 0:
            return b""
        complete = bytes(self._buf[:end])
        del self._buf[:end]
        if self._buf:
            log.debug("Holding %d bytes of an unfinished frame", len(self._buf))
        return complete

    @abstractmethod
    def _complete_end(self) -> int:
        """Offset just past the last complete frame in the buffer."""
        raise NotImplementedError


class RecordFrameBuffer(FrameBuffer):
    # 0x1E never occurs inside a multi-byte UTF-8 sequence, so cutting here is safe
    def _complete_end(self) -> int:
        return self._buf.rfind(_RS) + 1


class LengthPrefixedFrameBuffer(FrameBuffer):
    def _complete_end(self) -> int:
        try:
            _, end = _read_length_prefixed(bytes(self._buf))
        except DecodingError:
            self._buf.clear()
            raise
        return end
