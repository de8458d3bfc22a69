"""Recursive Length Prefix (RLP) encoding and decoding."""

from __future__ import annotations

from typing import List, Tuple, Union

Item = Union[bytes, List["Item"]]

_SHORT_LIMIT = 56
_STRING_OFFSET = 0x80
_LIST_OFFSET = 0xC0
_MAX_UINT_BYTES = 32


class DecoderError(ValueError):
    """Raised when data is not valid RLP."""


def encode(item) -> bytes:
    """Encode bytes, a non-negative int, or a (nested) list of those as RLP."""
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < _STRING_OFFSET:
            return data
        return _header(len(data), _STRING_OFFSET) + data
    if isinstance(item, bool):
        raise TypeError("booleans cannot be RLP encoded")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("negative integers cannot be RLP encoded")
        return encode(item.to_bytes((item.bit_length() + 7) // 8, "big"))
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(element) for element in item)
        return _header(len(payload), _LIST_OFFSET) + payload
    raise TypeError(f"cannot RLP encode object of type {type(item).__name__}")


def _header(length: int, offset: int) -> bytes:
    if length < _SHORT_LIMIT:
        return bytes([offset + length])
    size = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + _SHORT_LIMIT - 1 + len(size)]) + size


def _long_length(data: bytes, pos: int, size: int) -> Tuple[int, int]:
    end = pos + size
    if end > len(data):
        raise DecoderError("RLP is too short")
    raw = data[pos:end]
    if raw[0] == 0:
        raise DecoderError("RLP length has a zero prefix")
    length = int.from_bytes(raw, "big")
    if length < _SHORT_LIMIT:
        raise DecoderError("RLP long form used for a short length")
    return length, end


def _decode_at(data: bytes, pos: int) -> Tuple[Item, int]:
    if pos >= len(data):
        raise DecoderError("RLP is too short")
    prefix = data[pos]
    if prefix < _STRING_OFFSET:
        return data[pos:pos + 1], pos + 1

    is_list = prefix >= _LIST_OFFSET
    offset = _LIST_OFFSET if is_list else _STRING_OFFSET
    if prefix - offset < _SHORT_LIMIT:
        length, start = prefix - offset, pos + 1
    else:
        length, start = _long_length(data, pos + 1, prefix - offset - _SHORT_LIMIT + 1)

    end = start + length
    if end > len(data):
        raise DecoderError("RLP is too short")

    if not is_list:
        payload = data[start:end]
        if length == 1 and payload[0] < _STRING_OFFSET:
            raise DecoderError("single byte below 0x80 must not carry a prefix")
        return payload, end

    body = data[start:end]
    items: List[Item] = []
    cursor = 0
    while cursor < len(body):
        element, cursor = _decode_at(body, cursor)
        items.append(element)
    return items, end


def decode(data) -> Item:
    """Decode one complete RLP item; nested lists become Python lists."""
    raw = bytes(data)
    item, end = _decode_at(raw, 0)
    if end != len(raw):
        raise DecoderError("trailing bytes after RLP item")
    return item


def item_count(data) -> int:
    """Return the number of items in an RLP-encoded list."""
    item = decode(data)
    if not isinstance(item, list):
        raise DecoderError("RLP expected to be a list")
    return len(item)


def decode_int(data) -> int:
    """Interpret a decoded RLP string as an unsigned 256-bit integer."""
    raw = bytes(data)
    if len(raw) > _MAX_UINT_BYTES:
        raise DecoderError("RLP integer is too big")
    if raw and raw[0] == 0:
        raise DecoderError("RLP integer has a leading zero")
    return int.from_bytes(raw, "big")