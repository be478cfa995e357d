"""Recursive Length Prefix (RLP) encoding and decoding."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Union

Item = Union[bytes, list["Item"]]

_SHORT_LIMIT = 55
_STRING_OFFSET = 0x80
_LONG_STRING_OFFSET = 0xB7
_LIST_OFFSET = 0xC0
_LONG_LIST_OFFSET = 0xF7


class RLPDecodeError(ValueError):
    """Raised when a byte string is not a valid canonical RLP encoding."""


def _to_bytes(item: object) -> bytes:
    if isinstance(item, bool):
        raise TypeError("booleans cannot be RLP encoded")
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("negative integers cannot be RLP encoded")
        return item.to_bytes((item.bit_length() + 7) // 8, "big")
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    if hasattr(item, "__bytes__"):
        return bytes(item)
    raise TypeError(f"cannot RLP encode value of type {type(item).__name__}")


def _length_prefix(length: int, short_offset: int, long_offset: int) -> bytes:
    if length <= _SHORT_LIMIT:
        return bytes([short_offset + length])
    encoded_length = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([long_offset + len(encoded_length)]) + encoded_length


def encode(item: object) -> bytes:
    """Encode bytes, strings, non-negative integers and (nested) lists as RLP."""
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(element) for element in item)
        return _length_prefix(len(payload), _LIST_OFFSET, _LONG_LIST_OFFSET) + payload
    data = _to_bytes(item)
    if len(data) == 1 and data[0] < _STRING_OFFSET:
        return data
    return _length_prefix(len(data), _STRING_OFFSET, _LONG_STRING_OFFSET) + data


def _take(data: bytes, start: int, length: int) -> bytes:
    end = start + length
    if end > len(data):
        raise RLPDecodeError("unexpected end of input")
    return data[start:end]


def _long_length(data: bytes, pos: int, size: int) -> tuple[int, int]:
    """Read a long-form length of ``size`` bytes after the prefix at ``pos``."""
    raw = _take(data, pos + 1, size)
    if raw[0] == 0:
        raise RLPDecodeError("non-canonical length: leading zero bytes")
    length = int.from_bytes(raw, "big")
    if length <= _SHORT_LIMIT:
        raise RLPDecodeError("non-canonical length: long form used for short payload")
    return pos + 1 + size, length


def _decode_list(payload: bytes) -> list[Item]:
    items: list[Item] = []
    pos = 0
    while pos < len(payload):
        item, pos = _decode_item(payload, pos)
        items.append(item)
    return items


def _decode_item(data: bytes, pos: int) -> tuple[Item, int]:
    if pos >= len(data):
        raise RLPDecodeError("unexpected end of input")
    prefix = data[pos]
    if prefix < _STRING_OFFSET:
        return data[pos : pos + 1], pos + 1
    if prefix <= _LONG_STRING_OFFSET:
        length = prefix - _STRING_OFFSET
        payload = _take(data, pos + 1, length)
        if length == 1 and payload[0] < _STRING_OFFSET:
            raise RLPDecodeError("non-canonical encoding of a single byte")
        return payload, pos + 1 + length
    if prefix < _LIST_OFFSET:
        start, length = _long_length(data, pos, prefix - _LONG_STRING_OFFSET)
        return _take(data, start, length), start + length
    if prefix <= _LONG_LIST_OFFSET:
        length = prefix - _LIST_OFFSET
        return _decode_list(_take(data, pos + 1, length)), pos + 1 + length
    start, length = _long_length(data, pos, prefix - _LONG_LIST_OFFSET)
    return _decode_list(_take(data, start, length)), start + length


def decode(data: bytes | Sequence[int]) -> Item:
    """Decode a single RLP item; byte strings become ``bytes``, lists become ``list``."""
    raw = bytes(data)
    item, end = _decode_item(raw, 0)
    if end != len(raw):
        raise RLPDecodeError("trailing data after RLP item")
    return item