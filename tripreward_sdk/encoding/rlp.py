"""
Recursive Length Prefix (RLP) encoding.

Only encoding is provided; transactions are serialized for the node and
never read back.
"""
from typing import List, Sequence, Union

from ..exceptions import EncodingError

RLPInput = Union[bytes, bytearray, int, Sequence["RLPInput"]]

STRING_OFFSET = 0x80
LIST_OFFSET = 0xC0
SHORT_LENGTH_LIMIT = 56


def int_to_bytes(value: int) -> bytes:
    """
    Minimal big-endian representation of a non-negative integer.

    Zero becomes the empty byte string.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"Expected an integer, got {type(value).__name__}")
    if value < 0:
        raise EncodingError(f"Cannot RLP encode negative integer {value}")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def hex_to_bytes(value: str) -> bytes:
    """
    Decode a hex string, with or without ``0x`` prefix, into bytes.

    Odd-length strings are left-padded with a zero nibble.
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    if len(value) % 2:
        value = "0" + value
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise EncodingError(f"Invalid hex string: {e}") from e


def _length_prefix(length: int, offset: int) -> bytes:
    if length < SHORT_LENGTH_LIMIT:
        return bytes([offset + length])
    length_bytes = int_to_bytes(length)
    return bytes([offset + SHORT_LENGTH_LIMIT - 1 + len(length_bytes)]) + length_bytes


def rlp_encode(value: RLPInput) -> bytes:
    """
    RLP encode a byte string, a non-negative integer or a (nested) list of those.

    Args:
        value: Item to encode

    Returns:
        Encoded bytes

    Raises:
        EncodingError: If the value (or a nested item) has an unsupported type
    """
    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
        if len(data) == 1 and data[0] < STRING_OFFSET:
            return data
        return _length_prefix(len(data), STRING_OFFSET) + data

    if isinstance(value, int) and not isinstance(value, bool):
        return rlp_encode(int_to_bytes(value))

    if isinstance(value, (list, tuple)):
        payload = b"".join(rlp_encode(item) for item in value)
        return _length_prefix(len(payload), LIST_OFFSET) + payload

    raise EncodingError(f"Unsupported RLP input type: {type(value).__name__}")


def rlp_encode_hex(value: RLPInput) -> str:
    """RLP encode and render as a ``0x``-prefixed hex string."""
    return "0x" + rlp_encode(value).hex()


__all__: List[str] = ["rlp_encode", "rlp_encode_hex", "int_to_bytes", "hex_to_bytes"]
