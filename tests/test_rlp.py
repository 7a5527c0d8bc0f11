"""
Tests for the RLP encoder.
"""
import pytest

from tripreward_sdk.encoding.rlp import rlp_encode, rlp_encode_hex, int_to_bytes, hex_to_bytes
from tripreward_sdk.exceptions import EncodingError

LOREM = b"Lorem ipsum dolor sit amet, consectetur adipisicing elit"


@pytest.mark.parametrize("value, expected", [
    (b"", "80"),
    (b"\x00", "00"),
    (b"\x0f", "0f"),
    (b"\x7f", "7f"),
    (b"\x80", "8180"),
    (b"dog", "83646f67"),
    ([], "c0"),
    ([b"cat", b"dog"], "c88363617483646f67"),
    (0, "80"),
    (15, "0f"),
    (127, "7f"),
    (128, "8180"),
    (1024, "820400"),
    (2 ** 64 - 1, "88ffffffffffffffff"),
    ([[], [[]], [[], [[]]]], "c7c0c1c0c3c0c1c0"),
])
def test_canonical_vectors(value, expected):
    """Encodings match the published RLP test vectors"""
    assert rlp_encode(value).hex() == expected


def test_long_string():
    """Strings of 56+ bytes use a length-of-length prefix"""
    assert len(LOREM) == 56
    assert rlp_encode(LOREM) == b"\xb8\x38" + LOREM


def test_string_of_55_bytes_uses_short_form():
    data = b"a" * 55
    assert rlp_encode(data) == bytes([0x80 + 55]) + data


def test_very_long_string_two_byte_length():
    data = b"\x01" * 1024
    assert rlp_encode(data)[:3] == b"\xb9\x04\x00"


def test_long_list():
    """Lists with a payload of 56+ bytes use 0xf7 + length-of-length"""
    items = [b"abcd"] * 14  # 14 * 5 = 70 bytes of payload
    encoded = rlp_encode(items)
    assert encoded[:2] == b"\xf8\x46"
    assert len(encoded) == 72


def test_tuple_is_list():
    assert rlp_encode((b"cat", b"dog")) == rlp_encode([b"cat", b"dog"])


def test_bytearray_accepted():
    assert rlp_encode(bytearray(b"dog")) == rlp_encode(b"dog")


def test_hex_helper():
    assert rlp_encode_hex([b"cat", b"dog"]) == "0xc88363617483646f67"


@pytest.mark.parametrize("value", ["dog", 1.5, None, True, {"a": 1}])
def test_unsupported_types(value):
    with pytest.raises(EncodingError):
        rlp_encode(value)


def test_negative_integer_rejected():
    with pytest.raises(EncodingError, match="negative"):
        rlp_encode(-1)


def test_int_to_bytes_minimal():
    assert int_to_bytes(0) == b""
    assert int_to_bytes(1) == b"\x01"
    assert int_to_bytes(256) == b"\x01\x00"


@pytest.mark.parametrize("value, expected", [
    ("0x", b""),
    ("", b""),
    ("0x0a", b"\x0a"),
    ("a", b"\x0a"),
    ("0XFF00", b"\xff\x00"),
])
def test_hex_to_bytes(value, expected):
    assert hex_to_bytes(value) == expected


def test_hex_to_bytes_invalid():
    with pytest.raises(EncodingError):
        hex_to_bytes("0xzz")
