"""
BLAKE2b with a 256-bit digest (RFC 7693), unkeyed.

Transactions are signed over the BLAKE2b-256 hash of their RLP body, so
this module has to agree bit-for-bit with the node. All word arithmetic is
reduced modulo 2**64.
"""
import struct
from typing import List, Union

MASK64 = 0xFFFFFFFFFFFFFFFF
BLOCK_SIZE = 128
DIGEST_SIZE = 32
ROUNDS = 12

IV = (
    0x6A09E667F3BCC908, 0xBB67AE8584CAA73B,
    0x3C6EF372FE94F82B, 0xA54FF53A5F1D36F1,
    0x510E527FADE682D1, 0x9B05688C2B3E6C1F,
    0x1F83D9ABFB41BD6B, 0x5BE0CD19137E2179,
)

SIGMA = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
    (11, 8, 12, 0, 5, 2, 15, 13, 10, 14, 3, 6, 7, 1, 9, 4),
    (7, 9, 3, 1, 13, 12, 11, 14, 2, 6, 5, 10, 4, 0, 15, 8),
    (9, 0, 5, 7, 2, 4, 10, 15, 14, 1, 11, 12, 6, 8, 3, 13),
    (2, 12, 6, 10, 0, 11, 8, 3, 4, 13, 7, 5, 15, 14, 1, 9),
    (12, 5, 1, 15, 14, 13, 4, 10, 0, 7, 6, 3, 9, 2, 8, 11),
    (13, 11, 7, 14, 12, 1, 3, 9, 5, 0, 15, 4, 8, 6, 2, 10),
    (6, 15, 14, 9, 11, 3, 0, 8, 12, 2, 13, 7, 1, 4, 10, 5),
    (10, 2, 8, 4, 7, 6, 1, 5, 15, 11, 9, 14, 3, 12, 13, 0),
    # rows 10 and 11 repeat rows 0 and 1
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
)

# (a, b, c, d) quadruples: four columns then four diagonals
_COLUMNS_AND_DIAGONALS = (
    (0, 4, 8, 12), (1, 5, 9, 13), (2, 6, 10, 14), (3, 7, 11, 15),
    (0, 5, 10, 15), (1, 6, 11, 12), (2, 7, 8, 13), (3, 4, 9, 14),
)

_BLOCK_WORDS = struct.Struct("<16Q")
_DIGEST_WORDS = struct.Struct("<8Q")


def rotr64(x: int, n: int) -> int:
    """Rotate a 64-bit word right by ``n`` bits."""
    return ((x >> n) | (x << (64 - n))) & MASK64


def mix(v: List[int], a: int, b: int, c: int, d: int, x: int, y: int) -> None:
    """The G mixing function, updating ``v`` in place."""
    v[a] = (v[a] + v[b] + x) & MASK64
    v[d] = rotr64(v[d] ^ v[a], 32)
    v[c] = (v[c] + v[d]) & MASK64
    v[b] = rotr64(v[b] ^ v[c], 24)
    v[a] = (v[a] + v[b] + y) & MASK64
    v[d] = rotr64(v[d] ^ v[a], 16)
    v[c] = (v[c] + v[d]) & MASK64
    v[b] = rotr64(v[b] ^ v[c], 63)


def compress(h: List[int], block: bytes, counter: int, final: bool) -> None:
    """
    Compress one 128-byte block into the chain state ``h`` in place.

    Args:
        h: Eight-word chain state
        block: Exactly 128 bytes (the last block zero-padded)
        counter: Total number of input bytes hashed up to and including this block
        final: True only for the last block
    """
    m = _BLOCK_WORDS.unpack(block)
    v = list(h) + list(IV)
    v[12] ^= counter & MASK64
    v[13] ^= (counter >> 64) & MASK64
    if final:
        v[14] ^= MASK64

    for r in range(ROUNDS):
        s = SIGMA[r]
        for i, (a, b, c, d) in enumerate(_COLUMNS_AND_DIAGONALS):
            mix(v, a, b, c, d, m[s[2 * i]], m[s[2 * i + 1]])

    for i in range(8):
        h[i] ^= v[i] ^ v[i + 8]


class Blake2b256:
    """
    Incremental BLAKE2b-256 hasher with a ``hashlib``-like interface.

    A full block is only compressed once more input arrives, because the
    final block has to be flagged as such.
    """

    digest_size = DIGEST_SIZE
    block_size = BLOCK_SIZE
    name = "blake2b-256"

    def __init__(self, data: Union[bytes, bytearray] = b""):
        self._h = list(IV)
        # parameter block: digest length, key length 0, fanout 1, depth 1
        self._h[0] ^= 0x01010000 ^ DIGEST_SIZE
        self._counter = 0
        self._buffer = b""
        if data:
            self.update(data)

    def update(self, data: Union[bytes, bytearray]) -> "Blake2b256":
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"data must be bytes-like, got {type(data).__name__}")
        buf = self._buffer + bytes(data)
        while len(buf) > BLOCK_SIZE:
            self._counter += BLOCK_SIZE
            compress(self._h, buf[:BLOCK_SIZE], self._counter, final=False)
            buf = buf[BLOCK_SIZE:]
        self._buffer = buf
        return self

    def copy(self) -> "Blake2b256":
        other = Blake2b256()
        other._h = list(self._h)
        other._counter = self._counter
        other._buffer = self._buffer
        return other

    def digest(self) -> bytes:
        h = list(self._h)
        counter = self._counter + len(self._buffer)
        compress(h, self._buffer.ljust(BLOCK_SIZE, b"\x00"), counter, final=True)
        return _DIGEST_WORDS.pack(*h)[:DIGEST_SIZE]

    def hexdigest(self) -> str:
        return self.digest().hex()


def blake2b256(data: Union[bytes, bytearray]) -> bytes:
    """
    Hash ``data`` with BLAKE2b-256.

    Returns:
        32-byte digest
    """
    return Blake2b256(data).digest()
