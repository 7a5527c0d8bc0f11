"""
Transaction assembly for the reward contract call.

Builds the unsigned transaction body, converts it into the ordered RLP field
list used both for the signing hash and for the signed payload, and attaches
the signature.
"""
import itertools
import logging
import secrets
import threading
from enum import Enum
from typing import Any, List, Optional, Sequence

from .crypto.blake2b import blake2b256
from .encoding.rlp import hex_to_bytes, rlp_encode
from .exceptions import EncodingError
from .models import Clause, Signature, UnsignedTransaction

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION = 32
DEFAULT_GAS_PRICE_COEF = 128
BLOCK_REF_SIZE = 8
TX_ID_SIZE = 32
ADDRESS_SIZE = 20


class SignatureLayout(str, Enum):
    """
    How the signature is appended to the RLP field list.

    ``triple`` appends a nested ``[r, s, v]`` list. ``compact`` appends the
    65-byte ``r || s || v`` string, which is what Thor nodes decode.
    """
    TRIPLE = "triple"
    COMPACT = "compact"


class NonceSource:
    """
    Supplies transaction nonces.

    By default every nonce is an independent 64-bit value from the OS CSPRNG.
    In ``monotonic`` mode the first nonce is random and later ones count up
    from it, which rules out collisions within one process.
    """

    def __init__(self, monotonic: bool = False):
        self.monotonic = monotonic
        self._lock = threading.Lock()
        self._counter: Optional[itertools.count] = None

    def next(self) -> int:
        if not self.monotonic:
            return secrets.randbits(64)
        with self._lock:
            if self._counter is None:
                # leave room so the counter never wraps past 2**64
                self._counter = itertools.count(secrets.randbits(63))
            return next(self._counter)


TX_GAS = 5000
CLAUSE_GAS = 16000
CLAUSE_GAS_CONTRACT_CREATION = 48000
ZERO_BYTE_GAS = 4
NON_ZERO_BYTE_GAS = 68


def intrinsic_gas(clauses: Sequence[Clause]) -> int:
    """
    Gas charged before any clause executes.

    Clause simulation only reports execution gas, so this has to be added
    to get a usable gas limit.
    """
    if not clauses:
        return TX_GAS + CLAUSE_GAS

    total = TX_GAS
    for clause in clauses:
        total += CLAUSE_GAS if clause.to else CLAUSE_GAS_CONTRACT_CREATION
        for byte in hex_to_bytes(clause.data):
            total += NON_ZERO_BYTE_GAS if byte else ZERO_BYTE_GAS
    return total


def build_unsigned(
    clause: Clause,
    gas: int,
    block_ref: str,
    nonce: int,
    chain_tag: int,
    expiration: int = DEFAULT_EXPIRATION,
    gas_price_coef: int = DEFAULT_GAS_PRICE_COEF,
    depends_on: Optional[str] = None,
) -> UnsignedTransaction:
    """
    Assemble a single-clause unsigned transaction.

    Args:
        clause: Recipient/value/data of the call
        gas: Gas limit
        block_ref: ``0x``-prefixed 8-byte block reference
        nonce: Transaction nonce
        chain_tag: Network selector byte

    Raises:
        EncodingError: If a field is out of range
    """
    if len(hex_to_bytes(block_ref)) != BLOCK_REF_SIZE:
        raise EncodingError(f"blockRef must be {BLOCK_REF_SIZE} bytes: {block_ref}")
    try:
        return UnsignedTransaction(
            chain_tag=chain_tag,
            block_ref=block_ref,
            expiration=expiration,
            clauses=[clause],
            gas_price_coef=gas_price_coef,
            gas=gas,
            depends_on=depends_on,
            nonce=nonce,
            reserved=[],
        )
    except ValueError as e:
        raise EncodingError(f"Invalid transaction field: {e}") from e


def _optional_bytes(value: Optional[str], size: int, name: str) -> bytes:
    if not value:
        return b""
    raw = hex_to_bytes(value)
    if len(raw) != size:
        raise EncodingError(f"{name} must be {size} bytes, got {len(raw)}")
    return raw


def to_rlp_fields(tx: UnsignedTransaction) -> List[Any]:
    """
    Ordered field list for RLP encoding.

    Order: chainTag, blockRef, expiration, clauses, gasPriceCoef, gas,
    dependsOn, nonce, reserved. Each clause becomes ``[to, value, data]``.
    blockRef is a 64-bit integer on the wire, so leading zero bytes are dropped.
    """
    clauses = [
        [
            _optional_bytes(c.to, ADDRESS_SIZE, "clause.to"),
            c.value,
            hex_to_bytes(c.data),
        ]
        for c in tx.clauses
    ]
    return [
        tx.chain_tag,
        int.from_bytes(hex_to_bytes(tx.block_ref), "big"),
        tx.expiration,
        clauses,
        tx.gas_price_coef,
        tx.gas,
        _optional_bytes(tx.depends_on, TX_ID_SIZE, "dependsOn"),
        tx.nonce,
        list(tx.reserved),
    ]


def append_signature(
    fields: Sequence[Any],
    signature: Signature,
    layout: SignatureLayout = SignatureLayout.TRIPLE,
) -> List[Any]:
    """Return a copy of ``fields`` with the signature appended."""
    if SignatureLayout(layout) is SignatureLayout.COMPACT:
        return list(fields) + [signature.to_bytes()]
    return list(fields) + [[signature.r, signature.s, signature.v]]


def encode_signed(
    tx: UnsignedTransaction,
    signature: Signature,
    layout: SignatureLayout = SignatureLayout.TRIPLE,
) -> str:
    """RLP-encode a signed transaction as ``0x``-prefixed hex, ready for submission."""
    raw = rlp_encode(append_signature(to_rlp_fields(tx), signature, layout))
    return "0x" + raw.hex()


def transaction_id(signing_hash: bytes, sender: str) -> str:
    """
    Id the node assigns to a transaction: BLAKE2b-256 of the signing hash
    followed by the 20-byte sender address.
    """
    sender_bytes = hex_to_bytes(sender)
    if len(sender_bytes) != ADDRESS_SIZE:
        raise EncodingError(f"Sender address must be {ADDRESS_SIZE} bytes")
    return "0x" + blake2b256(signing_hash + sender_bytes).hex()
