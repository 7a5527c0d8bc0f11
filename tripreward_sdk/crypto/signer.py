"""
secp256k1 transaction signing.
"""
import logging
import re
from typing import Protocol, Union

from eth_account import Account
from eth_keys import keys

from ..encoding.rlp import rlp_encode
from ..exceptions import SigningError
from ..models import Signature, UnsignedTransaction
from ..transaction import to_rlp_fields
from .blake2b import blake2b256
from .ec_constants import PRIVATE_KEY_SIZE, SECP256K1_MAX, SECP256K1_MIN

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


class Signer(Protocol):
    """Protocol for custom signers"""
    address: str

    def sign(self, tx: UnsignedTransaction) -> Signature:
        """Sign an unsigned transaction and return its signature"""
        ...


def parse_private_key(private_key: Union[str, bytes]) -> bytes:
    """
    Validate a private key and return its 32 raw bytes.

    Args:
        private_key: Hex string (with or without ``0x``) or raw bytes

    Raises:
        SigningError: If the key is missing, not 32 bytes or outside the curve order
    """
    if not private_key:
        raise SigningError("Private key is not configured")

    if isinstance(private_key, (bytes, bytearray)):
        raw = bytes(private_key)
    else:
        hex_key = private_key.strip()
        if hex_key.startswith(("0x", "0X")):
            hex_key = hex_key[2:]
        if not _KEY_RE.match(hex_key):
            raise SigningError("Invalid private key: expected 32 bytes of hex")
        raw = bytes.fromhex(hex_key)

    if len(raw) != PRIVATE_KEY_SIZE:
        raise SigningError(f"Invalid private key: expected {PRIVATE_KEY_SIZE} bytes, got {len(raw)}")

    if not SECP256K1_MIN <= int.from_bytes(raw, "big") <= SECP256K1_MAX:
        raise SigningError("Invalid private key: out of range for secp256k1")

    return raw


def signing_hash(tx: UnsignedTransaction) -> bytes:
    """BLAKE2b-256 of the RLP-encoded unsigned transaction."""
    encoded = rlp_encode(to_rlp_fields(tx))
    logger.debug("Unsigned transaction RLP: 0x%s", encoded.hex())
    return blake2b256(encoded)


class TransactionSigner:
    """
    Signs transactions with a single preconfigured private key.

    The key is validated once, when the signer is created.
    """

    def __init__(self, private_key: Union[str, bytes]):
        raw = parse_private_key(private_key)
        self._key = keys.PrivateKey(raw)
        self.address: str = Account.from_key(raw).address

    def __repr__(self) -> str:
        return f"TransactionSigner(address={self.address})"

    @property
    def public_key(self) -> keys.PublicKey:
        return self._key.public_key

    def sign_hash(self, digest: bytes) -> Signature:
        """
        Sign a 32-byte digest.

        Raises:
            SigningError: If the digest has the wrong size
        """
        if len(digest) != 32:
            raise SigningError(f"Digest must be 32 bytes, got {len(digest)}")
        sig = self._key.sign_msg_hash(digest)
        return Signature(
            r=sig.r.to_bytes(32, "big"),
            s=sig.s.to_bytes(32, "big"),
            v=sig.v % 2,
        )

    def sign(self, tx: UnsignedTransaction) -> Signature:
        digest = signing_hash(tx)
        logger.debug("Signing hash: 0x%s", digest.hex())
        return self.sign_hash(digest)
