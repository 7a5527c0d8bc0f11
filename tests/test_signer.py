"""
Tests for the secp256k1 transaction signer.
"""
import hashlib

import pytest
import rlp
from eth_account import Account
from eth_keys import keys

from tripreward_sdk.crypto.signer import TransactionSigner, parse_private_key, signing_hash
from tripreward_sdk.exceptions import SigningError
from tripreward_sdk.models import Clause
from tripreward_sdk.transaction import build_unsigned, to_rlp_fields
from tripreward_sdk.crypto.ec_constants import SECP256K1_HALF_N, SECP256K1_N
from conftest import TEST_PRIV_KEY


@pytest.fixture
def signer():
    return TransactionSigner(TEST_PRIV_KEY)


@pytest.fixture
def tx():
    clause = Clause(to="0x1234567890123456789012345678901234567890", value=0, data="0x01020304")
    return build_unsigned(clause, gas=60000, block_ref="0x00d4e3a15f3c9e2b", nonce=987654321, chain_tag=0x27)


def test_address_matches_eth_account(signer):
    assert signer.address == Account.from_key(TEST_PRIV_KEY).address


def test_signing_hash_is_blake2b_of_rlp(tx):
    encoded = rlp.encode(to_rlp_fields(tx))
    assert signing_hash(tx) == hashlib.blake2b(encoded, digest_size=32).digest()


def test_signature_verifies_against_public_key(signer, tx):
    """A standard secp256k1 verifier accepts the signature"""
    sig = signer.sign(tx)
    digest = signing_hash(tx)

    eth_sig = keys.Signature(vrs=(sig.v, int.from_bytes(sig.r, "big"), int.from_bytes(sig.s, "big")))
    public_key = keys.PrivateKey(bytes.fromhex(TEST_PRIV_KEY[2:])).public_key

    assert eth_sig.verify_msg_hash(digest, public_key)
    assert eth_sig.recover_public_key_from_msg_hash(digest) == public_key


def test_signature_shape(signer, tx):
    sig = signer.sign(tx)
    assert len(sig.r) == 32
    assert len(sig.s) == 32
    assert sig.v in (0, 1)
    assert 0 < int.from_bytes(sig.s, "big") <= SECP256K1_HALF_N
    assert len(sig.to_bytes()) == 65


def test_signature_is_deterministic(signer, tx):
    assert signer.sign(tx) == signer.sign(tx)


def test_sign_hash_rejects_wrong_size(signer):
    with pytest.raises(SigningError, match="32 bytes"):
        signer.sign_hash(b"\x00" * 31)


def test_repr_hides_key(signer):
    assert TEST_PRIV_KEY[2:] not in repr(signer)
    assert signer.address in repr(signer)


def test_parse_private_key_with_and_without_prefix():
    assert parse_private_key(TEST_PRIV_KEY) == parse_private_key(TEST_PRIV_KEY[2:])
    assert parse_private_key(bytes.fromhex(TEST_PRIV_KEY[2:])) == bytes.fromhex(TEST_PRIV_KEY[2:])


@pytest.mark.parametrize("key", [
    "",
    None,
    "0x1234",
    "0x" + "zz" * 32,
    "0x" + "00" * 32,
    "0x" + "ab" * 33,
    hex(SECP256K1_N),
    b"\x01" * 31,
])
def test_parse_private_key_rejects_malformed(key):
    with pytest.raises(SigningError):
        parse_private_key(key)


def test_malformed_key_fails_at_construction():
    with pytest.raises(SigningError):
        TransactionSigner("0xnotakey")
