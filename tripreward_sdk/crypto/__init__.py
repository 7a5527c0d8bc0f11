"""
Hashing and signing primitives.

The signer lives in ``tripreward_sdk.crypto.signer`` and is not re-exported
here, since it depends on the transaction module which itself hashes with
BLAKE2b.
"""
from .blake2b import Blake2b256, blake2b256

__all__ = ["Blake2b256", "blake2b256"]
