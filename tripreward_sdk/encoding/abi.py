"""
Contract function call encoding.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Sequence

from web3 import Web3

from ..exceptions import EncodingError
from ..models import FunctionDescriptor

logger = logging.getLogger(__name__)

WORD_SIZE = 32
SELECTOR_SIZE = 4
UINT256_MAX = 2 ** 256 - 1

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")


def select_function(abi: Iterable[Dict[str, Any]], name: str) -> FunctionDescriptor:
    """
    Pick the function entry called ``name`` from a parsed ABI.

    Raises:
        EncodingError: If no function with that name exists
    """
    for entry in abi:
        if isinstance(entry, dict) and entry.get("type") == "function" and entry.get("name") == name:
            return FunctionDescriptor.model_validate(entry)
    raise EncodingError(f"{name} function not found in ABI")


def function_signature(descriptor: FunctionDescriptor) -> str:
    """Canonical signature, e.g. ``submitDistance(address,uint256,uint256)``"""
    return f"{descriptor.name}({','.join(descriptor.input_types)})"


def function_selector(descriptor: FunctionDescriptor) -> bytes:
    """First four bytes of the Keccak-256 hash of the canonical signature."""
    return bytes(Web3.keccak(text=function_signature(descriptor)))[:SELECTOR_SIZE]


def _encode_address(value: Any) -> bytes:
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise EncodingError(f"Invalid address parameter: {value!r}")
    raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    return raw.rjust(WORD_SIZE, b"\x00")


def _encode_uint256(value: Any) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"uint256 parameter must be an integer, got {type(value).__name__}")
    if not 0 <= value <= UINT256_MAX:
        raise EncodingError(f"uint256 parameter out of range: {value}")
    return value.to_bytes(WORD_SIZE, "big")


_ENCODERS = {
    "address": _encode_address,
    "uint256": _encode_uint256,
}


def encode_parameters(types: Sequence[str], args: Sequence[Any]) -> bytes:
    """
    Encode static parameters as consecutive 32-byte words.

    Raises:
        EncodingError: On arity mismatch or an unsupported parameter type
    """
    if len(types) != len(args):
        raise EncodingError(f"Expected {len(types)} arguments, got {len(args)}")

    words: List[bytes] = []
    for index, (abi_type, arg) in enumerate(zip(types, args)):
        encoder = _ENCODERS.get(abi_type)
        if encoder is None:
            raise EncodingError(f"Unsupported parameter type '{abi_type}' at position {index}")
        words.append(encoder(arg))
    return b"".join(words)


def encode_function_call(descriptor: FunctionDescriptor, args: Sequence[Any]) -> bytes:
    """
    Build calldata: 4-byte selector followed by the encoded arguments.

    Args:
        descriptor: Function to call
        args: Positional arguments, one per declared input

    Returns:
        Calldata bytes

    Raises:
        EncodingError: If the arguments do not match the descriptor
    """
    params = encode_parameters(descriptor.input_types, args)
    calldata = function_selector(descriptor) + params
    logger.debug("Encoded %s call: 0x%s", function_signature(descriptor), calldata.hex())
    return calldata
