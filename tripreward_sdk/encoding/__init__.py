"""
Binary encodings used to build transactions: RLP and contract calldata.
"""
from .rlp import rlp_encode, rlp_encode_hex, int_to_bytes, hex_to_bytes
from .abi import (
    select_function,
    function_signature,
    function_selector,
    encode_function_call,
)

__all__ = [
    "rlp_encode",
    "rlp_encode_hex",
    "int_to_bytes",
    "hex_to_bytes",
    "select_function",
    "function_signature",
    "function_selector",
    "encode_function_call",
]
