"""
TripReward SDK - reward verified trips with a signed VeChain transaction.
"""
from .version import __version__
from .client import RewardClient
from .config import NetworkConfig, RewardSettings
from .models import AbiInput, Clause, FunctionDescriptor, Receipt, Signature, UnsignedTransaction
from .exceptions import (
    TripRewardError,
    ValidationError,
    EncodingError,
    SigningError,
    NodeError,
    GasEstimationError,
    SubmissionError,
    VerificationError,
    ReceiptTimeoutError,
    RewardError,
    Stage,
)

__all__ = [
    "RewardClient",
    "NetworkConfig",
    "RewardSettings",
    "AbiInput",
    "Clause",
    "FunctionDescriptor",
    "Receipt",
    "Signature",
    "UnsignedTransaction",
    "TripRewardError",
    "ValidationError",
    "EncodingError",
    "SigningError",
    "NodeError",
    "GasEstimationError",
    "SubmissionError",
    "VerificationError",
    "ReceiptTimeoutError",
    "RewardError",
    "Stage",
    "__version__",
]
