"""
Exceptions for the TripReward SDK.
"""
from enum import Enum
from typing import Any, Dict, Optional


class Stage(str, Enum):
    """
    Stages of a reward attempt, in the order the client runs them.
    """
    VALIDATE = "validate"
    ABI = "abi"
    ENCODE = "encode"
    ESTIMATE_GAS = "estimate_gas"
    BLOCK_REF = "block_ref"
    BUILD = "build"
    SIGN = "sign"
    SUBMIT = "submit"
    VERIFY = "verify"


class TripRewardError(Exception):
    """Base exception for all TripReward SDK errors."""
    pass


class ValidationError(TripRewardError):
    """Raised when a reward request carries a bad address or distance."""
    pass


class EncodingError(TripRewardError):
    """Raised when calldata or RLP encoding cannot be produced."""
    pass


class SigningError(TripRewardError):
    """Raised when the signing key is missing, malformed or unusable."""
    pass


class NodeError(TripRewardError):
    """Raised when the node returns a malformed response or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class GasEstimationError(NodeError):
    """Raised when the node cannot produce a usable gas estimate."""

    def __init__(self, message: str, status_code: Optional[int] = None, vm_error: Optional[str] = None):
        self.vm_error = vm_error
        super().__init__(message, status_code=status_code)


class SubmissionError(NodeError):
    """Raised when the node rejects a signed transaction."""
    pass


class VerificationError(TripRewardError):
    """Raised when a transaction was mined but its receipt reports a revert."""

    def __init__(self, message: str, tx_id: str, receipt: Optional[Any] = None):
        self.tx_id = tx_id
        self.receipt = receipt
        super().__init__(message)


class ReceiptTimeoutError(TripRewardError):
    """
    Raised when no receipt appeared within the polling budget.

    The transaction outcome is unknown: query the receipt again by ``tx_id``
    later instead of resubmitting.
    """

    def __init__(self, message: str, tx_id: str, attempts: int):
        self.tx_id = tx_id
        self.attempts = attempts
        super().__init__(message)


# Stage failures that leave nothing committed on-chain
RETRYABLE_ERRORS = (NodeError,)

# Once the transaction has been accepted its outcome is unknown until a receipt is seen
POST_SUBMIT_STAGES = frozenset({Stage.VERIFY})


class RewardError(TripRewardError):
    """
    Raised by RewardClient when any stage of a reward attempt fails.

    Attributes:
        stage: Stage that failed
        cause: Exception raised by that stage
        user_address: Recipient address of the attempt
        distance: Distance of the attempt
    """

    def __init__(
        self,
        stage: Stage,
        cause: BaseException,
        user_address: Optional[str] = None,
        distance: Optional[int] = None,
    ):
        self.stage = Stage(stage)
        self.cause = cause
        self.user_address = user_address
        self.distance = distance
        super().__init__(
            f"Failed to trigger smart contract at stage '{self.stage.value}': {cause}"
        )

    @property
    def retryable(self) -> bool:
        """
        Whether the whole reward attempt can be run again safely.

        Never true after submission: the transaction may already be on-chain.
        """
        if self.stage in POST_SUBMIT_STAGES:
            return False
        return isinstance(self.cause, RETRYABLE_ERRORS)

    def summary(self) -> Dict[str, Any]:
        """Context suitable for audit logs."""
        return {
            "stage": self.stage.value,
            "error": str(self.cause),
            "error_type": type(self.cause).__name__,
            "user_address": self.user_address,
            "distance": self.distance,
        }
