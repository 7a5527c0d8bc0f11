"""
RewardClient - Main client for rewarding verified trips on-chain.
"""
import logging
import time
from typing import Any, Callable, Optional, TypeVar

from .abi_registry import AbiRegistry, REWARD_FUNCTION
from .cache import TTLValueCache
from .config import RewardSettings, is_valid_address
from .crypto.signer import Signer, TransactionSigner, signing_hash
from .encoding.abi import encode_function_call
from .exceptions import RewardError, SigningError, Stage, ValidationError
from .models import Clause, Receipt
from .node.client import BLOCK_REF_TTL, RECEIPT_ATTEMPTS, RECEIPT_INTERVAL, NodeClient
from .transaction import (
    NonceSource,
    SignatureLayout,
    build_unsigned,
    encode_signed,
    intrinsic_gas,
    transaction_id,
)

T = TypeVar('T')


class RewardClient:
    """
    Client that pays out trip rewards through the reward contract.

    This client handles:
    1. Encoding the ``submitDistance`` call for a user and distance
    2. Building and signing a single-clause transaction
    3. Submitting it to the node and waiting for a successful receipt

    Every failure is raised as a RewardError naming the stage that failed;
    the stage's own exception is available as ``cause``.
    """

    def __init__(
        self,
        node_url: str,
        contract_address: str,
        chain_tag: int,
        private_key: Optional[str] = None,
        signer: Optional[Signer] = None,
        wallet_address: Optional[str] = None,
        abi_registry: Optional[AbiRegistry] = None,
        node: Optional[NodeClient] = None,
        nonce_source: Optional[NonceSource] = None,
        signature_layout: str = SignatureLayout.TRIPLE.value,
        receipt_attempts: int = RECEIPT_ATTEMPTS,
        receipt_interval: float = RECEIPT_INTERVAL,
        timeout: float = 10,
        retry_count: int = 3,
        now: Optional[Callable[[], float]] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the RewardClient

        Args:
            node_url: Node REST API URL (e.g., "https://testnet.vechain.org")
            contract_address: Reward contract address
            chain_tag: Network selector byte (last byte of the genesis block id)
            private_key: Hex private key of the rewarding wallet (optional if signer provided)
            signer: Custom signer object (optional if private_key provided)
            wallet_address: Expected sender address; must match the key when given
            abi_registry: Source of the contract ABI (bundled ABI by default)
            node: Preconfigured NodeClient (built from node_url by default)
            nonce_source: Nonce generator (random 64-bit nonces by default)
            signature_layout: How the signature is appended, "triple" or "compact"
            receipt_attempts: Receipt polls before giving up
            receipt_interval: Seconds to wait before each receipt poll
            timeout: Timeout for HTTP requests in seconds
            retry_count: Number of transport-level HTTP retries
            now: Clock for the ABI and block reference caches
            sleep: Function used to wait between receipt polls
            logger: Optional logger instance to use for debug/info logging

        Raises:
            SigningError: If no usable key or signer is provided, or the key does not match wallet_address
            ValidationError: If the contract address is malformed
            ValueError: If node_url doesn't use https (unless it's localhost/127.0.0.1)
        """
        if not private_key and not signer:
            raise SigningError("Either private_key or signer must be provided")
        if not is_valid_address(contract_address):
            raise ValidationError(f"Invalid contract address: {contract_address!r}")

        self.logger = logger or logging.getLogger(__name__)
        self.contract_address = contract_address
        self.chain_tag = chain_tag
        self.signer: Signer = signer or TransactionSigner(private_key)
        self.signature_layout = SignatureLayout(signature_layout)
        self.receipt_attempts = receipt_attempts
        self.receipt_interval = receipt_interval

        if wallet_address and wallet_address.lower() != self.signer.address.lower():
            raise SigningError(
                f"Private key belongs to {self.signer.address}, not the configured wallet {wallet_address}"
            )

        self.abi_registry = abi_registry or AbiRegistry(now=now)
        self.node = node or NodeClient(
            node_url,
            timeout=timeout,
            retry_count=retry_count,
            block_ref_cache=TTLValueCache(ttl=BLOCK_REF_TTL, now=now, name="block_ref"),
            sleep=sleep,
            logger=self.logger,
        )
        self.nonce_source = nonce_source or NonceSource()

    @classmethod
    def from_settings(cls, settings: RewardSettings, **kwargs: Any) -> "RewardClient":
        """Build a client from RewardSettings; keyword arguments override collaborators."""
        abi_registry = kwargs.pop("abi_registry", None) or AbiRegistry(settings.abi_path, now=kwargs.get("now"))
        return cls(
            node_url=settings.node_url,
            contract_address=settings.contract_address,
            chain_tag=settings.chain_tag,
            private_key=settings.private_key,
            wallet_address=settings.wallet_address,
            abi_registry=abi_registry,
            signature_layout=settings.signature_layout,
            receipt_attempts=settings.receipt_attempts,
            receipt_interval=settings.receipt_interval,
            timeout=settings.timeout,
            retry_count=settings.retry_count,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RewardClient":
        """Build a client from environment variables (see RewardSettings.from_env)."""
        return cls.from_settings(RewardSettings.from_env(), **kwargs)

    @property
    def address(self) -> str:
        """Address of the rewarding wallet"""
        return self.signer.address

    def _validate(self, user_address: str, distance: int, trip_count: int) -> None:
        if not is_valid_address(user_address):
            raise ValidationError(f"Invalid user address: {user_address!r}")
        if isinstance(distance, bool) or not isinstance(distance, int):
            raise ValidationError(f"Distance must be an integer, got {type(distance).__name__}")
        if distance < 0:
            raise ValidationError("Distance must be non-negative")
        if isinstance(trip_count, bool) or not isinstance(trip_count, int) or trip_count < 0:
            raise ValidationError(f"Trip count must be a non-negative integer, got {trip_count!r}")

    def trigger_smart_contract(self, user_address: str, distance: int, trip_count: int = 1) -> str:
        """
        Reward a user for a verified trip.

        Args:
            user_address: Recipient address ("0x" + 40 hex characters)
            distance: Trip distance, non-negative
            trip_count: Third ``submitDistance`` argument (default 1)

        Returns:
            Id of the mined, non-reverted transaction

        Raises:
            RewardError: If any stage fails; ``stage`` and ``cause`` identify it.
                A cause of ReceiptTimeoutError means the outcome is unknown and the
                transaction should be re-queried with ``get_receipt``, not resubmitted.
        """
        def run(stage: Stage, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                error = RewardError(stage, e, user_address=user_address, distance=distance)
                self.logger.error("Failed to trigger smart contract: %s", error.summary())
                raise error from e

        run(Stage.VALIDATE, self._validate, user_address, distance, trip_count)

        descriptor = run(Stage.ABI, self.abi_registry.get_function, REWARD_FUNCTION)

        calldata = run(Stage.ENCODE, encode_function_call, descriptor, [user_address, distance, trip_count])
        clause = Clause(to=self.contract_address, value=0, data="0x" + calldata.hex())

        vm_gas = run(Stage.ESTIMATE_GAS, self.node.estimate_gas, [clause], caller=self.address)
        gas = vm_gas + intrinsic_gas([clause])

        block_ref = run(Stage.BLOCK_REF, self.node.get_block_ref)

        tx = run(
            Stage.BUILD,
            build_unsigned,
            clause,
            gas=gas,
            block_ref=block_ref,
            nonce=self.nonce_source.next(),
            chain_tag=self.chain_tag,
        )
        self.logger.debug("Unsigned transaction: %s", tx.model_dump(by_alias=True))

        signature = run(Stage.SIGN, self.signer.sign, tx)
        raw_tx = run(Stage.SIGN, encode_signed, tx, signature, self.signature_layout)
        expected_id = run(Stage.SIGN, lambda: transaction_id(signing_hash(tx), self.address))

        tx_id = run(Stage.SUBMIT, self.node.submit, raw_tx)
        if tx_id.lower() != expected_id:
            self.logger.warning("Node returned transaction id %s, expected %s", tx_id, expected_id)

        run(
            Stage.VERIFY,
            self.node.poll_receipt,
            tx_id,
            attempts=self.receipt_attempts,
            interval=self.receipt_interval,
        )

        self.logger.info(
            "Smart contract triggered successfully: tx=%s user=%s distance=%d gas=%d",
            tx_id, user_address, distance, gas,
        )
        return tx_id

    # Name used by the trip-reward orchestration
    triggerSmartContract = trigger_smart_contract

    def get_receipt(self, tx_id: str) -> Optional[Receipt]:
        """Query the receipt of a previously submitted transaction once."""
        return self.node.get_receipt(tx_id)

    def close(self) -> None:
        self.node.close()

    def __enter__(self) -> "RewardClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
