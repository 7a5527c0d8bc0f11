"""
NodeClient - HTTP client for a VeChain Thor node.
"""
import logging
import re
import time
import urllib.parse
from typing import Any, Callable, Dict, Optional, Sequence

import requests
from pydantic import ValidationError as PydanticValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..cache import TTLValueCache
from ..exceptions import (
    GasEstimationError,
    NodeError,
    ReceiptTimeoutError,
    SubmissionError,
    VerificationError,
)
from ..models import Clause, Receipt
from ._rate_limited_log import rate_limited_log

BLOCK_REF_TTL = 60
RECEIPT_ATTEMPTS = 10
RECEIPT_INTERVAL = 3.0

_BLOCK_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_TX_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def validate_node_url(url: str, name: str = "node_url") -> str:
    """
    Require https:// unless the node runs on localhost.

    Raises:
        ValueError: If the URL is insecure
    """
    parsed = urllib.parse.urlparse(url)
    netloc_parts = parsed.netloc.split(':')
    host = netloc_parts[0] if netloc_parts else ''
    is_local = host in ('localhost', '127.0.0.1')
    if parsed.scheme != 'https' and not is_local:
        raise ValueError(f"{name} must use https:// for security (got: {parsed.scheme}://)")
    return url.rstrip('/')


class NodeClient:
    """
    Client for the node operations a reward transaction needs.

    This client handles:
    1. Simulating clauses to estimate gas
    2. Fetching (and caching) the block reference of the best block
    3. Submitting signed transactions
    4. Polling for transaction receipts

    Connection errors and 5xx responses are retried by the HTTP adapter;
    every other failure surfaces to the caller as a NodeError subclass.
    """

    def __init__(
        self,
        node_url: str,
        timeout: float = 10,
        retry_count: int = 3,
        session: Optional[requests.Session] = None,
        block_ref_cache: Optional[TTLValueCache] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the NodeClient

        Args:
            node_url: Base URL of the node REST API (e.g., "https://testnet.vechain.org")
            timeout: Timeout for HTTP requests in seconds
            retry_count: Number of transport-level retries
            session: Preconfigured requests session (optional)
            block_ref_cache: Cache for the best-block reference (defaults to a 60s TTL cache)
            sleep: Function used to pause between receipt polls
            logger: Optional logger instance

        Raises:
            ValueError: If the URL doesn't use https (unless it's localhost/127.0.0.1)
        """
        self.node_url = validate_node_url(node_url)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.block_ref_cache = block_ref_cache or TTLValueCache(ttl=BLOCK_REF_TTL, name="block_ref")
        self._sleep = sleep

        if session is None:
            session = requests.Session()
            retries = Retry(
                total=retry_count,
                backoff_factor=0.5,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["GET", "POST"],
                raise_on_status=False,
                connect=retry_count,
                read=retry_count,
                other=retry_count
            )
            session.mount("http://", HTTPAdapter(max_retries=retries))
            session.mount("https://", HTTPAdapter(max_retries=retries))
        session.headers.update({"Content-Type": "application/json"})
        self.session = session

    def _url(self, path: str) -> str:
        return f"{self.node_url}{path}"

    def _json(self, response: requests.Response) -> Any:
        content_type = response.headers.get('Content-Type', '')
        if content_type and 'application/json' not in content_type:
            self.logger.warning("Unexpected Content-Type: %s (expected application/json)", content_type)
        return response.json()

    def estimate_gas(self, clauses: Sequence[Clause], caller: Optional[str] = None) -> int:
        """
        Simulate clauses and return the total gas they use.

        Args:
            clauses: Clauses to simulate
            caller: Address the simulation runs as (optional)

        Returns:
            Sum of ``gasUsed`` over all simulated clauses

        Raises:
            GasEstimationError: If the node fails, a clause reverts, or no gas is reported
        """
        if not clauses:
            raise GasEstimationError("Clauses array cannot be empty")

        body: Dict[str, Any] = {"clauses": [c.to_json() for c in clauses]}
        if caller:
            body["caller"] = caller

        try:
            response = self.session.post(self._url("/accounts/*"), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error("Gas estimation request failed: %s", e)
            raise GasEstimationError(f"Gas estimation failed: {e}") from e

        if response.status_code != 200:
            raise GasEstimationError(
                f"Gas estimation failed: HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            results = self._json(response)
        except ValueError as e:
            raise GasEstimationError(f"Invalid JSON in gas estimation response: {e}") from e

        if not isinstance(results, list):
            raise GasEstimationError(f"Invalid response format: expected a list, got {type(results).__name__}")

        for result in results:
            if isinstance(result, dict) and result.get("reverted"):
                vm_error = result.get("vmError") or "execution reverted"
                raise GasEstimationError(f"Clause simulation reverted: {vm_error}", vm_error=vm_error)

        try:
            total = sum(int(r.get("gasUsed") or 0) for r in results if isinstance(r, dict))
        except (TypeError, ValueError) as e:
            raise GasEstimationError(f"Invalid gasUsed in response: {e}") from e

        if not total:
            raise GasEstimationError("Gas estimation failed: No gas used")

        self.logger.info("Total gas estimated: %d", total)
        return total

    def _fetch_block_ref(self) -> str:
        try:
            response = self.session.get(self._url("/blocks/best"), timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error("Failed to fetch block reference: %s", e)
            raise NodeError(f"Failed to fetch block reference: {e}") from e

        if response.status_code != 200:
            raise NodeError(
                f"Failed to fetch block reference: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            block = self._json(response)
        except ValueError as e:
            raise NodeError(f"Invalid JSON in block response: {e}") from e

        block_id = block.get("id") if isinstance(block, dict) else None
        if not isinstance(block_id, str) or not _BLOCK_ID_RE.match(block_id):
            raise NodeError(f"Invalid block response: {block!r}")

        block_ref = block_id[:18]
        self.logger.debug("Fetched block reference %s (block %s)", block_ref, block.get("number"))
        return block_ref

    def get_block_ref(self) -> str:
        """
        Return the first 8 bytes of the best block id as ``0x``-prefixed hex.

        The value is cached for 60 seconds.

        Raises:
            NodeError: If the node returns a malformed block
        """
        return self.block_ref_cache.get_or_load("best", self._fetch_block_ref)

    def submit(self, raw_tx: str) -> str:
        """
        Submit a signed, RLP-encoded transaction.

        Args:
            raw_tx: ``0x``-prefixed hex of the signed transaction

        Returns:
            Transaction id reported by the node

        Raises:
            SubmissionError: If the node rejects the transaction or returns no id
        """
        self.logger.debug("Sending transaction: %s", raw_tx)
        try:
            response = self.session.post(self._url("/transactions"), json={"raw": raw_tx}, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error("Transaction sending failed: %s", e)
            raise SubmissionError(f"Transaction sending failed: {e}") from e

        try:
            body = self._json(response)
        except ValueError:
            body = None

        tx_id = body.get("id") if isinstance(body, dict) else None
        if response.status_code != 200 or not isinstance(tx_id, str) or not _TX_ID_RE.match(tx_id):
            error = body.get("error") if isinstance(body, dict) else None
            raise SubmissionError(
                f"Transaction ID not returned: {error or response.text.strip() or 'Unknown error'}",
                status_code=response.status_code,
            )

        self.logger.info("Transaction sent: %s", tx_id)
        return tx_id

    def get_receipt(self, tx_id: str) -> Optional[Receipt]:
        """
        Fetch a receipt once.

        Returns:
            The receipt, or None if the node has none yet (including non-200 replies)

        Raises:
            NodeError: If the node returns a receipt that cannot be parsed
        """
        response = self.session.get(self._url(f"/transactions/{tx_id}/receipt"), timeout=self.timeout)
        if response.status_code != 200:
            return None

        try:
            data = self._json(response)
        except ValueError as e:
            raise NodeError(f"Invalid JSON in receipt response: {e}") from e

        if not data:
            return None
        if not isinstance(data, dict):
            raise NodeError(f"Invalid receipt format: {data!r}")

        try:
            receipt = Receipt.model_validate(data)
        except PydanticValidationError as e:
            raise NodeError(f"Invalid receipt format: {e}") from e
        if receipt.id is None:
            receipt = receipt.model_copy(update={"id": tx_id})
        return receipt

    def poll_receipt(
        self,
        tx_id: str,
        attempts: int = RECEIPT_ATTEMPTS,
        interval: float = RECEIPT_INTERVAL
    ) -> Receipt:
        """
        Wait for a transaction receipt, pausing ``interval`` seconds before each attempt.

        Args:
            tx_id: Transaction id
            attempts: Maximum number of receipt queries
            interval: Pause before each query, in seconds

        Returns:
            The receipt of the successfully executed transaction

        Raises:
            VerificationError: As soon as a receipt reports a revert
            ReceiptTimeoutError: If no receipt appeared after all attempts
        """
        for attempt in range(1, attempts + 1):
            self._sleep(interval)
            try:
                receipt = self.get_receipt(tx_id)
            except (requests.RequestException, NodeError) as e:
                # the transaction is already out; only a receipt or the budget ends polling
                self.logger.warning("Receipt query %d/%d for %s failed: %s", attempt, attempts, tx_id, e)
                continue

            if receipt is None:
                rate_limited_log(
                    f"Receipt for {tx_id} still pending",
                    level="warning",
                    logger_instance=self.logger,
                )
                continue

            if receipt.reverted:
                self.logger.error("Transaction %s reverted", tx_id)
                raise VerificationError(f"Transaction {tx_id} reverted", tx_id=tx_id, receipt=receipt)

            self.logger.info("Transaction verified: %s (block %s)", tx_id, receipt.block_number)
            return receipt

        raise ReceiptTimeoutError(
            f"Transaction receipt not found for {tx_id} after {attempts} attempts",
            tx_id=tx_id,
            attempts=attempts,
        )

    def close(self) -> None:
        self.session.close()
