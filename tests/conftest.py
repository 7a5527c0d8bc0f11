"""
Pytest fixtures for the TripReward SDK tests.
"""
import re
import pytest
from unittest.mock import MagicMock
from eth_account import Account

from tripreward_sdk.node._rate_limited_log import reset_rate_limits
from tripreward_sdk.config import NetworkConfig

# Constants for testing
TEST_NODE_URL = "https://node.example.com"
TEST_CONTRACT = "0x1234567890123456789012345678901234567890"
TEST_USER = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_SENDER = Account.from_key(TEST_PRIV_KEY).address
TEST_CHAIN_TAG = 0x27
TEST_BLOCK_ID = "0x00d4e3a1" + "5f3c9e2b" + "ab" * 24
TEST_TX_ID = "0x" + "c0ffee" * 10 + "abcd"

ACCOUNTS_URL = re.compile(r"https://node\.example\.com/accounts/.*")
BEST_BLOCK_URL = f"{TEST_NODE_URL}/blocks/best"
TRANSACTIONS_URL = f"{TEST_NODE_URL}/transactions"
RECEIPT_URL = f"{TEST_NODE_URL}/transactions/{TEST_TX_ID}/receipt"

RECEIPT_OK = {
    "gasUsed": 36582,
    "gasPayer": TEST_SENDER,
    "paid": "0x1fbad5f2e25570000",
    "reward": "0x979b1b8d4c2d8000",
    "reverted": False,
    "meta": {
        "blockID": TEST_BLOCK_ID,
        "blockNumber": 13951905,
        "blockTimestamp": 1700000000,
        "txID": TEST_TX_ID,
        "txOrigin": TEST_SENDER,
    },
    "outputs": [{"contractAddress": None, "events": [], "transfers": []}],
}


class FakeClock:
    """Manually advanced clock for cache tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Keep process-wide caches from leaking between tests."""
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    reset_rate_limits()
    NetworkConfig._networks_cache = None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records calls instead of blocking"""
    return MagicMock()


@pytest.fixture
def thor_node(requests_mock):
    """
    Mock a healthy node: gas estimation, best block, submission and an
    immediately available, non-reverted receipt.
    """
    routes = {
        "accounts": requests_mock.post(
            ACCOUNTS_URL,
            json=[{"data": "0x", "events": [], "transfers": [], "gasUsed": 21543, "reverted": False, "vmError": ""}],
            headers={"Content-Type": "application/json"},
        ),
        "best": requests_mock.get(
            BEST_BLOCK_URL,
            json={"id": TEST_BLOCK_ID, "number": 13951905},
            headers={"Content-Type": "application/json"},
        ),
        "submit": requests_mock.post(
            TRANSACTIONS_URL,
            json={"id": TEST_TX_ID},
            headers={"Content-Type": "application/json"},
        ),
        "receipt": requests_mock.get(
            RECEIPT_URL,
            json=RECEIPT_OK,
            headers={"Content-Type": "application/json"},
        ),
    }
    return routes
