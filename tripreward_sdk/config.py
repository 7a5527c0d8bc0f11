"""
Configuration for the TripReward SDK.

Network presets ship with the package in ``networks.json``; deployment
settings (keys, contract address, node URL) come from the environment and
are read once when a client is built.
"""
import json
import logging
import os
import re
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Dict, Mapping, Optional

from .crypto.signer import parse_private_key
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "testnet"
DEFAULT_ABI_RESOURCE = "contract.json"

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: Any) -> bool:
    """``0x`` followed by exactly 40 hex characters."""
    return isinstance(address, str) and ADDRESS_RE.match(address) is not None


class NetworkConfig:
    """Bundled network presets (chain tag and default node URL)."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network presets, caching them for the lifetime of the process.
        """
        if cls._networks_cache is None:
            text = resources.files("tripreward_sdk").joinpath("networks.json").read_text(encoding="utf-8")
            cls._networks_cache = json.loads(text)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Network '{network}' not found. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_node_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Node URL for a network: explicit override, then ``<NETWORK>_NODE_URL``,
        then the bundled default.
        """
        if override:
            return override
        env_var = f"{network.upper().replace('-', '_')}_NODE_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            return env_url
        return cls.get_network(network)["node"]

    @classmethod
    def get_chain_tag(cls, network: str) -> int:
        return int(cls.get_network(network)["chainTag"])


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value, 0)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer, got {value!r}") from e


def _parse_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e


@dataclass(frozen=True)
class RewardSettings:
    """
    Settings for a RewardClient.

    Attributes:
        node_url: Base URL of the node REST API
        chain_tag: Network selector byte
        contract_address: Address of the reward contract
        private_key: Hex private key of the rewarding wallet
        wallet_address: Expected sender address (optional, checked against the key)
        abi_path: Path to the contract ABI JSON (bundled ABI when None)
        timeout: HTTP timeout in seconds
        retry_count: Transport-level HTTP retries
        receipt_attempts: Receipt polls before giving up
        receipt_interval: Seconds between receipt polls
        signature_layout: ``triple`` or ``compact``
    """
    node_url: str
    chain_tag: int
    contract_address: str
    private_key: str = field(repr=False)
    wallet_address: Optional[str] = None
    abi_path: Optional[str] = None
    timeout: float = 10
    retry_count: int = 3
    receipt_attempts: int = 10
    receipt_interval: float = 3.0
    signature_layout: str = "triple"

    def __post_init__(self):
        if not is_valid_address(self.contract_address):
            raise ValidationError(f"Invalid contract address: {self.contract_address!r}")
        if self.wallet_address and not is_valid_address(self.wallet_address):
            raise ValidationError(f"Invalid wallet address: {self.wallet_address!r}")
        if not 0 <= self.chain_tag <= 0xFF:
            raise ValidationError(f"Chain tag must fit in one byte, got {self.chain_tag}")
        if self.signature_layout not in ("triple", "compact"):
            raise ValidationError(f"Unknown signature layout: {self.signature_layout!r}")
        parse_private_key(self.private_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RewardSettings":
        """
        Build settings from environment variables.

        Raises:
            ValidationError: If a required variable is missing or malformed
            SigningError: If WALLET_PRIVATE_KEY is missing or malformed
        """
        env = os.environ if environ is None else environ
        network = env.get("VECHAIN_NETWORK", DEFAULT_NETWORK)

        contract_address = env.get("CONTRACT_ADDRESS")
        if not contract_address:
            raise ValidationError("CONTRACT_ADDRESS is not set")

        chain_tag_env = env.get("CHAIN_TAG")
        chain_tag = (
            _parse_int(chain_tag_env, "CHAIN_TAG") if chain_tag_env
            else NetworkConfig.get_chain_tag(network)
        )

        node_url = env.get("VECHAIN_NODE_URL") or NetworkConfig.get_node_url(network)

        settings = cls(
            node_url=node_url,
            chain_tag=chain_tag,
            contract_address=contract_address,
            private_key=env.get("WALLET_PRIVATE_KEY", ""),
            wallet_address=env.get("WALLET_ADDRESS") or None,
            abi_path=env.get("CONTRACT_ABI_PATH") or None,
            timeout=_parse_float(env.get("HTTP_TIMEOUT", "10"), "HTTP_TIMEOUT"),
            retry_count=_parse_int(env.get("HTTP_RETRY_COUNT", "3"), "HTTP_RETRY_COUNT"),
            receipt_attempts=_parse_int(env.get("RECEIPT_ATTEMPTS", "10"), "RECEIPT_ATTEMPTS"),
            receipt_interval=_parse_float(env.get("RECEIPT_INTERVAL", "3"), "RECEIPT_INTERVAL"),
            signature_layout=env.get("SIGNATURE_LAYOUT", "triple"),
        )
        logger.info("Loaded settings for network %s (chain tag 0x%02x, node %s)", network, chain_tag, node_url)
        return settings
