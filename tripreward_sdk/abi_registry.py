"""
Loading and caching of the reward contract ABI.
"""
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .cache import TTLValueCache
from .encoding.abi import select_function
from .exceptions import EncodingError
from .models import FunctionDescriptor

logger = logging.getLogger(__name__)

ABI_TTL = 3600
REWARD_FUNCTION = "submitDistance"


class AbiRegistry:
    """
    Resolves function descriptors from a contract ABI file.

    Descriptors are cached for an hour; an expired entry is reloaded from
    disk on the next lookup.

    Args:
        path: ABI JSON file; the ABI bundled with the package when None
        cache: Cache to hold descriptors (defaults to a one-hour TTL cache)
        now: Clock for the default cache
    """

    def __init__(
        self,
        path: Optional[str] = None,
        cache: Optional[TTLValueCache] = None,
        now: Optional[Callable[[], float]] = None,
    ):
        self.path = path
        self.cache = cache or TTLValueCache(ttl=ABI_TTL, now=now, name="contract_abi")

    def _read_text(self) -> str:
        if self.path is None:
            return resources.files("tripreward_sdk").joinpath("contract.json").read_text(encoding="utf-8")
        return Path(self.path).read_text(encoding="utf-8")

    def load(self) -> List[Dict[str, Any]]:
        """
        Read and parse the ABI file.

        Raises:
            EncodingError: If the file is missing or is not a JSON list
        """
        source = self.path or "<bundled contract.json>"
        try:
            abi = json.loads(self._read_text())
        except OSError as e:
            raise EncodingError(f"Cannot read contract ABI {source}: {e}") from e
        except ValueError as e:
            raise EncodingError(f"Invalid JSON in contract ABI {source}: {e}") from e

        if not isinstance(abi, list):
            raise EncodingError(f"Contract ABI {source} must be a list of entries")
        return abi

    def get_function(self, name: str = REWARD_FUNCTION) -> FunctionDescriptor:
        """
        Descriptor of the function called ``name``.

        Raises:
            EncodingError: If the ABI cannot be read or has no such function
        """
        def _load() -> FunctionDescriptor:
            descriptor = select_function(self.load(), name)
            logger.info("ABI for %s: %s", name, descriptor.model_dump())
            return descriptor

        return self.cache.get_or_load((self.path, name), _load)
