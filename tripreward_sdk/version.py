"""
Version information for the TripReward SDK.

pyproject.toml is the single place the version is written down; this module
only reads it back.
"""
import importlib.metadata
import pathlib
import tomli

DISTRIBUTION = "tripreward-sdk"

# Reported when neither package metadata nor pyproject.toml is available
UNKNOWN_VERSION = "0.0.0"


def _read_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        pass

    # Source checkout without an install
    path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(path, "rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError):
        return UNKNOWN_VERSION


__version__ = _read_version()
