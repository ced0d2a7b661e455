"""
Asha Journey - Mission resolution and learner progress for the Bitcoin realms.

Subpackages:
- schemas: Pydantic models for catalog, progress and resolution data
- classroom: catalog, resolver, progress store and progress policy
- viewer: display helpers for resolution failures
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ashajourney")
except PackageNotFoundError:
    __version__ = "0+unknown"

__all__ = ["__version__"]
