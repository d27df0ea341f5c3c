"""Runtime feature detection for optional extras.

Checks availability of optional dependencies (``tokenizer`` and
``keyring`` extras).
"""
from __future__ import annotations

import importlib.util


def _check_import(module_name: str) -> bool:
    """Check if a module is importable without importing it."""
    return importlib.util.find_spec(module_name) is not None


HAS_TOKENIZER: bool = _check_import("tiktoken")
HAS_KEYRING: bool = _check_import("keyring")


def require_extra(extra_name: str, package_name: str) -> None:
    """Raise ImportError with installation hint if extra is not available.

    Args:
        extra_name: Name of the pip extra (e.g., 'tokenizer')
        package_name: Name of the required package (e.g., 'tiktoken')

    Raises:
        ImportError: With installation instructions when package is not available.
    """
    if _check_import(package_name):
        return
    raise ImportError(
        f"The '{extra_name}' extra is required for this feature. "
        f"Install it with: pip install modelfusion-python[{extra_name}]"
    )
