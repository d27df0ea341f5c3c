"""
API key resolution utilities.

Resolves API keys from multiple sources:
1. Explicit value
2. Environment variables
3. System keyring (optional ``keyring`` extra)
"""

from __future__ import annotations

import os

from modelfusion.errors import LoadAPIKeyError

_KEYRING_SERVICES = ("modelfusion",)


def resolve_api_key(
    environment_variable_name: str,
    explicit_key: str | None = None,
    keyring_name: str | None = None,
) -> str | None:
    """Resolve an API key.

    Resolution order:
    1. Explicit key if provided
    2. The given environment variable
    3. System keyring entry ``modelfusion/<keyring_name>`` (if available)

    Args:
        environment_variable_name: Environment variable holding the key
        explicit_key: Explicitly provided API key
        keyring_name: Keyring user name (default: the variable name lowercased)

    Returns:
        Resolved API key or None if not found
    """
    if explicit_key:
        return explicit_key

    key = os.getenv(environment_variable_name)
    if key:
        return key

    return _try_keyring(keyring_name or environment_variable_name.lower())


def _try_keyring(name: str) -> str | None:
    """Try to get an API key from the system keyring.

    Args:
        name: Keyring user name

    Returns:
        API key from keyring or None
    """
    try:
        import keyring
        from keyring.errors import KeyringError
    except ImportError:
        return None

    for service in _KEYRING_SERVICES:
        try:
            key = keyring.get_password(service, name)
        except (KeyringError, RuntimeError):
            # No usable backend (common in containers, WSL, etc.)
            return None
        if key:
            return key

    return None


def load_api_key(
    api_key: str | None,
    environment_variable_name: str,
    description: str,
    api_key_parameter_name: str = "api_key",
) -> str:
    """Load an API key or raise a helpful error.

    Args:
        api_key: Explicit key (may be None)
        environment_variable_name: Environment variable holding the key
        description: Provider description used in the error message
        api_key_parameter_name: Name of the parameter for the explicit key

    Returns:
        The API key

    Raises:
        LoadAPIKeyError: If no key could be found
    """
    key = resolve_api_key(environment_variable_name, api_key)
    if key is None:
        raise LoadAPIKeyError(
            f"{description} API key is missing. "
            f"Pass it using the '{api_key_parameter_name}' parameter "
            f"or set it as an environment variable named {environment_variable_name}."
        )
    return key
