"""
Cache key generation utilities.

Keys are plain mappings (function type, function id and call input) that
are serialized canonically, so equal inputs always map to the same entry.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from enum import Enum
from typing import Any


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


def canonical_key(key: Any) -> str:
    """Serialize a cache key deterministically.

    Args:
        key: Mapping (or other JSON-like value) identifying the entry

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        _to_jsonable(key),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )


def hash_key(key: Any) -> str:
    """SHA-256 hex digest of the canonical key."""
    return hashlib.sha256(canonical_key(key).encode("utf-8")).hexdigest()


def create_call_cache_key(
    function_type: str,
    *,
    function_id: str | None,
    model: dict[str, Any],
    settings: dict[str, Any],
    prompt: Any,
) -> dict[str, Any]:
    """Build the cache key of a model call.

    Args:
        function_type: Function type (e.g. 'generate-text')
        function_id: Caller-supplied function identifier
        model: Model information
        settings: Model settings relevant to the output
        prompt: The (formatted) prompt

    Returns:
        Cache key mapping
    """
    return {
        "function_type": function_type,
        "function_id": function_id,
        "input": {
            "model": model,
            "settings": settings,
            "prompt": prompt,
        },
    }
