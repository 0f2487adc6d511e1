from __future__ import annotations

import hashlib
import json
from typing import Any
from urllib.parse import quote

from .models import IconDescriptor

ICON_KEY_LENGTH = 24

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def sha256_json(obj: dict[str, Any]) -> str:
    payload = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def derive_key(descriptor: IconDescriptor) -> str:
    """Short opaque cache key; a pure function of the canonical descriptor."""
    return sha256_json(descriptor.key_fields())[:ICON_KEY_LENGTH]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return quote(f"{value:g}", safe=_URI_COMPONENT_SAFE)
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def querify_descriptor(descriptor: IconDescriptor, cache_key: str = "") -> str:
    """Deterministic query string for a descriptor.

    Parameter names are sorted, booleans encode as ``1``/``0`` and strings are
    URL-escaped. The same string works as a URL query and as a secondary
    canonical form.
    """
    params = descriptor.key_fields()
    if cache_key:
        params["cacheKey"] = cache_key
    return "&".join(f"{name}={_format_value(params[name])}" for name in sorted(params))


def storage_path(descriptor: IconDescriptor, prefix: str = "") -> str:
    """Object-storage path: key of the bare specifier plus a ``-rrggbb`` color suffix."""
    base = derive_key(IconDescriptor(specifier=descriptor.specifier))
    color = descriptor.canonical().color
    suffix = f"-{color[1:]}" if color else ""
    return f"{prefix}{base}{suffix}"
