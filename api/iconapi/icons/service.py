from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .cache import IconCache
from .backends import NativeRendererBackend
from .dispatcher import IconResolver, build_default_resolver
from .keys import derive_key
from .models import Icon, IconDescriptor, parse_descriptor
from .postprocess import Postprocessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedIcon:
    key: str
    icon: Icon
    cached: bool


class IconService:
    """Canonicalize, look up, resolve and cache icons.

    One instance is created at startup and shared by every request; the
    cache inside it is the only shared mutable state. Failed resolutions
    leave the cache untouched.
    """

    def __init__(self, resolver: IconResolver, cache: IconCache) -> None:
        self.resolver = resolver
        self.cache = cache

    def get_icon(self, descriptor: IconDescriptor | dict[str, Any]) -> ResolvedIcon:
        canonical = parse_descriptor(descriptor)
        key = derive_key(canonical)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Using cached icon %s", key)
            return ResolvedIcon(key=key, icon=cached, cached=True)

        logger.info("Cache miss for %s", key)
        icon = self.resolver.resolve(canonical)
        self.cache.put(key, icon)
        return ResolvedIcon(key=key, icon=icon, cached=False)


def build_icon_service(
    *,
    renderer_root: str,
    cache_max_bytes: int,
    fetch_timeout: float,
    local_raster_recolor: bool = False,
) -> IconService:
    native = NativeRendererBackend(renderer_root, timeout=fetch_timeout)
    postprocessor = Postprocessor(native, local_raster_recolor=local_raster_recolor)
    resolver = build_default_resolver(native, postprocess=postprocessor)
    return IconService(resolver, IconCache(cache_max_bytes))
