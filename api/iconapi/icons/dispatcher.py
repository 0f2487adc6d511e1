from __future__ import annotations

import logging
import re

import emoji

from .backends import Backend, HttpBackend, IconifyBackend, NativeRendererBackend, PostprocessFn
from .errors import NotFoundError
from .models import Icon, IconDescriptor

logger = logging.getLogger(__name__)

SPECIFIER_RE = re.compile(r"^([a-z]{2,10}):(.+)$", re.DOTALL)
PREFIX_RE = re.compile(r"^[a-z]{2,10}$")

# Up to two short words followed by one to three glyphs, e.g. "AB", "key ⌘K".
TEXT_ICON_RE = re.compile(r"^((?:[a-z]{2,10} +){0,2})(\S{1,3}|\S \S)$", re.IGNORECASE)

NATIVE_PREFIXES = ("bundle", "symbol", "text", "svg", "data")


def split_specifier(specifier: str) -> tuple[str, str] | None:
    m = SPECIFIER_RE.match(specifier)
    if not m:
        return None
    return m.group(1), m.group(2)


def looks_like_text_icon(specifier: str) -> bool:
    return bool(TEXT_ICON_RE.match(specifier)) or emoji.emoji_count(specifier) > 0


class IconResolver:
    """Routes a descriptor to a backend by specifier prefix.

    Backends are kept in registration order. Specifiers without a registered
    prefix that look like short text or contain an emoji go to the native
    renderer as text.
    """

    def __init__(self, native: NativeRendererBackend) -> None:
        self.native = native
        self._backends: list[tuple[str, Backend]] = []

    def register(self, prefix: str, backend: Backend) -> None:
        if not PREFIX_RE.match(prefix):
            raise ValueError(f"Invalid backend prefix: {prefix!r}")
        if prefix in self.prefixes:
            raise ValueError(f"Backend prefix already registered: {prefix}")
        self._backends.append((prefix, backend))

    @property
    def prefixes(self) -> list[str]:
        return [prefix for prefix, _ in self._backends]

    def backend_for(self, specifier: str) -> Backend | None:
        parts = split_specifier(specifier)
        if parts is None:
            return None
        for prefix, backend in self._backends:
            if parts[0] == prefix:
                return backend
        return None

    def resolve(self, descriptor: IconDescriptor) -> Icon:
        backend = self.backend_for(descriptor.specifier)
        if backend is not None:
            logger.info("Using backend %s", backend.name)
            return backend.resolve(descriptor)

        if looks_like_text_icon(descriptor.specifier):
            logger.info("Using native renderer for text specifier")
            text = descriptor.model_copy(update={"specifier": f"text:{descriptor.specifier}"})
            return self.native.resolve(text)

        raise NotFoundError("No icon for specifier")


def build_default_resolver(
    native: NativeRendererBackend,
    *,
    postprocess: PostprocessFn | None = None,
    timeout: float | None = None,
) -> IconResolver:
    timeout = native.timeout if timeout is None else timeout
    resolver = IconResolver(native)
    http = HttpBackend(postprocess=postprocess, timeout=timeout)
    resolver.register("http", http)
    resolver.register("https", http)
    resolver.register("iconify", IconifyBackend(postprocess=postprocess, timeout=timeout))
    for prefix in NATIVE_PREFIXES:
        resolver.register(prefix, native)
    return resolver
