"""Icon resolution pipeline: descriptors, backends, recoloring and caching."""

from .cache import IconCache
from .errors import ConfigurationError, FormatError, IconError, InvalidInputError, NotFoundError, UpstreamError
from .keys import derive_key, querify_descriptor, storage_path
from .models import Icon, IconDescriptor, canonicalize, canonicalize_color, parse_descriptor
from .service import IconService, ResolvedIcon, build_icon_service

__all__ = [
    "ConfigurationError",
    "FormatError",
    "Icon",
    "IconCache",
    "IconDescriptor",
    "IconError",
    "IconService",
    "InvalidInputError",
    "NotFoundError",
    "ResolvedIcon",
    "UpstreamError",
    "build_icon_service",
    "canonicalize",
    "canonicalize_color",
    "derive_key",
    "parse_descriptor",
    "querify_descriptor",
    "storage_path",
]
