from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from email.message import Message
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .errors import ConfigurationError, InvalidInputError, NotFoundError, UpstreamError
from .models import SUPPORTED_CONTENT_TYPES, Icon, IconDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
ICONIFY_API_BASE = "https://api.iconify.design"
COLOR_MODE_HEADER = "x-icon-color-mode"

_MEDIA_TYPE_RE = re.compile(r"^[a-z0-9!#$&^_.+-]+/[a-z0-9!#$&^_.+-]+$")


@dataclass(frozen=True)
class FetchResponse:
    url: str
    status: int
    headers: dict[str, str]
    body: bytes

    def header(self, name: str) -> str:
        return self.headers.get(name.lower(), "")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


ColorModePredicate = Callable[[FetchResponse], bool]
PostprocessFn = Callable[[Icon, IconDescriptor], Icon]


def parse_content_type(value: str | None) -> str | None:
    """Media type of a Content-Type header value, without parameters."""
    if not value:
        return None
    header = Message()
    header["content-type"] = value
    media_type = header.get_params()[0][0].lower()
    if not _MEDIA_TYPE_RE.match(media_type):
        return None
    return media_type


def _status_error(status: int, url: str) -> NotFoundError | UpstreamError:
    message = f"Remote server returned status {status} for {url}"
    if status == 404:
        return NotFoundError(message)
    return UpstreamError(message, upstream_status=status)


def _timeout_error(url: str, timeout: float) -> UpstreamError:
    logger.warning("Upstream request timed out after %ss: %s", timeout, url[:200])
    return UpstreamError(f"Remote request to {url} timed out after {timeout}s")


def fetch_http(
    descriptor: IconDescriptor,
    *,
    url: str | None = None,
    method: str = "GET",
    payload: dict[str, Any] | None = None,
    intrinsic_color: ColorModePredicate | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Icon:
    """Fetch raw icon bytes over HTTP(S).

    The target defaults to the specifier itself. With ``method="POST"`` the
    descriptor (or ``payload``) is sent as a JSON body. ``intrinsic_color``
    inspects the response and returns True when the icon carries its own
    colors; without it every icon is treated as a mask.
    """
    target = url or descriptor.specifier
    method = method.upper()
    data = None
    headers = {"Accept": "image/png, image/svg+xml"}
    if method == "POST":
        data = json.dumps(payload if payload is not None else descriptor.to_payload()).encode("utf-8")
        headers["Content-Type"] = "application/json"

    logger.info("%s %s", method, target[:200])
    try:
        req = Request(target, data=data, headers=headers, method=method)
        with urlopen(req, timeout=timeout) as resp:  # nosec - specifier URLs are fetched by design
            status = int(resp.status)
            resp_headers = {k.lower(): v for k, v in resp.headers.items()}
            body = resp.read()
    except HTTPError as e:
        logger.info("Upstream status %s for %s", e.code, target[:200])
        raise _status_error(int(e.code), target) from e
    except URLError as e:
        if isinstance(e.reason, TimeoutError):
            raise _timeout_error(target, timeout) from e
        raise UpstreamError(f"Remote request failed for {target}: {e.reason}") from e
    except TimeoutError as e:
        raise _timeout_error(target, timeout) from e
    except ValueError as e:
        raise InvalidInputError(f"Invalid URL: {target[:200]}") from e
    except OSError as e:
        raise UpstreamError(f"Remote request failed for {target}: {e}") from e

    logger.info("status %s", status)
    if status != 200:
        raise _status_error(status, target)

    response = FetchResponse(url=target, status=status, headers=resp_headers, body=body)
    content_type = parse_content_type(response.header("content-type"))
    logger.info("contentType %s", content_type)
    if content_type is None:
        raise UpstreamError("Missing content type from remote server")
    if content_type not in SUPPORTED_CONTENT_TYPES:
        raise UpstreamError(f"Unsupported content type from remote server: {content_type}")

    color_mode = "intrinsic" if intrinsic_color is not None and intrinsic_color(response) else "mask"
    logger.info("colorMode %s", color_mode)
    return Icon(data=body, content_type=content_type, color_mode=color_mode)


def svg_has_intrinsic_color(response: FetchResponse) -> bool:
    """Iconify SVGs that paint with ``currentColor`` are masks."""
    return "currentColor" not in response.text


def renderer_color_mode(response: FetchResponse) -> bool:
    return response.header(COLOR_MODE_HEADER).strip().lower() == "intrinsic"


class Backend:
    """A source that turns a descriptor into icon bytes."""

    name = "backend"

    def resolve(self, descriptor: IconDescriptor) -> Icon:
        raise NotImplementedError


class NativeRendererBackend(Backend):
    """Delegates to the local rendering helper: ``POST {root}/icon`` with the descriptor as JSON."""

    name = "native"

    def __init__(self, root: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.root = (root or "").strip().rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        if not self.root:
            raise ConfigurationError("ICON_RENDERER_ROOT is not configured")
        return f"{self.root}/icon"

    def render(self, descriptor: IconDescriptor, *, intrinsic_color: bool | None = None) -> Icon:
        endpoint = self.endpoint
        payload = descriptor.to_payload()
        if intrinsic_color is not None:
            payload["intrinsicColor"] = intrinsic_color
        return fetch_http(
            descriptor,
            url=endpoint,
            method="POST",
            payload=payload,
            intrinsic_color=renderer_color_mode,
            timeout=self.timeout,
        )

    def resolve(self, descriptor: IconDescriptor) -> Icon:
        return self.render(descriptor)


class HttpBackend(Backend):
    """Generic fetch where the specifier is the URL."""

    name = "http"

    def __init__(self, *, postprocess: PostprocessFn | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.postprocess = postprocess
        self.timeout = timeout

    def _finish(self, icon: Icon, descriptor: IconDescriptor) -> Icon:
        if self.postprocess is None:
            return icon
        return self.postprocess(icon, descriptor)

    def resolve(self, descriptor: IconDescriptor) -> Icon:
        icon = fetch_http(descriptor, timeout=self.timeout)
        return self._finish(icon, descriptor)


class IconifyBackend(HttpBackend):
    """``iconify:set:name`` from the public Iconify API."""

    name = "iconify"

    def __init__(
        self,
        *,
        postprocess: PostprocessFn | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_base: str = ICONIFY_API_BASE,
    ) -> None:
        super().__init__(postprocess=postprocess, timeout=timeout)
        self.api_base = api_base.rstrip("/")

    def url_for(self, descriptor: IconDescriptor) -> str:
        parts = descriptor.specifier.split(":")
        if len(parts) != 3 or not all(p.strip() for p in parts):
            raise InvalidInputError("Invalid iconify specifier")
        _, icon_set, name = parts
        return f"{self.api_base}/{quote(icon_set.strip(), safe='')}/{quote(name.strip(), safe='')}.svg"

    def resolve(self, descriptor: IconDescriptor) -> Icon:
        icon = fetch_http(
            descriptor,
            url=self.url_for(descriptor),
            intrinsic_color=svg_has_intrinsic_color,
            timeout=self.timeout,
        )
        return self._finish(icon, descriptor)
