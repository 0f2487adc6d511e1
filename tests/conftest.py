"""
Pytest configuration and fixtures for icon API tests.
"""

import sys
from io import BytesIO
from pathlib import Path
from urllib.error import HTTPError, URLError

import numpy as np
import pytest
from PIL import Image

# Add the import root to the Python path
api_root = Path(__file__).parent.parent / "api"
sys.path.insert(0, str(api_root))

from iconapi.icons import backends  # noqa: E402
from iconapi.icons.backends import Backend, NativeRendererBackend  # noqa: E402
from iconapi.icons.models import Icon  # noqa: E402

RENDERER_ROOT = "http://renderer.test"

MASK_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    b'<path fill="currentColor" d="M0 0h24v24H0z"/></svg>'
)
INTRINSIC_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    b'<path fill="#ff0000" d="M0 0h24v24H0z"/></svg>'
)


def make_png(pixels, width, height):
    """Encode a list of RGBA tuples (row-major) as PNG bytes."""
    arr = np.array(pixels, dtype=np.uint8).reshape(height, width, 4)
    out = BytesIO()
    Image.fromarray(arr).save(out, format="PNG")
    return out.getvalue()


def read_png(data):
    with Image.open(BytesIO(data)) as img:
        return np.array(img.convert("RGBA"))


class FakeResponse:
    def __init__(self, status, headers, body):
        self.status = status
        self.headers = headers
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeUpstream:
    """Stands in for urlopen; routes are keyed by full URL."""

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.timeouts = []
        self.errors = {}

    def add(self, url, body=b"", *, status=200, content_type="image/svg+xml", headers=None):
        all_headers = {}
        if content_type is not None:
            all_headers["Content-Type"] = content_type
        all_headers.update(headers or {})
        self.routes[url] = (status, all_headers, body)

    def fail(self, url, error):
        self.errors[url] = error

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        self.timeouts.append(timeout)
        url = req.full_url
        if url in self.errors:
            raise self.errors[url]
        if url not in self.routes:
            raise URLError("connection refused")
        status, headers, body = self.routes[url]
        if status >= 400:
            raise HTTPError(url, status, "upstream error", hdrs=None, fp=None)
        return FakeResponse(status, headers, body)


class StaticBackend(Backend):
    """Backend returning a fixed icon and counting calls."""

    name = "static"

    def __init__(self, icon=None, error=None):
        self.icon = icon or Icon(data=INTRINSIC_SVG, content_type="image/svg+xml", color_mode="intrinsic")
        self.error = error
        self.calls = []

    def resolve(self, descriptor):
        self.calls.append(descriptor)
        if self.error is not None:
            raise self.error
        return self.icon


@pytest.fixture
def upstream(monkeypatch):
    fake = FakeUpstream()
    monkeypatch.setattr(backends, "urlopen", fake)
    return fake


@pytest.fixture
def native():
    return NativeRendererBackend(RENDERER_ROOT, timeout=5)
