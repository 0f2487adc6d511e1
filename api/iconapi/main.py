from __future__ import annotations

import logging
from typing import Any

from fastapi import BackgroundTasks, Body, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from iconapi.config import get_icon_config, get_logging_config
from iconapi.icons import (
    IconError,
    IconService,
    InvalidInputError,
    build_icon_service,
    derive_key,
    parse_descriptor,
    querify_descriptor,
)
from iconapi.icons.models import SVG, Icon
from iconapi.logging_setup import setup_logging
from iconapi.s3 import publish_variants

logger = logging.getLogger(__name__)

_log_cfg = get_logging_config()
setup_logging(_log_cfg.level, _log_cfg.log_file)

app = FastAPI(title="Icon API", docs_url="/docs", redoc_url=None)

ICON_RESPONSE_CACHE_CONTROL = "public, max-age=3600"


def _build_service() -> IconService:
    cfg = get_icon_config()
    return build_icon_service(
        renderer_root=cfg.renderer_root,
        cache_max_bytes=cfg.cache_max_bytes,
        fetch_timeout=cfg.fetch_timeout,
        local_raster_recolor=cfg.local_raster_recolor,
    )


app.state.icon_service = _build_service()
app.state.publish_variants = get_icon_config().publish_variants


def _icon_service(request: Request) -> IconService:
    return request.app.state.icon_service


def _icon_response(icon: Icon, key: str) -> Response:
    media_type = "image/svg+xml; charset=utf-8" if icon.content_type == SVG else icon.content_type
    return Response(
        content=icon.data,
        media_type=media_type,
        headers={"X-Icon-Key": key, "Cache-Control": ICON_RESPONSE_CACHE_CONTROL},
    )


def _publish_in_background(service: IconService, specifier: str) -> None:
    try:
        written = publish_variants(service, specifier)
    except RuntimeError as e:
        logger.error("Icon publishing is misconfigured: %s", e)
        return
    logger.info("Stored %d icon variants for %s", len(written), specifier[:200])


@app.exception_handler(IconError)
def handle_icon_error(request: Request, exc: IconError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.post("/frontend/icon")
def post_icon(
    request: Request,
    background_tasks: BackgroundTasks,
    body: Any = Body(default=None),
) -> Response:
    service = _icon_service(request)
    descriptor = parse_descriptor(body)
    resolved = service.get_icon(descriptor)
    if request.app.state.publish_variants:
        background_tasks.add_task(_publish_in_background, service, descriptor.specifier)
    return _icon_response(resolved.icon, resolved.key)


@app.post("/frontend/icon/key")
def post_icon_key(body: Any = Body(default=None)) -> dict[str, str]:
    descriptor = parse_descriptor(body)
    key = derive_key(descriptor)
    return {"key": key, "query": querify_descriptor(descriptor, key)}


@app.get("/icon/{specifier:path}")
def get_icon(specifier: str, request: Request) -> Response:
    colors = request.query_params.getlist("color")
    if len(colors) > 1:
        raise InvalidInputError("Duplicate query parameter: color")
    payload: dict[str, Any] = {"specifier": specifier}
    if colors:
        payload["color"] = colors[0]
    resolved = _icon_service(request).get_icon(payload)
    return _icon_response(resolved.icon, resolved.key)
