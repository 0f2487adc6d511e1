# Purpose: Publish rendered icons to S3-compatible object storage.
# Dependencies: boto3 (AWS S3 or any S3-compatible endpoint).
# Notes: Requires AWS_REGION, S3_BUCKET; S3_PREFIX and S3_ENDPOINT_URL are optional.
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from urllib.parse import quote

import boto3

from iconapi.icons.errors import IconError
from iconapi.icons.keys import storage_path
from iconapi.icons.models import IconDescriptor
from iconapi.icons.service import IconService

logger = logging.getLogger(__name__)

VARIANT_COLORS: tuple[str | None, ...] = (None, "#000000", "#ffffff", "#4d4d4d", "#b2b2b2")
ICON_CACHE_CONTROL = "public, max-age=3600"


@dataclass(frozen=True)
class S3Config:
    region: str
    bucket: str
    prefix: str
    endpoint_url: str


def get_s3_config() -> S3Config:
    region = os.environ.get("AWS_REGION", "").strip()
    bucket = os.environ.get("S3_BUCKET", "").strip()
    prefix = os.environ.get("S3_PREFIX", "").strip()
    endpoint_url = os.environ.get("S3_ENDPOINT_URL", "").strip()

    if not region:
        raise RuntimeError("AWS_REGION is not set")
    if not bucket:
        raise RuntimeError("S3_BUCKET is not set")
    if prefix and not prefix.endswith("/"):
        prefix = prefix + "/"

    return S3Config(region=region, bucket=bucket, prefix=prefix, endpoint_url=endpoint_url)


def s3_client(*, region: str, endpoint_url: str = ""):
    if endpoint_url:
        return boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
    return boto3.client("s3", region_name=region)


def put_bytes(
    *,
    client,
    bucket: str,
    key: str,
    body: bytes,
    content_type: str,
    cache_control: str = "",
    metadata: dict[str, str] | None = None,
) -> None:
    kwargs = {"Bucket": bucket, "Key": key, "Body": body, "ContentType": content_type or "application/octet-stream"}
    if cache_control:
        kwargs["CacheControl"] = cache_control
    if metadata:
        kwargs["Metadata"] = metadata
    client.put_object(**kwargs)


def publish_variants(service: IconService, specifier: str, *, cfg: S3Config | None = None, client=None) -> list[str]:
    """Render ``specifier`` in each standard color and upload every variant.

    Runs after the response is sent, so a failing variant is logged and
    skipped. Returns the object keys that were written.
    """
    cfg = cfg or get_s3_config()
    client = client or s3_client(region=cfg.region, endpoint_url=cfg.endpoint_url)

    written: list[str] = []
    for color in VARIANT_COLORS:
        descriptor = IconDescriptor(specifier=specifier, color=color)
        path = storage_path(descriptor, cfg.prefix)
        try:
            resolved = service.get_icon(descriptor)
            put_bytes(
                client=client,
                bucket=cfg.bucket,
                key=path,
                body=resolved.icon.data,
                content_type=resolved.icon.content_type,
                cache_control=ICON_CACHE_CONTROL,
                metadata={"icon-specifier": quote(specifier, safe="")},
            )
        except IconError as e:
            logger.warning("Skipping icon variant %s: %s", path, e)
            continue
        except Exception as e:  # noqa: BLE001
            logger.error("Upload of icon variant %s failed: %s", path, e)
            continue
        logger.info("Stored icon at %s", path)
        written.append(path)
    return written
