from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from io import BytesIO

import numpy as np
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as safe_fromstring
from PIL import Image, UnidentifiedImageError

from .errors import FormatError
from .models import PNG, SVG, Icon

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Keep serialized SVG free of ns0: prefixes.
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

_HEX_COLOR_RE = re.compile(r"^#[0-9a-f]{6}$")


def parse_hex_color(hex_color: str) -> tuple[int, int, int]:
    if not _HEX_COLOR_RE.match(hex_color or ""):
        raise FormatError(f"Invalid recolor target: {hex_color!r}")
    return int(hex_color[1:3], 16), int(hex_color[3:5], 16), int(hex_color[5:7], 16)


def recolor_raster(png_bytes: bytes, hex_color: str) -> bytes:
    """Paint every visible pixel with ``hex_color``, keeping the alpha channel.

    Fully transparent pixels keep their RGB values too, so no fringe appears
    when the image is later scaled or blended.
    """
    rgb = parse_hex_color(hex_color)
    try:
        with Image.open(BytesIO(png_bytes)) as img:
            if img.format != "PNG":
                raise FormatError(f"Expected PNG data, got {img.format}")
            pixels = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise FormatError(f"Malformed PNG: {e}") from e

    visible = pixels[:, :, 3] > 0
    pixels[visible, :3] = rgb

    out = BytesIO()
    Image.fromarray(pixels).save(out, format="PNG")
    logger.debug("Recolored PNG %dx%d to %s", pixels.shape[1], pixels.shape[0], hex_color)
    return out.getvalue()


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def recolor_vector(svg_bytes: bytes, hex_color: str) -> bytes:
    """Rewrite ``fill``/``stroke`` attributes across the SVG tree.

    Attributes set to ``none`` are left alone and elements without the
    attribute are not touched; the root element always ends up with an
    explicit fill unless it is ``none``.
    """
    parse_hex_color(hex_color)
    try:
        root = safe_fromstring(svg_bytes)
    except ET.ParseError as e:
        raise FormatError(f"Malformed SVG: {e}") from e
    except DefusedXmlException as e:
        raise FormatError(f"Rejected SVG: {e}") from e
    if _local_name(root.tag) != "svg":
        raise FormatError(f"Unsupported SVG root element: {_local_name(root.tag) or root.tag!r}")

    for node in root.iter():
        for attr in ("fill", "stroke"):
            value = node.get(attr)
            if value is not None and value.strip() != "none":
                node.set(attr, hex_color)

    if (root.get("fill") or "").strip() != "none":
        root.set("fill", hex_color)

    return ET.tostring(root, encoding="unicode").encode("utf-8")


def recolor(icon: Icon, hex_color: str) -> Icon:
    logger.info("Recoloring %s to %s", icon.content_type, hex_color)
    if icon.content_type == PNG:
        return icon.with_data(recolor_raster(icon.data, hex_color))
    if icon.content_type == SVG:
        return icon.with_data(recolor_vector(icon.data, hex_color))
    raise FormatError(f"Unsupported content type: {icon.content_type}")
