from __future__ import annotations

import base64
import math
import re
from dataclasses import dataclass, replace
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidInputError

ContentType = Literal["image/png", "image/svg+xml"]
ColorMode = Literal["intrinsic", "mask"]

PNG: ContentType = "image/png"
SVG: ContentType = "image/svg+xml"
SUPPORTED_CONTENT_TYPES: tuple[str, ...] = (PNG, SVG)

SCALE_MIN = 0.1
SCALE_MAX = 9.9

NAMED_COLORS = {
    "black": "#000000",
    "white": "#ffffff",
}

_HEX6_RE = re.compile(r"^[0-9a-f]{6}$")
_HEX3_RE = re.compile(r"^[0-9a-f]{3}$")


def canonicalize_color(value: Any) -> str | None:
    """Normalize a color token to lowercase ``#rrggbb``; anything unrecognized becomes None."""
    if not isinstance(value, str):
        return None
    color = value.strip().lower()
    if color in NAMED_COLORS:
        return NAMED_COLORS[color]
    if color.startswith("#"):
        color = color[1:]
    if _HEX6_RE.match(color):
        return "#" + color
    if _HEX3_RE.match(color):
        return "#" + "".join(ch * 2 for ch in color)
    return None


def clamp_scale(value: float | None) -> float | None:
    if value is None:
        return None
    return min(max(float(value), SCALE_MIN), SCALE_MAX)


class IconDescriptor(BaseModel):
    """An icon request: a specifier plus rendering flags.

    Field names are camelCase on the wire (``flipHorizontal``, ``preserveColor``...)
    and snake_case in Python.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    specifier: str = Field(..., min_length=1)
    flip_horizontal: bool = False
    flip_vertical: bool = False
    preserve_color: bool = False
    preserve_aspect: bool = False
    scale: float | None = None
    color: str | None = None

    @field_validator("color", mode="before")
    @classmethod
    def validate_color(cls, value: Any) -> str | None:
        return canonicalize_color(value)

    @field_validator("scale")
    @classmethod
    def validate_scale(cls, value: float | None) -> float | None:
        if value is not None and not math.isfinite(value):
            raise ValueError("scale must be a finite number")
        return clamp_scale(value)

    @property
    def has_transform(self) -> bool:
        return self.flip_horizontal or self.flip_vertical or self.scale is not None

    def canonical(self) -> "IconDescriptor":
        """Canonical values guarantee stable cache keys for equivalent requests."""
        return self.model_copy(
            update={
                "color": canonicalize_color(self.color),
                "scale": clamp_scale(self.scale),
            }
        )

    def key_fields(self) -> dict[str, Any]:
        """Canonical fields that identify the rendered result; defaults are omitted."""
        fields = self.canonical().model_dump(by_alias=True, exclude_none=True, exclude_defaults=True)
        if fields.get("scale") == 1:
            fields.pop("scale")
        return fields

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def parse_descriptor(payload: Any) -> IconDescriptor:
    if isinstance(payload, IconDescriptor):
        return payload.canonical()
    if not isinstance(payload, dict):
        raise InvalidInputError("Icon descriptor must be an object")
    try:
        return IconDescriptor.model_validate(payload).canonical()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'descriptor'}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInputError(f"Invalid icon descriptor: {problems}") from e


def canonicalize(descriptor: IconDescriptor) -> IconDescriptor:
    return descriptor.canonical()


@dataclass(frozen=True)
class Icon:
    data: bytes
    content_type: ContentType
    color_mode: ColorMode = "mask"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def intrinsic_color(self) -> bool:
        return self.color_mode == "intrinsic"

    def with_data(self, data: bytes) -> "Icon":
        return replace(self, data=bytes(data))

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"
