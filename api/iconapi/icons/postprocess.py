from __future__ import annotations

import logging

from .backends import NativeRendererBackend
from .models import PNG, SVG, Icon, IconDescriptor
from .recolor import recolor

logger = logging.getLogger(__name__)

DEFAULT_MASK_COLOR = "#000000"


class Postprocessor:
    """Turns a fetched icon into its final form for a descriptor.

    PNGs and anything with a flip or scale go back through the native renderer
    as a data URI, since only it can transform and normalize images. SVG masks
    are recolored in place. With ``local_raster_recolor`` a PNG mask without a
    transform is recolored locally instead of being re-rendered.
    """

    def __init__(self, renderer: NativeRendererBackend, *, local_raster_recolor: bool = False) -> None:
        self.renderer = renderer
        self.local_raster_recolor = local_raster_recolor

    def _wants_recolor(self, icon: Icon, descriptor: IconDescriptor) -> bool:
        return icon.color_mode == "mask" and not descriptor.preserve_color

    def __call__(self, icon: Icon, descriptor: IconDescriptor) -> Icon:
        return self.postprocess(icon, descriptor)

    def postprocess(self, icon: Icon, descriptor: IconDescriptor) -> Icon:
        color = descriptor.color or DEFAULT_MASK_COLOR

        if icon.content_type == PNG and self.local_raster_recolor and not descriptor.has_transform:
            if self._wants_recolor(icon, descriptor):
                logger.info("Recoloring PNG locally")
                return recolor(icon, color)
            return icon

        if icon.content_type == PNG or descriptor.has_transform:
            logger.info("Re-rendering %s through native renderer", icon.content_type)
            rerender = descriptor.model_copy(update={"specifier": icon.data_uri()})
            return self.renderer.render(rerender, intrinsic_color=icon.intrinsic_color)

        if icon.content_type == SVG and self._wants_recolor(icon, descriptor):
            return recolor(icon, color)

        return icon
