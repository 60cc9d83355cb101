"""
Rasterizer

Turns the stabilized clone into a pixel buffer through the surface's
DOM-to-bitmap primitive and validates what comes back.
"""

import re
from typing import Callable, Optional

from bs4 import Tag
from PIL import Image

from core.errors import CaptureError
from core.export_settings import ExportOptions
from core.layout_stabilizer import LayoutStabilizer, StableLayout
from core.render_surface import CaptureRequest, RenderSurface
from core.tree_cloner import ClonedTree
from models.theme import Theme
from utils.inline_style import apply_style_properties, get_style_property, set_style_property
from utils.logger import logger

# Vertical text calibration applied to the clone root, in CSS pixels.
# 0 keeps the host's own baseline placement.
BASELINE_OFFSET_PX = 0

TEXT_RENDERING_PROPERTIES = {
    "text-rendering": "geometricPrecision",
    "-webkit-font-smoothing": "antialiased",
    "-moz-osx-font-smoothing": "grayscale",
}

_TRANSLATE_Y_PATTERN = re.compile(r"translateY\([^)]*\)\s*", re.IGNORECASE)

StyleHook = Callable[[Tag], None]


def normalize_text_baseline(root: Tag) -> None:
    """
    Default pre-capture hook.

    Forces consistent text rendering on the clone root and removes vertical
    translate transforms that shift glyphs off their line boxes.
    """
    properties = dict(TEXT_RENDERING_PROPERTIES)
    if BASELINE_OFFSET_PX:
        properties["position"] = "relative"
        properties["top"] = f"{BASELINE_OFFSET_PX}px"
    apply_style_properties(root, properties)

    for element in root.find_all(style=True):
        transform = get_style_property(element, "transform")
        if not transform or "translatey" not in transform.lower():
            continue
        remaining = _TRANSLATE_Y_PATTERN.sub("", transform).strip()
        set_style_property(element, "transform", remaining or None)


class RasterResult:
    """Captured buffer plus the oversampling already applied to it."""

    def __init__(self, image: Image.Image, native_scale: int):
        self.image = image
        self.native_scale = native_scale

    @property
    def size(self):
        return self.image.size

    def __repr__(self):
        return f"RasterResult(size={self.image.size}, native_scale={self.native_scale})"


class Rasterizer:
    """Reads pixels of the mounted clone."""

    def __init__(
            self,
            style_hook: Optional[StyleHook] = normalize_text_baseline,
            stabilizer: Optional[LayoutStabilizer] = None
    ):
        self.style_hook = style_hook
        self.stabilizer = stabilizer or LayoutStabilizer()

    @staticmethod
    def resolve_background(theme: Theme, options: ExportOptions) -> Optional[str]:
        """Capture background; None only when transparency was asked for."""
        if options.transparent_background:
            return None
        return options.background_color or theme.colors.background

    def rasterize(
            self,
            cloned: ClonedTree,
            layout: StableLayout,
            theme: Theme,
            options: ExportOptions,
            surface: RenderSurface
    ) -> RasterResult:
        """
        Capture the clone at its stabilized size.

        Raises:
            CaptureError: If the primitive fails or the buffer is unusable
        """
        background = self.resolve_background(theme, options)
        native_scale = options.native_scale

        if self.style_hook is not None:
            self.style_hook(cloned.root)
        surface.mount(cloned.root)

        # The remount is a fresh page: fonts load again before pixels are read
        self.stabilizer.wait_for_fonts(surface, cloned.element_id, options.font_timeout_ms)

        request = CaptureRequest(
            element_id=cloned.element_id,
            width=layout.width,
            height=layout.height,
            background_color=background,
            scale=native_scale,
            allow_cross_origin=True
        )

        logger.debug(
            f"Capturing {layout.width}×{layout.height} @{native_scale}x "
            f"(background: {background or 'transparent'})",
            source="Rasterizer"
        )

        try:
            image = surface.capture(request)
        except CaptureError:
            raise
        except Exception as e:
            raise CaptureError(f"Capture failed: {e}", cause=e) from e

        self._validate(image, background)

        logger.info(f"Captured {image.width}×{image.height} pixels", source="Rasterizer")
        return RasterResult(image=image, native_scale=native_scale)

    @staticmethod
    def _validate(image: Optional[Image.Image], background: Optional[str]) -> None:
        if image is None:
            raise CaptureError("Capture returned no image")
        if image.width == 0 or image.height == 0:
            raise CaptureError(f"Capture returned an empty image ({image.width}×{image.height})")

        if background is not None and image.mode in ("RGBA", "LA", "PA"):
            alpha_min, alpha_max = image.getchannel("A").getextrema()
            if alpha_max == 0:
                raise CaptureError("Capture returned a fully transparent image")
