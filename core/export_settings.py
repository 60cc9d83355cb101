from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, Union


class ImageFormat(Enum):
    """Supported export formats."""
    PNG = "png"
    JPEG = "jpg"
    SVG = "svg"  # Raster wrapped in an SVG document, best effort

    @classmethod
    def from_string(cls, value: str) -> "ImageFormat":
        """Parse 'png' / 'jpg' / 'jpeg' / 'svg' (case-insensitive)."""
        normalized = value.strip().lower().lstrip(".")
        if normalized == "jpeg":
            normalized = "jpg"
        for fmt in cls:
            if fmt.value == normalized:
                return fmt
        raise ValueError(f"Unsupported export format: {value!r}")

    @property
    def mime_type(self) -> str:
        """MIME type declared in the data URL."""
        mime_types = {
            ImageFormat.PNG: "image/png",
            ImageFormat.JPEG: "image/jpeg",
            ImageFormat.SVG: "image/svg+xml",
        }
        return mime_types[self]

    @property
    def file_extension(self) -> str:
        """File extension without the leading dot."""
        return self.value


class LayoutPolicy(Enum):
    """How the clone's dimensions are resolved before capture."""
    NATURAL = "natural"      # Content decides width and height
    FIXED_WIDTH = "fixed"    # Canonical width, height measured from content


class ScalingMode(Enum):
    """Where output sharpness comes from."""
    NATIVE = "native"        # Capture primitive oversamples by `scale`
    COMPOSITE = "composite"  # Capture at 1x, compositor upscales by `scale`


MIN_QUALITY = 0.1
MAX_QUALITY = 1.0
MIN_SCALE = 1
MAX_SCALE = 4

DEFAULT_SCALE = {
    ScalingMode.NATIVE: 2,
    ScalingMode.COMPOSITE: 3,
}

DEFAULT_FONT_TIMEOUT_MS = 3000
TRANSPARENT = "transparent"


def clamp_quality(value: Union[int, float]) -> float:
    """Clamp quality into [0.1, 1.0]."""
    return min(MAX_QUALITY, max(MIN_QUALITY, float(value)))


def clamp_scale(value: Union[int, float]) -> int:
    """Clamp scale to an integer multiplier in [1, 4]."""
    return min(MAX_SCALE, max(MIN_SCALE, int(round(value))))


@dataclass
class ExportOptions:
    """
    Options for one export call.

    Out-of-range quality and scale are clamped at construction, so an
    ExportOptions instance is always valid.
    """
    format: ImageFormat = ImageFormat.PNG
    quality: float = 1.0
    scale: Optional[int] = None  # None = default for the scaling mode
    width: Optional[int] = None
    height: Optional[int] = None
    background_color: Optional[str] = None  # None = theme background
    scaling_mode: ScalingMode = ScalingMode.NATIVE
    layout_policy: LayoutPolicy = LayoutPolicy.NATURAL
    font_timeout_ms: int = DEFAULT_FONT_TIMEOUT_MS

    def __post_init__(self):
        if isinstance(self.format, str):
            self.format = ImageFormat.from_string(self.format)
        self.quality = clamp_quality(self.quality)
        if self.scale is None:
            self.scale = DEFAULT_SCALE[self.scaling_mode]
        self.scale = clamp_scale(self.scale)
        if self.width is not None and self.width <= 0:
            self.width = None
        if self.height is not None and self.height <= 0:
            self.height = None
        self.font_timeout_ms = max(0, int(self.font_timeout_ms))

    @property
    def transparent_background(self) -> bool:
        """True only when transparency was explicitly requested."""
        return (self.background_color or "").strip().lower() == TRANSPARENT

    @property
    def native_scale(self) -> int:
        """Oversampling factor handed to the capture primitive."""
        return self.scale if self.scaling_mode == ScalingMode.NATIVE else 1

    @property
    def pillow_quality(self) -> int:
        """Quality mapped onto Pillow's 1-100 JPEG scale."""
        return max(1, min(100, int(round(self.quality * 100))))

    def to_pillow_kwargs(self) -> Dict[str, Any]:
        """
        Convert options to Pillow save() kwargs for the raster payload.

        SVG exports embed a PNG raster, so they share the PNG kwargs.
        """
        if self.format == ImageFormat.JPEG:
            return {
                'format': 'JPEG',
                'quality': self.pillow_quality,
                'optimize': True,
            }
        return {
            'format': 'PNG',
            'optimize': True,
        }
