"""
Output Encoder

Serializes the final buffer to PNG / JPEG / SVG, builds the data URL and the
export file name.

File names:
    markdown-<themeId>[-debug]-<UTC timestamp>.<ext>
    e.g. markdown-dark-2024-05-01T12-30-45.png
"""

import base64
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from PIL import Image, ImageColor

from core.errors import EncodingError
from core.export_settings import ExportOptions, ImageFormat
from models.theme import Theme
from utils.logger import logger

FILE_NAME_PREFIX = "markdown"
DEBUG_SUFFIX = "-debug"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 to the second, with ':' replaced for file systems."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S")


def generate_file_name(
        theme_id: str,
        fmt: ImageFormat,
        debug_active: bool = False,
        now: Optional[datetime] = None
) -> str:
    """
    Build the export file name.

    Args:
        theme_id: Active theme id
        fmt: Output format (decides the extension)
        debug_active: Whether the debug overlay was on during capture
        now: Timestamp to use (defaults to the current UTC time)
    """
    suffix = DEBUG_SUFFIX if debug_active else ""
    timestamp = format_timestamp(now or utc_now())
    return f"{FILE_NAME_PREFIX}-{theme_id}{suffix}-{timestamp}.{fmt.file_extension}"


@dataclass(frozen=True)
class EncodedImage:
    """Encoded payload ready for delivery."""
    payload: bytes = field(repr=False)
    data_url: str = field(repr=False)
    mime_type: str
    file_name: str
    width: int
    height: int

    @property
    def size_kb(self) -> float:
        return len(self.payload) / 1024


class OutputEncoder:
    """Encodes final images and names the resulting file."""

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock

    def encode(
            self,
            image: Image.Image,
            theme: Theme,
            options: ExportOptions,
            debug_active: bool = False
    ) -> EncodedImage:
        """
        Encode the image in the requested format.

        Raises:
            EncodingError: If Pillow cannot serialize the buffer
        """
        fmt = options.format

        try:
            if fmt == ImageFormat.SVG:
                payload = self._encode_svg(image)
            else:
                prepared = self._prepare_for_format(image, theme, options)
                payload = self._save_to_bytes(prepared, options)
        except EncodingError:
            raise
        except (OSError, ValueError, KeyError) as e:
            raise EncodingError(f"Failed to encode {fmt.value.upper()}: {e}") from e

        if not payload:
            raise EncodingError(f"Encoder produced an empty {fmt.value.upper()} payload")

        data_url = f"data:{fmt.mime_type};base64,{base64.b64encode(payload).decode('ascii')}"
        file_name = generate_file_name(theme.id, fmt, debug_active, self.clock())

        logger.info(
            f"Encoded {file_name}: {image.width}×{image.height}, {len(payload) / 1024:.1f}KB",
            source="OutputEncoder"
        )

        return EncodedImage(
            payload=payload,
            data_url=data_url,
            mime_type=fmt.mime_type,
            file_name=file_name,
            width=image.width,
            height=image.height
        )

    @staticmethod
    def _flatten_color(theme: Theme, options: ExportOptions):
        color = options.background_color
        if not color or options.transparent_background:
            color = theme.colors.background
        try:
            return ImageColor.getrgb(color)[:3]
        except ValueError:
            logger.warning(f"Unparseable background '{color}', flattening onto white", source="OutputEncoder")
            return 255, 255, 255

    def _prepare_for_format(self, image: Image.Image, theme: Theme, options: ExportOptions) -> Image.Image:
        """Format-specific preparation before save (JPEG has no alpha)."""
        if options.format == ImageFormat.JPEG:
            if image.mode == 'RGB':
                return image
            logger.debug(f"Converting {image.mode} → RGB for JPEG", source="OutputEncoder")
            if image.mode == 'P':
                image = image.convert('RGBA')
            rgb_image = Image.new('RGB', image.size, self._flatten_color(theme, options))
            rgb_image.paste(image, mask=image.split()[-1] if image.mode in ('RGBA', 'LA') else None)
            return rgb_image

        if image.mode not in ('RGB', 'RGBA', 'L', 'LA'):
            return image.convert('RGBA')
        return image

    @staticmethod
    def _save_to_bytes(image: Image.Image, options: ExportOptions) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, **options.to_pillow_kwargs())
        return buffer.getvalue()

    def _encode_svg(self, image: Image.Image) -> bytes:
        """Wrap the PNG raster in an SVG document."""
        if image.mode not in ('RGB', 'RGBA'):
            image = image.convert('RGBA')
        png_bytes = self._save_to_bytes(image, ExportOptions(format=ImageFormat.PNG))
        encoded = base64.b64encode(png_bytes).decode('ascii')
        svg = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{image.width}" height="{image.height}" '
            f'viewBox="0 0 {image.width} {image.height}">\n'
            f'  <image width="{image.width}" height="{image.height}" '
            f'href="data:image/png;base64,{encoded}" '
            f'xlink:href="data:image/png;base64,{encoded}"/>\n'
            '</svg>\n'
        )
        return svg.encode('utf-8')
