"""
Compositor

Upscales a 1x capture to the requested scale when the capture primitive did
not oversample natively.
"""

from PIL import Image

from core.export_settings import ExportOptions
from core.rasterizer import RasterResult
from utils.logger import logger


class Compositor:
    """Produces the final buffer handed to the encoder."""

    @staticmethod
    def composite(raster: RasterResult, options: ExportOptions) -> Image.Image:
        """
        Return the final image for encoding.

        Only upscales when ``scale > 1`` and the raster is still at 1x;
        otherwise the captured buffer passes through untouched.
        """
        if options.scale <= 1 or raster.native_scale > 1:
            return raster.image

        source = raster.image
        target_size = (source.width * options.scale, source.height * options.scale)

        # Resampling works on straight RGB(A); palette/1-bit images get converted
        if source.mode not in ("RGB", "RGBA"):
            source = source.convert("RGBA")

        result = source.resize(target_size, Image.Resampling.LANCZOS)
        logger.debug(
            f"Upscaled {raster.image.width}×{raster.image.height} → "
            f"{result.width}×{result.height} ({options.scale}x)",
            source="Compositor"
        )
        return result
