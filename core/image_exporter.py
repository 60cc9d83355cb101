"""
Image Exporter

Single entry point of the snapshot pipeline:

    clone → stabilize → rasterize → composite → encode

Every fatal error inside the pipeline comes back as an ExportFailure; the
caller never sees an exception. The live preview target is tracked in a
StyleSnapshot for the duration of the call and restored whatever happens.
"""

from typing import Callable, Optional, Union

from core.compositor import Compositor
from core.errors import ExportError, TargetNotFound
from core.export_settings import ExportOptions
from core.layout_stabilizer import LayoutStabilizer
from core.output_encoder import OutputEncoder
from core.rasterizer import Rasterizer
from core.render_surface import RenderSurface
from core.style_snapshot import StyleSnapshot
from core.themes import get_theme
from core.tree_cloner import TreeCloner
from models.capture_target import CaptureTarget
from models.export_result import ExportErrorKind, ExportFailure, ExportResult, ExportSuccess
from models.preview_document import PreviewDocument
from models.theme import Theme
from utils.logger import logger
from utils.performance_monitor import PerformanceMonitor

DocumentProvider = Callable[[], PreviewDocument]


class ImageExporter:
    """Runs one export at a time against a render surface."""

    def __init__(
            self,
            surface: RenderSurface,
            document_provider: DocumentProvider,
            cloner: Optional[TreeCloner] = None,
            stabilizer: Optional[LayoutStabilizer] = None,
            rasterizer: Optional[Rasterizer] = None,
            compositor: Optional[Compositor] = None,
            encoder: Optional[OutputEncoder] = None,
            performance_monitor: Optional[PerformanceMonitor] = None
    ):
        self.surface = surface
        self.document_provider = document_provider
        self.cloner = cloner or TreeCloner()
        self.stabilizer = stabilizer or LayoutStabilizer()
        self.rasterizer = rasterizer or Rasterizer(stabilizer=self.stabilizer)
        self.compositor = compositor or Compositor()
        self.encoder = encoder or OutputEncoder()
        self.performance_monitor = performance_monitor or PerformanceMonitor()

    def export(
            self,
            target: Union[CaptureTarget, str],
            theme: Union[Theme, str],
            options: Optional[ExportOptions] = None
    ) -> ExportResult:
        """
        Export the target subtree as an encoded image.

        Args:
            target: Capture target (or its element id)
            theme: Theme to render with (or its id)
            options: Export options (None = defaults)

        Returns:
            ExportSuccess with the encoded payload, or ExportFailure
        """
        if isinstance(target, str):
            target = CaptureTarget(element_id=target)
        if isinstance(theme, str):
            theme = get_theme(theme)
        options = options or ExportOptions()

        logger.info(
            f"Exporting {target} as {options.format.value.upper()} "
            f"(theme: {theme.id}, scale: {options.scale}x {options.scaling_mode.value}, "
            f"layout: {options.layout_policy.value})",
            source="ImageExporter"
        )

        try:
            document = self.document_provider()
            live_element = document.find_target(target)
        except Exception as e:
            logger.error(f"Preview document unavailable: {type(e).__name__}: {e}", source="ImageExporter")
            return ExportFailure(
                error_message=str(e) or type(e).__name__,
                error_kind=ExportErrorKind.UNEXPECTED
            )

        if live_element is None:
            error = TargetNotFound(target.element_id)
            logger.error(str(error), source="ImageExporter")
            return ExportFailure(error_message=str(error), error_kind=error.kind)

        memory_before = self.performance_monitor.get_memory_mb()
        snapshot = StyleSnapshot(label=f"export of {target}")
        snapshot.track(live_element)

        try:
            cloned = self.cloner.clone(document, target, theme, self.surface)
            layout = self.stabilizer.stabilize(cloned, self.surface, options)
            raster = self.rasterizer.rasterize(cloned, layout, theme, options, self.surface)
            final_image = self.compositor.composite(raster, options)
            encoded = self.encoder.encode(final_image, theme, options, cloned.debug_active)

        except ExportError as e:
            logger.error(f"Export failed: {e}", source="ImageExporter")
            return ExportFailure(error_message=str(e), error_kind=e.kind)

        except Exception as e:
            logger.error(f"Unexpected export error: {type(e).__name__}: {e}", source="ImageExporter")
            return ExportFailure(
                error_message=str(e) or type(e).__name__,
                error_kind=ExportErrorKind.UNEXPECTED
            )

        finally:
            snapshot.restore()
            self._release_surface()
            memory_after = self.performance_monitor.get_memory_mb()
            logger.debug(
                f"Memory: {PerformanceMonitor.format_memory(memory_before)} → "
                f"{PerformanceMonitor.format_memory(memory_after)}",
                source="ImageExporter"
            )

        logger.success(
            f"Exported {encoded.file_name} ({encoded.width}×{encoded.height}, {encoded.size_kb:.1f}KB)",
            source="ImageExporter"
        )

        return ExportSuccess(
            data_url=encoded.data_url,
            file_name=encoded.file_name,
            mime_type=encoded.mime_type,
            payload=encoded.payload,
            width=encoded.width,
            height=encoded.height,
            debug_active=cloned.debug_active
        )

    def _release_surface(self) -> None:
        try:
            self.surface.reset()
        except Exception as e:
            logger.warning(f"Render surface reset failed: {e}", source="ImageExporter")
