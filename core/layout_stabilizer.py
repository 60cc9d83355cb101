"""
Layout Stabilizer

Removes layout ambiguity from the mounted clone before any pixels are read:
resolves the capture size with one of two policies, measuring only after a
bounded wait for web fonts on the page actually being measured. Every mount
starts a fresh page, so the barrier runs again after each one.

Policies:
- NATURAL: the surface computes width/height from content
- FIXED_WIDTH: a canonical content width is forced, the height is measured
  from content after a synchronous reflow, then the borrowed styles are
  restored. Export width no longer depends on the live viewport.
"""

import time
from dataclasses import dataclass

from core.export_settings import ExportOptions, LayoutPolicy
from core.render_surface import RenderSurface
from core.style_snapshot import StyleSnapshot
from core.tree_cloner import ClonedTree
from utils.logger import logger

# Maximum content width of the editor's preview column
FIXED_CONTENT_WIDTH_PX = 800
FONT_POLL_INTERVAL_MS = 50


@dataclass(frozen=True)
class StableLayout:
    """Resolved capture dimensions in CSS pixels."""
    width: int
    height: int
    fonts_ready: bool
    policy: LayoutPolicy


class LayoutStabilizer:
    """Settles fonts and dimensions of a mounted clone."""

    def __init__(
            self,
            fixed_width_px: int = FIXED_CONTENT_WIDTH_PX,
            poll_interval_ms: int = FONT_POLL_INTERVAL_MS
    ):
        self.fixed_width_px = fixed_width_px
        self.poll_interval_ms = poll_interval_ms

    def wait_for_fonts(self, surface: RenderSurface, element_id: str, timeout_ms: int) -> bool:
        """
        Font-readiness barrier.

        Polls the surface until no font referenced under the element is
        pending, or the timeout elapses. A timeout is logged, never raised.

        Returns:
            True if every font reported loaded before the deadline
        """
        deadline = time.monotonic() + timeout_ms / 1000.0
        pending = surface.pending_fonts(element_id)

        while pending:
            if time.monotonic() >= deadline:
                logger.warning(
                    f"Font barrier timed out after {timeout_ms}ms, still pending: {', '.join(pending)}. "
                    f"Capturing anyway",
                    source="LayoutStabilizer"
                )
                return False
            surface.wait(self.poll_interval_ms)
            pending = surface.pending_fonts(element_id)

        logger.debug("All fonts loaded", source="LayoutStabilizer")
        return True

    def stabilize(self, cloned: ClonedTree, surface: RenderSurface, options: ExportOptions) -> StableLayout:
        """
        Resolve final capture dimensions for the mounted clone.

        Args:
            cloned: Clone already mounted on the surface
            surface: Surface the clone lives on
            options: Export options (layout policy, explicit size, font timeout)

        Returns:
            StableLayout with width/height to capture
        """
        if options.layout_policy == LayoutPolicy.FIXED_WIDTH:
            width, height, fonts_ready = self._measure_fixed_width(cloned, surface, options.font_timeout_ms)
        else:
            fonts_ready = self.wait_for_fonts(surface, cloned.element_id, options.font_timeout_ms)
            width, height = surface.measure(cloned.element_id)
            logger.debug(f"Natural layout: {width}×{height}", source="LayoutStabilizer")

        if options.width:
            width = options.width
        if options.height:
            height = options.height

        width = max(1, int(width))
        height = max(1, int(height))

        logger.info(
            f"Layout stabilized ({options.layout_policy.value}): {width}×{height}"
            f"{'' if fonts_ready else ' [fonts pending]'}",
            source="LayoutStabilizer"
        )
        return StableLayout(width=width, height=height, fonts_ready=fonts_ready, policy=options.layout_policy)

    def _measure_fixed_width(self, cloned: ClonedTree, surface: RenderSurface, font_timeout_ms: int):
        """Force the canonical width, reflow, record height, restore."""
        with StyleSnapshot(label="fixed-width measurement") as snapshot:
            snapshot.borrow(cloned.root, "width", f"{self.fixed_width_px}px")
            snapshot.borrow(cloned.root, "max-width", "none")
            snapshot.borrow(cloned.root, "height", "auto")
            surface.mount(cloned.root)
            fonts_ready = self.wait_for_fonts(surface, cloned.element_id, font_timeout_ms)

            # Reading layout flushes pending reflow
            _, content_height = surface.measure(cloned.element_id, viewport_width=self.fixed_width_px)

        # Clone is back to its own styles; the viewport keeps the canonical width
        surface.mount(cloned.root)
        logger.debug(
            f"Fixed-width layout: {self.fixed_width_px}×{content_height}",
            source="LayoutStabilizer"
        )
        return self.fixed_width_px, content_height, fonts_ready
