"""
Tree Cloner

Copies the capture target out of the live preview document into an
isolated render surface, together with every active stylesheet. The live
tree is only read, never written.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, List

from bs4 import Tag

from core.errors import TargetNotFound
from core.render_surface import RenderSurface, StyleSource
from core.style_resolver import StyleResolver
from models.capture_target import CaptureTarget
from models.preview_document import PreviewDocument
from models.theme import Theme
from utils.inline_style import apply_style_properties
from utils.logger import logger

DEBUG_OVERLAY_CLASS = "debug-margins"

# Box model of the live target carried onto the clone root
LAYOUT_PROPERTIES = ("padding", "margin", "max-width", "width", "display")


@dataclass
class ClonedTree:
    """Detached copy of the capture target mounted on a surface."""
    root: Tag
    element_id: str
    stylesheets: List[StyleSource] = field(default_factory=list)
    debug_active: bool = False


def is_debug_overlay_active(element: Tag) -> bool:
    """True when the margin/padding debug overlay is toggled on the element."""
    return DEBUG_OVERLAY_CLASS in (element.get("class") or [])


class TreeCloner:
    """Produces a detached, theme-resolved copy of the capture target."""

    @staticmethod
    def collect_stylesheets(document: PreviewDocument, theme: Theme) -> List[StyleSource]:
        """
        Copy every active stylesheet in document order.

        ``<style>`` text is resolved against the theme; linked sheets are
        copied as-is.
        """
        sources = []
        for element in document.stylesheet_elements():
            element_id = element.get("id")
            if element.name == "link":
                href = element.get("href")
                if not href:
                    logger.debug("Skipping stylesheet link without href", source="TreeCloner")
                    continue
                sources.append(StyleSource(href=href, element_id=element_id))
            else:
                css_text = "".join(str(child) for child in element.contents)
                sources.append(StyleSource(
                    css_text=StyleResolver.resolve_stylesheet(css_text, theme),
                    element_id=element_id
                ))
        return sources

    @staticmethod
    def live_layout(document: PreviewDocument) -> Dict[str, str]:
        """Layout properties the live view computed for the capture target."""
        return {
            name: document.root_layout[name]
            for name in LAYOUT_PROPERTIES
            if document.root_layout.get(name)
        }

    @staticmethod
    def clone(
            document: PreviewDocument,
            target: CaptureTarget,
            theme: Theme,
            surface: RenderSurface
    ) -> ClonedTree:
        """
        Clone the capture target onto the surface.

        Args:
            document: Live preview document (read-only here)
            target: Capture target to locate
            theme: Theme whose variables get resolved
            surface: Isolated render surface receiving the copy

        Returns:
            ClonedTree mounted on the surface

        Raises:
            TargetNotFound: If the target id is not in the document
        """
        live_element = document.find_target(target)
        if live_element is None:
            raise TargetNotFound(target.element_id)

        # bs4 copies are deep and detached from the source tree
        clone_root = copy.copy(live_element)
        debug_active = is_debug_overlay_active(clone_root)

        # Same box as the live preview, whatever the surface viewport is
        apply_style_properties(clone_root, TreeCloner.live_layout(document))

        node_styles = StyleResolver.resolve_node_styles(theme, target.element_id)
        apply_style_properties(clone_root, node_styles.get(target.element_id, {}))

        stylesheets = TreeCloner.collect_stylesheets(document, theme)

        # Stylesheets first: measurements taken before they land are wrong
        surface.reset()
        for source in stylesheets:
            surface.attach_stylesheet(source)
        surface.mount(clone_root)

        logger.debug(
            f"Cloned {target} with {len(stylesheets)} stylesheet(s)"
            f"{' (debug overlay active)' if debug_active else ''}",
            source="TreeCloner"
        )

        return ClonedTree(
            root=clone_root,
            element_id=target.element_id,
            stylesheets=stylesheets,
            debug_active=debug_active
        )
