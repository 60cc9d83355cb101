"""
Render Surface

Interface of the host rendering surface the export pipeline captures from:
an isolated page that lays out a mounted node tree with CSS, reports font
loading and exposes a DOM-to-bitmap primitive.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4 import Tag
from PIL import Image


@dataclass(frozen=True)
class StyleSource:
    """One stylesheet copied from the live document."""
    css_text: Optional[str] = None  # <style> contents (already theme-resolved)
    href: Optional[str] = None      # <link rel="stylesheet"> target
    element_id: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return self.href is not None

    def to_html(self) -> str:
        """Markup used to attach this stylesheet to a page head."""
        id_attr = f' id="{self.element_id}"' if self.element_id else ""
        if self.is_linked:
            return f'<link rel="stylesheet"{id_attr} href="{self.href}">'
        return f"<style{id_attr}>{self.css_text or ''}</style>"


@dataclass(frozen=True)
class CaptureRequest:
    """Parameters for one pixel read."""
    element_id: str
    width: int
    height: int
    background_color: Optional[str]  # None = transparent
    scale: int = 1                   # Native oversampling factor
    allow_cross_origin: bool = True


class RenderSurface(ABC):
    """
    Isolated rendering context for a cloned capture target.

    Call order within one export:
        reset() -> attach_stylesheet()* -> mount() -> measure()/pending_fonts()
        -> [mount() again after clone mutations] -> capture()
    """

    @abstractmethod
    def reset(self) -> None:
        """Drop any stylesheets and mounted content."""

    @abstractmethod
    def attach_stylesheet(self, source: StyleSource) -> None:
        """Attach a stylesheet; must happen before the clone is mounted."""

    @abstractmethod
    def mount(self, root: Tag) -> None:
        """Mount (or re-mount after mutation) the cloned subtree."""

    @abstractmethod
    def measure(self, element_id: str, viewport_width: Optional[int] = None) -> Tuple[int, int]:
        """
        Force a synchronous reflow and return the element's (width, height)
        in CSS pixels. ``viewport_width`` constrains the page width first.
        """

    @abstractmethod
    def pending_fonts(self, element_id: str) -> List[str]:
        """Font families referenced under the element that are not loaded yet."""

    @abstractmethod
    def wait(self, interval_ms: int) -> None:
        """Yield to the host for ``interval_ms`` (lets loads progress)."""

    @abstractmethod
    def capture(self, request: CaptureRequest) -> Image.Image:
        """Read the element's pixels. Raises on any primitive failure."""

    def close(self) -> None:
        """Release host resources."""
