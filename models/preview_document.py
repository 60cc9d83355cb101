"""
Preview Document

The live node tree shown in the preview pane. The preview view is rendered
from this document, and exports clone their capture target out of it.
"""

from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from models.capture_target import CaptureTarget


class PreviewDocument:
    """A parsed HTML page holding stylesheets and the capture target."""

    def __init__(self, html: str, base_url: Optional[str] = None):
        self.soup = BeautifulSoup(html, "html.parser")
        self.base_url = base_url
        # Computed box of the capture target as last laid out by the live view
        self.root_layout: Dict[str, str] = {}

        if self.soup.head is None:
            head = self.soup.new_tag("head")
            if self.soup.html is not None:
                self.soup.html.insert(0, head)
            else:
                self.soup.insert(0, head)

    @property
    def head(self) -> Tag:
        return self.soup.head

    def find_target(self, target: CaptureTarget) -> Optional[Tag]:
        """Locate the capture target by id, or None if it is not in the tree."""
        element = self.soup.find(id=target.element_id)
        return element if isinstance(element, Tag) else None

    def stylesheet_elements(self) -> List[Tag]:
        """All ``<style>`` and ``<link rel="stylesheet">`` elements in document order."""
        elements = []
        for element in self.soup.find_all(["style", "link"]):
            if element.name == "link":
                rel = element.get("rel") or []
                if isinstance(rel, str):
                    rel = rel.split()
                if "stylesheet" not in [r.lower() for r in rel]:
                    continue
            elements.append(element)
        return elements

    def set_root_layout(self, properties: Optional[Dict[str, str]]) -> None:
        """Record the live target's computed layout properties (empty values dropped)."""
        self.root_layout = {
            str(name): str(value)
            for name, value in (properties or {}).items()
            if value not in (None, "")
        }

    def to_html(self) -> str:
        """Serialize the whole document (used to refresh the live view)."""
        return str(self.soup)

    def __repr__(self) -> str:
        return f"PreviewDocument(stylesheets={len(self.stylesheet_elements())}, base_url={self.base_url!r})"
