"""
Markdown Renderer

Builds the live preview document from editor text: markdown-it HTML wrapped
in the capture target, with the themed content stylesheet in the head.
"""

from typing import Optional

from markdown_it import MarkdownIt

from core.themes import build_theme_stylesheet, get_theme
from models.capture_target import PREVIEW_CONTENT_ID
from models.preview_document import PreviewDocument
from utils.logger import logger

THEME_STYLE_ID = "markdown-themes"

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style id="{style_id}">
{stylesheet}
</style>
</head>
<body>
<div id="{content_id}" class="markdown-content theme-{theme_id}">
{body}
</div>
</body>
</html>"""


class MarkdownRenderer:
    """Markdown text → PreviewDocument."""

    def __init__(self):
        self._md = MarkdownIt(
            "commonmark",
            {"html": True, "typographer": True},
        ).enable("table").enable("strikethrough")
        # Theme rules are shared by every render; only the class switches
        self._stylesheet = build_theme_stylesheet()

    def render_html(self, markdown_text: str) -> str:
        """Render markdown to an HTML fragment."""
        return self._md.render(markdown_text or "")

    def render(self, markdown_text: str, theme_id: Optional[str] = None, base_url: Optional[str] = None) -> PreviewDocument:
        """
        Build the preview document for the given markdown and theme.

        Args:
            markdown_text: Editor contents
            theme_id: Active theme (unknown ids fall back to the default)
            base_url: Base for relative image links
        """
        theme = get_theme(theme_id)
        html = DOCUMENT_TEMPLATE.format(
            style_id=THEME_STYLE_ID,
            stylesheet=self._stylesheet,
            content_id=PREVIEW_CONTENT_ID,
            theme_id=theme.id,
            body=self.render_html(markdown_text)
        )
        logger.debug(f"Rendered preview ({len(markdown_text or '')} chars, theme: {theme.id})", source="MarkdownRenderer")
        return PreviewDocument(html, base_url=base_url)
