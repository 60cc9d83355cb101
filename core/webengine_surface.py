"""
WebEngine Surface

RenderSurface backed by an off-screen QWebEngineView. The clone and its
stylesheets are loaded into a private page, laid out by Chromium and grabbed
as a pixmap. Every host call is made blocking with a local QEventLoop bounded
by a timeout, so the exporter runs as plain sequential code on the GUI thread.
"""

import json
import math
from typing import Any, List, Optional, Tuple

from bs4 import Tag
from PIL import Image
from PySide6.QtCore import QEventLoop, QRect, Qt, QTimer, QUrl
from PySide6.QtGui import QColor, QImage
from PySide6.QtWebEngineCore import QWebEngineSettings
from PySide6.QtWebEngineWidgets import QWebEngineView

from core.errors import CaptureError
from core.render_surface import CaptureRequest, RenderSurface, StyleSource
from utils.logger import logger

LOAD_TIMEOUT_MS = 5000
SCRIPT_TIMEOUT_MS = 2000
PAINT_SETTLE_MS = 60
DEFAULT_VIEWPORT = (1024, 768)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
{stylesheets}
<style id="capture-surface">
html, body {{ margin: 0; padding: 0; background: transparent; overflow: hidden; }}
</style>
</head>
<body>{content}</body>
</html>"""

MEASURE_JS = """
(() => {
  const el = document.getElementById(%s);
  if (!el) { return null; }
  void el.offsetHeight;
  const rect = el.getBoundingClientRect();
  return { width: rect.width, height: Math.max(rect.height, el.scrollHeight) };
})();
"""

PENDING_FONTS_JS = """
(() => {
  const el = document.getElementById(%s);
  if (!el || !document.fonts) { return []; }
  const used = new Set();
  for (const node of [el, ...el.querySelectorAll('*')]) {
    for (const family of getComputedStyle(node).fontFamily.split(',')) {
      used.add(family.trim().replace(/^["']|["']$/g, '').toLowerCase());
    }
  }
  const pending = [];
  document.fonts.forEach((face) => {
    const family = face.family.replace(/^["']|["']$/g, '');
    if (face.status === 'loading' && used.has(family.toLowerCase())) {
      pending.push(family);
    }
  });
  return pending;
})();
"""

BROKEN_IMAGES_JS = """
(() => {
  const el = document.getElementById(%s);
  if (!el) { return []; }
  return Array.from(el.querySelectorAll('img'))
    .filter((img) => img.complete && img.naturalWidth === 0)
    .map((img) => img.getAttribute('src') || '');
})();
"""

# Computed box of an element in whichever page runs it (the live preview)
ROOT_LAYOUT_JS = """
(() => {
  const el = document.getElementById(%s);
  if (!el) { return null; }
  const style = getComputedStyle(el);
  const result = {};
  for (const name of %s) {
    result[name] = style.getPropertyValue(name);
  }
  return result;
})();
"""


class WebEngineSurface(RenderSurface):
    """Off-screen Chromium page used as the isolated capture surface."""

    def __init__(self, base_url: Optional[str] = None, parent=None):
        self.base_url = QUrl(base_url) if base_url else QUrl("about:blank")
        self._stylesheets: List[StyleSource] = []
        self._viewport_width: Optional[int] = None

        self.view = QWebEngineView(parent)
        self.view.setAttribute(Qt.WidgetAttribute.WA_DontShowOnScreen, True)
        self.view.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)

        # Remote images and linked stylesheets load from a local page
        settings = self.view.settings()
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessRemoteUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.ShowScrollBars, False)

        self.view.page().setBackgroundColor(QColor(Qt.GlobalColor.transparent))
        self.view.resize(*DEFAULT_VIEWPORT)
        self.view.show()

    # ------------------------------------------------------------------
    # Blocking helpers
    # ------------------------------------------------------------------

    def _spin(self, timeout_ms: int, done: dict) -> bool:
        """Run a local event loop until done['done'] or the timeout."""
        if done.get("done"):
            return True

        loop = QEventLoop()
        done["loop"] = loop

        timeout_timer = QTimer()
        timeout_timer.setSingleShot(True)
        timeout_timer.timeout.connect(loop.quit)
        timeout_timer.start(max(40, int(timeout_ms)))
        loop.exec()
        timeout_timer.stop()
        return bool(done.get("done"))

    @staticmethod
    def _finish(done: dict) -> None:
        done["done"] = True
        loop = done.get("loop")
        if loop is not None and loop.isRunning():
            loop.quit()

    def _run_js(self, script: str, timeout_ms: int = SCRIPT_TIMEOUT_MS) -> Any:
        """Run JavaScript on the page and wait for its result."""
        done = {"done": False, "result": None}

        def on_result(result) -> None:
            if done["done"]:
                return
            done["result"] = result
            self._finish(done)

        self.view.page().runJavaScript(script, on_result)
        if not self._spin(timeout_ms, done):
            raise TimeoutError(f"Script did not return within {timeout_ms}ms")
        return done["result"]

    def _load_html(self, html: str) -> None:
        done = {"done": False, "ok": False}

        def on_load_finished(ok: bool) -> None:
            done["ok"] = ok
            self._finish(done)

        self.view.loadFinished.connect(on_load_finished)
        try:
            self.view.setHtml(html, self.base_url)
            if not self._spin(LOAD_TIMEOUT_MS, done):
                raise TimeoutError(f"Capture page did not load within {LOAD_TIMEOUT_MS}ms")
        finally:
            self.view.loadFinished.disconnect(on_load_finished)

        if not done["ok"]:
            logger.warning("Capture page reported a failed load", source="WebEngineSurface")

    # ------------------------------------------------------------------
    # RenderSurface
    # ------------------------------------------------------------------

    def reset(self) -> None:
        self._stylesheets = []
        self._viewport_width = None
        self.view.setZoomFactor(1.0)
        self.view.resize(*DEFAULT_VIEWPORT)

    def attach_stylesheet(self, source: StyleSource) -> None:
        self._stylesheets.append(source)

    def mount(self, root: Tag) -> None:
        html = PAGE_TEMPLATE.format(
            stylesheets="\n".join(source.to_html() for source in self._stylesheets),
            content=str(root)
        )
        self._load_html(html)

    def measure(self, element_id: str, viewport_width: Optional[int] = None) -> Tuple[int, int]:
        if viewport_width is not None and viewport_width != self._viewport_width:
            self._viewport_width = viewport_width
            self.view.setZoomFactor(1.0)
            self.view.resize(viewport_width, self.view.height())
            self.wait(PAINT_SETTLE_MS)

        rect = self._run_js(MEASURE_JS % json.dumps(element_id))
        if not rect:
            raise CaptureError(f"Element '#{element_id}' missing from the capture page")
        return math.ceil(rect["width"]), math.ceil(rect["height"])

    def pending_fonts(self, element_id: str) -> List[str]:
        result = self._run_js(PENDING_FONTS_JS % json.dumps(element_id))
        return list(result or [])

    def wait(self, interval_ms: int) -> None:
        loop = QEventLoop()
        QTimer.singleShot(max(0, int(interval_ms)), loop.quit)
        loop.exec()

    def capture(self, request: CaptureRequest) -> Image.Image:
        broken = self._run_js(BROKEN_IMAGES_JS % json.dumps(request.element_id)) or []
        for src in broken:
            logger.warning(f"Image failed to load and will be blank: {src}", source="WebEngineSurface")

        pixel_width = request.width * request.scale
        pixel_height = request.height * request.scale

        if request.background_color is None:
            self.view.page().setBackgroundColor(QColor(Qt.GlobalColor.transparent))
        else:
            self.view.page().setBackgroundColor(QColor(request.background_color))

        # Zoom keeps the CSS viewport at request.width while painting scale× pixels
        self.view.resize(pixel_width, pixel_height)
        self.view.setZoomFactor(float(request.scale))
        self.wait(PAINT_SETTLE_MS)

        pixmap = self.view.grab(QRect(0, 0, pixel_width, pixel_height))
        if pixmap.isNull():
            raise CaptureError("Web view grab returned an empty pixmap")

        return self._qimage_to_pil(pixmap.toImage())

    def close(self) -> None:
        self.view.close()
        self.view.deleteLater()

    @staticmethod
    def _qimage_to_pil(qimage: QImage) -> Image.Image:
        """Convert QImage → PIL RGBA."""
        qimage = qimage.convertToFormat(QImage.Format.Format_RGBA8888)
        data = bytes(qimage.constBits())
        return Image.frombuffer(
            "RGBA",
            (qimage.width(), qimage.height()),
            data,
            "raw",
            "RGBA",
            qimage.bytesPerLine(),
            1
        )
