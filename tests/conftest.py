from __future__ import annotations

import os
from typing import Iterable, List, Optional, Tuple

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image
from PySide6.QtCore import QSettings
from PySide6.QtGui import QGuiApplication

from core.app_settings import AppSettingsController
from core.render_surface import CaptureRequest, RenderSurface, StyleSource
from core.themes import get_theme
from models.preview_document import PreviewDocument

PREVIEW_HTML = """<!DOCTYPE html>
<html>
<head>
<style id="themes">
.theme-dark { background-color: var(--theme-dark-bg); color: var(--theme-dark-text); }
.theme-dark a { color: var( --theme-dark-link , blue); }
.theme-light { background-color: var(--theme-light-bg); }
</style>
<link rel="stylesheet" href="https://example.com/fonts.css">
<link rel="icon" href="favicon.ico">
</head>
<body>
<div id="preview-content" class="markdown-content theme-dark" style="width: 640px; transform: scale(1)">
<h1>Title</h1>
<p>Some <a href="#">text</a></p>
</div>
</body>
</html>"""


class FakeSurface(RenderSurface):
    """Records every call; sizes, font states and captures are scripted."""

    def __init__(
            self,
            size: Tuple[int, int] = (640, 480),
            fixed_height: int = 900,
            pending_fonts_sequence: Optional[Iterable[List[str]]] = None,
            capture_error: Optional[BaseException] = None,
            capture_image: Optional[Image.Image] = None
    ):
        self.size = size
        self.fixed_height = fixed_height
        self._pending = list(pending_fonts_sequence or [])
        self.capture_error = capture_error
        self.capture_image = capture_image

        self.calls: List[tuple] = []
        self.stylesheets: List[StyleSource] = []
        self.mounted: List[str] = []
        self.requests: List[CaptureRequest] = []
        self.waited_ms = 0

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def reset(self) -> None:
        self.calls.append(("reset",))
        self.stylesheets = []

    def attach_stylesheet(self, source: StyleSource) -> None:
        self.calls.append(("attach_stylesheet", source))
        self.stylesheets.append(source)

    def mount(self, root) -> None:
        self.calls.append(("mount", str(root)))
        self.mounted.append(str(root))

    def measure(self, element_id: str, viewport_width: Optional[int] = None) -> Tuple[int, int]:
        self.calls.append(("measure", element_id, viewport_width))
        if viewport_width is not None:
            return viewport_width, self.fixed_height
        return self.size

    def pending_fonts(self, element_id: str) -> List[str]:
        self.calls.append(("pending_fonts", element_id))
        if len(self._pending) > 1:
            return self._pending.pop(0)
        return self._pending[0] if self._pending else []

    def wait(self, interval_ms: int) -> None:
        self.calls.append(("wait", interval_ms))
        self.waited_ms += interval_ms

    def capture(self, request: CaptureRequest) -> Image.Image:
        self.calls.append(("capture", request))
        self.requests.append(request)
        if self.capture_error is not None:
            raise self.capture_error
        if self.capture_image is not None:
            return self.capture_image
        color = request.background_color or (0, 0, 0, 0)
        return Image.new("RGBA", (request.width * request.scale, request.height * request.scale), color)


class FakeClipboard:
    """Stands in for QClipboard; either write can be made to fail."""

    def __init__(self, fail_image: bool = False, fail_text: bool = False):
        self.fail_image = fail_image
        self.fail_text = fail_text
        self.image = None
        self.text = None

    def setImage(self, image) -> None:
        if self.fail_image:
            raise RuntimeError("image write refused")
        self.image = image

    def setText(self, text: str) -> None:
        if self.fail_text:
            raise RuntimeError("text write refused")
        self.text = text


@pytest.fixture(scope="session")
def qapp():
    """Offscreen application for timers, QImage and signals."""

    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


@pytest.fixture
def preview_document() -> PreviewDocument:
    return PreviewDocument(PREVIEW_HTML)


@pytest.fixture
def dark_theme():
    return get_theme("dark")


@pytest.fixture
def light_theme():
    return get_theme("light")


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def app_settings(qapp, tmp_path) -> AppSettingsController:
    """Settings controller backed by a throwaway ini file."""

    settings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    controller = AppSettingsController(settings)
    controller.set_output_folder(tmp_path / "exports")
    return controller


@pytest.fixture
def surface_factory():
    """Build FakeSurface instances with scripted behaviour."""

    return FakeSurface


@pytest.fixture
def clipboard_factory():
    return FakeClipboard
