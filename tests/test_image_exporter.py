import re
from datetime import datetime, timezone

import pytest

from core.export_settings import ExportOptions, LayoutPolicy, ScalingMode
from core.image_exporter import ImageExporter
from core.output_encoder import OutputEncoder
from models.capture_target import CaptureTarget
from models.export_result import ExportErrorKind, ExportFailure, ExportSuccess
from utils import debug_overlay

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def exporter_factory(preview_document):
    def build(surface):
        return ImageExporter(
            surface,
            lambda: preview_document,
            encoder=OutputEncoder(clock=lambda: FIXED_NOW),
        )
    return build


def test_dark_theme_png_export(exporter_factory, fake_surface) -> None:
    result = exporter_factory(fake_surface).export(CaptureTarget(), "dark", ExportOptions(format="png", scale=2))

    assert isinstance(result, ExportSuccess)
    assert result.success
    assert result.mime_type == "image/png"
    assert result.data_url.startswith("data:image/png;base64,")
    assert re.fullmatch(r"markdown-dark-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.png", result.file_name)
    assert (result.width, result.height) == (640 * 2, 480 * 2)
    assert not result.debug_active


def test_composite_scaling_upscales_after_capture(exporter_factory, fake_surface) -> None:
    options = ExportOptions(scale=3, scaling_mode=ScalingMode.COMPOSITE)

    result = exporter_factory(fake_surface).export(CaptureTarget(), "light", options)

    assert fake_surface.requests[0].scale == 1
    assert (result.width, result.height) == (640 * 3, 480 * 3)


def test_out_of_range_options_are_clamped(exporter_factory, fake_surface) -> None:
    result = exporter_factory(fake_surface).export(CaptureTarget(), "dark", ExportOptions(scale=10, quality=5))

    assert result.success
    assert fake_surface.requests[0].scale == 4


def test_missing_target_fails_without_capture(exporter_factory, fake_surface) -> None:
    result = exporter_factory(fake_surface).export(CaptureTarget("nope"), "dark")

    assert isinstance(result, ExportFailure)
    assert not result.success
    assert result.error_kind == ExportErrorKind.TARGET_NOT_FOUND
    assert "#nope" in result.error_message
    assert "capture" not in fake_surface.call_names()


def test_capture_failure_reported_and_live_styles_intact(exporter_factory, surface_factory, preview_document) -> None:
    live = preview_document.find_target(CaptureTarget())
    style_before = live["style"]
    surface = surface_factory(capture_error=RuntimeError("tainted canvas"))

    result = exporter_factory(surface).export(CaptureTarget(), "dark")

    assert result.error_kind == ExportErrorKind.CAPTURE
    assert "tainted canvas" in result.error_message
    assert live["style"] == style_before
    # Surface released after the failure
    assert surface.call_names()[-1] == "reset"


def test_live_document_unchanged_across_repeated_exports(exporter_factory, fake_surface, preview_document) -> None:
    html_before = preview_document.to_html()
    exporter = exporter_factory(fake_surface)

    for policy in (LayoutPolicy.NATURAL, LayoutPolicy.FIXED_WIDTH, LayoutPolicy.NATURAL):
        assert exporter.export(CaptureTarget(), "dark", ExportOptions(layout_policy=policy)).success

    assert preview_document.to_html() == html_before


def test_debug_overlay_adds_file_name_suffix(exporter_factory, fake_surface, preview_document) -> None:
    debug_overlay.enable_overlay(preview_document)

    result = exporter_factory(fake_surface).export(CaptureTarget(), "dark")

    assert result.debug_active
    assert result.file_name == "markdown-dark-debug-2024-05-01T12-30-45.png"


def test_unexpected_error_becomes_failure(preview_document, fake_surface) -> None:
    class ExplodingEncoder(OutputEncoder):
        def encode(self, *args, **kwargs):
            raise ZeroDivisionError("boom")

    exporter = ImageExporter(fake_surface, lambda: preview_document, encoder=ExplodingEncoder())

    result = exporter.export(CaptureTarget(), "dark")

    assert result.error_kind == ExportErrorKind.UNEXPECTED
    assert result.error_message == "boom"


def test_unknown_theme_id_falls_back_to_default(exporter_factory, fake_surface) -> None:
    result = exporter_factory(fake_surface).export(CaptureTarget(), "no-such-theme")

    assert result.file_name.startswith("markdown-light-")


def _reads_before_font_check(calls):
    """Measure/capture calls made since the last mount without a font check in between."""
    unchecked = []
    checked = False
    for call in calls:
        name = call[0]
        if name == "mount":
            checked = False
        elif name == "pending_fonts":
            checked = True
        elif name in ("measure", "capture") and not checked:
            unchecked.append(name)
    return unchecked


@pytest.mark.parametrize("policy", [LayoutPolicy.NATURAL, LayoutPolicy.FIXED_WIDTH])
def test_fonts_checked_on_every_page_that_is_read(exporter_factory, fake_surface, policy) -> None:
    result = exporter_factory(fake_surface).export(CaptureTarget(), "dark", ExportOptions(layout_policy=policy))

    assert result.success
    names = fake_surface.call_names()
    last_mount = len(names) - 1 - names[::-1].index("mount")
    last_font_check = len(names) - 1 - names[::-1].index("pending_fonts")
    assert last_font_check > last_mount
    assert _reads_before_font_check(fake_surface.calls) == []


def test_document_provider_error_becomes_failure(fake_surface) -> None:
    def broken_provider():
        raise RuntimeError("preview not rendered yet")

    result = ImageExporter(fake_surface, broken_provider).export(CaptureTarget(), "dark")

    assert isinstance(result, ExportFailure)
    assert result.error_kind == ExportErrorKind.UNEXPECTED
    assert result.error_message == "preview not rendered yet"
    assert fake_surface.calls == []


def test_live_box_carried_into_capture(exporter_factory, fake_surface, preview_document) -> None:
    preview_document.set_root_layout({"width": "712px", "padding": "32px 40px"})

    assert exporter_factory(fake_surface).export(CaptureTarget(), "dark").success

    assert "width: 712px" in fake_surface.mounted[-1]
    assert "padding: 32px 40px" in fake_surface.mounted[-1]
    assert preview_document.find_target(CaptureTarget())["style"] == "width: 640px; transform: scale(1)"
