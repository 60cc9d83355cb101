import pytest
from bs4 import BeautifulSoup
from PIL import Image

from core.errors import CaptureError
from core.export_settings import ExportOptions, LayoutPolicy, ScalingMode
from core.layout_stabilizer import StableLayout
from core.rasterizer import Rasterizer, normalize_text_baseline
from core.tree_cloner import TreeCloner
from models.capture_target import CaptureTarget
from utils.inline_style import get_style_property

LAYOUT = StableLayout(width=200, height=100, fonts_ready=True, policy=LayoutPolicy.NATURAL)


def _clone(document, theme, surface):
    return TreeCloner.clone(document, CaptureTarget(), theme, surface)


def test_native_scale_and_theme_background(preview_document, dark_theme, fake_surface) -> None:
    cloned = _clone(preview_document, dark_theme, fake_surface)

    raster = Rasterizer().rasterize(cloned, LAYOUT, dark_theme, ExportOptions(scale=2), fake_surface)

    request = fake_surface.requests[0]
    assert request.background_color == dark_theme.colors.background
    assert request.scale == 2
    assert request.allow_cross_origin
    assert raster.image.size == (400, 200)
    assert raster.native_scale == 2


def test_composite_mode_captures_at_1x(preview_document, dark_theme, fake_surface) -> None:
    cloned = _clone(preview_document, dark_theme, fake_surface)
    options = ExportOptions(scaling_mode=ScalingMode.COMPOSITE)

    raster = Rasterizer().rasterize(cloned, LAYOUT, dark_theme, options, fake_surface)

    assert fake_surface.requests[0].scale == 1
    assert raster.native_scale == 1


def test_explicit_transparent_background(preview_document, dark_theme, fake_surface) -> None:
    cloned = _clone(preview_document, dark_theme, fake_surface)
    options = ExportOptions(background_color="transparent")

    Rasterizer().rasterize(cloned, LAYOUT, dark_theme, options, fake_surface)

    assert fake_surface.requests[0].background_color is None


def test_hook_runs_once_before_capture(preview_document, dark_theme, fake_surface) -> None:
    cloned = _clone(preview_document, dark_theme, fake_surface)
    seen = []

    def hook(root):
        seen.append(len(fake_surface.requests))

    Rasterizer(style_hook=hook).rasterize(cloned, LAYOUT, dark_theme, ExportOptions(), fake_surface)

    assert seen == [0]
    names = fake_surface.call_names()
    assert names[-3:] == ["mount", "pending_fonts", "capture"]


def test_primitive_exception_becomes_capture_error(preview_document, dark_theme, surface_factory) -> None:
    surface = surface_factory(capture_error=RuntimeError("GPU lost"))
    cloned = _clone(preview_document, dark_theme, surface)

    with pytest.raises(CaptureError) as excinfo:
        Rasterizer().rasterize(cloned, LAYOUT, dark_theme, ExportOptions(), surface)

    assert isinstance(excinfo.value.cause, RuntimeError)
    assert "GPU lost" in str(excinfo.value)


def test_fully_transparent_result_rejected_when_opaque_requested(preview_document, dark_theme, surface_factory) -> None:
    surface = surface_factory(capture_image=Image.new("RGBA", (10, 10), (0, 0, 0, 0)))
    cloned = _clone(preview_document, dark_theme, surface)

    with pytest.raises(CaptureError):
        Rasterizer().rasterize(cloned, LAYOUT, dark_theme, ExportOptions(), surface)


def test_empty_result_rejected(preview_document, dark_theme, surface_factory) -> None:
    surface = surface_factory(capture_image=Image.new("RGB", (0, 0)))
    cloned = _clone(preview_document, dark_theme, surface)

    with pytest.raises(CaptureError):
        Rasterizer().rasterize(cloned, LAYOUT, dark_theme, ExportOptions(), surface)


def test_normalize_text_baseline_strips_translate_y() -> None:
    soup = BeautifulSoup(
        '<div id="root"><span style="transform: translateY(2px) rotate(3deg)">a</span>'
        '<em style="transform: translateY(-1px)">b</em></div>',
        "html.parser",
    )
    root = soup.div

    normalize_text_baseline(root)

    assert get_style_property(root, "text-rendering") == "geometricPrecision"
    assert get_style_property(root, "-webkit-font-smoothing") == "antialiased"
    assert get_style_property(root, "top") is None
    assert get_style_property(root.span, "transform") == "rotate(3deg)"
    assert not root.em.has_attr("style")
