from models.capture_target import CaptureTarget
from utils import debug_overlay


def test_enable_adds_classes_attributes_and_stylesheet(preview_document) -> None:
    assert debug_overlay.enable_overlay(preview_document)

    target = preview_document.find_target(CaptureTarget())
    assert "debug-margins" in target["class"]
    assert "debug-padding" in target["class"]
    assert "debug-text-baseline" in target.h1["class"]
    assert target.p.has_attr("data-debug-margin")
    assert preview_document.soup.find(id="debug-styles") is not None
    assert debug_overlay.is_overlay_enabled(preview_document)


def test_disable_restores_document(preview_document) -> None:
    html_before = preview_document.to_html()

    debug_overlay.enable_overlay(preview_document)
    debug_overlay.disable_overlay(preview_document)

    assert preview_document.to_html() == html_before


def test_toggle_flips_state(preview_document) -> None:
    assert debug_overlay.toggle_overlay(preview_document) is True
    assert debug_overlay.toggle_overlay(preview_document) is False
    assert not debug_overlay.is_overlay_enabled(preview_document)


def test_enable_on_missing_target(preview_document) -> None:
    assert not debug_overlay.enable_overlay(preview_document, CaptureTarget("elsewhere"))
    assert preview_document.soup.find(id="debug-styles") is None


def test_overlay_stylesheet_is_cloned(preview_document, dark_theme, fake_surface) -> None:
    from core.tree_cloner import TreeCloner

    debug_overlay.enable_overlay(preview_document)
    cloned = TreeCloner.clone(preview_document, CaptureTarget(), dark_theme, fake_surface)

    assert any(source.element_id == "debug-styles" for source in cloned.stylesheets)
    assert cloned.debug_active
