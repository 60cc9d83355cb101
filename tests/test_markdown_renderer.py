from core.markdown_renderer import THEME_STYLE_ID, MarkdownRenderer
from core.themes import THEMES, build_theme_stylesheet, get_theme, list_themes
from core.tree_cloner import TreeCloner
from models.capture_target import CaptureTarget


def test_registry_has_eight_themes() -> None:
    assert [theme.id for theme in list_themes()] == [
        "light", "dark", "warm", "elegant", "nature", "sunset", "ocean", "mint",
    ]
    assert get_theme(None).id == "light"
    assert get_theme("unknown").id == "light"


def test_theme_stylesheet_has_no_placeholders() -> None:
    css = build_theme_stylesheet()

    assert "{{" not in css
    for theme_id in THEMES:
        assert f".theme-{theme_id}" in css
        assert f"var(--theme-{theme_id}-bg)" in css


def test_render_builds_capture_target() -> None:
    document = MarkdownRenderer().render("# Title\n\n| a | b |\n|---|---|\n| 1 | 2 |", "ocean")

    target = document.find_target(CaptureTarget())
    assert target is not None
    assert target["class"] == ["markdown-content", "theme-ocean"]
    assert target.h1.get_text() == "Title"
    assert target.table is not None
    assert document.soup.find(id=THEME_STYLE_ID) is not None


def test_rendered_document_resolves_for_export(dark_theme, fake_surface) -> None:
    document = MarkdownRenderer().render("Hello *world*", "dark")

    cloned = TreeCloner.clone(document, CaptureTarget(), dark_theme, fake_surface)

    theme_css = next(s for s in cloned.stylesheets if s.element_id == THEME_STYLE_ID).css_text
    assert "var(--theme-dark-" not in theme_css
    assert "var(--theme-light-bg)" in theme_css
