import pytest

from core.style_resolver import StyleResolver
from core.themes import THEMES, build_theme_stylesheet, get_theme
from models.theme import Theme, ThemeColors, Typography
from utils.logger import LogLevel, logger


def test_resolves_active_theme_variables_only(dark_theme) -> None:
    css = (
        ".theme-dark { background: var(--theme-dark-bg); color: var(--theme-dark-text); }\n"
        ".theme-light { background: var(--theme-light-bg); }"
    )

    resolved = StyleResolver.resolve_stylesheet(css, dark_theme)

    assert "background: #1a1a1a" in resolved
    assert "color: #ffffff" in resolved
    assert "var(--theme-light-bg)" in resolved
    assert "var(--theme-dark" not in resolved


def test_whitespace_and_fallback_are_consumed(dark_theme) -> None:
    css = "a { color: var( --theme-dark-link , blue ); }"

    resolved = StyleResolver.resolve_stylesheet(css, dark_theme)

    assert resolved == f"a {{ color: {dark_theme.colors.resolved_link}; }}"


def test_non_themed_rules_untouched(dark_theme) -> None:
    css = "p { margin: 0 0 1em; color: var(--other-color); }"

    assert StyleResolver.resolve_stylesheet(css, dark_theme) == css


def test_unknown_role_left_literal_and_logged(dark_theme) -> None:
    logger.clear()
    css = "p { color: var(--theme-dark-shadow); }"

    resolved = StyleResolver.resolve_stylesheet(css, dark_theme)

    assert resolved == css
    warnings = logger.get_messages(LogLevel.WARNING)
    assert any("--theme-dark-shadow" in message.message for message in warnings)


def test_optional_roles_fall_back() -> None:
    theme = Theme(
        id="bare",
        name="Bare",
        description="",
        colors=ThemeColors(background="#000", text="#eee", accent="#f00", code="#111"),
        typography=Typography(font_family="serif"),
    )

    values = StyleResolver.theme_values(theme)

    assert values["border"] == "#eee"
    assert values["heading"] == "#eee"
    assert values["link"] == "#f00"


def test_empty_stylesheet_passes_through(dark_theme) -> None:
    assert StyleResolver.resolve_stylesheet("", dark_theme) == ""


def test_node_styles_for_capture_root() -> None:
    theme = get_theme("warm")

    styles = StyleResolver.resolve_node_styles(theme, "preview-content")

    root = styles["preview-content"]
    assert root["background-color"] == theme.colors.background
    assert root["color"] == theme.colors.text
    assert root["font-size"] == "16px"
    assert root["height"] == "auto"


def test_fallback_with_nested_parentheses(dark_theme) -> None:
    css = "a { color: var(--theme-dark-text, rgb(0, 0, 0)); border: 1px solid var(--theme-dark-border,rgba(0,0,0,.1)); }"

    resolved = StyleResolver.resolve_stylesheet(css, dark_theme)

    assert resolved == (
        f"a {{ color: {dark_theme.colors.text}; "
        f"border: 1px solid {dark_theme.colors.resolved_border}; }}"
    )


@pytest.mark.parametrize("theme", list(THEMES.values()), ids=lambda theme: theme.id)
def test_every_theme_resolves_its_generated_stylesheet(theme) -> None:
    css = build_theme_stylesheet()

    resolved = StyleResolver.resolve_stylesheet(css, theme)

    assert f"var(--theme-{theme.id}-" not in resolved
    for role, value in StyleResolver.theme_values(theme).items():
        assert f"var(--theme-{theme.id}-{role})" in css
        assert value in resolved
    other = next(other for other in THEMES if other != theme.id)
    assert f"var(--theme-{other}-bg)" in resolved
