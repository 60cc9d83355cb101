"""Built-in export themes."""

from typing import Dict, List, Optional

from models.theme import Theme, ThemeColors, Typography
from qss import read_stylesheet

DEFAULT_THEME_ID = "light"

SYSTEM_FONT_STACK = '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif'

_TYPOGRAPHY = Typography(font_family=SYSTEM_FONT_STACK, font_size="16px", line_height="1.7")

THEMES: Dict[str, Theme] = {
    "light": Theme(
        id="light",
        name="Light",
        description="Clean and professional with excellent readability",
        colors=ThemeColors(
            background="#ffffff",
            text="#1a1a1a",
            accent="#3b82f6",
            code="#f3f4f6",
            border="#e5e7eb",
            heading="#111827",
            link="#2563eb",
        ),
        typography=_TYPOGRAPHY,
    ),
    "dark": Theme(
        id="dark",
        name="Dark",
        description="Easy on the eyes with striking contrast",
        colors=ThemeColors(
            background="#1a1a1a",
            text="#ffffff",
            accent="#60a5fa",
            code="#374151",
            border="#374151",
            heading="#f9fafb",
            link="#93c5fd",
        ),
        typography=_TYPOGRAPHY,
    ),
    "warm": Theme(
        id="warm",
        name="Warm",
        description="Soft, inviting colors perfect for engaging content",
        colors=ThemeColors(
            background="#fefdf9",
            text="#1c1917",
            accent="#f59e0b",
            code="#fef3c7",
            border="#fed7aa",
            heading="#78350f",
            link="#d97706",
        ),
        typography=_TYPOGRAPHY,
    ),
    "elegant": Theme(
        id="elegant",
        name="Elegant",
        description="Modern and stylish for a premium look",
        colors=ThemeColors(
            background="#fafaf9",
            text="#0c0a09",
            accent="#6366f1",
            code="#f5f5f4",
            border="#e7e5e4",
            heading="#1c1917",
            link="#4f46e5",
        ),
        typography=_TYPOGRAPHY,
    ),
    "nature": Theme(
        id="nature",
        name="Nature",
        description="Fresh and organic with natural color tones",
        colors=ThemeColors(
            background="#fefffe",
            text="#14532d",
            accent="#22c55e",
            code="#f0fdf4",
            border="#bbf7d0",
            heading="#052e16",
            link="#16a34a",
        ),
        typography=_TYPOGRAPHY,
    ),
    "sunset": Theme(
        id="sunset",
        name="Sunset",
        description="Warm and vibrant like a beautiful sunset",
        colors=ThemeColors(
            background="#fffbeb",
            text="#9a3412",
            accent="#ea580c",
            code="#fed7aa",
            border="#fdba74",
            heading="#7c2d12",
            link="#dc2626",
        ),
        typography=_TYPOGRAPHY,
    ),
    "ocean": Theme(
        id="ocean",
        name="Ocean",
        description="Calm and serene with blue color palette",
        colors=ThemeColors(
            background="#f8fafc",
            text="#0f172a",
            accent="#0ea5e9",
            code="#e0f2fe",
            border="#7dd3fc",
            heading="#0c4a6e",
            link="#0284c7",
        ),
        typography=_TYPOGRAPHY,
    ),
    "mint": Theme(
        id="mint",
        name="Mint",
        description="Cool and refreshing with mint green accents",
        colors=ThemeColors(
            background="#fdfffe",
            text="#064e3b",
            accent="#10b981",
            code="#ecfdf5",
            border="#a7f3d0",
            heading="#022c22",
            link="#059669",
        ),
        typography=_TYPOGRAPHY,
    ),
}


def list_themes() -> List[Theme]:
    """Themes in registry order."""
    return list(THEMES.values())


def get_theme(theme_id: Optional[str]) -> Theme:
    """Look up a theme, falling back to the default for unknown ids."""
    if not theme_id:
        return THEMES[DEFAULT_THEME_ID]
    return THEMES.get(theme_id, THEMES[DEFAULT_THEME_ID])


def build_theme_stylesheet(themes: Optional[List[Theme]] = None) -> str:
    """
    Build the preview stylesheet: shared layout rules plus one themed block
    per theme, with colours referenced through ``var(--theme-<id>-<role>)``.
    """
    base = read_stylesheet("markdown_base.css")
    template = read_stylesheet("markdown_theme.css")

    blocks = [base]
    for theme in themes or list_themes():
        replacements = {
            "{{THEME_ID}}": theme.id,
            "{{BACKGROUND}}": theme.colors.background,
            "{{TEXT}}": theme.colors.text,
            "{{ACCENT}}": theme.colors.accent,
            "{{CODE}}": theme.colors.code,
            "{{BORDER}}": theme.colors.resolved_border,
            "{{HEADING}}": theme.colors.resolved_heading,
            "{{LINK}}": theme.colors.resolved_link,
            "{{FONT_FAMILY}}": theme.typography.font_family,
            "{{FONT_SIZE}}": theme.typography.font_size,
            "{{LINE_HEIGHT}}": theme.typography.line_height,
        }
        block = template
        for placeholder, value in replacements.items():
            block = block.replace(placeholder, value)
        blocks.append(block)

    return "\n".join(blocks)
