"""
Style Resolver

Turns theme-scoped CSS variables into concrete values so the capture
surface never has to resolve custom properties itself.

A themed variable is a reference of the form ``var(--theme-<themeId>-<role>)``
(optionally with whitespace and a fallback). Only references to the theme
being exported are rewritten; every other rule is passed through untouched.
"""

import re
from typing import Dict

from models.theme import Theme
from utils.logger import logger

# Fallbacks may hold one level of nested parentheses, e.g. rgb(0, 0, 0)
THEMED_VARIABLE_PATTERN = (
    r"var\(\s*--theme-{theme_id}-(?P<role>[A-Za-z0-9_-]+)\s*"
    r"(?:,(?:[^()]|\([^()]*\))*)?\)"
)


class StyleResolver:
    """Pure theme-variable substitution and root style computation."""

    @staticmethod
    def theme_values(theme: Theme) -> Dict[str, str]:
        """
        Concrete value for every themed role.

        border and heading fall back to text, link falls back to accent.
        """
        colors = theme.colors
        return {
            "bg": colors.background,
            "text": colors.text,
            "accent": colors.accent,
            "code": colors.code,
            "border": colors.resolved_border,
            "heading": colors.resolved_heading,
            "link": colors.resolved_link,
        }

    @staticmethod
    def resolve_stylesheet(css_text: str, theme: Theme) -> str:
        """
        Replace every themed variable of ``theme`` with its concrete value.

        Unknown roles are left as literal text and logged; this never raises.

        Args:
            css_text: Stylesheet text that may contain themed variables
            theme: Theme being exported

        Returns:
            Stylesheet text with the theme's variables resolved
        """
        if not css_text:
            return css_text

        values = StyleResolver.theme_values(theme)
        pattern = re.compile(THEMED_VARIABLE_PATTERN.format(theme_id=re.escape(theme.id)))
        unmatched = set()
        replaced = 0

        def substitute(match: re.Match) -> str:
            nonlocal replaced
            role = match.group("role")
            value = values.get(role)
            if value is None:
                unmatched.add(role)
                return match.group(0)
            replaced += 1
            return value

        resolved = pattern.sub(substitute, css_text)

        for role in sorted(unmatched):
            logger.warning(
                f"Unmatched themed variable --theme-{theme.id}-{role} left as-is",
                source="StyleResolver"
            )
        if replaced:
            logger.debug(f"Resolved {replaced} themed variable(s) for '{theme.id}'", source="StyleResolver")

        return resolved

    @staticmethod
    def resolve_node_styles(theme: Theme, element_id: str) -> Dict[str, Dict[str, str]]:
        """
        Concrete root-level properties the capture root must carry.

        Returns:
            Mapping of element id -> {css property: value}
        """
        typography = theme.typography
        return {
            element_id: {
                "background-color": theme.colors.background,
                "color": theme.colors.text,
                "font-family": typography.font_family,
                "font-size": typography.font_size,
                "line-height": typography.line_height,
                "height": "auto",
                "box-sizing": "border-box",
            }
        }
