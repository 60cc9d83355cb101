from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ThemeColors:
    """Colour roles of a theme. Optional roles fall back to text/accent."""

    background: str
    text: str
    accent: str
    code: str
    border: Optional[str] = None
    heading: Optional[str] = None
    link: Optional[str] = None

    @property
    def resolved_border(self) -> str:
        return self.border or self.text

    @property
    def resolved_heading(self) -> str:
        return self.heading or self.text

    @property
    def resolved_link(self) -> str:
        return self.link or self.accent


@dataclass(frozen=True)
class Typography:
    """Typography tokens of a theme."""

    font_family: str
    font_size: str = "16px"
    line_height: str = "1.7"
    heading_font: Optional[str] = None


@dataclass(frozen=True)
class Theme:
    """A named palette plus typography. Never mutated after construction."""

    id: str
    name: str
    description: str
    colors: ThemeColors
    typography: Typography

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"
