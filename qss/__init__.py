"""Stylesheet templates for the preview document."""

from pathlib import Path

QSS_DIR = Path(__file__).parent


def read_stylesheet(name: str) -> str:
    """Read a stylesheet template shipped in this package."""
    return (QSS_DIR / name).read_text(encoding="utf-8")
