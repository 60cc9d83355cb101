"""
Debug overlay for layout inspection.

Outlines margins, padding and text baselines inside the preview content.
Exports taken while the overlay is on carry a ``-debug`` file name suffix.
"""

from bs4 import Tag

from models.capture_target import CaptureTarget
from models.preview_document import PreviewDocument
from qss import read_stylesheet
from utils.inline_style import get_style_property
from utils.logger import logger

DEBUG_STYLE_ID = "debug-styles"
OVERLAY_CLASSES = ("debug-margins", "debug-padding")
BASELINE_CLASS = "debug-text-baseline"
MARGIN_ATTRIBUTE = "data-debug-margin"
TEXT_ELEMENTS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li"]


def _add_class(element: Tag, name: str) -> None:
    classes = list(element.get("class") or [])
    if name not in classes:
        classes.append(name)
        element["class"] = classes


def _remove_class(element: Tag, name: str) -> None:
    classes = [c for c in (element.get("class") or []) if c != name]
    if classes:
        element["class"] = classes
    elif element.has_attr("class"):
        del element["class"]


def is_overlay_enabled(document: PreviewDocument, target: CaptureTarget = CaptureTarget()) -> bool:
    element = document.find_target(target)
    return element is not None and OVERLAY_CLASSES[0] in (element.get("class") or [])


def enable_overlay(document: PreviewDocument, target: CaptureTarget = CaptureTarget()) -> bool:
    """
    Turn the overlay on for the target.

    Returns:
        False if the target is not in the document
    """
    element = document.find_target(target)
    if element is None:
        logger.warning(f"Cannot enable debug overlay, {target} not found", source="DebugOverlay")
        return False

    if document.soup.find(id=DEBUG_STYLE_ID) is None:
        style = document.soup.new_tag("style", id=DEBUG_STYLE_ID)
        style.string = read_stylesheet("debug_overlay.css")
        document.head.append(style)

    for name in OVERLAY_CLASSES:
        _add_class(element, name)

    for text_element in element.find_all(TEXT_ELEMENTS):
        _add_class(text_element, BASELINE_CLASS)
        text_element[MARGIN_ATTRIBUTE] = get_style_property(text_element, "margin") or "auto"

    logger.info("Debug overlay enabled", source="DebugOverlay")
    return True


def disable_overlay(document: PreviewDocument, target: CaptureTarget = CaptureTarget()) -> None:
    """Remove every overlay class, attribute and the overlay stylesheet."""
    element = document.find_target(target)
    if element is not None:
        for name in OVERLAY_CLASSES:
            _remove_class(element, name)
        for text_element in element.find_all(TEXT_ELEMENTS):
            _remove_class(text_element, BASELINE_CLASS)
            if text_element.has_attr(MARGIN_ATTRIBUTE):
                del text_element[MARGIN_ATTRIBUTE]

    style = document.soup.find(id=DEBUG_STYLE_ID)
    if style is not None:
        style.decompose()

    logger.info("Debug overlay disabled", source="DebugOverlay")


def toggle_overlay(document: PreviewDocument, target: CaptureTarget = CaptureTarget()) -> bool:
    """Flip the overlay. Returns the new state."""
    if is_overlay_enabled(document, target):
        disable_overlay(document, target)
        return False
    return enable_overlay(document, target)
