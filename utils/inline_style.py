"""
Inline style helpers.

Reads and writes single properties of an element's ``style`` attribute
while keeping the declaration order of everything else.
"""

from typing import Dict, List, Optional

from bs4 import Tag


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse a ``style`` attribute into an ordered property map.

    Args:
        style: Raw attribute value (None or empty = no declarations)

    Returns:
        Dict of lowercase property name -> value, in declaration order
    """
    declarations: Dict[str, str] = {}
    if not style:
        return declarations

    for chunk in _split_declarations(style):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            declarations[name] = value
    return declarations


def _split_declarations(style: str) -> List[str]:
    # Semicolons inside url(...) or quoted strings do not end a declaration
    chunks = []
    current = []
    depth = 0
    quote = None
    for char in style:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif char == ";" and depth == 0:
            chunks.append("".join(current))
            current = []
            continue
        current.append(char)
    chunks.append("".join(current))
    return chunks


def serialize_inline_style(declarations: Dict[str, str]) -> str:
    """Serialize a property map back to ``style`` attribute text."""
    return "; ".join(f"{name}: {value}" for name, value in declarations.items())


def get_style_property(element: Tag, name: str) -> Optional[str]:
    """Return the inline value of ``name`` on ``element`` or None."""
    return parse_inline_style(element.get("style")).get(name.lower())


def set_style_property(element: Tag, name: str, value: Optional[str]) -> None:
    """
    Set (or remove, when value is None) one inline style property.

    The ``style`` attribute is dropped entirely once it holds no declarations.
    """
    declarations = parse_inline_style(element.get("style"))
    name = name.lower()

    if value is None:
        declarations.pop(name, None)
    else:
        declarations[name] = value

    if declarations:
        element["style"] = serialize_inline_style(declarations)
    elif element.has_attr("style"):
        del element["style"]


def apply_style_properties(element: Tag, properties: Dict[str, str]) -> None:
    """Set several inline style properties in one attribute write."""
    if not properties:
        return
    declarations = parse_inline_style(element.get("style"))
    for name, value in properties.items():
        declarations[name.lower()] = value
    element["style"] = serialize_inline_style(declarations)
