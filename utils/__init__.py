from .inline_style import (
    get_style_property,
    set_style_property,
    parse_inline_style,
    serialize_inline_style
)

__all__ = [
    'get_style_property',
    'set_style_property',
    'parse_inline_style',
    'serialize_inline_style'
]
