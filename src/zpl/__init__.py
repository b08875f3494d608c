"""
ZPL interpreter.

Module Structure:
    zpl/
    ├── __init__.py      # This file (public API exports)
    ├── commands.py      # Tokenizer and typed command variants
    ├── state.py         # Drawing state and the shared transition function
    ├── passes.py        # Field data, layout, command and field passes
    └── converter.py     # ZplToSvg / convert()

Usage:
    >>> from src.zpl import convert
    >>> svg = convert(zpl, width_inches=4.0, height_inches=6.0, dpi=300)
"""

from src.zpl.commands import Command, template_section, tokenize
from src.zpl.converter import ZplToSvg, convert, pixel_size
from src.zpl.passes import (
    extract_field_data,
    render_commands,
    render_fields,
    resolve_field_layouts,
)
from src.zpl.state import DrawingState, FieldLayout, advance

__all__ = [
    "Command",
    "DrawingState",
    "FieldLayout",
    "ZplToSvg",
    "advance",
    "convert",
    "extract_field_data",
    "pixel_size",
    "render_commands",
    "render_fields",
    "resolve_field_layouts",
    "template_section",
    "tokenize",
]
