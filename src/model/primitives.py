"""
Vector primitives accumulated by the SVG builder.

Each primitive is an immutable record of one drawable element. The builder
keeps them in insertion order; later primitives paint over earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

__all__ = [
    "TextPrimitive",
    "RectPrimitive",
    "LinePrimitive",
    "Primitive",
]


@dataclass(frozen=True)
class TextPrimitive:
    """
    A single line of text.

    Attributes:
        text: Literal text content (unescaped).
        x: Left edge (or anchor point when ``anchor`` is set).
        y: Baseline.
        size: Font size in vector units.
        color: Fill colour.
        font_family: CSS font family; ``CustomFont-<hash>`` for embedded fonts.
        font_weight: CSS font weight.
        anchor: Optional ``text-anchor`` value (``"middle"`` etc.).
        font_path: Font file backing ``font_family`` when it is embedded.
    """

    text: str
    x: int
    y: int
    size: int
    color: str = "black"
    font_family: str = "Arial, sans-serif"
    font_weight: str = "normal"
    anchor: Optional[str] = None
    font_path: Optional[str] = None


@dataclass(frozen=True)
class RectPrimitive:
    x: int
    y: int
    width: int
    height: int
    fill: str = "none"
    stroke: str = "black"
    stroke_width: int = 1


@dataclass(frozen=True)
class LinePrimitive:
    x1: int
    y1: int
    x2: int
    y2: int
    stroke: str = "black"
    stroke_width: int = 1


Primitive = Union[TextPrimitive, RectPrimitive, LinePrimitive]
