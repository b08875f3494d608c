"""
SVG Builder for ZPL rendering.

Accumulates vector primitives in paint order and serialises them with
svgwrite. Fonts referenced by text primitives are embedded inline as base64
``@font-face`` rules so the document renders identically wherever it goes.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import svgwrite

from src.fonts.resolver import (
    LEGACY_FONTS,
    default_fonts_dir,
    font_family_for,
    font_mime_type,
    read_font_bytes,
)
from src.model.primitives import (
    LinePrimitive,
    Primitive,
    RectPrimitive,
    TextPrimitive,
)

logger = logging.getLogger(__name__)

__all__ = ["SvgBuilder"]


class SvgBuilder:
    """
    Ordered collection of vector primitives plus embedded font data.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        fonts_dir: Directory scanned for legacy always-embedded fonts.
    """

    def __init__(
        self,
        width: int,
        height: int,
        fonts_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.fonts_dir = Path(fonts_dir) if fonts_dir is not None else default_fonts_dir()
        self._elements: List[Primitive] = []
        self._font_paths: Dict[str, str] = {}
        self._font_data: Dict[str, bytes] = {}

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    @property
    def primitives(self) -> Tuple[Primitive, ...]:
        return tuple(self._elements)

    @property
    def font_registry(self) -> Dict[str, bytes]:
        """Family name -> raw font bytes for every font requested so far."""
        return dict(self._font_data)

    def add_primitive(self, primitive: Primitive) -> None:
        self._elements.append(primitive)

    def add_rect(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        fill: str = "none",
        stroke: str = "black",
        stroke_width: int = 1,
    ) -> None:
        self._elements.append(RectPrimitive(x, y, width, height, fill, stroke, stroke_width))

    def add_line(
        self,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        stroke: str = "black",
        stroke_width: int = 1,
    ) -> None:
        self._elements.append(LinePrimitive(x1, y1, x2, y2, stroke, stroke_width))

    def add_text(
        self,
        text: str,
        x: int,
        y: int,
        font_size: int,
        color: str = "black",
        font_family: str = "Arial, sans-serif",
        font_weight: str = "normal",
        anchor: Optional[str] = None,
    ) -> None:
        self._elements.append(
            TextPrimitive(text, x, y, font_size, color, font_family, font_weight, anchor)
        )

    def add_text_with_font(
        self,
        text: str,
        x: int,
        y: int,
        font_size: int,
        color: str = "black",
        font_path: Optional[str] = None,
    ) -> None:
        """Add text drawn with an embedded font file."""
        family = font_family_for(font_path)
        if font_path and family not in self._font_data and Path(font_path).is_file():
            self._font_paths[family] = font_path
            self._font_data[family] = read_font_bytes(font_path)
            logger.debug("Registered font %s -> %s", family, font_path)

        self._elements.append(
            TextPrimitive(
                text=text,
                x=x,
                y=y,
                size=font_size,
                color=color,
                font_family=family,
                font_path=font_path,
            )
        )

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def _font_face_css(self) -> str:
        rules: List[str] = []
        for family, data in self._font_data.items():
            rules.append(
                _font_face(family, font_mime_type(self._font_paths[family]), data)
            )

        for family, filename in LEGACY_FONTS:
            path = self.fonts_dir / filename
            if path.is_file():
                rules.append(_font_face(family, "font/opentype", read_font_bytes(path)))

        return "\n".join(rules)

    def to_drawing(self) -> svgwrite.Drawing:
        dwg = svgwrite.Drawing(size=(self.width, self.height), profile="full", debug=False)
        dwg["viewBox"] = f"0 0 {self.width} {self.height}"
        dwg.embed_stylesheet(self._font_face_css())
        dwg.add(dwg.rect(insert=(0, 0), size=("100%", "100%"), fill="white"))

        for element in self._elements:
            if isinstance(element, RectPrimitive):
                dwg.add(
                    dwg.rect(
                        insert=(element.x, element.y),
                        size=(element.width, element.height),
                        fill=element.fill,
                        stroke=element.stroke,
                        stroke_width=element.stroke_width,
                    )
                )
            elif isinstance(element, TextPrimitive):
                extra = {"text_anchor": element.anchor} if element.anchor else {}
                dwg.add(
                    dwg.text(
                        element.text,
                        insert=(element.x, element.y),
                        font_family=element.font_family,
                        font_size=element.size,
                        font_weight=element.font_weight,
                        fill=element.color,
                        **extra,
                    )
                )
            elif isinstance(element, LinePrimitive):
                dwg.add(
                    dwg.line(
                        start=(element.x1, element.y1),
                        end=(element.x2, element.y2),
                        stroke=element.stroke,
                        stroke_width=element.stroke_width,
                    )
                )
        return dwg

    def to_svg(self) -> str:
        """Serialise to an SVG document string with XML declaration."""
        buf = io.StringIO()
        self.to_drawing().write(buf)
        logger.debug(
            "Serialised SVG %dx%d with %d elements, %d embedded fonts",
            self.width,
            self.height,
            len(self._elements),
            len(self._font_data),
        )
        return buf.getvalue()


def _font_face(family: str, mime_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return (
        "@font-face {\n"
        f"  font-family: '{family}';\n"
        f"  src: url('data:{mime_type};base64,{encoded}');\n"
        "}"
    )
