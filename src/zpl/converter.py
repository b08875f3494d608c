"""
ZPL to SVG conversion.

Runs the four interpreter passes over a fresh builder for every call; no
state is shared between conversions, so independent labels can be converted
concurrently.

Example:
    >>> from src.zpl.converter import convert
    >>> svg = convert("^XA^FO50,50^A0N,30,30^FDHello^FS^XZ", 4.0, 6.0, 300)
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Final, Optional, Union

from src.fonts.resolver import resolve_font_path
from src.svg.builder import SvgBuilder
from src.zpl.commands import tokenize
from src.zpl.passes import (
    extract_field_data,
    render_commands,
    render_fields,
    resolve_field_layouts,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_WIDTH_INCHES",
    "DEFAULT_HEIGHT_INCHES",
    "DEFAULT_DPI",
    "DEFAULT_FONT_RENDERER",
    "ZplToSvg",
    "convert",
    "pixel_size",
]

DEFAULT_WIDTH_INCHES: Final[float] = 4.0
DEFAULT_HEIGHT_INCHES: Final[float] = 6.0
DEFAULT_DPI: Final[int] = 300
DEFAULT_FONT_RENDERER: Final[str] = "noto"


def pixel_size(inches: float, dpi: int) -> int:
    """Physical length to pixels, rounding halves up."""
    return int(math.floor(inches * dpi + 0.5))


class ZplToSvg:
    """
    Converter from ZPL label markup to an SVG document.

    Args:
        fonts_dir: Directory with the preset and legacy font files. Defaults
            to ``$ZPL_FONTS_DIR`` or the project ``fonts/`` directory.
    """

    def __init__(self, fonts_dir: Optional[Union[str, Path]] = None) -> None:
        self.fonts_dir = fonts_dir

    def build(
        self,
        zpl: str,
        width_inches: float = DEFAULT_WIDTH_INCHES,
        height_inches: float = DEFAULT_HEIGHT_INCHES,
        dpi: int = DEFAULT_DPI,
        font_renderer: str = DEFAULT_FONT_RENDERER,
    ) -> SvgBuilder:
        """
        Interpret ``zpl`` into a populated builder without serialising it.

        Raises:
            FontNotFoundError: If text has to be drawn and the font is missing.
        """
        width = pixel_size(width_inches, dpi)
        height = pixel_size(height_inches, dpi)
        font_path = resolve_font_path(font_renderer, self.fonts_dir)
        builder = SvgBuilder(width, height, fonts_dir=self.fonts_dir)

        commands = tokenize(zpl)

        # Pass 1: ^FN -> ^FD bindings
        field_data = extract_field_data(commands)
        # Pass 2: layouts from the template section
        layouts = resolve_field_layouts(commands)
        # Pass 3: graphics and barcodes first so text paints on top
        barcode_fields = render_commands(commands, field_data, builder, font_path)
        # Pass 4: field text
        render_fields(field_data, layouts, barcode_fields, builder, font_path)

        logger.info(
            "Converted ZPL (%d commands, %d fields, %d barcodes) to %dx%d",
            len(commands),
            len(field_data),
            len(barcode_fields),
            width,
            height,
        )
        return builder

    def render(
        self,
        zpl: str,
        width_inches: float = DEFAULT_WIDTH_INCHES,
        height_inches: float = DEFAULT_HEIGHT_INCHES,
        dpi: int = DEFAULT_DPI,
        font_renderer: str = DEFAULT_FONT_RENDERER,
    ) -> str:
        return self.build(zpl, width_inches, height_inches, dpi, font_renderer).to_svg()


def convert(
    zpl: str,
    width_inches: float = DEFAULT_WIDTH_INCHES,
    height_inches: float = DEFAULT_HEIGHT_INCHES,
    dpi: int = DEFAULT_DPI,
    font_renderer: str = DEFAULT_FONT_RENDERER,
    fonts_dir: Optional[Union[str, Path]] = None,
) -> str:
    """
    Convert a ZPL string to an SVG document string.

    Args:
        zpl: ZPL markup.
        width_inches: Label width in inches.
        height_inches: Label height in inches.
        dpi: Dots per inch; pixel size is ``round(inches * dpi)``.
        font_renderer: ``"noto"``, ``"ibm-vga"`` or a path to a ``.ttf`` file.
        fonts_dir: Override for the font directory.

    Returns:
        The SVG document.

    Raises:
        FontNotFoundError: If the label has text and the font cannot be found.
    """
    return ZplToSvg(fonts_dir).render(zpl, width_inches, height_inches, dpi, font_renderer)
