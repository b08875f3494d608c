"""
raster

Rasterization of converted labels (SVG -> PNG/JPEG/PIL image).

Public API:
    - select_rasterizer: build a fallback chain (rsvg-convert, cairosvg)
    - RasterizationError / RasterizerUnavailableError
    - to_image, to_png, to_jpeg, svg_to_image, svg_to_png_bytes
    - export_label: PNG/JPEG export driven by load_config()

Dependencies:
    Pillow, cairosvg (optional at runtime), rsvg-convert (optional tool)
"""

from src.raster.export import (
    export_label,
    svg_to_image,
    svg_to_png_bytes,
    to_image,
    to_jpeg,
    to_png,
)
from src.raster.rasterizer import (
    DEFAULT_RASTERIZERS,
    CairoSvgRasterizer,
    RasterizationError,
    Rasterizer,
    RasterizerChain,
    RasterizerUnavailableError,
    RsvgConvertRasterizer,
    select_rasterizer,
)

__all__ = [
    "DEFAULT_RASTERIZERS",
    "CairoSvgRasterizer",
    "RasterizationError",
    "Rasterizer",
    "RasterizerChain",
    "RasterizerUnavailableError",
    "RsvgConvertRasterizer",
    "export_label",
    "select_rasterizer",
    "svg_to_image",
    "svg_to_png_bytes",
    "to_image",
    "to_jpeg",
    "to_png",
]
