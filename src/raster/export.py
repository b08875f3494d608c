"""
Bitmap export of ZPL labels: ZPL -> SVG -> PNG bytes -> PIL image / file.

All functions accept an explicit rasterizer; when omitted a default fallback
chain is selected for that call only.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image

from src.raster.rasterizer import RasterizationError, Rasterizer, select_rasterizer
from src.zpl.converter import (
    DEFAULT_DPI,
    DEFAULT_FONT_RENDERER,
    DEFAULT_HEIGHT_INCHES,
    DEFAULT_WIDTH_INCHES,
    convert,
    pixel_size,
)

logger = logging.getLogger(__name__)

__all__ = [
    "svg_to_png_bytes",
    "svg_to_image",
    "to_image",
    "to_png",
    "to_jpeg",
    "export_label",
]

PathLike = Union[str, Path]


def svg_to_png_bytes(
    svg: str,
    width: int,
    height: int,
    rasterizer: Optional[Rasterizer] = None,
) -> bytes:
    """Rasterize an SVG document to PNG bytes of ``width`` x ``height``."""
    return (rasterizer or select_rasterizer()).rasterize(svg, width, height)


def _flatten(image: Image.Image) -> Image.Image:
    """Composite onto white and drop alpha."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, "white")
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def svg_to_image(
    svg: str,
    width: int,
    height: int,
    rasterizer: Optional[Rasterizer] = None,
) -> Image.Image:
    """
    Rasterize an SVG document into an RGB PIL image of exactly ``width`` x ``height``.

    Raises:
        RasterizationError: If no rasterizer could produce a readable bitmap.
    """
    png = svg_to_png_bytes(svg, width, height, rasterizer)
    try:
        with Image.open(BytesIO(png)) as raw:
            raw.load()
            image = _flatten(raw)
    except OSError as e:
        raise RasterizationError("Rasterizer output is not a readable image") from e

    if image.size != (width, height):
        logger.debug("Resizing %s to %dx%d", image.size, width, height)
        image = image.resize((width, height), Image.Resampling.LANCZOS)
    return image


def to_image(
    zpl: str,
    width_inches: float = DEFAULT_WIDTH_INCHES,
    height_inches: float = DEFAULT_HEIGHT_INCHES,
    dpi: int = DEFAULT_DPI,
    font_renderer: str = DEFAULT_FONT_RENDERER,
    rasterizer: Optional[Rasterizer] = None,
    fonts_dir: Optional[PathLike] = None,
) -> Image.Image:
    """Convert ZPL straight to a PIL image."""
    svg = convert(zpl, width_inches, height_inches, dpi, font_renderer, fonts_dir)
    return svg_to_image(
        svg,
        pixel_size(width_inches, dpi),
        pixel_size(height_inches, dpi),
        rasterizer,
    )


def to_png(
    zpl: str,
    output_path: PathLike,
    width_inches: float = DEFAULT_WIDTH_INCHES,
    height_inches: float = DEFAULT_HEIGHT_INCHES,
    dpi: int = DEFAULT_DPI,
    font_renderer: str = DEFAULT_FONT_RENDERER,
    compress_level: int = 9,
    rasterizer: Optional[Rasterizer] = None,
    fonts_dir: Optional[PathLike] = None,
) -> None:
    """Render ZPL to a PNG file with ``dpi`` recorded in the file."""
    image = to_image(
        zpl, width_inches, height_inches, dpi, font_renderer, rasterizer, fonts_dir
    )
    image.save(output_path, format="PNG", compress_level=compress_level, dpi=(dpi, dpi))
    logger.info("Saved PNG %s (%dx%d)", output_path, image.width, image.height)


def to_jpeg(
    zpl: str,
    output_path: PathLike,
    width_inches: float = DEFAULT_WIDTH_INCHES,
    height_inches: float = DEFAULT_HEIGHT_INCHES,
    dpi: int = DEFAULT_DPI,
    font_renderer: str = DEFAULT_FONT_RENDERER,
    quality: int = 90,
    rasterizer: Optional[Rasterizer] = None,
    fonts_dir: Optional[PathLike] = None,
) -> None:
    """Render ZPL to a JPEG file."""
    image = to_image(
        zpl, width_inches, height_inches, dpi, font_renderer, rasterizer, fonts_dir
    )
    image.save(output_path, format="JPEG", quality=quality, dpi=(dpi, dpi))
    logger.info("Saved JPEG %s (%dx%d)", output_path, image.width, image.height)


def export_label(
    zpl: str,
    output_path: PathLike,
    config: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Render ZPL to a PNG or JPEG file using a configuration dictionary.

    The format follows the output suffix (``.png``, ``.jpg``, ``.jpeg``).
    Label size, dpi, font renderer, fonts directory, rasterizer names and
    the format option are read from ``config`` (``load_config()`` when omitted).

    Raises:
        ValueError: For an unsupported output suffix or unknown rasterizer name.
    """
    if config is None:
        from src import load_config

        config = load_config()

    path = Path(output_path)
    suffix = path.suffix.lower()
    if suffix not in (".png", ".jpg", ".jpeg"):
        raise ValueError(
            f"Unsupported output format {path.suffix!r}; expected .png, .jpg or .jpeg"
        )

    options = dict(
        width_inches=config.get("width_inches", DEFAULT_WIDTH_INCHES),
        height_inches=config.get("height_inches", DEFAULT_HEIGHT_INCHES),
        dpi=config.get("dpi", DEFAULT_DPI),
        font_renderer=config.get("font_renderer", DEFAULT_FONT_RENDERER),
        rasterizer=select_rasterizer(config.get("rasterizers")),
        fonts_dir=config.get("fonts_dir"),
    )
    if suffix == ".png":
        to_png(zpl, path, compress_level=config.get("png_compress_level", 9), **options)
    else:
        to_jpeg(zpl, path, quality=config.get("jpeg_quality", 90), **options)
    return path
