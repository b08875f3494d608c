"""
Font lookup for text rendering.

Maps a renderer selector (a preset name or a path to a ``.ttf`` file) to a
font file, and reads font files for embedding into the SVG output.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Dict, Final, Optional, Tuple, Union

logger = logging.getLogger(__name__)

__all__ = [
    "FontNotFoundError",
    "FONT_PRESETS",
    "LEGACY_FONTS",
    "default_fonts_dir",
    "resolve_font_path",
    "require_font",
    "font_family_for",
    "font_mime_type",
    "read_font_bytes",
]

PathLike = Union[str, Path]

FONTS_DIR_ENV: Final[str] = "ZPL_FONTS_DIR"

# Relative to the fonts directory
FONT_PRESETS: Final[Dict[str, str]] = {
    "noto": "Noto_Sans/NotoSans-VariableFont_wdth,wght.ttf",
    "ibm-vga": "IBM_VGA/Px437_IBM_VGA_8x16.ttf",
}

# Embedded in every document when present in the fonts directory
LEGACY_FONTS: Final[Tuple[Tuple[str, str], ...]] = (
    ("Swiss721BT-Roman", "Swiss721BT-Roman.otf"),
    ("Swiss721BT-Medium", "Swiss721BT-Medium.otf"),
    ("Swiss721BT-BoldCondensed", "Swiss721BT-BoldCondensed.otf"),
)


class FontNotFoundError(RuntimeError):
    """Font file missing at draw time."""


def default_fonts_dir() -> Path:
    """``$ZPL_FONTS_DIR`` if set, else the ``fonts/`` directory next to ``src``."""
    env_dir = os.environ.get(FONTS_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path(__file__).resolve().parents[2] / "fonts"


def resolve_font_path(
    selector: str, fonts_dir: Optional[PathLike] = None
) -> Optional[str]:
    """
    Resolve a font renderer selector.

    Args:
        selector: ``"noto"``, ``"ibm-vga"`` or a path to an existing ``.ttf``.
        fonts_dir: Directory holding the preset fonts.

    Returns:
        The font path, or None when the selector is neither an existing
        TrueType file nor a known preset. Preset paths are not checked for
        existence here; see :func:`require_font`.
    """
    candidate = Path(selector)
    if candidate.suffix == ".ttf" and candidate.is_file():
        return selector

    relative = FONT_PRESETS.get(selector)
    if relative is None:
        logger.warning("Unknown font renderer %r", selector)
        return None

    base = Path(fonts_dir) if fonts_dir is not None else default_fonts_dir()
    return str(base / relative)


def require_font(font_path: Optional[str]) -> str:
    """Return ``font_path`` if the file exists, else raise FontNotFoundError."""
    if not font_path or not os.path.isfile(font_path):
        raise FontNotFoundError(f"Font file not found: {font_path}")
    return font_path


def font_family_for(font_path: Optional[str]) -> str:
    """Stable CSS family name for a font path (same path, same name)."""
    digest = hashlib.md5((font_path or "default").encode("utf-8")).hexdigest()
    return f"CustomFont-{digest}"


def font_mime_type(font_path: PathLike) -> str:
    return "font/opentype" if Path(font_path).suffix.lower() == ".otf" else "font/truetype"


def read_font_bytes(font_path: PathLike) -> bytes:
    with open(font_path, "rb") as f:
        return f.read()
