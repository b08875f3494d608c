"""Font resolution and font-file access for embedded SVG fonts."""

from src.fonts.resolver import (
    FONT_PRESETS,
    LEGACY_FONTS,
    FontNotFoundError,
    default_fonts_dir,
    font_family_for,
    font_mime_type,
    read_font_bytes,
    require_font,
    resolve_font_path,
)

__all__ = [
    "FONT_PRESETS",
    "LEGACY_FONTS",
    "FontNotFoundError",
    "default_fonts_dir",
    "font_family_for",
    "font_mime_type",
    "read_font_bytes",
    "require_font",
    "resolve_font_path",
]
