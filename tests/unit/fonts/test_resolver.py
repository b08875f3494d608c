import hashlib
import logging
from pathlib import Path

import pytest

from src.fonts.resolver import (
    FONT_PRESETS,
    FontNotFoundError,
    default_fonts_dir,
    font_family_for,
    font_mime_type,
    read_font_bytes,
    require_font,
    resolve_font_path,
)


class TestResolveFontPath:
    @pytest.mark.parametrize("preset", sorted(FONT_PRESETS))
    def test_presets(self, preset: str, tmp_path: Path) -> None:
        assert resolve_font_path(preset, tmp_path) == str(tmp_path / FONT_PRESETS[preset])

    def test_preset_not_checked_for_existence(self, tmp_path: Path) -> None:
        path = resolve_font_path("noto", tmp_path / "missing")
        assert path is not None and not Path(path).exists()

    def test_existing_ttf_used_verbatim(self, tmp_path: Path) -> None:
        font = tmp_path / "mine.ttf"
        font.write_bytes(b"x")
        assert resolve_font_path(str(font)) == str(font)

    def test_missing_ttf_is_unknown(self, tmp_path: Path) -> None:
        assert resolve_font_path(str(tmp_path / "gone.ttf")) is None

    def test_existing_non_ttf_is_unknown(self, tmp_path: Path) -> None:
        font = tmp_path / "mine.otf"
        font.write_bytes(b"x")
        assert resolve_font_path(str(font)) is None

    def test_unknown_selector_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="src.fonts.resolver"):
            assert resolve_font_path("comic-sans") is None
        assert "comic-sans" in caplog.text

    def test_env_fonts_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZPL_FONTS_DIR", str(tmp_path))
        assert default_fonts_dir() == tmp_path
        assert resolve_font_path("ibm-vga") == str(tmp_path / FONT_PRESETS["ibm-vga"])

    def test_default_fonts_dir_next_to_package(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ZPL_FONTS_DIR", raising=False)
        assert default_fonts_dir().name == "fonts"
        assert (default_fonts_dir().parent / "src").is_dir()


class TestFontFiles:
    def test_require_font_existing(self, tmp_path: Path) -> None:
        font = tmp_path / "a.ttf"
        font.write_bytes(b"x")
        assert require_font(str(font)) == str(font)

    @pytest.mark.parametrize("path", [None, "", "/definitely/not/here.ttf"])
    def test_require_font_missing(self, path: str) -> None:
        with pytest.raises(FontNotFoundError, match="Font file not found"):
            require_font(path)

    def test_family_is_path_stable(self) -> None:
        digest = hashlib.md5(b"/fonts/a.ttf").hexdigest()
        assert font_family_for("/fonts/a.ttf") == f"CustomFont-{digest}"
        assert font_family_for("/fonts/a.ttf") == font_family_for("/fonts/a.ttf")
        assert font_family_for("/fonts/a.ttf") != font_family_for("/fonts/b.ttf")

    def test_family_for_missing_path(self) -> None:
        digest = hashlib.md5(b"default").hexdigest()
        assert font_family_for(None) == f"CustomFont-{digest}"

    @pytest.mark.parametrize(
        "name,mime",
        [("a.ttf", "font/truetype"), ("a.otf", "font/opentype"), ("A.OTF", "font/opentype")],
    )
    def test_mime_type(self, name: str, mime: str) -> None:
        assert font_mime_type(name) == mime

    def test_read_font_bytes(self, tmp_path: Path) -> None:
        font = tmp_path / "a.ttf"
        font.write_bytes(b"\x00\x01binary")
        assert read_font_bytes(font) == b"\x00\x01binary"

    def test_font_not_found_is_runtime_error(self) -> None:
        assert issubclass(FontNotFoundError, RuntimeError)
