"""
model/enums.py

(Краткое RU: Перечисления для векторной модели этикетки ZPL: классы прямоугольников, цвета.)

EN: Domain enums for the ZPL label vector model (box classification, paint colours).
NO markup parsing logic here!

- Box classes follow the ^GB width/height/thickness rules of the label printer.
- Only monochrome paint: thermal labels print black on white.

See Also:
    - src/zpl/passes.py (where boxes are drawn)
    - src/svg/builder.py (where colours are serialised)
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Literal

# === DEFAULT METRICS ===
DEFAULT_FONT_HEIGHT: Final[int] = 30
DEFAULT_FONT_WIDTH: Final[int] = 30
DEFAULT_BARCODE_MODULE_WIDTH: Final[int] = 2
DEFAULT_BARCODE_HEIGHT: Final[int] = 100
MAX_REVERSE_STROKE_WIDTH: Final[int] = 5


class Color(str, Enum):
    BLACK = "black"
    WHITE = "white"
    NONE = "none"


class BoxKind(str, Enum):
    """Geometric class of a ^GB graphic box."""

    FILLED = "filled"
    LINE = "line"
    BORDER = "border"

    @classmethod
    def classify(cls, width: int, height: int, thickness: int) -> BoxKind:
        """
        Classify a box from its parameters.

        A thickness larger than either side fills the box completely; a
        thickness equal to either side collapses it into a solid line;
        anything thinner is an outline.
        """
        if thickness > width or thickness > height:
            return cls.FILLED
        if thickness == width or thickness == height:
            return cls.LINE
        return cls.BORDER

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names_ru = {
            self.FILLED: "Залитый прямоугольник",
            self.LINE: "Линия",
            self.BORDER: "Рамка",
        }
        names_en = {
            self.FILLED: "Filled box",
            self.LINE: "Line",
            self.BORDER: "Border",
        }
        return names_ru[self] if lang == "ru" else names_en[self]

