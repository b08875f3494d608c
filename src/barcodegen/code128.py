"""
RU: Упрощённый кодировщик Code 128 (набор B) для векторного вывода ^BC: таблица шаблонов, старт/стоп, масштаб модуля.
EN: Simplified Code 128 (subset B) encoder producing vector bars for ^BC symbols.

The symbol is built from a fixed start pattern, one 11-module pattern per
payload character and a fixed 13-module stop pattern. There is no check
character, so the result looks like Code 128 but will not verify on a
scanner. Characters without a pattern are dropped and the symbol shrinks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, List, Optional, Tuple

from src.model.primitives import RectPrimitive, TextPrimitive

if TYPE_CHECKING:
    from src.svg.builder import SvgBuilder

logger = logging.getLogger(__name__)

__all__ = [
    "START_PATTERN",
    "STOP_PATTERN",
    "CODE128_PATTERNS",
    "Code128Encoder",
    "effective_module_width",
    "pattern_for",
    "encode",
]

START_PATTERN: Final[str] = "11010010000"  # Start B
STOP_PATTERN: Final[str] = "1100011101011"

FIRST_CODE_POINT: Final[int] = 32
LAST_CODE_POINT: Final[int] = 127

INTERPRETATION_OFFSET: Final[int] = 20
INTERPRETATION_FONT_SIZE: Final[int] = 12

# Empirical: ^BY module widths look too wide when drawn 1:1.
MODULE_WIDTH_DIVISOR: Final[float] = 1.5

# Indexed by code point - 32. Covers space (32) through 'Z' (90).
CODE128_PATTERNS: Final[Tuple[str, ...]] = (
    "11011001100",  # Space (32)
    "11001101100",  # !
    "11001100110",  # "
    "10010011000",  # #
    "10010001100",  # $
    "10001001100",  # %
    "10011001000",  # &
    "10011000100",  # '
    "10001100100",  # (
    "11001001000",  # )
    "11001000100",  # *
    "11000100100",  # +
    "10110011100",  # ,
    "10011011100",  # -
    "10011001110",  # .
    "10111001100",  # /
    "10011101100",  # 0 (48)
    "10011100110",  # 1
    "11001110010",  # 2
    "11001011100",  # 3
    "11001001110",  # 4
    "11011100100",  # 5
    "11001110100",  # 6
    "11101101110",  # 7
    "11101001100",  # 8
    "11100101100",  # 9
    "11100100110",  # :
    "11101100100",  # ;
    "11100110100",  # <
    "11100110010",  # =
    "11011011000",  # >
    "11011000110",  # ?
    "11000110110",  # @
    "10100011000",  # A (65)
    "10001011000",  # B
    "10001000110",  # C
    "10110001000",  # D
    "10001101000",  # E
    "10001100010",  # F
    "11010001000",  # G
    "11000101000",  # H
    "11000100010",  # I
    "10110111000",  # J
    "10110001110",  # K
    "10001101110",  # L
    "10111011000",  # M
    "10111000110",  # N
    "10001110110",  # O
    "11101110110",  # P
    "11010001110",  # Q
    "11000101110",  # R
    "11011101000",  # S
    "11011100010",  # T
    "11011101110",  # U
    "11101011000",  # V
    "11101000110",  # W
    "11100010110",  # X
    "11101101000",  # Y
    "11101100010",  # Z (90)
)


def effective_module_width(module_width: int) -> int:
    """Scale a ^BY module width to drawn units, never below 1."""
    return max(1, int(round(module_width / MODULE_WIDTH_DIVISOR)))


def pattern_for(char: str) -> Optional[str]:
    """Return the bar/space pattern for ``char`` or None if it has none."""
    code_point = ord(char)
    if FIRST_CODE_POINT <= code_point <= LAST_CODE_POINT:
        index = code_point - FIRST_CODE_POINT
        if index < len(CODE128_PATTERNS):
            return CODE128_PATTERNS[index]
    return None


@dataclass(frozen=True)
class BarGroup:
    """One encoded unit of the symbol: start, a payload character or stop."""

    label: str
    pattern: str


class Code128Encoder:
    """
    Encoder for one ^BC symbol.

    Args:
        data: Payload string.
        module_width: Module width as given by ^BY (before scaling).
        height: Bar height in dots.
        print_interpretation: ^BC interpretation-line flag; anything but
            ``"N"`` (case-insensitive) prints the payload under the bars.

    Example:
        >>> enc = Code128Encoder("AB", module_width=2, height=80)
        >>> [g.label for g in enc.groups()]
        ['START', 'A', 'B', 'STOP']
    """

    def __init__(
        self,
        data: str,
        module_width: int = 2,
        height: int = 100,
        print_interpretation: str = "Y",
    ) -> None:
        self.data = data
        self.module_width = module_width
        self.height = height
        self.print_interpretation = print_interpretation

    @property
    def bar_width(self) -> int:
        return effective_module_width(self.module_width)

    @property
    def shows_interpretation(self) -> bool:
        return self.print_interpretation.upper() != "N"

    def groups(self) -> List[BarGroup]:
        groups = [BarGroup("START", START_PATTERN)]
        for char in self.data:
            pattern = pattern_for(char)
            if pattern is None:
                logger.debug("No Code 128 pattern for %r, skipped", char)
                continue
            groups.append(BarGroup(char, pattern))
        groups.append(BarGroup("STOP", STOP_PATTERN))
        return groups

    def symbol_width(self) -> int:
        """Total width in drawn units, spaces included."""
        return sum(len(g.pattern) for g in self.groups()) * self.bar_width

    def bars(self, x: int, y: int) -> List[RectPrimitive]:
        """Filled rectangles for every bar module, left to right."""
        rects: List[RectPrimitive] = []
        cursor = x
        bar_width = self.bar_width
        for group in self.groups():
            for module in group.pattern:
                if module == "1":
                    rects.append(
                        RectPrimitive(cursor, y, bar_width, self.height, "black", "none")
                    )
                cursor += bar_width
        return rects

    def interpretation(self, x: int, y: int) -> Optional[TextPrimitive]:
        if not self.shows_interpretation:
            return None
        return TextPrimitive(
            text=self.data,
            x=x + self.symbol_width() // 2,
            y=y + self.height + INTERPRETATION_OFFSET,
            size=INTERPRETATION_FONT_SIZE,
            anchor="middle",
        )

    def render(self, builder: SvgBuilder, x: int, y: int) -> None:
        """Append the symbol (and its interpretation line) to ``builder``."""
        logger.debug(
            "Drawing Code 128 %r at (%d, %d) module=%d height=%d",
            self.data,
            x,
            y,
            self.bar_width,
            self.height,
        )
        for rect in self.bars(x, y):
            builder.add_primitive(rect)
        text = self.interpretation(x, y)
        if text is not None:
            builder.add_primitive(text)


def encode(data: str, module_width: int, height: int) -> List[RectPrimitive]:
    """Pure encoding entry point: bars for ``data`` with the origin at (0, 0)."""
    return Code128Encoder(data, module_width, height).bars(0, 0)
