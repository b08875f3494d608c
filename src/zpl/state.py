"""
Transient drawing state threaded through a ZPL command scan.

Every pass starts from :data:`INITIAL_STATE` (or an injected state) and folds
commands into it with :func:`advance`. The state is immutable; each step
returns a new record. The layout pass and the render pass differ only in
which commands cancel a pending reverse flag, captured in
:class:`TransitionRules`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from src.model.enums import (
    DEFAULT_BARCODE_HEIGHT,
    DEFAULT_BARCODE_MODULE_WIDTH,
    DEFAULT_FONT_HEIGHT,
    DEFAULT_FONT_WIDTH,
)
from src.zpl.commands import (
    BarcodeWidth,
    Code128,
    Command,
    FieldNumber,
    FieldOrigin,
    FieldReverse,
    FieldSeparator,
    FontCommand,
    GraphicBox,
)

__all__ = [
    "DrawingState",
    "FieldLayout",
    "TransitionRules",
    "INITIAL_STATE",
    "LAYOUT_RULES",
    "RENDER_RULES",
    "advance",
]


@dataclass(frozen=True)
class FieldLayout:
    """Position and font in force when a field number was declared."""

    x: int
    y: int
    font_height: int = DEFAULT_FONT_HEIGHT
    font_width: int = DEFAULT_FONT_WIDTH
    reverse: bool = False


@dataclass(frozen=True)
class DrawingState:
    x: int = 0
    y: int = 0
    font_height: int = DEFAULT_FONT_HEIGHT
    font_width: int = DEFAULT_FONT_WIDTH
    reverse: bool = False
    module_width: int = DEFAULT_BARCODE_MODULE_WIDTH
    barcode_height: int = DEFAULT_BARCODE_HEIGHT
    print_interpretation: str = "Y"

    def snapshot(self) -> FieldLayout:
        return FieldLayout(self.x, self.y, self.font_height, self.font_width, self.reverse)

    @classmethod
    def from_layout(cls, layout: FieldLayout) -> DrawingState:
        return cls(
            x=layout.x,
            y=layout.y,
            font_height=layout.font_height,
            font_width=layout.font_width,
            reverse=layout.reverse,
        )


@dataclass(frozen=True)
class TransitionRules:
    """Which commands cancel a pending ^FR besides ^GB."""

    origin_clears_reverse: bool
    separator_clears_reverse: bool
    field_number_clears_reverse: bool


INITIAL_STATE: Final[DrawingState] = DrawingState()

# Template scan: ^FR survives ^FO and ^FS until a field or box consumes it.
LAYOUT_RULES: Final[TransitionRules] = TransitionRules(
    origin_clears_reverse=False,
    separator_clears_reverse=False,
    field_number_clears_reverse=True,
)

# Render scan: a new origin or the end of a field drops a stale ^FR.
RENDER_RULES: Final[TransitionRules] = TransitionRules(
    origin_clears_reverse=True,
    separator_clears_reverse=True,
    field_number_clears_reverse=False,
)


def advance(state: DrawingState, command: Command, rules: TransitionRules) -> DrawingState:
    """
    Apply one command to ``state``.

    ^GB always consumes the reverse flag: it belongs to the box being drawn
    and must not leak into the next field.
    """
    if isinstance(command, FontCommand):
        return replace(state, font_height=command.height, font_width=command.width)
    if isinstance(command, FieldOrigin):
        if rules.origin_clears_reverse:
            return replace(state, x=command.x, y=command.y, reverse=False)
        return replace(state, x=command.x, y=command.y)
    if isinstance(command, FieldReverse):
        return replace(state, reverse=True)
    if isinstance(command, FieldSeparator):
        return replace(state, reverse=False) if rules.separator_clears_reverse else state
    if isinstance(command, GraphicBox):
        return replace(state, reverse=False)
    if isinstance(command, FieldNumber):
        return replace(state, reverse=False) if rules.field_number_clears_reverse else state
    if isinstance(command, BarcodeWidth):
        return replace(state, module_width=command.module_width)
    if isinstance(command, Code128):
        return replace(
            state,
            barcode_height=command.height,
            print_interpretation=command.print_interpretation,
        )
    return state
