"""
RU: Четыре прохода интерпретатора ZPL: данные полей, позиции шаблона, графика/штрихкоды, текст полей.
EN: The four interpreter passes over a tokenized ZPL stream.

Pass 1  extract_field_data     ^FN -> ^FD bindings, inline or template/data separated
Pass 2  resolve_field_layouts  position/font/reverse per ^FN in the template section
Pass 3  render_commands        boxes, unassociated inline text, Code 128 symbols
Pass 4  render_fields          text for every bound field not used by a barcode

ZPL accepts two shapes for field data:
    1. Inline:     ^FN1^FDdata^FS
    2. Separated:  ^FN1^FS in the template, then ^XF...^FN1^FDdata^FS later
Both bind ``data`` to field 1.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Final, Optional, Sequence, Set

from src.barcodegen.code128 import Code128Encoder
from src.fonts.resolver import require_font
from src.model.enums import MAX_REVERSE_STROKE_WIDTH, BoxKind, Color
from src.svg.builder import SvgBuilder
from src.zpl.commands import (
    Code128,
    Command,
    FieldData,
    FieldNumber,
    FieldSeparator,
    GraphicBox,
    template_section,
)
from src.zpl.state import (
    INITIAL_STATE,
    LAYOUT_RULES,
    RENDER_RULES,
    DrawingState,
    FieldLayout,
    advance,
)

logger = logging.getLogger(__name__)

__all__ = [
    "FIELD_LOOKBACK_WINDOW",
    "extract_field_data",
    "resolve_field_layouts",
    "render_commands",
    "render_fields",
    "emit_text",
    "draw_box",
    "next_field_number",
    "has_recent_field_number",
    "font_size_for",
]

# ^FD within this many commands after a ^FN belongs to that field
FIELD_LOOKBACK_WINDOW: Final[int] = 3

FONT_SIZE_SCALE: Final[float] = 0.6
CHAR_WIDTH_SCALE: Final[float] = 0.6


# =============================================================================
# STRUCTURAL QUERIES
# =============================================================================


def next_field_number(commands: Sequence[Command], index: int) -> Optional[int]:
    """
    Field number declared right after ``commands[index]``.

    Intervening ^FS commands are skipped; any other command ends the search.
    """
    for command in commands[index + 1 :]:
        if isinstance(command, FieldNumber):
            return command.number
        if not isinstance(command, FieldSeparator):
            return None
    return None


def has_recent_field_number(
    commands: Sequence[Command], index: int, window: int = FIELD_LOOKBACK_WINDOW
) -> bool:
    start = max(0, index - window)
    return any(isinstance(c, FieldNumber) for c in commands[start:index])


# =============================================================================
# PRIMITIVE EMISSION
# =============================================================================


def font_size_for(font_height: int) -> int:
    """Vector font size for a ZPL font height in dots."""
    return int(round(font_height * FONT_SIZE_SCALE))


def emit_text(
    builder: SvgBuilder,
    text: str,
    layout: FieldLayout,
    font_path: Optional[str],
) -> None:
    """
    Draw ``text`` with its top-left corner at the layout origin.

    A reversed layout first paints a black background sized from an
    approximate character width, then draws the text in white on top.

    Raises:
        FontNotFoundError: If the font file does not exist.
    """
    if not text:
        return
    path = require_font(font_path)

    font_size = font_size_for(layout.font_height)
    color = Color.BLACK

    if layout.reverse:
        char_width = font_size * CHAR_WIDTH_SCALE
        builder.add_rect(
            layout.x,
            layout.y,
            int(len(text) * char_width),
            layout.font_height,
            Color.BLACK.value,
            Color.NONE.value,
        )
        color = Color.WHITE

    builder.add_text_with_font(
        text,
        layout.x,
        layout.y + font_size,
        font_size,
        color.value,
        path,
    )


def draw_box(builder: SvgBuilder, x: int, y: int, box: GraphicBox, reverse: bool) -> None:
    kind = BoxKind.classify(box.width, box.height, box.thickness)
    logger.debug(
        "%s %dx%d (thickness %d) at (%d, %d)%s",
        kind.localized_name("en"), box.width, box.height, box.thickness, x, y,
        " reversed" if reverse else "",
    )
    black, white, none = Color.BLACK.value, Color.WHITE.value, Color.NONE.value

    if kind is BoxKind.FILLED:
        if reverse:
            builder.add_rect(
                x, y, box.width, box.height, white, black,
                min(box.thickness, MAX_REVERSE_STROKE_WIDTH),
            )
        else:
            builder.add_rect(x, y, box.width, box.height, black, none)
    elif kind is BoxKind.LINE:
        builder.add_rect(x, y, box.width, box.height, white if reverse else black, none)
    elif reverse:
        # White interior keeps whatever was painted underneath from showing
        builder.add_rect(x, y, box.width, box.height, white, black, box.thickness)
    else:
        builder.add_rect(x, y, box.width, box.height, none, black, box.thickness)


# =============================================================================
# PASSES
# =============================================================================


def extract_field_data(commands: Sequence[Command]) -> Dict[int, str]:
    """
    Pass 1: bind ^FD payloads to field numbers.

    A ^FN stays pending across ^FS until the next ^FD. Any other command
    abandons it. Re-declaring a field number overwrites its data.
    """
    field_data: Dict[int, str] = {}
    pending: Optional[int] = None

    for command in commands:
        if isinstance(command, FieldNumber):
            pending = command.number
        elif isinstance(command, FieldData):
            if pending is not None:
                field_data[pending] = command.text
                logger.debug("Field %d bound to %r", pending, command.text)
                pending = None
        elif not isinstance(command, FieldSeparator):
            pending = None

    return field_data


def resolve_field_layouts(
    commands: Sequence[Command], start: DrawingState = INITIAL_STATE
) -> Dict[int, FieldLayout]:
    """
    Pass 2: record the drawing context of every ^FN in the template section.

    The first declaration of a field number wins. ^FR applies to at most one
    following field; a ^GB in between consumes it.
    """
    layouts: Dict[int, FieldLayout] = {}
    state = start

    for command in template_section(commands):
        if isinstance(command, FieldNumber) and command.number not in layouts:
            layouts[command.number] = state.snapshot()
        state = advance(state, command, LAYOUT_RULES)

    logger.debug("Resolved layouts for fields %s", sorted(layouts))
    return layouts


def render_commands(
    commands: Sequence[Command],
    field_data: Dict[int, str],
    builder: SvgBuilder,
    font_path: Optional[str],
    start: DrawingState = INITIAL_STATE,
) -> Set[int]:
    """
    Pass 3: draw boxes, unassociated ^FD text and Code 128 symbols.

    Returns:
        Field numbers consumed by barcodes; they are not drawn as text.
    """
    barcode_fields: Set[int] = set()
    state = start

    for index, command in enumerate(commands):
        if isinstance(command, GraphicBox):
            draw_box(builder, state.x, state.y, command, state.reverse)

        elif isinstance(command, FieldData):
            if command.text and not has_recent_field_number(commands, index):
                emit_text(builder, command.text, state.snapshot(), font_path)
                state = replace(state, reverse=False)

        elif isinstance(command, Code128):
            state = advance(state, command, RENDER_RULES)
            number = next_field_number(commands, index)
            if number is None:
                logger.debug("^BC at command %d has no following ^FN", index)
                continue
            barcode_fields.add(number)
            if number in field_data:
                Code128Encoder(
                    field_data[number],
                    state.module_width,
                    state.barcode_height,
                    state.print_interpretation,
                ).render(builder, state.x, state.y)
            else:
                logger.debug("Barcode field %d has no data, skipped", number)
            continue

        state = advance(state, command, RENDER_RULES)

    return barcode_fields


def render_fields(
    field_data: Dict[int, str],
    layouts: Dict[int, FieldLayout],
    barcode_fields: Set[int],
    builder: SvgBuilder,
    font_path: Optional[str],
) -> None:
    """Pass 4: draw every bound field that has a layout and is not a barcode."""
    for number, data in field_data.items():
        if not data:
            continue
        layout = layouts.get(number)
        if layout is None:
            logger.debug("Field %d has data but no layout, skipped", number)
            continue
        if number in barcode_fields:
            continue
        emit_text(builder, data, layout, font_path)
