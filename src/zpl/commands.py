"""
ZPL command tokenizer.

Splits a raw ZPL string on the ``^`` control prefix and classifies every
piece into one of a closed set of typed commands. Only the subset needed for
text fields, field association, graphic boxes and Code 128 symbols is
recognised; everything else becomes :class:`UnknownCommand` so that passes
can still reason about "some other command sits here".

Recognised commands:
    ^A<f>[o],h,w   FontCommand          font height/width
    ^FOx,y         FieldOrigin          drawing origin
    ^FNn           FieldNumber          field declaration
    ^FD...         FieldData            field payload
    ^FR            FieldReverse         reverse-video flag
    ^FS            FieldSeparator       end of field
    ^GBw,h,t       GraphicBox           box / line
    ^BYw           BarcodeWidth         module width
    ^BC[o],h,f     Code128              barcode symbol
    ^XF<name>      RecallFormat         end of the template section
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final, List, Pattern, Sequence, Union

logger = logging.getLogger(__name__)

__all__ = [
    "CONTROL_PREFIX",
    "FontCommand",
    "FieldOrigin",
    "FieldNumber",
    "FieldData",
    "FieldReverse",
    "FieldSeparator",
    "GraphicBox",
    "BarcodeWidth",
    "Code128",
    "RecallFormat",
    "UnknownCommand",
    "Command",
    "parse_command",
    "tokenize",
    "template_section",
]

CONTROL_PREFIX: Final[str] = "^"


# =============================================================================
# COMMAND VARIANTS
# =============================================================================


@dataclass(frozen=True)
class FontCommand:
    height: int
    width: int


@dataclass(frozen=True)
class FieldOrigin:
    x: int
    y: int


@dataclass(frozen=True)
class FieldNumber:
    number: int


@dataclass(frozen=True)
class FieldData:
    text: str


@dataclass(frozen=True)
class FieldReverse:
    pass


@dataclass(frozen=True)
class FieldSeparator:
    pass


@dataclass(frozen=True)
class GraphicBox:
    width: int
    height: int
    thickness: int


@dataclass(frozen=True)
class BarcodeWidth:
    module_width: int


@dataclass(frozen=True)
class Code128:
    height: int
    print_interpretation: str = "Y"


@dataclass(frozen=True)
class RecallFormat:
    name: str


@dataclass(frozen=True)
class UnknownCommand:
    raw: str


Command = Union[
    FontCommand,
    FieldOrigin,
    FieldNumber,
    FieldData,
    FieldReverse,
    FieldSeparator,
    GraphicBox,
    BarcodeWidth,
    Code128,
    RecallFormat,
    UnknownCommand,
]


# =============================================================================
# CLASSIFICATION
# =============================================================================

_FONT_RE: Final[Pattern[str]] = re.compile(r"^A[0-9A-Z][NRIB]?\s*,\s*(\d+)\s*,\s*(\d+)")
_ORIGIN_RE: Final[Pattern[str]] = re.compile(r"^FO\s*(\d+)\s*,\s*(\d+)")
_NUMBER_RE: Final[Pattern[str]] = re.compile(r"^FN(\d+)")
_REVERSE_RE: Final[Pattern[str]] = re.compile(r"^FR\s*$")
_SEPARATOR_RE: Final[Pattern[str]] = re.compile(r"^FS\s*$")
_BOX_RE: Final[Pattern[str]] = re.compile(r"^GB\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")
_BARCODE_WIDTH_RE: Final[Pattern[str]] = re.compile(r"^BY\s*(\d+)")
_CODE128_RE: Final[Pattern[str]] = re.compile(r"^BC[NRIB]?\s*,\s*(\d+)\s*,?\s*(\w*)")
_RECALL_RE: Final[Pattern[str]] = re.compile(r"^XF(.*)$", re.DOTALL)


def parse_command(raw: str) -> Command:
    """
    Classify one command body (the text after a ``^``).

    Keywords are case-sensitive prefixes. Anything that does not match a
    recognised shape is returned as UnknownCommand.
    """
    if raw.startswith("FD"):
        return FieldData(raw[2:].strip())

    m = _ORIGIN_RE.match(raw)
    if m:
        return FieldOrigin(int(m.group(1)), int(m.group(2)))

    m = _NUMBER_RE.match(raw)
    if m:
        return FieldNumber(int(m.group(1)))

    if _SEPARATOR_RE.match(raw):
        return FieldSeparator()

    if _REVERSE_RE.match(raw):
        return FieldReverse()

    m = _FONT_RE.match(raw)
    if m:
        return FontCommand(int(m.group(1)), int(m.group(2)))

    m = _BOX_RE.match(raw)
    if m:
        return GraphicBox(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _BARCODE_WIDTH_RE.match(raw)
    if m:
        return BarcodeWidth(int(m.group(1)))

    m = _CODE128_RE.match(raw)
    if m:
        return Code128(int(m.group(1)), m.group(2) or "Y")

    m = _RECALL_RE.match(raw)
    if m:
        return RecallFormat(m.group(1).strip())

    return UnknownCommand(raw)


def tokenize(zpl: str) -> List[Command]:
    """Split ``zpl`` on the control prefix and classify every non-empty piece."""
    commands = [parse_command(piece) for piece in zpl.split(CONTROL_PREFIX) if piece]
    logger.debug("Tokenized %d commands", len(commands))
    return commands


def template_section(commands: Sequence[Command]) -> List[Command]:
    """Commands before the first ^XF marker (all of them if there is none)."""
    for index, command in enumerate(commands):
        if isinstance(command, RecallFormat):
            return list(commands[:index])
    return list(commands)
