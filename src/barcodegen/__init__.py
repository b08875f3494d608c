"""
barcodegen

Модуль для векторного кодирования линейных штрихкодов ^BC в примитивы SVG.

- Упрощённый Code 128 (набор B): фиксированная таблица шаблонов, старт/стоп без контрольного символа.
- Выход - список прямоугольников и необязательная строка интерпретации.

Public API:
    - Code128Encoder: кодировщик одного символа (class)
    - encode: чистая функция данные -> прямоугольники
    - effective_module_width: масштабирование ширины модуля ^BY

Примеры:
    >>> from src.barcodegen import Code128Encoder
    >>> bars = Code128Encoder("AB", module_width=2, height=80).bars(10, 10)
"""

from src.barcodegen.code128 import (
    CODE128_PATTERNS,
    START_PATTERN,
    STOP_PATTERN,
    BarGroup,
    Code128Encoder,
    effective_module_width,
    encode,
    pattern_for,
)

__all__ = [
    "CODE128_PATTERNS",
    "START_PATTERN",
    "STOP_PATTERN",
    "BarGroup",
    "Code128Encoder",
    "effective_module_width",
    "encode",
    "pattern_for",
]
