"""Vector document builder (SVG serialisation of label primitives)."""

from src.svg.builder import SvgBuilder

__all__ = ["SvgBuilder"]
