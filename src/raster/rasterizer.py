"""
RU: Растеризация SVG в PNG: внешняя утилита rsvg-convert или библиотека cairosvg, с цепочкой запасных вариантов.
EN: SVG to PNG rasterization strategies with an explicit fallback chain.

Strategies:
    - RsvgConvertRasterizer: ``rsvg-convert`` command-line tool via subprocess
    - CairoSvgRasterizer: ``cairosvg`` library (needs the cairo system library)

A RasterizerChain tries its strategies in order and only fails when every one
of them failed. The chain is built per conversion context with
:func:`select_rasterizer` and passed explicitly; availability is never cached
in module globals.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, Final, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

__all__ = [
    "RasterizationError",
    "RasterizerUnavailableError",
    "Rasterizer",
    "RsvgConvertRasterizer",
    "CairoSvgRasterizer",
    "RasterizerChain",
    "DEFAULT_RASTERIZERS",
    "select_rasterizer",
]

DEFAULT_RASTERIZERS: Final[List[str]] = ["rsvg-convert", "cairosvg"]


class RasterizationError(RuntimeError):
    """SVG could not be rasterized by a strategy (or by any, from a chain)."""


class RasterizerUnavailableError(RasterizationError):
    """The tool or library behind a strategy is not installed."""


class Rasterizer(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def rasterize(self, svg: str, width: int, height: int) -> bytes: ...


class RsvgConvertRasterizer:
    """
    Rasterize with the ``rsvg-convert`` tool.

    The SVG and PNG live in a temporary directory removed on every exit path.

    Args:
        executable: Tool name or path.
        timeout: Seconds before the tool is killed.
    """

    name = "rsvg-convert"

    def __init__(self, executable: str = "rsvg-convert", timeout: float = 60.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        if not self.is_available():
            raise RasterizerUnavailableError(f"{self.executable} not found on PATH")

        with tempfile.TemporaryDirectory(prefix="zpl_") as tmp:
            svg_path = Path(tmp) / "label.svg"
            png_path = Path(tmp) / "label.png"
            svg_path.write_text(svg, encoding="utf-8")

            command = [
                self.executable,
                "--format=png",
                f"--width={width}",
                f"--height={height}",
                "--background-color=white",
                str(svg_path),
                "-o",
                str(png_path),
            ]
            logger.debug("Running %s", " ".join(command))
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                raise RasterizationError(f"{self.executable} could not run: {e}") from e

            if result.returncode != 0:
                output = (result.stderr or "") + (result.stdout or "")
                raise RasterizationError(f"rsvg-convert failed: {output.strip()}")

            try:
                return png_path.read_bytes()
            except OSError as e:
                raise RasterizationError("Failed to read PNG from temporary file") from e


class CairoSvgRasterizer:
    """Rasterize in-process with cairosvg."""

    name = "cairosvg"

    @staticmethod
    def _load() -> ModuleType:
        try:
            import cairosvg
        except (ImportError, OSError) as e:
            # cairocffi raises OSError when libcairo itself is missing
            raise RasterizerUnavailableError(f"cairosvg is not usable: {e}") from e
        return cairosvg

    def is_available(self) -> bool:
        try:
            self._load()
        except RasterizerUnavailableError:
            return False
        return True

    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        cairosvg = self._load()
        try:
            png = cairosvg.svg2png(
                bytestring=svg.encode("utf-8"),
                output_width=width,
                output_height=height,
                background_color="white",
            )
        except Exception as e:
            raise RasterizationError(f"cairosvg failed: {e}") from e
        if not png:
            raise RasterizationError("cairosvg returned no data")
        return png


class RasterizerChain:
    """Try strategies in order, falling back on failure."""

    name = "chain"

    def __init__(self, strategies: Sequence[Rasterizer]) -> None:
        if not strategies:
            raise ValueError("RasterizerChain needs at least one strategy")
        self.strategies = list(strategies)

    def is_available(self) -> bool:
        return any(s.is_available() for s in self.strategies)

    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        failures: List[str] = []
        for strategy in self.strategies:
            try:
                png = strategy.rasterize(svg, width, height)
            except RasterizerUnavailableError as e:
                logger.debug("Rasterizer %s unavailable: %s", strategy.name, e)
                failures.append(f"{strategy.name}: {e}")
                continue
            except RasterizationError as e:
                logger.warning("Rasterizer %s failed, falling back: %s", strategy.name, e)
                failures.append(f"{strategy.name}: {e}")
                continue
            logger.debug("Rasterized %dx%d with %s", width, height, strategy.name)
            return png

        raise RasterizationError("All rasterizers failed: " + "; ".join(failures))


_REGISTRY: Final[Dict[str, Callable[[], Rasterizer]]] = {
    RsvgConvertRasterizer.name: RsvgConvertRasterizer,
    CairoSvgRasterizer.name: CairoSvgRasterizer,
}


def select_rasterizer(names: Optional[Sequence[str]] = None) -> RasterizerChain:
    """
    Build a fallback chain from strategy names.

    Args:
        names: Strategy names in preference order; defaults to
            ``DEFAULT_RASTERIZERS``.

    Raises:
        ValueError: For an unknown strategy name.
    """
    chosen = list(names) if names is not None else list(DEFAULT_RASTERIZERS)
    strategies: List[Rasterizer] = []
    for name in chosen:
        factory = _REGISTRY.get(name)
        if factory is None:
            raise ValueError(
                f"Unknown rasterizer {name!r}; expected one of {sorted(_REGISTRY)}"
            )
        strategies.append(factory())
    return RasterizerChain(strategies)
