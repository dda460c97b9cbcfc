"""SVG to PNG rasterizers.

A converter renders one SVG at `scale` times its logical size into a PNG.
Pixel dimensions are `int(scale * height)` by `int(scale * width)`.

Backends:
  - Inkscape, invoked as an external CLI (the default).
  - CairoSVG, in-process.

Both fail loudly: a missing backend raises MissingToolError so callers can
decide whether to skip, anything else that goes wrong raises
ConversionError naming the source. Outputs are checked with Pillow so a
backend that silently writes the wrong size is caught here rather than by
Xcode.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from asset_catalog.framework.errors import ConversionError, InputValidationError, MissingToolError

INKSCAPE_MISSING_MESSAGE = (
    "inkscape not installed. inkscape (https://www.inkscape.org/) is needed to convert SVG files. "
    "Put it on PATH, set INKSCAPE_PATH, or set converter.binary."
)
CAIROSVG_MISSING_MESSAGE = (
    "cairosvg could not be loaded. Install it with `pip install asset-catalog[cairo]` "
    "and make sure the cairo library is available."
)


class Converter(Protocol):
    concurrency_safe: bool

    def convert(self, scale: int, height: float, width: float, source: str, output: str) -> None:
        ...


@dataclass(frozen=True)
class ConverterConfig:
    name: str = "inkscape"
    binary: str | None = None
    timeout_s: int = 120


def pixel_size(scale: int, height: float, width: float) -> tuple[int, int]:
    """Return (width_px, height_px) for a logical size at `scale`."""

    return int(scale * width), int(scale * height)


def verify_png(source: str, output: str, expected: tuple[int, int]) -> None:
    """Check that `output` is a PNG of exactly `expected` (width, height)."""

    path = Path(output)
    if not path.is_file():
        raise ConversionError(f"{source}: converter did not produce {output}", path=source)
    try:
        with Image.open(path) as im:
            fmt = im.format
            size = im.size
    except (OSError, UnidentifiedImageError) as exc:
        raise ConversionError(f"{source}: unreadable output {output}: {exc}", path=source) from exc
    if fmt != "PNG":
        raise ConversionError(f"{source}: expected PNG output, got {fmt}", path=source)
    if size != expected:
        raise ConversionError(
            f"{source}: expected {expected[0]}x{expected[1]} output, got {size[0]}x{size[1]}",
            path=source,
        )


def find_inkscape(explicit_path: str | None) -> str | None:
    """Locate the inkscape executable.

    Search order:
      1) explicit_path
      2) env var INKSCAPE_PATH
      3) PATH lookup
    """
    candidates: list[str] = []

    if explicit_path:
        candidates.append(explicit_path)

    env_path = os.environ.get("INKSCAPE_PATH")
    if env_path:
        candidates.append(env_path)

    for name in ["inkscape", "inkscape.exe", "inkscape.com"]:
        found = shutil.which(name)
        if found:
            candidates.append(found)

    for candidate in candidates:
        p = Path(candidate)
        if p.exists() and p.is_file():
            return str(p)
    return None


class InkscapeConverter:
    concurrency_safe = True

    def __init__(self, binary: str | None = None, *, timeout_s: int = 120):
        self.binary = binary
        self.timeout_s = timeout_s

    def convert(self, scale: int, height: float, width: float, source: str, output: str) -> None:
        binary = find_inkscape(self.binary)
        if not binary:
            raise MissingToolError(INKSCAPE_MISSING_MESSAGE)

        width_px, height_px = pixel_size(scale, height, width)
        cmd: list[str] = [
            binary,
            "--export-type=png",
            f"--export-filename={output}",
            f"--export-width={width_px}",
            f"--export-height={height_px}",
            source,
        ]
        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as exc:
            raise ConversionError(
                f"{source}: inkscape timed out after {self.timeout_s}s", path=source
            ) from exc
        except OSError as exc:
            raise ConversionError(f"{source}: failed to run inkscape: {exc}", path=source) from exc

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            stdout = (proc.stdout or "").strip()
            raise ConversionError(
                f"{source}: inkscape failed. "
                f"returncode={proc.returncode}. "
                f"stdout={stdout[-2000:]!r} stderr={stderr[-2000:]!r}",
                path=source,
            )
        verify_png(source, output, (width_px, height_px))


class CairoSvgConverter:
    concurrency_safe = True

    def convert(self, scale: int, height: float, width: float, source: str, output: str) -> None:
        try:
            import cairosvg
        except (ImportError, OSError) as exc:
            # cairocffi raises OSError when the native cairo library is absent.
            raise MissingToolError(CAIROSVG_MISSING_MESSAGE) from exc

        width_px, height_px = pixel_size(scale, height, width)
        try:
            cairosvg.svg2png(
                url=str(source),
                write_to=str(output),
                output_width=width_px,
                output_height=height_px,
            )
        except Exception as exc:  # noqa: BLE001
            raise ConversionError(f"{source}: cairosvg failed: {exc}", path=source) from exc
        verify_png(source, output, (width_px, height_px))


CONVERTERS = ("inkscape", "cairosvg")


def make_converter(config: ConverterConfig) -> Converter:
    if config.name == "inkscape":
        return InkscapeConverter(config.binary, timeout_s=config.timeout_s)
    if config.name == "cairosvg":
        return CairoSvgConverter()
    raise InputValidationError(
        f"Unknown converter: {config.name!r} (expected one of {', '.join(CONVERTERS)})"
    )
