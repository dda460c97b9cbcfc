from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from asset_catalog.app.build import BuildResult, run_build
from asset_catalog.framework.config import BuildConfig
from asset_catalog.framework.errors import ConversionError


@dataclass(frozen=True)
class ConvertCall:
    scale: int
    height: float
    width: float
    source: str
    output: str


class RecordingConverter:
    """Stands in for Inkscape: records each call and writes a blank PNG of the requested size."""

    concurrency_safe = True

    def __init__(self, fail_on: str | None = None):
        self.calls: list[ConvertCall] = []
        self.fail_on = fail_on
        self._lock = threading.Lock()

    def convert(self, scale: int, height: float, width: float, source: str, output: str) -> None:
        with self._lock:
            self.calls.append(ConvertCall(scale, height, width, source, output))
        if self.fail_on and Path(output).name == self.fail_on:
            raise ConversionError(f"{source}: refused to render {self.fail_on}", path=source)
        size = (int(scale * width), int(scale * height))
        Image.new("RGBA", size, (0, 0, 0, 0)).save(output, format="PNG")

    def outputs(self) -> list[str]:
        return sorted(Path(call.output).name for call in self.calls)

    def reset(self) -> None:
        self.calls.clear()


def write_svg(path: Path, *, height: str | None = None, width: str | None = None, age_s: float = 100) -> Path:
    """Write a minimal SVG and backdate it so outputs written afterwards are newer."""

    attrs = ['xmlns="http://www.w3.org/2000/svg"']
    if height is not None:
        attrs.append(f'height="{height}"')
    if width is not None:
        attrs.append(f'width="{width}"')
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"<svg {' '.join(attrs)}><rect width=\"1\" height=\"1\"/></svg>", encoding="utf-8")
    stamp = time.time() - age_s
    os.utime(path, (stamp, stamp))
    return path


def touch(path: Path) -> None:
    """Give `path` a modification time newer than anything written so far."""

    stamp = time.time() + 100
    os.utime(path, (stamp, stamp))


def build(source_dir: Path, output_dir: Path, converter: RecordingConverter, **options) -> BuildResult:
    cfg = BuildConfig(source_dir=str(source_dir), output_dir=str(output_dir), **options)
    return run_build(cfg, converter=converter)

