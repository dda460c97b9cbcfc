"""Turn a stale SVG into image descriptors plus the rasterizer calls behind them.

Deciding and doing are kept apart: the pipeline only records what an image
set should contain and queues a BuildTask per raster. Nothing is rendered
until the writer drains the queue.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from asset_catalog.framework.appicon import APP_ICON_SLOTS, IconSlot
from asset_catalog.framework.catalog import Image, ImageSet
from asset_catalog.framework.converters import Converter, pixel_size
from asset_catalog.framework.staleness import needs_update
from asset_catalog.framework.svg import read_dimensions

UNIVERSAL_SCALES: tuple[int, ...] = (1, 2, 3)
UNIVERSAL_IDIOM = "universal"


@dataclass(frozen=True)
class ParsedSVG:
    needs_regeneration: bool
    height: float = 0.0
    width: float = 0.0


def inspect_svg(
    image_set: ImageSet,
    source: str | os.PathLike[str],
    *,
    expected: int,
    force: bool = False,
    logger: logging.Logger | None = None,
) -> ParsedSVG:
    """Run the staleness check and, only when stale, read the SVG's size."""

    stale = needs_update(
        source,
        image_set.images,
        image_set.directory,
        expected=expected,
        force=force,
        logger=logger,
    )
    if not stale:
        return ParsedSVG(needs_regeneration=False)
    height, width = read_dimensions(source)
    return ParsedSVG(needs_regeneration=True, height=height, width=width)


@dataclass(frozen=True)
class BuildTask:
    """One pending rasterizer call."""

    scale: int
    height: float
    width: float
    source: str
    output: Path
    converter: Converter = field(compare=False, repr=False)

    @property
    def pixel_size(self) -> tuple[int, int]:
        return pixel_size(self.scale, self.height, self.width)

    def run(self, logger: logging.Logger | None = None) -> None:
        if logger:
            logger.info("Generating %s", self.output)
        self.converter.convert(self.scale, self.height, self.width, self.source, str(self.output))


class TaskQueue:
    """Pending build tasks keyed by the directory of the image set that owns them."""

    def __init__(self) -> None:
        self._tasks: dict[Path, list[BuildTask]] = {}

    def replace(self, image_set: ImageSet, tasks: Sequence[BuildTask]) -> None:
        self._tasks[image_set.directory] = list(tasks)

    def get(self, image_set: ImageSet) -> list[BuildTask]:
        return list(self._tasks.get(image_set.directory, ()))

    def pop(self, image_set: ImageSet) -> list[BuildTask]:
        return self._tasks.pop(image_set.directory, [])

    def __iter__(self) -> Iterator[BuildTask]:
        for tasks in self._tasks.values():
            yield from tasks

    def __len__(self) -> int:
        return sum(len(tasks) for tasks in self._tasks.values())


def icon_size_label(size: float) -> str:
    label = f"{size:.1f}".removesuffix(".0")
    return f"{label}x{label}"


class GenerationPipeline:
    def __init__(
        self,
        converter: Converter,
        *,
        icon_slots: Sequence[IconSlot] = APP_ICON_SLOTS,
        logger: logging.Logger | None = None,
    ):
        self.converter = converter
        self.icon_slots = tuple(icon_slots)
        self.logger = logger
        self.pending = TaskQueue()

    @property
    def universal_count(self) -> int:
        return len(UNIVERSAL_SCALES)

    @property
    def app_icon_count(self) -> int:
        return len(self.icon_slots)

    def _task(self, image_set: ImageSet, scale: int, height: float, width: float, source: str, filename: str) -> BuildTask:
        return BuildTask(
            scale=scale,
            height=height,
            width=width,
            source=source,
            output=image_set.directory / filename,
            converter=self.converter,
        )

    def _replace(self, image_set: ImageSet, images: list[Image], tasks: list[BuildTask]) -> None:
        # Tasks queued for the previous image list are dropped with it.
        image_set.images = images
        self.pending.replace(image_set, tasks)
        if self.logger:
            self.logger.debug("%s: queued %d images", image_set.directory, len(tasks))

    def universal(
        self,
        image_set: ImageSet,
        source: str | os.PathLike[str],
        *,
        stem: str,
        height: float,
        width: float,
    ) -> list[Image]:
        """Describe the 1x/2x/3x universal rasters for `source`."""

        source = str(source)
        images: list[Image] = []
        tasks: list[BuildTask] = []
        for scale in UNIVERSAL_SCALES:
            filename = f"{stem}-{scale}x.png"
            images.append(Image(filename=filename, idiom=UNIVERSAL_IDIOM, scale=f"{scale}x"))
            tasks.append(self._task(image_set, scale, height, width, source, filename))
        self._replace(image_set, images, tasks)
        return images

    def app_icon(self, image_set: ImageSet, source: str | os.PathLike[str], *, stem: str) -> list[Image]:
        """Describe one raster per icon slot. The slot size replaces the SVG's own size."""

        source = str(source)
        images: list[Image] = []
        tasks: list[BuildTask] = []
        for slot in self.icon_slots:
            filename = f"{stem}-{slot.idiom}-@{slot.scale}-{int(slot.size)}.png"
            images.append(
                Image(
                    filename=filename,
                    size=icon_size_label(slot.size),
                    idiom=slot.idiom,
                    scale=f"{slot.scale}x",
                )
            )
            tasks.append(self._task(image_set, slot.scale, slot.size, slot.size, source, filename))
        self._replace(image_set, images, tasks)
        return images
