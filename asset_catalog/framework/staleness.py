from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from asset_catalog.framework.catalog import Image
from asset_catalog.framework.errors import FilesystemError


def needs_update(
    source: str | os.PathLike[str],
    images: Sequence[Image],
    directory: str | os.PathLike[str],
    *,
    expected: int,
    force: bool = False,
    logger: logging.Logger | None = None,
) -> bool:
    """
    Decide whether the rasters recorded in `images` must be regenerated.

    Stale when forced, when the recorded count differs from `expected`, or
    when any recorded output under `directory` is missing or older than the
    source. A source that cannot be stat'ed raises FilesystemError: an
    unreadable source is not the same thing as an unchanged one.
    """

    if force:
        if logger:
            logger.debug("%s: forced update", source)
        return True
    if len(images) != expected:
        if logger:
            logger.debug("%s: %d recorded images, expected %d", source, len(images), expected)
        return True

    try:
        source_mtime = os.stat(source).st_mtime_ns
    except OSError as exc:
        raise FilesystemError(f"{source}: {exc}", path=source) from exc

    for image in images:
        if not image.filename:
            if logger:
                logger.debug("%s: %s slot has no output file", source, image.idiom or "image")
            return True
        output = Path(directory) / image.filename
        try:
            output_mtime = os.stat(output).st_mtime_ns
        except OSError:
            if logger:
                logger.debug("%s: missing output %s", source, output)
            return True
        if output_mtime < source_mtime:
            if logger:
                logger.debug("%s: output %s is older than its source", source, output)
            return True
    return False
