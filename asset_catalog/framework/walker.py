from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from asset_catalog.framework.catalog import Catalog, Container, Group
from asset_catalog.framework.errors import (
    AssetCatalogError,
    FilesystemError,
    InputValidationError,
    SourceParseError,
)
from asset_catalog.framework.generation import GenerationPipeline, inspect_svg

SVG_EXTENSION = ".svg"


@dataclass(frozen=True)
class WalkFailure:
    path: str
    error: AssetCatalogError


def _raise_walk_error(exc: OSError) -> None:
    raise FilesystemError(f"{exc.filename}: failed to list: {exc}", path=exc.filename) from exc


class SVGWalker:
    """Mirror a directory of SVGs into a catalog.

    Each `a/b/name.svg` under `source_dir` resolves groups `a` then `b` from
    the catalog root and an image set `name` inside `b`. Only stale sources
    get new images queued on the pipeline.
    """

    def __init__(
        self,
        source_dir: str | os.PathLike[str],
        catalog: Catalog,
        pipeline: GenerationPipeline,
        *,
        sanitize_paths: bool = False,
        force_update: bool = False,
        keep_going: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.source_dir = Path(source_dir)
        self.catalog = catalog
        self.pipeline = pipeline
        self.sanitize_paths = sanitize_paths
        self.force_update = force_update
        self.keep_going = keep_going
        self.logger = logger
        self.seen = 0
        self.updated = 0

    def sanitized(self, name: str) -> str:
        if not self.sanitize_paths:
            return name
        return name.replace(" ", "_")

    def walk(self) -> list[WalkFailure]:
        """Add every SVG under `source_dir`, in sorted order.

        Without `keep_going` the first failing source aborts the walk. With it,
        sources that are unreadable or malformed are logged and returned, and
        the rest of the tree is still added.
        """

        if not self.source_dir.is_dir():
            raise InputValidationError(f"{self.source_dir}: input is not a directory", path=self.source_dir)

        failures: list[WalkFailure] = []
        for dirpath, dirnames, filenames in os.walk(self.source_dir, onerror=_raise_walk_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if Path(filename).suffix != SVG_EXTENSION:
                    continue
                path = Path(dirpath) / filename
                try:
                    self.add(path.relative_to(self.source_dir))
                except (SourceParseError, FilesystemError) as exc:
                    if not self.keep_going:
                        raise
                    if self.logger:
                        self.logger.error("Skipping %s: %s", path, exc)
                    failures.append(WalkFailure(str(path), exc))
        return failures

    def add(self, relative: str | os.PathLike[str]) -> bool:
        """Add one source given relative to `source_dir`. Returns True if it was stale.

        Groups first created for a source that then fails are dropped again,
        so a failed source leaves no empty nodes behind.
        """

        rel = Path(relative)
        holder: Catalog | Group = self.catalog
        created: list[tuple[Container, str]] = []
        for part in rel.parts[:-1]:
            name = self.sanitized(part)
            if name not in holder.container.groups:
                created.append((holder.container, name))
            holder = holder.resolve_group(name)
        try:
            return self.add_svg(holder, self.source_dir / rel)
        except (SourceParseError, FilesystemError):
            for container, name in reversed(created):
                container.groups.pop(name, None)
            raise

    def add_svg(self, holder: Catalog | Group, path: str | os.PathLike[str]) -> bool:
        path = Path(path)
        if path.suffix != SVG_EXTENSION:
            raise InputValidationError(f"{path}: not an svg file", path=path)

        stem = self.sanitized(path.stem)
        fresh = stem not in holder.container.image_sets
        image_set = holder.resolve_image_set(stem)
        self.seen += 1
        try:
            parsed = inspect_svg(
                image_set,
                path,
                expected=self.pipeline.universal_count,
                force=self.force_update,
                logger=self.logger,
            )
        except (SourceParseError, FilesystemError):
            if fresh:
                holder.container.image_sets.pop(stem, None)
            raise
        if not parsed.needs_regeneration:
            return False

        self.pipeline.universal(image_set, path, stem=stem, height=parsed.height, width=parsed.width)
        self.updated += 1
        return True

    def add_app_icon(self, path: str | os.PathLike[str]) -> bool:
        """Use `path` as the catalog's app icon source."""

        path = Path(path)
        if path.suffix != SVG_EXTENSION:
            raise InputValidationError(f"{path}: not an svg file", path=path)

        fresh = self.catalog.app_icon is None
        image_set = self.catalog.resolve_app_icon()
        self.seen += 1
        try:
            parsed = inspect_svg(
                image_set,
                path,
                expected=self.pipeline.app_icon_count,
                force=self.force_update,
                logger=self.logger,
            )
        except (SourceParseError, FilesystemError):
            if fresh:
                self.catalog.app_icon = None
            raise
        if not parsed.needs_regeneration:
            return False

        self.pipeline.app_icon(image_set, path, stem=self.sanitized(path.stem))
        self.updated += 1
        return True
