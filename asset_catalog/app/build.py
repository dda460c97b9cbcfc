"""Run one catalog build: walk the sources, decide what is stale, write the catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from asset_catalog.framework.catalog import Catalog
from asset_catalog.framework.config import BuildConfig
from asset_catalog.framework.converters import Converter, make_converter
from asset_catalog.framework.errors import FilesystemError, SourceParseError
from asset_catalog.framework.generation import GenerationPipeline
from asset_catalog.framework.walker import SVGWalker, WalkFailure
from asset_catalog.framework.writer import CatalogWriter


@dataclass
class BuildResult:
    catalog: Catalog
    sources: int = 0
    updated: int = 0
    generated: int = 0
    metadata_written: int = 0
    failures: list[WalkFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def run_build(
    cfg: BuildConfig,
    *,
    converter: Converter | None = None,
    logger: logging.Logger | None = None,
) -> BuildResult:
    converter = converter or make_converter(cfg.converter)
    catalog = Catalog.open(cfg.output_dir, default_info=cfg.catalog_info)
    pipeline = GenerationPipeline(converter, logger=logger)
    walker = SVGWalker(
        cfg.source_dir,
        catalog,
        pipeline,
        sanitize_paths=cfg.sanitize,
        force_update=cfg.force,
        keep_going=cfg.keep_going,
        logger=logger,
    )

    if logger:
        logger.info("Adding SVGs from %s to %s", cfg.source_dir, catalog.directory)
    failures = walker.walk()

    if cfg.app_icon:
        try:
            walker.add_app_icon(cfg.app_icon)
        except (SourceParseError, FilesystemError) as exc:
            if not cfg.keep_going:
                raise
            if logger:
                logger.error("Skipping app icon %s: %s", cfg.app_icon, exc)
            failures.append(WalkFailure(cfg.app_icon, exc))

    if logger:
        logger.info(
            "%d of %d sources need regeneration (%d images queued)",
            walker.updated,
            walker.seen,
            len(pipeline.pending),
        )

    writer = CatalogWriter(pipeline.pending, jobs=cfg.jobs, logger=logger)
    writer.write(catalog)

    if logger:
        logger.info(
            "Wrote %d metadata files and generated %d images",
            writer.metadata_written,
            writer.generated,
        )

    return BuildResult(
        catalog=catalog,
        sources=walker.seen,
        updated=walker.updated,
        generated=writer.generated,
        metadata_written=writer.metadata_written,
        failures=failures,
    )
