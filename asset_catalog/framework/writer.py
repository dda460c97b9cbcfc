"""Persist a catalog tree and run its queued rasterizer calls.

Writing is all-or-nothing per run: the first failing task aborts the write.
Files already produced stay on disk; the next run's staleness check picks up
whatever is missing or out of date.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from asset_catalog.framework.catalog import APP_ICON_DIRNAME, Catalog, Container, Group, ImageSet
from asset_catalog.framework.contents import write_contents
from asset_catalog.framework.errors import AssetCatalogError, FilesystemError
from asset_catalog.framework.generation import BuildTask, TaskQueue


def _ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"{directory}: failed to create directory: {exc}", path=directory) from exc


class CatalogWriter:
    """Writes Contents.json for every node and drains the task queue.

    With `jobs > 1` the queued tasks are run up front on a thread pool, one
    image set per job, before any metadata is written. Image sets never share
    a directory, so jobs never write the same file. Converters that are not
    safe for concurrent use force sequential execution.
    """

    def __init__(self, tasks: TaskQueue, *, jobs: int = 1, logger: logging.Logger | None = None):
        if jobs < 1:
            raise ValueError("jobs must be >= 1")
        self.tasks = tasks
        self.jobs = jobs
        self.logger = logger
        self.generated = 0
        self.metadata_written = 0

    def write(self, catalog: Catalog) -> None:
        if self._parallel():
            self._run_parallel(catalog)

        _ensure_dir(catalog.directory)
        self._write_contents(catalog.directory, catalog.to_contents())
        if catalog.app_icon is not None:
            try:
                self.write_image_set(catalog.app_icon)
            except AssetCatalogError as exc:
                raise exc.with_context(APP_ICON_DIRNAME) from exc
        self._write_children(catalog.container)

    def write_group(self, group: Group) -> None:
        _ensure_dir(group.directory)
        self._write_contents(group.directory, group.to_contents())
        self._write_children(group.container)

    def write_image_set(self, image_set: ImageSet) -> None:
        _ensure_dir(image_set.directory)
        self.generated += self._execute(self.tasks.pop(image_set))
        self._write_contents(image_set.directory, image_set.to_contents())

    def _write_children(self, container: Container) -> None:
        for name, group in container.groups.items():
            try:
                self.write_group(group)
            except AssetCatalogError as exc:
                raise exc.with_context(name) from exc

        for name, image_set in container.image_sets.items():
            try:
                self.write_image_set(image_set)
            except AssetCatalogError as exc:
                raise exc.with_context(name) from exc

    def _write_contents(self, directory: Path, payload: dict) -> None:
        path = write_contents(directory, payload)
        self.metadata_written += 1
        if self.logger:
            self.logger.debug("Wrote %s", path)

    def _execute(self, tasks: list[BuildTask]) -> int:
        for task in tasks:
            try:
                task.run(self.logger)
            except OSError as exc:
                raise FilesystemError(f"{task.source}: {exc}", path=task.output) from exc
        return len(tasks)

    def _parallel(self) -> bool:
        if self.jobs == 1:
            return False
        unsafe = [task for task in self.tasks if not getattr(task.converter, "concurrency_safe", False)]
        if unsafe:
            if self.logger:
                self.logger.warning("Converter is not safe for concurrent use; generating sequentially")
            return False
        return True

    def _run_parallel(self, catalog: Catalog) -> None:
        batches: list[tuple[str, ImageSet, list[BuildTask]]] = []
        for rel, image_set in catalog.iter_image_sets():
            tasks = self.tasks.pop(image_set)
            if tasks:
                batches.append((rel.replace("/", ":"), image_set, tasks))
        if not batches:
            return

        if self.logger:
            self.logger.info("Generating %d image sets on %d workers", len(batches), self.jobs)

        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            futures: dict[Future[int], str] = {}
            for context, image_set, tasks in batches:
                futures[executor.submit(self._run_batch, image_set, tasks)] = context

            for future in as_completed(futures):
                error = future.exception()
                if error is None:
                    self.generated += future.result()
                    continue
                # Queued batches are dropped; running ones finish on pool exit.
                for other in futures:
                    other.cancel()
                if isinstance(error, AssetCatalogError):
                    raise error.with_context(futures[future]) from error
                raise error

    def _run_batch(self, image_set: ImageSet, tasks: list[BuildTask]) -> int:
        _ensure_dir(image_set.directory)
        return self._execute(tasks)
