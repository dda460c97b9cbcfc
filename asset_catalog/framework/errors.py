"""Error taxonomy for catalog builds.

Every error carries a human readable message and, where one is known, the
filesystem path it concerns. Wrapping an error with node context keeps its
type so callers can still tell a missing rasterizer apart from a broken
source file after the error has bubbled up through the tree.
"""

from __future__ import annotations

import os


class AssetCatalogError(Exception):
    """Base class for all build failures."""

    def __init__(self, message: str, *, path: str | os.PathLike[str] | None = None):
        super().__init__(message)
        self.message = message
        self.path = None if path is None else str(path)

    def __str__(self) -> str:
        return self.message

    def with_context(self, context: str) -> "AssetCatalogError":
        return type(self)(f"{context}:{self.message}", path=self.path)


class InputValidationError(AssetCatalogError):
    """Bad arguments or configuration; raised before any work starts."""


class MetadataReadError(AssetCatalogError):
    """An existing Contents.json could not be read or parsed."""


class SourceParseError(AssetCatalogError):
    """An SVG source is malformed or declares unparsable dimensions."""


class MissingToolError(AssetCatalogError):
    """The configured rasterizer is not installed."""


class ConversionError(AssetCatalogError):
    """The rasterizer failed or produced something unexpected."""


class FilesystemError(AssetCatalogError):
    """A stat, read, or write under the catalog failed."""
