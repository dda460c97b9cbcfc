"""Catalog model, staleness tracking, generation and serialization.

This package is independent of `asset_catalog.app` and the CLI (framework
boundary): it never configures logging or reads config files itself.
"""

from .catalog import Catalog, CatalogInfo, Container, Group, Image, ImageSet
from .errors import (
    AssetCatalogError,
    ConversionError,
    FilesystemError,
    InputValidationError,
    MetadataReadError,
    MissingToolError,
    SourceParseError,
)
from .generation import BuildTask, GenerationPipeline, TaskQueue
from .walker import SVGWalker, WalkFailure
from .writer import CatalogWriter

__all__ = [
    "AssetCatalogError",
    "BuildTask",
    "Catalog",
    "CatalogInfo",
    "CatalogWriter",
    "Container",
    "ConversionError",
    "FilesystemError",
    "GenerationPipeline",
    "Group",
    "Image",
    "ImageSet",
    "InputValidationError",
    "MetadataReadError",
    "MissingToolError",
    "SVGWalker",
    "SourceParseError",
    "TaskQueue",
    "WalkFailure",
]
