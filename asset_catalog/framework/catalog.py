"""In-memory model of an asset catalog.

The tree mirrors the on-disk layout: a Catalog owns a Container of Groups
(namespace directories) and ImageSets (`<name>.imageset` directories). Nodes
are created lazily the first time a name is resolved and are populated from
an existing Contents.json when one is present, so a rebuild starts from the
previous run's metadata.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from asset_catalog.framework.contents import contents_path, read_contents
from asset_catalog.framework.errors import (
    FilesystemError,
    InputValidationError,
    MetadataReadError,
)

DEFAULT_AUTHOR = "asset_catalog"
DEFAULT_VERSION = 1

CATALOG_EXTENSION = ".xcassets"
IMAGESET_EXTENSION = ".imageset"
APP_ICON_DIRNAME = "AppIcon.appiconset"


@dataclass(frozen=True)
class CatalogInfo:
    """Provenance stamp written into every Contents.json."""

    author: str = DEFAULT_AUTHOR
    version: int = DEFAULT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {"author": self.author, "version": self.version}

    @classmethod
    def from_mapping(cls, value: Any, *, source: str) -> "CatalogInfo":
        if not isinstance(value, Mapping):
            raise MetadataReadError(f"{source}: info must be an object", path=source)
        author = value.get("author", "")
        version = value.get("version", 0)
        if not isinstance(author, str):
            raise MetadataReadError(f"{source}: info.author must be a string", path=source)
        if isinstance(version, bool) or not isinstance(version, int):
            raise MetadataReadError(f"{source}: info.version must be an integer", path=source)
        return cls(author=author, version=version)


# (attribute, JSON key) in the order they are written.
_IMAGE_FIELDS: tuple[tuple[str, str], ...] = (
    ("filename", "filename"),
    ("size", "size"),
    ("idiom", "idiom"),
    ("scale", "scale"),
    ("subtype", "subtype"),
    ("screen_width", "screen-width"),
    ("width_class", "width-class"),
    ("height_class", "height-class"),
    ("unassigned", "unassigned"),
    ("alignment_insets", "alignment-insets"),
    ("memory", "memory"),
    ("graphics_feature_set", "graphics-feature-set"),
)


@dataclass
class Image:
    """One derived raster described by an image set's Contents.json."""

    filename: str
    size: str = ""
    idiom: str = ""
    scale: str = ""
    subtype: str = ""
    screen_width: str = ""
    width_class: str = ""
    height_class: str = ""
    unassigned: bool = False
    alignment_insets: dict[str, Any] = field(default_factory=dict)
    memory: str = ""
    graphics_feature_set: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"filename": self.filename}
        for attr, key in _IMAGE_FIELDS[1:]:
            value = getattr(self, attr)
            if value:
                payload[key] = value
        return payload

    @classmethod
    def from_mapping(cls, value: Any, *, source: str) -> "Image":
        if not isinstance(value, Mapping):
            raise MetadataReadError(f"{source}: image entries must be objects", path=source)
        kwargs: dict[str, Any] = {}
        for attr, key in _IMAGE_FIELDS:
            if key not in value:
                continue
            raw = value[key]
            if attr == "unassigned":
                if not isinstance(raw, bool):
                    raise MetadataReadError(f"{source}: {key} must be a boolean", path=source)
            elif attr == "alignment_insets":
                if not isinstance(raw, Mapping):
                    raise MetadataReadError(f"{source}: {key} must be an object", path=source)
                raw = dict(raw)
            elif not isinstance(raw, str):
                raise MetadataReadError(f"{source}: {key} must be a string", path=source)
            kwargs[attr] = raw
        if not kwargs.get("filename"):
            # Xcode leaves filename out for empty slots; keep the slot so the
            # count check sees it, the missing file makes it stale anyway.
            kwargs["filename"] = ""
        return cls(**kwargs)


def _parse_tags(properties: Any, *, source: str) -> list[str]:
    if properties is None:
        return []
    if not isinstance(properties, Mapping):
        raise MetadataReadError(f"{source}: properties must be an object", path=source)
    tags = properties.get("on-demand-resource-tags", [])
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise MetadataReadError(
            f"{source}: on-demand-resource-tags must be a list of strings", path=source
        )
    return list(tags)


@dataclass(eq=False)
class ImageSet:
    name: str
    directory: Path
    info: CatalogInfo = field(default_factory=CatalogInfo)
    on_demand_resource_tags: list[str] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)

    @classmethod
    def load(cls, name: str, directory: str | Path, *, default_info: CatalogInfo) -> "ImageSet":
        """Create the node for `directory`, reading its Contents.json if it exists."""

        image_set = cls(name=name, directory=Path(directory))
        payload = read_contents(image_set.directory)
        if payload is None:
            image_set.info = default_info
            return image_set

        source = str(contents_path(image_set.directory))
        image_set.info = CatalogInfo.from_mapping(payload.get("info", {}), source=source)
        image_set.on_demand_resource_tags = _parse_tags(payload.get("properties"), source=source)
        images = payload.get("images", [])
        if not isinstance(images, list):
            raise MetadataReadError(f"{source}: images must be a list", path=source)
        image_set.images = [Image.from_mapping(entry, source=source) for entry in images]
        return image_set

    def to_contents(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"info": self.info.to_dict()}
        if self.on_demand_resource_tags:
            payload["properties"] = {"on-demand-resource-tags": list(self.on_demand_resource_tags)}
        payload["images"] = [image.to_dict() for image in self.images]
        return payload


class Container:
    """Named children of a catalog or group."""

    def __init__(self, directory: str | Path, *, default_info: CatalogInfo):
        self.directory = Path(directory)
        self.default_info = default_info
        self.groups: dict[str, Group] = {}
        self.image_sets: dict[str, ImageSet] = {}

    def resolve_group(self, name: str) -> "Group":
        existing = self.groups.get(name)
        if existing is not None:
            return existing
        _check_name(name)
        group = Group.load(name, self.directory / name, default_info=self.default_info)
        self.groups[name] = group
        return group

    def resolve_image_set(self, name: str) -> ImageSet:
        existing = self.image_sets.get(name)
        if existing is not None:
            return existing
        _check_name(name)
        image_set = ImageSet.load(
            name,
            self.directory / f"{name}{IMAGESET_EXTENSION}",
            default_info=self.default_info,
        )
        self.image_sets[name] = image_set
        return image_set

    def discover(self) -> None:
        """Populate children from whatever a previous build left on disk."""

        try:
            entries = sorted(p for p in self.directory.iterdir() if p.is_dir())
        except FileNotFoundError:
            return
        except OSError as exc:
            raise FilesystemError(f"{self.directory}: failed to list: {exc}", path=self.directory) from exc

        for entry in entries:
            if entry.name.endswith(IMAGESET_EXTENSION):
                self.resolve_image_set(entry.name[: -len(IMAGESET_EXTENSION)])
            elif entry.suffix == ".appiconset":
                continue
            elif contents_path(entry).is_file():
                self.resolve_group(entry.name).container.discover()


def _check_name(name: str) -> None:
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise InputValidationError(f"invalid node name: {name!r}")


@dataclass(eq=False)
class Group:
    name: str
    container: Container
    info: CatalogInfo = field(default_factory=CatalogInfo)
    provides_namespace: bool = True
    on_demand_resource_tags: list[str] = field(default_factory=list)

    @property
    def directory(self) -> Path:
        return self.container.directory

    @classmethod
    def load(cls, name: str, directory: str | Path, *, default_info: CatalogInfo) -> "Group":
        group = cls(name=name, container=Container(directory, default_info=default_info))
        payload = read_contents(group.directory)
        if payload is None:
            group.info = default_info
            return group

        source = str(contents_path(group.directory))
        group.info = CatalogInfo.from_mapping(payload.get("info", {}), source=source)
        properties = payload.get("properties")
        group.on_demand_resource_tags = _parse_tags(properties, source=source)
        provides = (properties or {}).get("provides-namespace", False)
        if not isinstance(provides, bool):
            raise MetadataReadError(f"{source}: provides-namespace must be a boolean", path=source)
        group.provides_namespace = provides
        return group

    def resolve_group(self, name: str) -> "Group":
        return self.container.resolve_group(name)

    def resolve_image_set(self, name: str) -> ImageSet:
        return self.container.resolve_image_set(name)

    def to_contents(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        if self.on_demand_resource_tags:
            properties["on-demand-resource-tags"] = list(self.on_demand_resource_tags)
        properties["provides-namespace"] = self.provides_namespace
        return {"info": self.info.to_dict(), "properties": properties}


class Catalog:
    """Root of the tree: the `<name>.xcassets` directory."""

    def __init__(self, directory: str | Path, *, default_info: CatalogInfo | None = None):
        self.directory = Path(directory)
        self.name = self.directory.name[: -len(CATALOG_EXTENSION)]
        self.default_info = default_info or CatalogInfo()
        self.info = self.default_info
        self.container = Container(self.directory, default_info=self.default_info)
        self.app_icon: ImageSet | None = None

    @classmethod
    def open(cls, directory: str | Path, *, default_info: CatalogInfo | None = None) -> "Catalog":
        """Open (or start) the catalog at `directory`.

        The directory must be named `*.xcassets`. It does not have to exist
        yet; it is created on write.
        """

        path = Path(directory)
        if not path.name.endswith(CATALOG_EXTENSION) or path.name == CATALOG_EXTENSION:
            raise InputValidationError(
                f"{path}: not a catalog folder (must end in {CATALOG_EXTENSION})", path=path
            )
        try:
            exists = path.exists()
        except OSError as exc:
            raise FilesystemError(f"{path}: {exc}", path=path) from exc
        if exists and not path.is_dir():
            raise InputValidationError(f"{path}: not a directory", path=path)

        catalog = cls(path, default_info=default_info)
        payload = read_contents(path)
        if payload is not None:
            catalog.info = CatalogInfo.from_mapping(
                payload.get("info", {}), source=str(contents_path(path))
            )
        return catalog

    @classmethod
    def load(cls, directory: str | Path, *, default_info: CatalogInfo | None = None) -> "Catalog":
        """Open a catalog and read its entire persisted tree."""

        catalog = cls.open(directory, default_info=default_info)
        catalog.container.discover()
        if (catalog.directory / APP_ICON_DIRNAME).is_dir():
            catalog.resolve_app_icon()
        return catalog

    @property
    def groups(self) -> dict[str, Group]:
        return self.container.groups

    @property
    def image_sets(self) -> dict[str, ImageSet]:
        return self.container.image_sets

    def resolve_group(self, name: str) -> Group:
        return self.container.resolve_group(name)

    def resolve_image_set(self, name: str) -> ImageSet:
        return self.container.resolve_image_set(name)

    def resolve_app_icon(self) -> ImageSet:
        if self.app_icon is None:
            self.app_icon = ImageSet.load(
                "AppIcon",
                self.directory / APP_ICON_DIRNAME,
                default_info=self.default_info,
            )
        return self.app_icon

    def to_contents(self) -> dict[str, Any]:
        return {"info": self.info.to_dict()}

    def iter_groups(self) -> Iterator[tuple[str, Group]]:
        """Yield (relative path, group) for every group, depth first."""

        def walk(container: Container, prefix: str) -> Iterator[tuple[str, Group]]:
            for name, group in container.groups.items():
                rel = f"{prefix}{name}"
                yield rel, group
                yield from walk(group.container, rel + "/")

        yield from walk(self.container, "")

    def iter_image_sets(self) -> Iterator[tuple[str, ImageSet]]:
        """Yield (relative path, image set) for every image set, icon set first."""

        if self.app_icon is not None:
            yield APP_ICON_DIRNAME, self.app_icon
        for name, image_set in self.container.image_sets.items():
            yield name, image_set
        for rel, group in self.iter_groups():
            for name, image_set in group.container.image_sets.items():
                yield f"{rel}/{name}", image_set
