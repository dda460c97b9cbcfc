from __future__ import annotations

from asset_catalog.framework.catalog import APP_ICON_DIRNAME, IMAGESET_EXTENSION, Catalog, Container


def describe_catalog(catalog: Catalog) -> list[str]:
    """Render the persisted tree as indented lines, one per node."""

    lines = [f"{catalog.directory.name} (author={catalog.info.author}, version={catalog.info.version})"]
    if catalog.app_icon is not None:
        lines.append(f"  {APP_ICON_DIRNAME} [{len(catalog.app_icon.images)} images]")

    def walk(container: Container, depth: int) -> None:
        indent = "  " * depth
        for name, group in sorted(container.groups.items()):
            lines.append(f"{indent}{name}/")
            walk(group.container, depth + 1)
        for name, image_set in sorted(container.image_sets.items()):
            lines.append(f"{indent}{name}{IMAGESET_EXTENSION} [{len(image_set.images)} images]")

    walk(catalog.container, 1)
    return lines
