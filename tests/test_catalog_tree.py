import json
from pathlib import Path

import pytest

from asset_catalog.framework.catalog import Catalog, CatalogInfo, Group, Image, ImageSet
from asset_catalog.framework.errors import InputValidationError, MetadataReadError


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_open_rejects_wrong_extension(tmp_path):
    with pytest.raises(InputValidationError, match="not a catalog folder"):
        Catalog.open(tmp_path / "Assets")


def test_open_rejects_file(tmp_path):
    path = tmp_path / "Assets.xcassets"
    path.write_text("", encoding="utf-8")
    with pytest.raises(InputValidationError, match="not a directory"):
        Catalog.open(path)


def test_open_missing_directory_is_a_fresh_catalog(tmp_path):
    catalog = Catalog.open(tmp_path / "Assets.xcassets")
    assert catalog.name == "Assets"
    assert catalog.info == CatalogInfo()
    assert catalog.groups == {}
    assert catalog.image_sets == {}


def test_open_reads_existing_info(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    _write_json(directory / "Contents.json", {"info": {"author": "xcode", "version": 1}})
    catalog = Catalog.open(directory, default_info=CatalogInfo(author="someone-else", version=2))
    assert catalog.info == CatalogInfo(author="xcode", version=1)


def test_resolve_group_returns_same_node(tmp_path):
    catalog = Catalog.open(tmp_path / "Assets.xcassets")
    first = catalog.resolve_group("icons")
    assert catalog.resolve_group("icons") is first
    assert list(catalog.groups) == ["icons"]
    assert first.directory == tmp_path / "Assets.xcassets" / "icons"


def test_fresh_group_defaults(tmp_path):
    info = CatalogInfo(author="tests", version=3)
    catalog = Catalog.open(tmp_path / "Assets.xcassets", default_info=info)
    group = catalog.resolve_group("icons")
    assert group.provides_namespace is True
    assert group.on_demand_resource_tags == []
    assert group.info == info
    assert group.to_contents() == {
        "info": {"author": "tests", "version": 3},
        "properties": {"provides-namespace": True},
    }


def test_fresh_image_set_defaults(tmp_path):
    catalog = Catalog.open(tmp_path / "Assets.xcassets")
    group = catalog.resolve_group("icons")
    image_set = group.resolve_image_set("home")
    assert group.resolve_image_set("home") is image_set
    assert image_set.images == []
    assert image_set.directory == tmp_path / "Assets.xcassets" / "icons" / "home.imageset"


def test_group_loads_persisted_properties(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    _write_json(
        directory / "icons" / "Contents.json",
        {
            "info": {"author": "xcode", "version": 1},
            "properties": {"on-demand-resource-tags": ["level1"], "provides-namespace": False},
        },
    )
    group = Catalog.open(directory).resolve_group("icons")
    assert group.info == CatalogInfo(author="xcode", version=1)
    assert group.provides_namespace is False
    assert group.on_demand_resource_tags == ["level1"]
    assert group.to_contents()["properties"] == {
        "on-demand-resource-tags": ["level1"],
        "provides-namespace": False,
    }


def test_image_set_loads_persisted_images(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    _write_json(
        directory / "home.imageset" / "Contents.json",
        {
            "info": {"author": "xcode", "version": 1},
            "images": [
                {"filename": "home-1x.png", "idiom": "universal", "scale": "1x"},
                {"idiom": "universal", "scale": "2x"},
                {"filename": "home-3x.png", "idiom": "universal", "scale": "3x", "unassigned": True},
            ],
        },
    )
    image_set = Catalog.open(directory).resolve_image_set("home")
    assert [image.filename for image in image_set.images] == ["home-1x.png", "", "home-3x.png"]
    assert image_set.images[2].unassigned is True


def test_corrupt_metadata_is_fatal(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    (directory / "icons").mkdir(parents=True)
    (directory / "icons" / "Contents.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(MetadataReadError, match="invalid JSON"):
        Catalog.open(directory).resolve_group("icons")


def test_metadata_with_wrong_shape_is_fatal(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    _write_json(directory / "home.imageset" / "Contents.json", {"images": {"filename": "x.png"}})
    with pytest.raises(MetadataReadError, match="images must be a list"):
        Catalog.open(directory).resolve_image_set("home")


def test_invalid_names_are_rejected(tmp_path):
    catalog = Catalog.open(tmp_path / "Assets.xcassets")
    with pytest.raises(InputValidationError):
        catalog.resolve_group("..")
    with pytest.raises(InputValidationError):
        catalog.resolve_image_set("")


def test_image_to_dict_omits_empty_fields_in_order():
    image = Image(
        filename="app-ipad-@2-83.png",
        size="83.5x83.5",
        idiom="ipad",
        scale="2x",
        memory="2GB",
    )
    payload = image.to_dict()
    assert list(payload) == ["filename", "size", "idiom", "scale", "memory"]


def test_image_set_contents_omit_empty_properties(tmp_path):
    image_set = ImageSet(name="home", directory=tmp_path / "home.imageset")
    image_set.images = [Image(filename="home-1x.png", idiom="universal", scale="1x")]
    assert image_set.to_contents() == {
        "info": {"author": "asset_catalog", "version": 1},
        "images": [{"filename": "home-1x.png", "idiom": "universal", "scale": "1x"}],
    }
    image_set.on_demand_resource_tags = ["intro"]
    assert list(image_set.to_contents()) == ["info", "properties", "images"]


def test_load_discovers_persisted_tree(tmp_path):
    directory = tmp_path / "Assets.xcassets"
    info = {"author": "xcode", "version": 1}
    _write_json(directory / "Contents.json", {"info": info})
    _write_json(directory / "a" / "Contents.json", {"info": info, "properties": {"provides-namespace": True}})
    _write_json(directory / "a" / "b" / "Contents.json", {"info": info, "properties": {"provides-namespace": True}})
    _write_json(directory / "a" / "b" / "leaf.imageset" / "Contents.json", {"info": info, "images": []})
    _write_json(directory / "AppIcon.appiconset" / "Contents.json", {"info": info, "images": []})
    (directory / "not-a-node").mkdir()

    catalog = Catalog.load(directory)

    assert list(catalog.groups) == ["a"]
    inner = catalog.groups["a"].container.groups["b"]
    assert isinstance(inner, Group)
    assert list(inner.container.image_sets) == ["leaf"]
    assert catalog.app_icon is not None
    assert [rel for rel, _group in catalog.iter_groups()] == ["a", "a/b"]
    assert [rel for rel, _set in catalog.iter_image_sets()] == ["AppIcon.appiconset", "a/b/leaf"]
