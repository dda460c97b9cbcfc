import logging

import pytest

from asset_catalog.framework.catalog import Catalog
from asset_catalog.framework.errors import InputValidationError, SourceParseError
from asset_catalog.framework.generation import GenerationPipeline
from asset_catalog.framework.walker import SVGWalker

from support import RecordingConverter, write_svg


def _walker(source_dir, catalog_dir, **options) -> SVGWalker:
    catalog = Catalog.open(catalog_dir)
    pipeline = GenerationPipeline(RecordingConverter())
    return SVGWalker(source_dir, catalog, pipeline, **options)


def test_path_mirroring_creates_groups_root_down(source_dir, catalog_dir):
    write_svg(source_dir / "a" / "b" / "name.svg")
    walker = _walker(source_dir, catalog_dir)

    assert walker.walk() == []

    catalog = walker.catalog
    assert list(catalog.groups) == ["a"]
    b = catalog.groups["a"].container.groups["b"]
    assert b.directory == catalog_dir / "a" / "b"
    assert list(b.container.image_sets) == ["name"]
    assert b.container.image_sets["name"].directory == catalog_dir / "a" / "b" / "name.imageset"


def test_sanitize_replaces_spaces(source_dir, catalog_dir):
    write_svg(source_dir / "a b" / "my icon.svg")
    walker = _walker(source_dir, catalog_dir, sanitize_paths=True)
    walker.walk()

    group = walker.catalog.groups["a_b"]
    assert list(group.container.image_sets) == ["my_icon"]
    image_set = group.container.image_sets["my_icon"]
    assert image_set.images[0].filename == "my_icon-1x.png"


def test_without_sanitize_names_are_kept(source_dir, catalog_dir):
    write_svg(source_dir / "a b" / "name.svg")
    walker = _walker(source_dir, catalog_dir)
    walker.walk()
    assert list(walker.catalog.groups) == ["a b"]


def test_only_svg_files_are_added(source_dir, catalog_dir):
    write_svg(source_dir / "icon.svg")
    (source_dir / "notes.txt").write_text("hi", encoding="utf-8")
    (source_dir / "upper.SVG").write_text("<svg/>", encoding="utf-8")
    walker = _walker(source_dir, catalog_dir)
    walker.walk()
    assert list(walker.catalog.image_sets) == ["icon"]
    assert walker.seen == 1


def test_sibling_directories_share_a_group(source_dir, catalog_dir):
    write_svg(source_dir / "icons" / "home.svg")
    write_svg(source_dir / "icons" / "lock.svg")
    walker = _walker(source_dir, catalog_dir)
    walker.walk()
    assert sorted(walker.catalog.groups["icons"].container.image_sets) == ["home", "lock"]


def test_parse_error_aborts_walk_by_default(source_dir, catalog_dir):
    write_svg(source_dir / "bad.svg", height="tall")
    walker = _walker(source_dir, catalog_dir)
    with pytest.raises(SourceParseError, match="bad.svg"):
        walker.walk()


def test_keep_going_collects_failures(source_dir, catalog_dir, caplog):
    write_svg(source_dir / "a.svg", height="tall")
    write_svg(source_dir / "b.svg", height="10")
    logger = logging.getLogger("test.walker.keep_going")
    walker = _walker(source_dir, catalog_dir, keep_going=True, logger=logger)

    with caplog.at_level(logging.ERROR, logger="test.walker.keep_going"):
        failures = walker.walk()

    assert [failure.path for failure in failures] == [str(source_dir / "a.svg")]
    assert isinstance(failures[0].error, SourceParseError)
    assert "Skipping" in caplog.text
    assert len(walker.pipeline.pending) == 3


def test_missing_source_dir(tmp_path, catalog_dir):
    walker = _walker(tmp_path / "nope", catalog_dir)
    with pytest.raises(InputValidationError, match="not a directory"):
        walker.walk()


def test_add_svg_requires_svg_extension(source_dir, catalog_dir):
    walker = _walker(source_dir, catalog_dir)
    with pytest.raises(InputValidationError, match="not an svg file"):
        walker.add_svg(walker.catalog, source_dir / "icon.png")


def test_app_icon_is_resolved_once(source_dir, catalog_dir):
    icon = write_svg(source_dir.parent / "app.svg")
    walker = _walker(source_dir, catalog_dir)

    assert walker.add_app_icon(icon) is True
    first = walker.catalog.app_icon
    assert walker.add_app_icon(icon) is True
    assert walker.catalog.app_icon is first
    assert first.directory == catalog_dir / "AppIcon.appiconset"
    assert len(walker.pipeline.pending) == 13


def test_failed_source_leaves_no_new_nodes(source_dir, catalog_dir):
    write_svg(source_dir / "broken" / "deep" / "bad.svg", height="tall")
    write_svg(source_dir / "icons" / "bad.svg", width="wide")
    write_svg(source_dir / "icons" / "good.svg")
    walker = _walker(source_dir, catalog_dir, keep_going=True)

    failures = walker.walk()

    assert len(failures) == 2
    assert "broken" not in walker.catalog.groups
    assert sorted(walker.catalog.groups["icons"].container.image_sets) == ["good"]


def test_failed_app_icon_is_not_kept(source_dir, catalog_dir, tmp_path):
    walker = _walker(source_dir, catalog_dir)
    icon = write_svg(tmp_path / "icon.svg", height="nan")
    with pytest.raises(SourceParseError):
        walker.add_app_icon(icon)
    assert walker.catalog.app_icon is None
