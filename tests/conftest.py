from __future__ import annotations

from pathlib import Path

import pytest

from support import RecordingConverter


@pytest.fixture
def converter() -> RecordingConverter:
    return RecordingConverter()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    return tmp_path / "out" / "Test.xcassets"
