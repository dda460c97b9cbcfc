from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from asset_catalog.framework.errors import FilesystemError, MetadataReadError

CONTENTS_FILENAME = "Contents.json"


def contents_path(directory: str | Path) -> Path:
    return Path(directory) / CONTENTS_FILENAME


def read_contents(directory: str | Path) -> dict[str, Any] | None:
    """Load a node's Contents.json.

    Returns None when the file does not exist (a node that was never written).
    Any other read or decode failure raises MetadataReadError, since dropping
    the file would silently lose the previous build state.
    """

    path = contents_path(directory)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as exc:
        raise MetadataReadError(f"{path}: invalid JSON: {exc}", path=path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataReadError(f"{path}: failed to read: {exc}", path=path) from exc

    if not isinstance(payload, Mapping):
        raise MetadataReadError(f"{path}: expected a JSON object", path=path)
    return dict(payload)


def write_contents(directory: str | Path, payload: Mapping[str, Any]) -> Path:
    """Overwrite a node's Contents.json with `payload` (key order preserved)."""

    path = contents_path(directory)
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"{path}: failed to write metadata: {exc}", path=path) from exc
    return path
