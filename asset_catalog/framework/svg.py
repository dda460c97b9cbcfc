"""Intrinsic size of an SVG source.

Only the root element's `width` and `height` attributes are consulted. Both
may be empty, a bare number, or a number with a `px` suffix. A value that
comes out as zero (including an absent attribute) falls back to 150, the
browser default for replaced elements with no intrinsic size.
"""

from __future__ import annotations

import math
import os
import xml.etree.ElementTree as ET
from pathlib import Path

from asset_catalog.framework.errors import FilesystemError, SourceParseError

DEFAULT_DIMENSION = 150.0


def parse_dim(value: str) -> float:
    """Parse one dimension attribute. Raises ValueError for malformed input."""

    text = value or ""
    if text == "":
        parsed = 0.0
    else:
        text = text.removesuffix("px")
        parsed = float(text)
        if not math.isfinite(parsed):
            raise ValueError(f"non-finite dimension {value!r}")
    if parsed == 0:
        return DEFAULT_DIMENSION
    return parsed


def parse_dimensions(data: bytes | str, *, source: str | os.PathLike[str] = "<svg>") -> tuple[float, float]:
    """Return (height, width) declared on the document's root element."""

    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise SourceParseError(f"{source}: failed to parse svg: {exc}", path=source) from exc

    try:
        height = parse_dim(root.get("height", ""))
        width = parse_dim(root.get("width", ""))
    except ValueError as exc:
        raise SourceParseError(f"{source}: failed to parse dim: {exc}", path=source) from exc
    return height, width


def read_dimensions(path: str | os.PathLike[str]) -> tuple[float, float]:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise FilesystemError(f"{path}: failed to read: {exc}", path=path) from exc
    return parse_dimensions(data, source=path)
