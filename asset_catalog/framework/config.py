from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from asset_catalog.framework.catalog import CATALOG_EXTENSION, CatalogInfo
from asset_catalog.framework.converters import CONVERTERS, ConverterConfig
from asset_catalog.framework.errors import InputValidationError


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts:
      - True/False
      - 0/1 (ints)
      - strings: true/false/1/0/yes/no (case-insensitive, surrounding whitespace ignored)

    Raises:
      InputValidationError for anything else, with the provided config key path.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise InputValidationError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
        raise InputValidationError(f"Invalid boolean for {path}: {value!r}")

    raise InputValidationError(f"Invalid boolean for {path}: {value!r}")


def parse_int(value: Any, path: str) -> int:
    if value is None:
        raise InputValidationError(f"Invalid config value for {path}: None")
    if isinstance(value, bool):
        raise InputValidationError(f"Invalid config type for {path}: expected int, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if not value.strip():
            raise InputValidationError(f"Invalid config value for {path}: must be an int")
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InputValidationError(f"Invalid config value for {path}: must be an int") from exc
    raise InputValidationError(f"Invalid config type for {path}: expected int")


def parse_optional_str(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InputValidationError(f"Invalid config type for {path}: expected string")
    return value.strip() or None


_SCHEMA: dict[str, Any] = {
    "source_dir": None,
    "output_dir": None,
    "app_icon": None,
    "force": None,
    "sanitize": None,
    "verbose": None,
    "keep_going": None,
    "jobs": None,
    "log_file": None,
    "strict": None,
    "converter": {"name": None, "binary": None, "timeout_s": None},
    "catalog_info": {"author": None, "version": None},
}


def _collect_unknown_keys(mapping: Any, schema: Mapping[str, Any], *, prefix: str) -> list[str]:
    if not isinstance(mapping, Mapping):
        return []
    unknown: list[str] = []
    for key, value in mapping.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)
        if key not in schema:
            unknown.append(key_path)
            continue
        subschema = schema[key]
        if isinstance(subschema, Mapping):
            unknown.extend(_collect_unknown_keys(value, subschema, prefix=key_path))
    return unknown


def _section(cfg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InputValidationError(f"Invalid config type for {key}: expected mapping")
    return value


@dataclass(frozen=True)
class BuildConfig:
    source_dir: str
    output_dir: str
    app_icon: str | None = None
    force: bool = False
    sanitize: bool = False
    verbose: bool = False
    keep_going: bool = False
    jobs: int = 1
    log_file: str | None = None
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    catalog_info: CatalogInfo = field(default_factory=CatalogInfo)

    @staticmethod
    def from_dict(cfg: Mapping[str, Any]) -> tuple["BuildConfig", list[str]]:
        """
        Parse and validate configuration, returning (BuildConfig, warnings).

        Raises:
            InputValidationError: if required keys are missing or invalid.
        """

        if not isinstance(cfg, Mapping):
            raise InputValidationError("Config must be a mapping")

        warnings: list[str] = []
        strict = parse_bool(cfg.get("strict", False), "strict")
        unknown_keys = _collect_unknown_keys(cfg, _SCHEMA, prefix="")
        if unknown_keys:
            if strict:
                raise InputValidationError(f"Unknown config keys: {', '.join(unknown_keys)}")
            warnings.extend(f"Unknown config key: {key}" for key in unknown_keys)

        source_dir = parse_optional_str(cfg.get("source_dir"), "source_dir")
        if not source_dir:
            raise InputValidationError("no input directory specified")
        output_dir = parse_optional_str(cfg.get("output_dir"), "output_dir")
        if not output_dir:
            raise InputValidationError("no output directory specified")
        if not output_dir.rstrip("/\\").endswith(CATALOG_EXTENSION):
            raise InputValidationError(
                f"unsupported output directory {output_dir} (must end in {CATALOG_EXTENSION})"
            )

        jobs = parse_int(cfg.get("jobs", 1), "jobs")
        if jobs < 1:
            raise InputValidationError("Invalid config value for jobs: must be >= 1")

        converter_cfg = _section(cfg, "converter")
        converter_name = parse_optional_str(converter_cfg.get("name"), "converter.name") or "inkscape"
        if converter_name not in CONVERTERS:
            raise InputValidationError(
                f"Invalid config value for converter.name: {converter_name!r} "
                f"(expected one of {', '.join(CONVERTERS)})"
            )
        timeout_s = parse_int(converter_cfg.get("timeout_s", 120), "converter.timeout_s")
        if timeout_s <= 0:
            raise InputValidationError("Invalid config value for converter.timeout_s: must be > 0")
        converter = ConverterConfig(
            name=converter_name,
            binary=parse_optional_str(converter_cfg.get("binary"), "converter.binary"),
            timeout_s=timeout_s,
        )

        info_cfg = _section(cfg, "catalog_info")
        defaults = CatalogInfo()
        author = parse_optional_str(info_cfg.get("author"), "catalog_info.author") or defaults.author
        version = parse_int(info_cfg.get("version", defaults.version), "catalog_info.version")

        build_cfg = BuildConfig(
            source_dir=source_dir,
            output_dir=output_dir,
            app_icon=parse_optional_str(cfg.get("app_icon"), "app_icon"),
            force=parse_bool(cfg.get("force", False), "force"),
            sanitize=parse_bool(cfg.get("sanitize", False), "sanitize"),
            verbose=parse_bool(cfg.get("verbose", False), "verbose"),
            keep_going=parse_bool(cfg.get("keep_going", False), "keep_going"),
            jobs=jobs,
            log_file=parse_optional_str(cfg.get("log_file"), "log_file"),
            converter=converter,
            catalog_info=CatalogInfo(author=author, version=version),
        )
        return build_cfg, warnings


def apply_overrides(cfg: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Layer command-line values over a config mapping; None means 'not given'."""

    merged: dict[str, Any] = dict(cfg)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            base = merged.get(key)
            section = dict(base) if isinstance(base, Mapping) else {}
            section.update({k: v for k, v in value.items() if v is not None})
            merged[key] = section
        else:
            merged[key] = value
    return merged
