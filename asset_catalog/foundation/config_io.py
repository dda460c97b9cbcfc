from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

CONFIG_ENV_VAR = "ASSET_CATALOG_CONFIG"
CONFIG_FILENAME = "asset_catalog.yaml"
LOCAL_CONFIG_FILENAME = "asset_catalog.local.yaml"


def _load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except FileNotFoundError:
        raise
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if overlay is None:
        return None

    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ValueError(
                f"Invalid config overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    if isinstance(overlay, Mapping):
        raise ValueError(
            f"Invalid config overlay merge at {path}: base is {type(base).__name__} but overlay is mapping"
        )

    return overlay


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env_var: str = CONFIG_ENV_VAR,
    start_dir: str | os.PathLike[str] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load build settings from YAML.

    An explicit path (or the env var) loads exactly that file. Otherwise
    `asset_catalog.yaml` in `start_dir` (default: cwd) is loaded, with
    `asset_catalog.local.yaml` merged over it when present. Having no config
    file at all is fine; settings can come entirely from the command line.

    Returns (config mapping, meta) where meta records how it was found.
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        raw_env = os.environ.get(str(env_var), "")
        explicit_path = raw_env.strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        cfg = _load_yaml_mapping(expanded)
        meta = {
            "mode": "env" if config_path is None else "explicit",
            "paths": [expanded],
            "env_var": env_var,
        }
        return cfg, meta

    directory = Path(start_dir or os.getcwd())
    base_config_path = directory / CONFIG_FILENAME
    local_overlay_path = directory / LOCAL_CONFIG_FILENAME

    if not base_config_path.is_file():
        return {}, {"mode": "none", "paths": [], "env_var": env_var}

    cfg = _load_yaml_mapping(str(base_config_path))
    loaded_paths = [str(base_config_path.resolve())]
    mode = "base"

    if local_overlay_path.is_file():
        overlay = _load_yaml_mapping(str(local_overlay_path))
        cfg = _deep_merge(cfg, overlay, path="")
        loaded_paths.append(str(local_overlay_path.resolve()))
        mode = "base+local"

    return cfg, {"mode": mode, "paths": loaded_paths, "env_var": env_var}
