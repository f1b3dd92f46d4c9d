"""Load MikrobConfig from mikrob.yaml / mikrob.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from mikrob._errors import ConfigError
from mikrob.config import MikrobConfig

CONFIG_FILE_NAMES: tuple[str, ...] = ("mikrob.yaml", "mikrob.yml", "mikrob.toml")

_CONFIG_KEYS: frozenset[str] = frozenset({
    "host",
    "port",
    "workers",
    "pages_dir",
    "views_dir",
    "static_dir",
    "watch",
    "debug",
})


def load_config(root: Path, **overrides: object) -> MikrobConfig:
    """Load MikrobConfig from root, optionally merging a mikrob config file.

    Looks for mikrob.yaml, mikrob.yml, or mikrob.toml in root. Keyword
    overrides set to *None* are ignored so CLI defaults don't mask the file.

    Raises:
        ConfigError: If the config file is malformed or has unknown keys.

    """
    file_config = _read_mikrob_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = sorted(set(merged) - _CONFIG_KEYS)
    if unknown:
        msg = f"Unknown mikrob config keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    return MikrobConfig(root=root, **merged)  # type: ignore[arg-type]


def _read_mikrob_config(root: Path) -> dict[str, object]:
    """Read mikrob config from yaml/toml if present. Returns empty dict otherwise."""
    for name in CONFIG_FILE_NAMES:
        path = root / name
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
            data = tomllib.loads(text) if path.suffix == ".toml" else yaml.safe_load(text)
        except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
            msg = f"Failed to read {path}: {exc}"
            raise ConfigError(msg) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            msg = f"{path} must contain a mapping, got {type(data).__name__}"
            raise ConfigError(msg)
        return _flatten_mikrob_section(data)
    return {}


def _flatten_mikrob_section(data: dict[str, object]) -> dict[str, object]:
    """Extract mikrob.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("mikrob")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "mikrob" and k in _CONFIG_KEYS:
            result[k] = v
    return result
