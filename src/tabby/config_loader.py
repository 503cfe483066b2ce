"""Load SiteConfig from tabby.yaml / tabby.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from dataclasses import fields
from pathlib import Path

import yaml

from tabby._errors import ConfigError
from tabby.config import ComponentsOptions, ServerOptions, SiteConfig, WatcherOptions

_SECTIONS: dict[str, type] = {
    "server": ServerOptions,
    "watcher": WatcherOptions,
    "components": ComponentsOptions,
}

_TOP_LEVEL = frozenset(
    f.name for f in fields(SiteConfig) if f.name not in _SECTIONS and f.name != "cwd"
)


def load_config(root: Path, **overrides: object) -> SiteConfig:
    """Load SiteConfig rooted at *root*, optionally merging a config file.

    Looks for tabby.yaml, tabby.yml, or tabby.toml in root. Overrides take
    precedence; ``None`` overrides are ignored so unset CLI flags do not mask
    file values. Nested sections (``server``, ``watcher``, ``components``)
    are merged key by key.

    Raises:
        ConfigError: If the file cannot be parsed or holds unknown keys.

    """
    file_config = _read_tabby_config(root)
    merged: dict[str, object] = dict(file_config)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in _SECTIONS and isinstance(value, dict):
            section = dict(merged.get(key) or {})  # type: ignore[call-overload]
            section.update(value)
            merged[key] = section
        else:
            merged[key] = value
    return _build_config(root, merged)


def _build_config(root: Path, data: dict[str, object]) -> SiteConfig:
    kwargs: dict[str, object] = {}
    for key, value in data.items():
        if key in _SECTIONS:
            options_cls = _SECTIONS[key]
            if not isinstance(value, dict):
                msg = f"Config section {key!r} must be a mapping"
                raise ConfigError(msg)
            if "ignore" in value:
                value = {**value, "ignore": tuple(value["ignore"])}
            try:
                kwargs[key] = options_cls(**value)
            except TypeError as exc:
                msg = f"Invalid {key!r} options: {exc}"
                raise ConfigError(msg) from exc
        elif key in _TOP_LEVEL:
            kwargs[key] = value
        else:
            msg = f"Unknown config key: {key!r}"
            raise ConfigError(msg)
    return SiteConfig(cwd=root, **kwargs)  # type: ignore[arg-type]


def _read_tabby_config(root: Path) -> dict[str, object]:
    """Read config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tabby.yaml", "tabby.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tabby.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tabby_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tabby_section(data, path)


def _flatten_tabby_section(data: object, path: Path) -> dict[str, object]:
    """Accept both a top-level mapping and a ``tabby:`` section."""
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping"
        raise ConfigError(msg)
    section = data.get("tabby")
    if isinstance(section, dict):
        return dict(section)
    return dict(data)
