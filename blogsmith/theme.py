"""Theme resolution for Blogsmith.

A theme is a tree of plain values: a color palette, named color modes that
partially override the palette, an initial mode selector, and any other
top-level keys a renderer understands (fonts, breakpoints, ...):

    initialColorMode: light
    colors:
      primary: "#000"
      accent: "#6166DC"
      modes:
        dark:
          primary: "#fff"

Sites customize a base theme with an override tree of the same shape. The
two are combined with deep_merge: nested mappings merge key by key and any
other override value replaces the base value outright.

Key functions:
- deep_merge: Override-wins recursive merge of two mapping trees.
- resolve_theme: Merge an override onto a base theme and validate the result.
- load_theme_file: Read a YAML theme override (theme.yaml).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .utils import freeze, thaw

log = logging.getLogger(__name__)

THEME_FILENAME = "theme.yaml"

_SCALARS = (str, int, float, bool, date, type(None))

# Neutral base palette; sites are expected to override it
DEFAULT_THEME: dict[str, Any] = {
    "initialColorMode": "light",
    "colors": {
        "primary": "#000",
        "secondary": "#73737D",
        "accent": "#6166DC",
        "grey": "#73737D",
        "background": "#fafafa",
        "gradient": "linear-gradient(180deg, rgba(217, 219, 224, 0) 0%, #D9DBE0 100%)",
        "articleText": "#08080B",
        "card": "#fff",
        "error": "#EE565B",
        "success": "#46B17B",
        "modes": {
            "light": {},
            "dark": {
                "primary": "#fff",
                "secondary": "#fff",
                "accent": "#E9DAAC",
                "background": "#111216",
                "gradient": "linear-gradient(180deg, #111216 0%, rgba(66, 81, 98, 0.36) 100%)",
                "articleText": "#fff",
                "card": "#1D2128",
            },
        },
    },
}


def _check_value(value: Any, path: str) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ConfigError(path or "theme", f"key {key!r} is not a string")
            _check_value(item, f"{path}.{key}" if path else key)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_value(item, f"{path}[{index}]")
    elif not isinstance(value, _SCALARS):
        raise ConfigError(
            path or "theme", f"unsupported theme value of type {type(value).__name__}"
        )


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = thaw(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(current, value)
        else:
            merged[key] = thaw(value)
    return merged


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge override onto base, recursively, with override values winning.

    For each key of override: when both sides hold mappings they are merged
    recursively, otherwise the override value replaces the base value.
    Keys only present in override are added. Neither input is modified.

    Args:
        base: Base mapping tree.
        override: Override mapping tree.

    Returns:
        A new merged mapping tree.

    Raises:
        ConfigError: If either side is not a mapping, or holds a value that is
            not a mapping, list, or scalar.
    """
    if not isinstance(base, Mapping):
        raise ConfigError("theme", "base theme must be a mapping")
    if not isinstance(override, Mapping):
        raise ConfigError("theme", "theme override must be a mapping")
    _check_value(base, "")
    _check_value(override, "")
    return _merge(base, override)


@dataclass(frozen=True)
class ThemeDefinition:
    """A resolved theme.

    Attributes:
        colors: Base color palette (name to value).
        modes: Named color modes, each a partial palette.
        initial_color_mode: Name of the mode selected on first load, if any.
        extra: Other top-level theme keys, passed through to renderers.
    """

    colors: Mapping[str, Any] = field(default_factory=dict)
    modes: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    initial_color_mode: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ThemeDefinition:
        """Build a ThemeDefinition from a theme mapping tree.

        Raises:
            ConfigError: If colors or modes are not mappings, or the initial
                color mode names a mode that does not exist.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("theme", "theme must be a mapping")
        raw_colors = data.get("colors") or {}
        if not isinstance(raw_colors, Mapping):
            raise ConfigError("colors", "must be a mapping of colors")
        colors = dict(raw_colors)
        modes = colors.pop("modes", None) or {}
        if not isinstance(modes, Mapping):
            raise ConfigError("colors.modes", "must be a mapping of mode names")
        for name, palette in modes.items():
            if not isinstance(palette, Mapping):
                raise ConfigError(f"colors.modes.{name}", "must be a mapping of colors")
        initial = data.get("initialColorMode")
        if initial is not None:
            if not isinstance(initial, str):
                raise ConfigError("initialColorMode", "must be a string")
            if initial not in modes:
                known = ", ".join(sorted(modes)) or "none"
                raise ConfigError(
                    "initialColorMode",
                    f"unknown color mode {initial!r} (known modes: {known})",
                )
        extra = {k: v for k, v in data.items() if k not in ("colors", "initialColorMode")}
        return cls(
            colors=freeze(colors),
            modes=freeze(modes),
            initial_color_mode=initial,
            extra=freeze(extra),
        )

    @property
    def mode_names(self) -> list[str]:
        return list(self.modes)

    def palette(self, mode: str | None = None) -> dict[str, Any]:
        """Return the base colors overlaid with a mode's partial palette.

        Args:
            mode: Mode name; defaults to the initial color mode.

        Raises:
            KeyError: If the mode does not exist.
        """
        mode = mode if mode is not None else self.initial_color_mode
        if mode is None:
            return thaw(self.colors)
        if mode not in self.modes:
            raise KeyError(mode)
        return _merge(self.colors, self.modes[mode])

    def to_mapping(self) -> dict[str, Any]:
        """Serialize back to a theme mapping tree."""
        data = thaw(self.extra)
        colors = thaw(self.colors)
        if self.modes:
            colors["modes"] = thaw(self.modes)
        data["colors"] = colors
        if self.initial_color_mode is not None:
            data["initialColorMode"] = self.initial_color_mode
        return data


def resolve_theme(
    base: Mapping[str, Any] | ThemeDefinition,
    override: Mapping[str, Any] | None = None,
) -> ThemeDefinition:
    """Merge a theme override onto a base theme.

    Args:
        base: Base theme, as a mapping tree or a ThemeDefinition.
        override: Override mapping tree; None means no override.

    Returns:
        The merged, validated ThemeDefinition.

    Raises:
        ConfigError: If the inputs are malformed or the merged initial color
            mode does not name an existing mode.
    """
    if isinstance(base, ThemeDefinition):
        base = base.to_mapping()
    merged = deep_merge(base, override if override is not None else {})
    theme = ThemeDefinition.from_mapping(merged)
    log.debug(
        "Resolved theme with %d colors, modes %s, initial mode %s",
        len(theme.colors),
        theme.mode_names,
        theme.initial_color_mode,
    )
    return theme


def load_theme_file(path: Path) -> dict[str, Any]:
    """Load a YAML theme override file.

    Args:
        path: Path to the theme file (usually theme.yaml).

    Returns:
        The override mapping tree; empty if the file is empty.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(str(path), f"cannot read theme file: {exc}") from exc
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(str(path), f"invalid YAML: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ConfigError(str(path), "theme override must be a mapping")
    return dict(loaded)
