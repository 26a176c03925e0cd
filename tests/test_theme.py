import copy

import pytest

from blogsmith.errors import ConfigError
from blogsmith.theme import (
    DEFAULT_THEME,
    ThemeDefinition,
    deep_merge,
    load_theme_file,
    resolve_theme,
)

OVERRIDE = {
    "initialColorMode": "dark",
    "colors": {
        "primary": "#33455B",
        "secondary": "#73737D",
        "accent": "#82b2ff",
        "background": "#fff",
        "gradient": "none",
        "modes": {"dark": {"gradient": "none", "accent": "#91BDFA"}},
    },
}


def test_merge_scenario():
    base = {"colors": {"primary": "#000", "modes": {"dark": {"accent": "#111"}}}}
    override = {"colors": {"primary": "#33455B", "modes": {"dark": {"accent": "#91BDFA"}}}}
    assert deep_merge(base, override) == {
        "colors": {"primary": "#33455B", "modes": {"dark": {"accent": "#91BDFA"}}}
    }


def test_merge_keeps_base_keys_and_adds_new_ones():
    base = {"colors": {"primary": "#000", "text": "#111"}, "fonts": {"body": "serif"}}
    override = {"colors": {"primary": "#fff", "link": "#00f"}, "space": [0, 4, 8]}
    assert deep_merge(base, override) == {
        "colors": {"primary": "#fff", "text": "#111", "link": "#00f"},
        "fonts": {"body": "serif"},
        "space": [0, 4, 8],
    }


def test_override_replaces_non_mapping_values_wholesale():
    base = {"fonts": {"body": "serif"}, "space": [0, 2, 4, 8], "radius": 4}
    override = {"fonts": "system-ui", "space": [1], "radius": {"small": 2}}
    assert deep_merge(base, override) == override


def test_merge_is_idempotent_and_pure():
    base = copy.deepcopy(DEFAULT_THEME)
    once = deep_merge(base, OVERRIDE)
    assert deep_merge(once, OVERRIDE) == once
    assert base == DEFAULT_THEME
    assert OVERRIDE["colors"]["modes"]["dark"] == {"gradient": "none", "accent": "#91BDFA"}

    once["colors"]["modes"]["dark"]["accent"] = "#000"
    assert OVERRIDE["colors"]["modes"]["dark"]["accent"] == "#91BDFA"


def test_merge_rejects_bad_input():
    with pytest.raises(ConfigError):
        deep_merge({"colors": {}}, ["not", "a", "mapping"])
    with pytest.raises(ConfigError) as exc_info:
        deep_merge({}, {"colors": {"primary": object()}})
    assert exc_info.value.field == "colors.primary"
    with pytest.raises(ConfigError):
        deep_merge({}, {"colors": {1: "#000"}})


def test_resolve_theme_with_override():
    theme = resolve_theme(DEFAULT_THEME, OVERRIDE)

    assert theme.initial_color_mode == "dark"
    assert theme.colors["primary"] == "#33455B"
    assert theme.colors["grey"] == DEFAULT_THEME["colors"]["grey"]
    assert "modes" not in theme.colors
    assert theme.modes["dark"]["accent"] == "#91BDFA"
    assert theme.modes["dark"]["card"] == "#1D2128"
    assert theme.mode_names == ["light", "dark"]

    dark = theme.palette()
    assert dark["accent"] == "#91BDFA"
    assert dark["gradient"] == "none"
    assert dark["grey"] == "#73737D"
    assert theme.palette("light")["accent"] == "#82b2ff"
    with pytest.raises(KeyError):
        theme.palette("sepia")


def test_resolve_accepts_theme_definition_and_no_override():
    base = resolve_theme(DEFAULT_THEME)
    assert base.initial_color_mode == "light"
    assert resolve_theme(base, None) == base
    assert resolve_theme(base, OVERRIDE) == resolve_theme(DEFAULT_THEME, OVERRIDE)


def test_initial_mode_must_exist():
    with pytest.raises(ConfigError) as exc_info:
        resolve_theme(DEFAULT_THEME, {"initialColorMode": "sepia"})
    assert exc_info.value.field == "initialColorMode"
    assert "sepia" in exc_info.value.message

    theme = resolve_theme({"colors": {"primary": "#000"}})
    assert theme.initial_color_mode is None
    assert theme.palette() == {"primary": "#000"}


def test_mode_shapes_are_validated():
    with pytest.raises(ConfigError):
        ThemeDefinition.from_mapping({"colors": {"modes": ["dark"]}})
    with pytest.raises(ConfigError):
        ThemeDefinition.from_mapping({"colors": {"modes": {"dark": "#000"}}})
    with pytest.raises(ConfigError):
        ThemeDefinition.from_mapping({"colors": "#000"})


def test_theme_is_read_only_and_round_trips():
    theme = resolve_theme(DEFAULT_THEME, OVERRIDE)
    with pytest.raises(TypeError):
        theme.colors["primary"] = "#fff"
    assert ThemeDefinition.from_mapping(theme.to_mapping()) == theme


def test_load_theme_file(tmp_path):
    path = tmp_path / "theme.yaml"
    path.write_text(
        "initialColorMode: dark\ncolors:\n  primary: '#33455B'\n"
        "  modes:\n    dark:\n      accent: '#91BDFA'\n",
        encoding="utf-8",
    )
    assert load_theme_file(path) == {
        "initialColorMode": "dark",
        "colors": {"primary": "#33455B", "modes": {"dark": {"accent": "#91BDFA"}}},
    }

    path.write_text("", encoding="utf-8")
    assert load_theme_file(path) == {}

    path.write_text("- dark\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_theme_file(path)

    with pytest.raises(ConfigError):
        load_theme_file(tmp_path / "missing.yaml")


def test_impossible_date_in_theme_file_is_a_config_error(tmp_path):
    path = tmp_path / "theme.yaml"
    path.write_text("released: 2020-13-45\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_theme_file(path)


def test_nested_theme_values_are_read_only():
    theme = resolve_theme(DEFAULT_THEME, {"breakpoints": ["phone", "tablet"]})
    assert theme.extra["breakpoints"] == ("phone", "tablet")
    with pytest.raises(AttributeError):
        theme.extra["breakpoints"].append("desktop")
    with pytest.raises(TypeError):
        theme.modes["dark"]["accent"] = "#000"
    assert theme.to_mapping()["breakpoints"] == ["phone", "tablet"]
