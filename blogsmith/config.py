"""Site configuration loading for Blogsmith.

This module turns the declarative site configuration into a validated,
immutable SiteConfig. The configuration is a mapping with two keys:

    siteMetadata:
      title: My blog
      siteUrl: https://blog.example.com
      hero: {heading: Welcome, maxWidth: 400}
      social:
        - {name: github, url: https://github.com/example}
    plugins:
      - resolve: "@narative/gatsby-theme-novela"
        options: {contentPosts: content/posts, contentAuthors: content/authors}

Plugins are parsed into typed variants (ThemePlugin, ManifestPlugin) through
a PluginRegistry; identifiers the registry does not know become OpaquePlugin
instances that keep their options untouched.

Key functions:
- load_config: Validate a configuration mapping into a SiteConfig.
- load_config_file: Read blogsmith.yaml and validate it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from .content import ContentKind
from .errors import ConfigError
from .utils import freeze, thaw

log = logging.getLogger(__name__)

CONFIG_FILENAME = "blogsmith.yaml"

THEME_PLUGIN = "@narative/gatsby-theme-novela"
MANIFEST_PLUGIN = "gatsby-plugin-manifest"

DEFAULT_CONTENT_POSTS = "content/posts"
DEFAULT_CONTENT_AUTHORS = "content/authors"
DEFAULT_BASE_PATH = "/"

MANIFEST_DISPLAY_MODES = ("fullscreen", "standalone", "minimal-ui", "browser")

_SITE_METADATA_KEYS = ("title", "name", "siteUrl", "description", "hero", "social")


def _is_url(value: str) -> bool:
    parts = urlsplit(value)
    return (
        parts.scheme in ("http", "https")
        and bool(parts.netloc)
        and not any(ch.isspace() for ch in value)
    )


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(field_name, "must be a mapping")
    return value


def _required_str(data: Mapping[str, Any], key: str, prefix: str) -> str:
    field_name = f"{prefix}.{key}"
    value = data.get(key)
    if value is None:
        raise ConfigError(field_name, "is required")
    if not isinstance(value, str):
        raise ConfigError(field_name, "must be a string")
    if not value.strip():
        raise ConfigError(field_name, "must not be empty")
    return value.strip()


def _optional_str(data: Mapping[str, Any], key: str, prefix: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{prefix}.{key}", "must be a string")
    return value


def _optional_bool(data: Mapping[str, Any], key: str, prefix: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{prefix}.{key}", "must be true or false")
    return value


@dataclass(frozen=True)
class ContentSource:
    """A content directory declared by the configuration.

    Attributes:
        kind: Kind of documents found in the directory.
        path: Directory path, relative to the project root.
        plugin: Identifier of the declaring plugin, or None for defaults.
    """

    kind: ContentKind
    path: str
    plugin: str | None = None


@dataclass(frozen=True)
class HeroSettings:
    """Hero banner settings shown on the blog home page."""

    heading: str = ""
    max_width: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"heading": self.heading, "maxWidth": self.max_width}


@dataclass(frozen=True)
class SocialLink:
    name: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url}


@dataclass(frozen=True)
class Plugin:
    """Base class for plugin declarations.

    Attributes:
        name: Plugin identifier (the "resolve" key).
    """

    name: str

    def options(self) -> dict[str, Any]:
        """Return the plugin options as a plain mapping."""
        return {}

    def content_sources(self) -> list[ContentSource]:
        """Return the content directories this plugin declares."""
        return []

    def to_dict(self) -> dict[str, Any]:
        return {"resolve": self.name, "options": self.options()}


@dataclass(frozen=True)
class ThemePlugin(Plugin):
    """Blog theme plugin declaring where posts and authors live.

    Attributes:
        content_posts: Directory containing posts.
        content_authors: Directory containing author profiles.
        base_path: URL path the blog is mounted at.
        authors_page: Whether author pages are generated.
        local_source: Whether content is read from local directories.
        contentful_source: Whether content comes from a remote CMS.
        extra: Option keys this engine does not interpret.
    """

    content_posts: str = DEFAULT_CONTENT_POSTS
    content_authors: str = DEFAULT_CONTENT_AUTHORS
    base_path: str = DEFAULT_BASE_PATH
    authors_page: bool = False
    local_source: bool = True
    contentful_source: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, name: str, options: Mapping[str, Any], prefix: str) -> ThemePlugin:
        base_path = _optional_str(options, "basePath", prefix) or DEFAULT_BASE_PATH
        if not base_path.startswith("/"):
            raise ConfigError(f"{prefix}.basePath", "must start with '/'")
        sources = _mapping(options.get("sources"), f"{prefix}.sources")
        known = {"contentPosts", "contentAuthors", "basePath", "authorsPage", "sources"}
        return cls(
            name=name,
            content_posts=_optional_str(options, "contentPosts", prefix) or DEFAULT_CONTENT_POSTS,
            content_authors=_optional_str(options, "contentAuthors", prefix)
            or DEFAULT_CONTENT_AUTHORS,
            base_path=base_path,
            authors_page=_optional_bool(options, "authorsPage", prefix, False),
            local_source=_optional_bool(sources, "local", f"{prefix}.sources", True),
            contentful_source=_optional_bool(sources, "contentful", f"{prefix}.sources", False),
            extra=freeze({k: v for k, v in options.items() if k not in known}),
        )

    def options(self) -> dict[str, Any]:
        options = {
            "contentPosts": self.content_posts,
            "contentAuthors": self.content_authors,
            "basePath": self.base_path,
            "authorsPage": self.authors_page,
            "sources": {"local": self.local_source, "contentful": self.contentful_source},
        }
        options.update(thaw(self.extra))
        return options

    def content_sources(self) -> list[ContentSource]:
        if not self.local_source:
            return []
        return [
            ContentSource(ContentKind.POST, self.content_posts, self.name),
            ContentSource(ContentKind.AUTHOR, self.content_authors, self.name),
        ]


@dataclass(frozen=True)
class ManifestPlugin(Plugin):
    """Web app manifest plugin."""

    short_name: str | None = None
    app_name: str | None = None
    start_url: str | None = None
    background_color: str | None = None
    theme_color: str | None = None
    display: str | None = None
    icon: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    _OPTION_KEYS = (
        ("name", "app_name"),
        ("short_name", "short_name"),
        ("start_url", "start_url"),
        ("background_color", "background_color"),
        ("theme_color", "theme_color"),
        ("display", "display"),
        ("icon", "icon"),
    )

    @classmethod
    def from_options(
        cls, name: str, options: Mapping[str, Any], prefix: str
    ) -> ManifestPlugin:
        values = {
            attr: _optional_str(options, key, prefix) for key, attr in cls._OPTION_KEYS
        }
        display = values["display"]
        if display is not None and display not in MANIFEST_DISPLAY_MODES:
            raise ConfigError(
                f"{prefix}.display",
                f"must be one of {', '.join(MANIFEST_DISPLAY_MODES)}",
            )
        known = {key for key, _ in cls._OPTION_KEYS}
        return cls(
            name=name,
            extra=freeze({k: v for k, v in options.items() if k not in known}),
            **values,
        )

    def options(self) -> dict[str, Any]:
        options = {}
        for key, attr in self._OPTION_KEYS:
            value = getattr(self, attr)
            if value is not None:
                options[key] = value
        options.update(thaw(self.extra))
        return options


@dataclass(frozen=True)
class OpaquePlugin(Plugin):
    """A plugin this engine does not know; options are carried through as-is."""

    raw_options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, name: str, options: Mapping[str, Any], prefix: str) -> OpaquePlugin:
        return cls(name=name, raw_options=freeze(options))

    def options(self) -> dict[str, Any]:
        return thaw(self.raw_options)


PluginParser = Callable[[str, Mapping[str, Any], str], Plugin]


class PluginRegistry:
    """Registry mapping plugin identifiers to typed option parsers.

    New plugin kinds can be registered without touching the loader;
    unregistered identifiers parse into OpaquePlugin.
    """

    def __init__(self):
        self._parsers: dict[str, PluginParser] = {}
        self.register(THEME_PLUGIN, ThemePlugin.from_options)
        self.register(MANIFEST_PLUGIN, ManifestPlugin.from_options)

    def register(self, identifier: str, parser: PluginParser) -> None:
        """Register a parser for a plugin identifier.

        Args:
            identifier: The plugin's "resolve" value.
            parser: Callable taking (name, options, field prefix).
        """
        self._parsers[identifier] = parser

    def is_known(self, identifier: str) -> bool:
        return identifier in self._parsers

    def parse(self, entry: Any, index: int) -> Plugin:
        """Parse one entry of the plugins list.

        Args:
            entry: A {resolve, options} mapping or a bare identifier string.
            index: Position in the plugins list, for error messages.

        Returns:
            The typed plugin declaration.
        """
        prefix = f"plugins[{index}]"
        if isinstance(entry, str):
            entry = {"resolve": entry}
        if not isinstance(entry, Mapping):
            raise ConfigError(prefix, "must be a mapping or a plugin name")
        name = _required_str(entry, "resolve", prefix)
        options = _mapping(entry.get("options"), f"{prefix}.options")
        parser = self._parsers.get(name, OpaquePlugin.from_options)
        return parser(name, options, f"{prefix}.options")


default_plugin_registry = PluginRegistry()


@dataclass(frozen=True)
class SiteConfig:
    """Validated site configuration.

    Attributes:
        title: Site title.
        site_url: Absolute URL the site is published at.
        name: Short site or organization name.
        description: Site description.
        hero: Hero banner settings.
        social: Social links, in declaration order.
        plugins: Plugin declarations, in declaration order.
        extra: siteMetadata keys this engine does not interpret.
    """

    title: str
    site_url: str
    name: str = ""
    description: str = ""
    hero: HeroSettings = field(default_factory=HeroSettings)
    social: tuple[SocialLink, ...] = ()
    plugins: tuple[Plugin, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def plugin(self, name: str) -> Plugin | None:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        return None

    def content_sources(self) -> list[ContentSource]:
        """Return the content directories to scan.

        Plugins declare their own directories. When no plugin declares any
        and no plugin turned local sources off, the default posts and
        authors directories are used.
        """
        sources: list[ContentSource] = []
        for plugin in self.plugins:
            sources.extend(plugin.content_sources())
        if sources or any(isinstance(p, ThemePlugin) for p in self.plugins):
            return sources
        return [
            ContentSource(ContentKind.POST, DEFAULT_CONTENT_POSTS),
            ContentSource(ContentKind.AUTHOR, DEFAULT_CONTENT_AUTHORS),
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the configuration mapping shape."""
        metadata: dict[str, Any] = {
            "title": self.title,
            "name": self.name,
            "siteUrl": self.site_url,
            "description": self.description,
            "hero": self.hero.to_dict(),
            "social": [link.to_dict() for link in self.social],
        }
        metadata.update(thaw(self.extra))
        return {
            "siteMetadata": metadata,
            "plugins": [plugin.to_dict() for plugin in self.plugins],
        }


def _load_hero(value: Any) -> HeroSettings:
    hero = _mapping(value, "siteMetadata.hero")
    heading = _optional_str(hero, "heading", "siteMetadata.hero") or ""
    max_width = hero.get("maxWidth")
    if max_width is not None and (
        isinstance(max_width, bool) or not isinstance(max_width, int) or max_width <= 0
    ):
        raise ConfigError("siteMetadata.hero.maxWidth", "must be a positive integer")
    return HeroSettings(heading=heading, max_width=max_width)


def _load_social(value: Any) -> tuple[SocialLink, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError("siteMetadata.social", "must be a list")
    links = []
    for index, item in enumerate(value):
        prefix = f"siteMetadata.social[{index}]"
        item = _mapping(item, prefix)
        name = _required_str(item, "name", prefix)
        url = _required_str(item, "url", prefix)
        if not _is_url(url):
            raise ConfigError(f"{prefix}.url", f"not a well-formed URL: {url!r}")
        links.append(SocialLink(name=name, url=url))
    return tuple(links)


def _load_plugins(value: Any, registry: PluginRegistry) -> tuple[Plugin, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError("plugins", "must be a list")
    plugins: list[Plugin] = []
    seen: set[str] = set()
    for index, entry in enumerate(value):
        plugin = registry.parse(entry, index)
        if plugin.name in seen:
            raise ConfigError(
                f"plugins[{index}].resolve", f"duplicate plugin {plugin.name!r}"
            )
        seen.add(plugin.name)
        if not registry.is_known(plugin.name):
            log.debug("Plugin %s has no typed options; keeping them opaque", plugin.name)
        plugins.append(plugin)
    return tuple(plugins)


def load_config(
    data: Mapping[str, Any], registry: PluginRegistry | None = None
) -> SiteConfig:
    """Validate a configuration mapping into a SiteConfig.

    Args:
        data: Mapping with "siteMetadata" and "plugins" keys.
        registry: Optional plugin registry (defaults to the built-in one).

    Returns:
        The validated SiteConfig.

    Raises:
        ConfigError: If a required field is missing or a field is malformed.
    """
    if not isinstance(data, Mapping):
        raise ConfigError("", "configuration must be a mapping")
    registry = registry or default_plugin_registry
    metadata = _mapping(data.get("siteMetadata"), "siteMetadata")

    title = _required_str(metadata, "title", "siteMetadata")
    site_url = _required_str(metadata, "siteUrl", "siteMetadata")
    if not _is_url(site_url):
        raise ConfigError("siteMetadata.siteUrl", f"not a well-formed URL: {site_url!r}")

    return SiteConfig(
        title=title,
        site_url=site_url,
        name=_optional_str(metadata, "name", "siteMetadata") or "",
        description=_optional_str(metadata, "description", "siteMetadata") or "",
        hero=_load_hero(metadata.get("hero")),
        social=_load_social(metadata.get("social")),
        plugins=_load_plugins(data.get("plugins"), registry),
        extra=freeze(
            {k: v for k, v in metadata.items() if k not in _SITE_METADATA_KEYS}
        ),
    )


def load_config_file(path: Path, registry: PluginRegistry | None = None) -> SiteConfig:
    """Load and validate a YAML configuration file.

    Args:
        path: Path to the configuration file (usually blogsmith.yaml).
        registry: Optional plugin registry.

    Returns:
        The validated SiteConfig.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or is invalid.
    """
    if not path.exists():
        raise ConfigError(str(path), "configuration file not found")
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(str(path), f"invalid YAML: {exc}") from exc
    if not isinstance(loaded, Mapping):
        raise ConfigError(str(path), "configuration must be a mapping")
    log.debug("Loaded configuration from %s", path)
    return load_config(loaded, registry)
