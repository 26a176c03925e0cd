import copy

import pytest

from blogsmith.config import (
    MANIFEST_PLUGIN,
    THEME_PLUGIN,
    ContentSource,
    HeroSettings,
    ManifestPlugin,
    OpaquePlugin,
    PluginRegistry,
    SiteConfig,
    ThemePlugin,
    load_config,
    load_config_file,
)
from blogsmith.content import ContentKind
from blogsmith.errors import ConfigError

SITE_CONFIG = {
    "siteMetadata": {
        "title": "Lalilo engineering blog",
        "name": "Lalilo",
        "siteUrl": "https://tech.lalilo.com",
        "description": "Lalilo engineering blog",
        "hero": {"heading": "Lalilo Engineering Blog", "maxWidth": 400},
        "social": [
            {"name": "twitter", "url": "https://twitter.com/LaliloApp"},
            {"name": "github", "url": "https://github.com/lalalilo"},
        ],
    },
    "plugins": [
        {
            "resolve": THEME_PLUGIN,
            "options": {
                "contentPosts": "content/posts",
                "contentAuthors": "content/authors",
                "basePath": "/",
                "authorsPage": True,
                "sources": {"local": True},
            },
        },
        {
            "resolve": MANIFEST_PLUGIN,
            "options": {
                "name": "Novela by Narative",
                "short_name": "Novela",
                "start_url": "/",
                "background_color": "#fff",
                "theme_color": "#fff",
                "display": "standalone",
                "icon": "src/assets/favicon.png",
            },
        },
        {"resolve": "gatsby-plugin-sitemap", "options": {"exclude": ["/drafts"]}},
        "gatsby-plugin-offline",
    ],
}


def config_with(**metadata):
    data = copy.deepcopy(SITE_CONFIG)
    data["siteMetadata"].update(metadata)
    return data


def test_load_config_typed_fields():
    config = load_config(SITE_CONFIG)

    assert config.title == "Lalilo engineering blog"
    assert config.site_url == "https://tech.lalilo.com"
    assert config.hero == HeroSettings(heading="Lalilo Engineering Blog", max_width=400)
    assert [link.name for link in config.social] == ["twitter", "github"]

    theme, manifest, sitemap, offline = config.plugins
    assert isinstance(theme, ThemePlugin)
    assert theme.authors_page is True
    assert theme.local_source is True and theme.contentful_source is False
    assert isinstance(manifest, ManifestPlugin)
    assert manifest.app_name == "Novela by Narative"
    assert manifest.display == "standalone"
    assert isinstance(sitemap, OpaquePlugin)
    assert sitemap.options() == {"exclude": ["/drafts"]}
    assert isinstance(offline, OpaquePlugin)
    assert offline.options() == {}
    assert config.plugin(MANIFEST_PLUGIN) is manifest
    assert config.plugin("missing") is None


def test_config_round_trips():
    config = load_config(SITE_CONFIG)
    serialized = config.to_dict()
    assert load_config(serialized) == config
    assert serialized["siteMetadata"]["siteUrl"] == "https://tech.lalilo.com"
    assert serialized["plugins"][1]["options"] == SITE_CONFIG["plugins"][1]["options"]
    assert serialized["plugins"][3] == {"resolve": "gatsby-plugin-offline", "options": {}}


def test_round_trip_keeps_unknown_keys():
    data = config_with(author="Team")
    data["plugins"][0]["options"]["mdx"] = False
    config = load_config(data)
    serialized = config.to_dict()
    assert serialized["siteMetadata"]["author"] == "Team"
    assert serialized["plugins"][0]["options"]["mdx"] is False
    assert load_config(serialized) == config


def test_loaded_config_does_not_alias_input():
    data = copy.deepcopy(SITE_CONFIG)
    config = load_config(data)
    data["plugins"][2]["options"]["exclude"].append("/other")
    assert config.plugins[2].options() == {"exclude": ["/drafts"]}


@pytest.mark.parametrize(
    "metadata, field",
    [
        ({"siteUrl": ""}, "siteMetadata.siteUrl"),
        ({"siteUrl": "tech.lalilo.com"}, "siteMetadata.siteUrl"),
        ({"siteUrl": "ftp://tech.lalilo.com"}, "siteMetadata.siteUrl"),
        ({"siteUrl": "https://tech lalilo.com"}, "siteMetadata.siteUrl"),
        ({"title": ""}, "siteMetadata.title"),
        ({"title": None}, "siteMetadata.title"),
        ({"title": 12}, "siteMetadata.title"),
        ({"hero": {"maxWidth": -1}}, "siteMetadata.hero.maxWidth"),
        ({"hero": {"maxWidth": "wide"}}, "siteMetadata.hero.maxWidth"),
        ({"social": [{"name": "x", "url": "nope"}]}, "siteMetadata.social[0].url"),
        ({"social": [{"url": "https://x.com"}]}, "siteMetadata.social[0].name"),
        ({"social": "twitter"}, "siteMetadata.social"),
    ],
)
def test_invalid_site_metadata(metadata, field):
    with pytest.raises(ConfigError) as exc_info:
        load_config(config_with(**metadata))
    assert exc_info.value.field == field


def test_missing_site_metadata():
    with pytest.raises(ConfigError) as exc_info:
        load_config({"plugins": []})
    assert exc_info.value.field == "siteMetadata.title"
    with pytest.raises(ConfigError):
        load_config(["not", "a", "mapping"])


def test_plugin_validation():
    data = copy.deepcopy(SITE_CONFIG)
    data["plugins"].append({"resolve": THEME_PLUGIN})
    with pytest.raises(ConfigError) as exc_info:
        load_config(data)
    assert exc_info.value.field == "plugins[4].resolve"
    assert "duplicate" in exc_info.value.message

    data = copy.deepcopy(SITE_CONFIG)
    data["plugins"][1]["options"]["display"] = "windowed"
    with pytest.raises(ConfigError) as exc_info:
        load_config(data)
    assert exc_info.value.field == "plugins[1].options.display"

    data = copy.deepcopy(SITE_CONFIG)
    data["plugins"][0]["options"]["authorsPage"] = "yes"
    with pytest.raises(ConfigError) as exc_info:
        load_config(data)
    assert exc_info.value.field == "plugins[0].options.authorsPage"

    data = copy.deepcopy(SITE_CONFIG)
    data["plugins"][0]["options"]["basePath"] = "blog"
    with pytest.raises(ConfigError):
        load_config(data)

    for bad in ({"options": {}}, 42, {"resolve": "x", "options": "y"}):
        data = copy.deepcopy(SITE_CONFIG)
        data["plugins"] = [bad]
        with pytest.raises(ConfigError):
            load_config(data)


def test_content_sources():
    config = load_config(SITE_CONFIG)
    assert config.content_sources() == [
        ContentSource(ContentKind.POST, "content/posts", THEME_PLUGIN),
        ContentSource(ContentKind.AUTHOR, "content/authors", THEME_PLUGIN),
    ]

    remote = copy.deepcopy(SITE_CONFIG)
    remote["plugins"][0]["options"]["sources"] = {"local": False, "contentful": True}
    assert load_config(remote).content_sources() == []

    bare = load_config({"siteMetadata": {"title": "T", "siteUrl": "https://t.dev"}})
    assert bare.plugins == ()
    assert [(s.kind, s.path, s.plugin) for s in bare.content_sources()] == [
        (ContentKind.POST, "content/posts", None),
        (ContentKind.AUTHOR, "content/authors", None),
    ]


def test_custom_plugin_registry():
    registry = PluginRegistry()
    registry.register("gatsby-plugin-sitemap", OpaquePlugin.from_options)
    assert registry.is_known("gatsby-plugin-sitemap")
    config = load_config(SITE_CONFIG, registry=registry)
    assert config.plugins[2].name == "gatsby-plugin-sitemap"


def test_load_config_file(tmp_path):
    path = tmp_path / "blogsmith.yaml"
    path.write_text(
        "siteMetadata:\n  title: Blog\n  siteUrl: https://blog.example.com\n"
        "plugins:\n  - resolve: '@narative/gatsby-theme-novela'\n",
        encoding="utf-8",
    )
    config = load_config_file(path)
    assert isinstance(config, SiteConfig)
    assert isinstance(config.plugins[0], ThemePlugin)
    assert config.plugins[0].content_posts == "content/posts"

    with pytest.raises(ConfigError, match="not found"):
        load_config_file(tmp_path / "missing.yaml")

    path.write_text("siteMetadata: [oops", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_config_file(path)

    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config_file(path)


def test_impossible_date_in_config_file_is_a_config_error(tmp_path):
    path = tmp_path / "blogsmith.yaml"
    path.write_text(
        "siteMetadata:\n  title: Blog\n  siteUrl: https://blog.example.com\n"
        "  launched: 2020-02-30\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_config_file(path)


def test_nested_option_values_are_read_only():
    config = load_config(config_with(keywords=["python", "blog"]))
    assert config.extra["keywords"] == ("python", "blog")
    with pytest.raises(AttributeError):
        config.extra["keywords"].append("other")
    with pytest.raises(AttributeError):
        config.plugins[2].raw_options["exclude"].append("/other")
    assert config.to_dict()["siteMetadata"]["keywords"] == ["python", "blog"]
    assert config.plugins[2].options() == {"exclude": ["/drafts"]}
