from pathlib import Path

import pytest

CONFIG_YAML = """\
siteMetadata:
  title: Lalilo engineering blog
  name: Lalilo
  siteUrl: https://tech.lalilo.com
  description: Lalilo engineering blog
  hero:
    heading: Lalilo Engineering Blog
    maxWidth: 400
  social:
    - name: github
      url: https://github.com/lalalilo
plugins:
  - resolve: "@narative/gatsby-theme-novela"
    options:
      contentPosts: content/posts
      contentAuthors: content/authors
      basePath: /
      authorsPage: true
      sources:
        local: true
  - resolve: gatsby-plugin-manifest
    options:
      name: Lalilo
      display: standalone
"""

THEME_YAML = """\
initialColorMode: dark
colors:
  primary: "#33455B"
  accent: "#82b2ff"
  modes:
    dark:
      gradient: none
      accent: "#91BDFA"
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path) -> Path:
    """A small blog project with two posts, one broken post and one author."""
    root = tmp_path / "blog"
    write(root / "blogsmith.yaml", CONFIG_YAML)
    write(root / "theme.yaml", THEME_YAML)
    posts = root / "content" / "posts"
    write(
        posts / "2020-03-01-first-post" / "index.md",
        "---\ntitle: First post\nauthor: Jane Doe\ndate: 2020-03-01\n---\nHello.\n",
    )
    write(
        posts / "2020-04-01-second.md",
        "---\ntitle: Second\nauthor: Jane Doe, Ghost Writer\n---\nAgain.\n",
    )
    write(posts / "broken.md", "---\ntitle: Broken\nNo end\n")
    write(
        root / "content" / "authors" / "jane-doe.md",
        "---\nname: Jane Doe\nbio: Writes code\nfeatured: true\n---\n",
    )
    return root
