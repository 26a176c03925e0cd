"""Blogsmith blog content engine.

This package turns a blog's declarative configuration into a site model ready
for rendering. It loads site metadata and plugin wiring, scans post and author
content with front-matter, merges a theme override onto a base theme, and
assembles everything into one immutable model handed to an external renderer.

The main entry points are the build module, which runs the whole pipeline,
and the CLI module, which exposes it on the command line.

Architecture:
- config: site metadata and plugin declarations (Config Loader)
- content / frontmatter: content discovery and parsing (Content Source Scanner)
- theme: base theme plus override deep merge (Theme Resolver)
- site: cross-checks and the immutable SiteModel (Site Assembler)
- build: the build state machine tying the stages together
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
