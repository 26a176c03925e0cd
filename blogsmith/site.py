"""Site assembly for Blogsmith.

The assembler is the last stage of a build. It checks that the content the
configuration points at actually exists, cross-references post authors, and
freezes configuration, theme and documents into one SiteModel.

Key classes and functions:
- SiteModel: Immutable result of a build, handed to an external renderer.
- assemble: Validate and combine the build inputs into a SiteModel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .config import SiteConfig
from .content import ContentDocument, ContentKind
from .errors import AssemblyError, BlogsmithError, ReferenceWarning
from .theme import ThemeDefinition
from .utils import plain_data

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteModel:
    """The assembled site, ready for rendering.

    Attributes:
        config: Validated site configuration.
        theme: Resolved theme.
        documents: All documents, posts first, each kind in path order.
        warnings: Non-fatal problems found during the build.
    """

    config: SiteConfig
    theme: ThemeDefinition
    documents: tuple[ContentDocument, ...]
    warnings: tuple[BlogsmithError, ...] = ()

    @property
    def posts(self) -> tuple[ContentDocument, ...]:
        return tuple(d for d in self.documents if d.kind is ContentKind.POST)

    @property
    def authors(self) -> tuple[ContentDocument, ...]:
        return tuple(d for d in self.documents if d.kind is ContentKind.AUTHOR)

    def author(self, name: str) -> ContentDocument | None:
        """Find an author profile by display name or slug (case-insensitive)."""
        wanted = name.strip().lower()
        for document in self.authors:
            if wanted in (document.slug, document.title.lower()):
                return document
        return None

    def posts_by(self, name: str) -> tuple[ContentDocument, ...]:
        """Return the posts attributed to an author, by name or slug."""
        profile = self.author(name)
        names = {name.strip().lower()}
        if profile is not None:
            names.update({profile.slug, profile.title.lower()})
        return tuple(
            post
            for post in self.posts
            if any(author.lower() in names for author in post.authors)
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain data view of the model for renderers and dumps."""
        return {
            "config": plain_data(self.config.to_dict()),
            "theme": plain_data(self.theme.to_mapping()),
            "posts": [d.to_dict() for d in self.posts],
            "authors": [d.to_dict() for d in self.authors],
            "warnings": [
                {"kind": w.kind, "message": str(w)} for w in self.warnings
            ],
        }


def _check_content_paths(config: SiteConfig, documents: list[ContentDocument]) -> None:
    for source in config.content_sources():
        if source.plugin is None:
            continue
        found = [d for d in documents if d.kind is source.kind and d.source == source.path]
        if not found:
            raise AssemblyError(
                source.plugin,
                source.path,
                f"no {source.kind.value} documents found; check the plugin's content path",
            )
        log.debug("%s: %d documents in %s", source.plugin, len(found), source.path)


def _check_authors(documents: list[ContentDocument]) -> list[ReferenceWarning]:
    known: set[str] = set()
    for document in documents:
        if document.kind is ContentKind.AUTHOR:
            known.update({document.slug, document.title.lower()})
    warnings = []
    for document in documents:
        if document.kind is not ContentKind.POST:
            continue
        for author in document.authors:
            if author.lower() not in known:
                warning = ReferenceWarning(document.path, f"unknown author {author!r}")
                log.warning("%s", warning)
                warnings.append(warning)
    return warnings


def assemble(
    config: SiteConfig,
    theme: ThemeDefinition,
    documents: Iterable[ContentDocument],
    warnings: Iterable[BlogsmithError] = (),
) -> SiteModel:
    """Combine the build inputs into an immutable SiteModel.

    Args:
        config: Validated site configuration.
        theme: Resolved theme.
        documents: Scanned documents.
        warnings: Non-fatal errors collected by earlier stages.

    Returns:
        The assembled SiteModel.

    Raises:
        AssemblyError: If a plugin-declared content path produced no documents.
    """
    documents = list(documents)
    _check_content_paths(config, documents)
    ordered = [d for d in documents if d.kind is ContentKind.POST] + [
        d for d in documents if d.kind is ContentKind.AUTHOR
    ]
    collected = list(warnings) + _check_authors(ordered)
    model = SiteModel(
        config=config,
        theme=theme,
        documents=tuple(ordered),
        warnings=tuple(collected),
    )
    log.info(
        "Assembled %s: %d posts, %d authors, %d warnings",
        config.title,
        len(model.posts),
        len(model.authors),
        len(model.warnings),
    )
    return model
