"""Site building for Blogsmith.

This module runs the build pipeline: load the configuration, scan content,
resolve the theme, and assemble the site model. A build moves through the
states

    Idle -> Loading -> Scanning -> Resolving -> Assembling -> Ready

and lands in Failed as soon as any stage raises a fatal error. A finished
build (Ready or Failed) has to be reset to Idle before it can run again;
nothing is retried inside a build.

Key classes and functions:
- BuildState: States of the build state machine.
- SiteBuild: One build of one project.
- build_site: Run a build of a project directory in one call.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import (
    CONFIG_FILENAME,
    PluginRegistry,
    SiteConfig,
    load_config,
    load_config_file,
)
from .content import DEFAULT_SCAN_TIMEOUT, ContentDocument, ContentKind, ContentScanner
from .errors import BlogsmithError, BuildStateError, ParseError
from .site import SiteModel, assemble
from .theme import DEFAULT_THEME, THEME_FILENAME, ThemeDefinition, load_theme_file, resolve_theme

log = logging.getLogger(__name__)


class BuildState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SCANNING = "scanning"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    READY = "ready"
    FAILED = "failed"


_TRANSITIONS: dict[BuildState, tuple[BuildState, ...]] = {
    BuildState.IDLE: (BuildState.LOADING,),
    BuildState.LOADING: (BuildState.SCANNING, BuildState.FAILED),
    BuildState.SCANNING: (BuildState.RESOLVING, BuildState.FAILED),
    BuildState.RESOLVING: (BuildState.ASSEMBLING, BuildState.FAILED),
    BuildState.ASSEMBLING: (BuildState.READY, BuildState.FAILED),
    BuildState.READY: (),
    BuildState.FAILED: (),
}


class SiteBuild:
    """One build of a project.

    Inputs not passed explicitly are read from the project directory:
    blogsmith.yaml for the configuration and theme.yaml for the theme
    override. Content directories are resolved relative to project_root.
    A plugin registry other than the default one can be passed to parse
    additional plugin kinds.

    Attributes:
        project_root: Root directory of the project.
        state: Current BuildState.
        history: States visited by the current run, starting with Idle.
        error: The error that failed the build, if any.
        model: The assembled SiteModel once the build is Ready.
    """

    def __init__(
        self,
        project_root: Path,
        config: Mapping[str, Any] | None = None,
        theme_override: Mapping[str, Any] | None = None,
        base_theme: Mapping[str, Any] | ThemeDefinition | None = None,
        max_workers: int | None = None,
        timeout: float | None = DEFAULT_SCAN_TIMEOUT,
        cancel: threading.Event | None = None,
        registry: PluginRegistry | None = None,
    ):
        self.project_root = project_root
        self.config_data = config
        self.theme_override = theme_override
        self.base_theme = base_theme if base_theme is not None else DEFAULT_THEME
        self.max_workers = max_workers
        self.timeout = timeout
        self.cancel = cancel
        self.registry = registry
        self.reset()

    def reset(self) -> None:
        """Return the build to Idle, discarding any previous result."""
        self.state = BuildState.IDLE
        self.history: list[BuildState] = [BuildState.IDLE]
        self.error: BlogsmithError | None = None
        self.model: SiteModel | None = None

    def _enter(self, state: BuildState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise BuildStateError(
                f"cannot move build from {self.state.value} to {state.value}"
            )
        log.debug("Build %s: %s -> %s", self.project_root, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def run(self) -> SiteModel:
        """Run every stage and return the assembled model.

        Returns:
            The SiteModel; also stored on self.model.

        Raises:
            BuildStateError: If the build is not Idle.
            BlogsmithError: The error that failed the build, after the build
                has entered Failed and stored it on self.error.
        """
        if self.state is not BuildState.IDLE:
            raise BuildStateError(
                f"build is {self.state.value}; reset() it before running again"
            )
        try:
            self._enter(BuildState.LOADING)
            config = self._load()
            self._enter(BuildState.SCANNING)
            documents, parse_errors = self._scan(config)
            self._enter(BuildState.RESOLVING)
            theme = self._resolve()
            self._enter(BuildState.ASSEMBLING)
            model = assemble(config, theme, documents, parse_errors)
        except BlogsmithError as exc:
            self.error = exc
            self._enter(BuildState.FAILED)
            log.error("Build failed while %s: %s", self.history[-2].value, exc)
            raise
        self.model = model
        self._enter(BuildState.READY)
        return model

    def _load(self) -> SiteConfig:
        if self.config_data is not None:
            return load_config(self.config_data, self.registry)
        return load_config_file(self.project_root / CONFIG_FILENAME, self.registry)

    def _scan(self, config: SiteConfig) -> tuple[list[ContentDocument], list[ParseError]]:
        documents: list[ContentDocument] = []
        errors: list[ParseError] = []
        # Slugs are unique per kind across every source of that kind
        claimed: dict[ContentKind, dict[str, Path]] = {}
        for source in config.content_sources():
            scanner = ContentScanner(
                self.project_root / source.path,
                source.kind,
                source=source.path,
                max_workers=self.max_workers,
                timeout=self.timeout,
            )
            result = scanner.scan(cancel=self.cancel)
            seen = claimed.setdefault(source.kind, {})
            for document in result.documents:
                try:
                    scanner.claim_slug(document, seen)
                except ParseError as exc:
                    log.warning("Skipping %s: %s", exc.path, exc.message)
                    errors.append(exc)
                    continue
                documents.append(document)
            errors.extend(result.errors)
        return documents, errors

    def _resolve(self) -> ThemeDefinition:
        override = self.theme_override
        if override is None:
            theme_path = self.project_root / THEME_FILENAME
            override = load_theme_file(theme_path) if theme_path.exists() else {}
        return resolve_theme(self.base_theme, override)


def build_site(
    project_root: Path,
    max_workers: int | None = None,
    timeout: float | None = DEFAULT_SCAN_TIMEOUT,
    cancel: threading.Event | None = None,
) -> SiteModel:
    """Build the site model of a project directory.

    Args:
        project_root: Directory holding blogsmith.yaml, theme.yaml and content.
        max_workers: Thread pool size for content parsing.
        timeout: Seconds each content scan may take.
        cancel: Optional event that aborts the build's content scans.

    Returns:
        The assembled SiteModel.

    Raises:
        BlogsmithError: If the build failed.
    """
    build = SiteBuild(
        project_root, max_workers=max_workers, timeout=timeout, cancel=cancel
    )
    return build.run()
