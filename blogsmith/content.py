"""Content scanning for Blogsmith.

This module discovers content files (posts and author profiles) under a
content directory and parses each one into a ContentDocument: front-matter
metadata plus the raw body.

A malformed file never aborts a scan. Its ParseError is recorded and the
file is skipped, so one bad post only costs that post. Only a cancelled or
timed out scan fails as a whole, with a single ScanError.

Key classes:
- ContentKind: Kind of a content document (post or author).
- ContentDocument: Immutable parsed content file.
- ContentScanner: Discovers and parses the files of one content directory.
- ScanResult: Documents and parse errors produced by a full scan.
"""

from __future__ import annotations

import concurrent.futures
import enum
import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .errors import ParseError, ScanError
from .frontmatter import parse_frontmatter
from .utils import (
    coerce_datetime,
    extract_date_from_name,
    freeze,
    is_content_file,
    is_ignored_path,
    plain_data,
    slugify,
    split_names,
    titleize,
)

log = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 30.0


class ContentKind(str, enum.Enum):
    POST = "post"
    AUTHOR = "author"


# Front-matter keys a document of each kind must define
REQUIRED_KEYS: dict[ContentKind, tuple[str, ...]] = {
    ContentKind.POST: ("title",),
    ContentKind.AUTHOR: ("name",),
}


@dataclass(frozen=True)
class ContentDocument:
    """A parsed content file.

    Attributes:
        kind: Post or author.
        slug: Identifier derived from the file path, unique per kind.
        frontmatter: Read-only mapping of front-matter keys to values.
        body: Raw body text following the front-matter.
        path: Path to the source file.
        source: Content directory the file was scanned from.
    """

    kind: ContentKind
    slug: str
    frontmatter: Mapping[str, Any]
    body: str
    path: Path
    source: str = ""

    @property
    def title(self) -> str:
        """Title from front-matter ("title", or "name" for authors)."""
        for key in ("title", "name"):
            value = self.frontmatter.get(key)
            if value:
                return str(value)
        return titleize(self.path.name)

    @property
    def date(self) -> datetime | None:
        """Publication date from front-matter or a YYYY-MM-DD- file name prefix."""
        value = coerce_datetime(self.frontmatter.get("date"))
        if value is not None:
            return value
        stem = self.path.parent.name if self.path.stem == "index" else self.path.stem
        return extract_date_from_name(stem)

    @property
    def authors(self) -> list[str]:
        """Author names a post is attributed to."""
        return split_names(self.frontmatter.get("author"))

    def to_dict(self) -> dict[str, Any]:
        date = self.date
        return {
            "kind": self.kind.value,
            "slug": self.slug,
            "title": self.title,
            "date": date.isoformat() if date else None,
            "frontmatter": plain_data(self.frontmatter),
            "body": self.body,
            "path": self.path.as_posix(),
            "source": self.source,
        }


def derive_slug(rel: Path) -> str:
    """Derive a document slug from its path relative to the content root.

    Post folders are supported: "2020-01-01-hello/index.md" has slug "hello".
    """
    stem = rel.stem
    if stem == "index" and rel.parent != Path("."):
        stem = rel.parent.name
    return slugify(stem)


@dataclass
class ScanResult:
    """Documents and errors produced by ContentScanner.scan.

    Attributes:
        documents: Parsed documents sorted by file path.
        errors: Parse errors sorted by file path.
    """

    documents: list[ContentDocument] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)


class ContentScanner:
    """Discovers and parses content files of one kind under a directory.

    Attributes:
        root: Directory to scan.
        kind: Kind assigned to every scanned document.
        source: Label of the content directory (usually the configured path).
        max_workers: Thread pool size for scan(); None lets the executor decide.
        timeout: Seconds scan() may take before it is aborted.
        errors: Parse errors recorded by the last iter_documents() run.
    """

    def __init__(
        self,
        root: Path,
        kind: ContentKind,
        source: str | None = None,
        max_workers: int | None = None,
        timeout: float | None = DEFAULT_SCAN_TIMEOUT,
    ):
        self.root = root
        self.kind = ContentKind(kind)
        self.source = source if source is not None else root.as_posix()
        self.max_workers = max_workers
        self.timeout = timeout
        self.errors: list[ParseError] = []

    def iter_files(self) -> list[Path]:
        """List content files under the root in lexicographic path order.

        Hidden and "_"-prefixed files and directories are skipped.

        Returns:
            Sorted list of paths to content files.
        """
        if not self.root.is_dir():
            log.warning("Content directory %s does not exist", self.root)
            return []
        files: list[Path] = []
        for path in self.root.rglob("*"):
            if path.is_dir():
                continue
            rel = path.relative_to(self.root)
            if is_ignored_path(rel):
                log.debug("Skipping internal file %s", path)
                continue
            if is_content_file(path):
                files.append(path)
        return sorted(files, key=lambda p: p.relative_to(self.root).as_posix())

    def parse(self, path: Path) -> ContentDocument:
        """Parse one content file into a ContentDocument.

        Args:
            path: Path to the content file.

        Raises:
            ParseError: If the file cannot be read or its front-matter is invalid.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(path, f"cannot read file: {exc}", exc) from exc
        frontmatter, body = parse_frontmatter(raw, path)
        for key in REQUIRED_KEYS[self.kind]:
            if not frontmatter.get(key):
                raise ParseError(path, f"missing required front-matter key {key!r}")
        return ContentDocument(
            kind=self.kind,
            slug=derive_slug(path.relative_to(self.root)),
            frontmatter=freeze(frontmatter),
            body=body,
            path=path,
            source=self.source,
        )

    def iter_documents(self) -> Iterator[ContentDocument]:
        """Lazily parse documents in file path order.

        Parse errors are appended to self.errors and the file is skipped.
        The iterator is single use; iterate again to re-scan.
        """
        self.errors = []
        seen: dict[str, Path] = {}
        for path in self.iter_files():
            try:
                document = self.parse(path)
                self.claim_slug(document, seen)
            except ParseError as exc:
                self._record(exc)
                continue
            yield document

    def scan(self, cancel: threading.Event | None = None) -> ScanResult:
        """Parse all documents in parallel and return them in path order.

        Args:
            cancel: Optional event; setting it aborts the remaining scan.

        Returns:
            ScanResult with sorted documents and parse errors.

        Raises:
            ScanError: If the scan was cancelled or exceeded self.timeout.
        """
        if cancel is not None and cancel.is_set():
            raise ScanError(self.root, "scan cancelled")
        paths = self.iter_files()
        parsed: dict[Path, ContentDocument] = {}
        errors: list[ParseError] = []

        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="blogsmith-scan"
        )
        try:
            futures = {
                pool.submit(self._parse_unless_cancelled, path, cancel): path
                for path in paths
            }
            try:
                for future in concurrent.futures.as_completed(futures, timeout=self.timeout):
                    if cancel is not None and cancel.is_set():
                        raise ScanError(self.root, "scan cancelled", errors)
                    try:
                        document = future.result()
                    except ParseError as exc:
                        errors.append(exc)
                        continue
                    if document is not None:
                        parsed[futures[future]] = document
            except concurrent.futures.TimeoutError as exc:
                raise ScanError(
                    self.root, f"scan timed out after {self.timeout}s", errors
                ) from exc
        except Exception:
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

        result = ScanResult()
        seen: dict[str, Path] = {}
        for path in sorted(parsed, key=lambda p: p.relative_to(self.root).as_posix()):
            document = parsed[path]
            try:
                self.claim_slug(document, seen)
            except ParseError as exc:
                errors.append(exc)
                continue
            result.documents.append(document)
        result.errors = sorted(errors, key=lambda e: e.path.as_posix())
        for error in result.errors:
            self._log_error(error)
        return result

    def _parse_unless_cancelled(
        self, path: Path, cancel: threading.Event | None
    ) -> ContentDocument | None:
        if cancel is not None and cancel.is_set():
            return None
        return self.parse(path)

    def claim_slug(self, document: ContentDocument, seen: dict[str, Path]) -> None:
        """Record document.slug in seen, or raise ParseError if it is taken."""
        previous = seen.get(document.slug)
        if previous is not None:
            raise ParseError(
                document.path,
                f"duplicate {self.kind.value} slug {document.slug!r} (already used by {previous})",
            )
        seen[document.slug] = document.path

    def _record(self, error: ParseError) -> None:
        self.errors.append(error)
        self._log_error(error)

    def _log_error(self, error: ParseError) -> None:
        log.warning("Skipping %s: %s", error.path, error.message)
