"""Error types for Blogsmith.

Every error raised by the engine derives from BlogsmithError. Errors carry
the context a user needs to fix the problem (the offending file or config
field) as attributes, and chain the original exception when they wrap one.

Fatal errors abort a build:
- ConfigError: missing or malformed configuration (including theme data).
- AssemblyError: a plugin references content that produced no documents.
- ScanError: a content scan was cancelled or timed out.
- BuildStateError: a build was run from a state other than Idle.

Collected errors are kept on the site model as warnings:
- ParseError: a content document could not be parsed and was skipped.
- ReferenceWarning: a post refers to an author that does not exist.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class BlogsmithError(Exception):
    """Base class for all Blogsmith errors."""

    kind = "error"


class ConfigError(BlogsmithError):
    """Missing or malformed configuration.

    Attributes:
        field: Dotted path of the offending field (e.g. "siteMetadata.siteUrl").
        message: Human-readable error message.
    """

    kind = "config"

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)


class ParseError(BlogsmithError):
    """A content document could not be parsed.

    Attributes:
        path: Path to the offending file.
        message: Human-readable error message.
        original_error: The exception that was caught, if any.
    """

    kind = "parse"

    def __init__(
        self,
        path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.path = path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{path}: {message}")


class ReferenceWarning(BlogsmithError):
    """A document refers to something that does not exist."""

    kind = "reference"

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class AssemblyError(BlogsmithError):
    """A plugin references a content path that yielded no documents.

    Attributes:
        plugin: Identifier of the plugin declaring the content path.
        path: The declared content path.
        message: Human-readable error message.
    """

    kind = "assembly"

    def __init__(self, plugin: str, path: str, message: str):
        self.plugin = plugin
        self.path = path
        self.message = message
        super().__init__(f"{plugin}: {path}: {message}")


class ScanError(BlogsmithError):
    """A content scan was aborted before finishing.

    Attributes:
        root: Root directory of the aborted scan.
        message: Human-readable error message.
        errors: Parse errors recorded before the scan was aborted.
    """

    kind = "scan"

    def __init__(self, root: Path, message: str, errors: Sequence[ParseError] = ()):
        self.root = root
        self.message = message
        self.errors = tuple(errors)
        detail = f" ({len(self.errors)} parse errors)" if self.errors else ""
        super().__init__(f"{root}: {message}{detail}")


class BuildStateError(BlogsmithError):
    """A build was driven through an invalid state transition."""

    kind = "state"
