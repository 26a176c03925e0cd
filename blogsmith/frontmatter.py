"""Front-matter parsing for Blogsmith content files.

A content file may start with a YAML block delimited by two ``---`` lines:

    ---
    title: Hello
    date: 2020-01-01
    ---
    Body text...

Files without an opening delimiter have no front-matter; the whole text is
the body. Anything else that does not fit the format raises ParseError.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError

DELIMITER = "---"


def _is_delimiter(line: str) -> bool:
    return line.strip() == DELIMITER


def split_frontmatter(text: str, path: Path) -> tuple[str | None, str]:
    """Split raw file content into the front-matter block and the body.

    Args:
        text: Raw file content.
        path: Path to the file, used in error messages.

    Returns:
        Tuple of (front-matter source or None, body text).

    Raises:
        ParseError: If the opening delimiter is never closed.
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return None, text
    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return header, body
    raise ParseError(path, "missing closing front-matter delimiter '---'")


def _check_value(key: str, value: Any, path: Path) -> None:
    if isinstance(value, Mapping):
        raise ParseError(path, f"front-matter key {key!r} must be a scalar or a list")


def parse_frontmatter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Parse YAML front-matter from content.

    Args:
        text: Raw file content.
        path: Path to the file, used in error messages.

    Returns:
        Tuple of (front-matter dict, body text).

    Raises:
        ParseError: On an unclosed block, invalid YAML, a block that is not a
            mapping, non-string keys, or nested mapping values.
    """
    header, body = split_frontmatter(text, path)
    if header is None:
        return {}, body
    try:
        data = yaml.safe_load(header)
    except (yaml.YAMLError, ValueError) as exc:
        # ValueError: timestamps that are not real dates (e.g. 2020-02-30)
        raise ParseError(path, f"invalid front-matter YAML: {exc}", exc) from exc
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise ParseError(path, "front-matter must be a mapping of keys to values")
    for key, value in data.items():
        if not isinstance(key, str):
            raise ParseError(path, f"front-matter key {key!r} is not a string")
        _check_value(key, value, path)
    return data, body
