"""Utility functions for Blogsmith.

Key functions:
    slugify: Convert file names to slugs.
    titleize: Convert file names to human-readable titles.
    extract_date_from_name: Extract a date from a YYYY-MM-DD- file name prefix.
    is_content_file: Check if a path is a content source file.
    is_ignored_path: Check if a path is hidden or internal.
    split_names: Normalize a comma separated string or list into names.
    freeze: Make a tree of mappings and lists read-only.
    thaw: Copy a frozen tree back into dicts and lists.
    plain_data: Convert a tree to JSON/YAML friendly plain data.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

CONTENT_SUFFIXES = (".md", ".mdx")


def _strip_date_prefix(name: str) -> str:
    parts = name.split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
        return "-".join(parts[3:])
    return name


def slugify(name: str) -> str:
    """Convert a file name stem to a slug, dropping any date prefix.

    Args:
        name: File name stem.

    Returns:
        Lower-case slug, or "index" when nothing usable is left.
    """
    cleaned = _strip_date_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a file name to a human-readable title.

    Examples:
        >>> titleize("2024-01-15-hello-world.md")
        'Hello World'
    """
    base = _strip_date_prefix(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a file name with a YYYY-MM-DD prefix.

    Args:
        name: File name stem (without extension).

    Returns:
        datetime if a valid date prefix is found, None otherwise.
    """
    parts = name.split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def coerce_datetime(value: Any) -> datetime | None:
    """Coerce a front-matter date value to a datetime.

    PyYAML already turns unquoted ISO dates into date/datetime objects;
    quoted strings are parsed with datetime.fromisoformat.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def is_content_file(path: Path) -> bool:
    """Check if a path is a Markdown content file (.md or .mdx)."""
    return path.suffix.lower() in CONTENT_SUFFIXES


def is_ignored_path(rel: Path) -> bool:
    """Check if a relative path has a hidden or internal component.

    Components starting with "." or "_" are skipped by the scanner.
    """
    return any(part.startswith((".", "_")) for part in rel.parts)


def split_names(value: Any) -> list[str]:
    """Normalize a name list given as a comma separated string or a list.

    Examples:
        >>> split_names("Ada Lovelace, Alan Turing")
        ['Ada Lovelace', 'Alan Turing']
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = [str(value)]
    return [item.strip() for item in items if item.strip()]


def freeze(value: Any) -> Any:
    """Return a read-only copy of a tree of mappings and lists.

    Mappings become MappingProxyType and lists become tuples, at every depth.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Return a mutable copy of a tree, as dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


def plain_data(value: Any) -> Any:
    """Convert a tree to plain data that JSON and YAML dumpers accept.

    Dates and datetimes become ISO 8601 strings.
    """
    if isinstance(value, Mapping):
        return {str(key): plain_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain_data(item) for item in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
