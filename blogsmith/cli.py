"""Command-line interface for Blogsmith.

This module defines the CLI commands using the Click framework.

Commands:
- build: Run the build pipeline and report the result.
- dump: Print the assembled site model as YAML or JSON.
- new: Create a new post or author profile interactively.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .config import CONFIG_FILENAME, load_config_file
from .content import ContentKind, derive_slug
from .errors import BlogsmithError, ConfigError
from .log import setup_logging
from .utils import is_content_file


def _project_option(func):
    return click.option(
        "--project",
        "project",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Project directory (defaults to the current directory)",
    )(func)


@click.group()
@click.version_option(version=__version__, prog_name="blogsmith")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Blogsmith blog content engine."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@_project_option
@click.option("--workers", type=int, default=None, help="Parallel content parsers")
@click.option(
    "--timeout", type=float, default=None, help="Seconds a content scan may take"
)
def build(project: Path | None, workers: int | None, timeout: float | None):
    """Build the site model and report a summary."""
    from .build import DEFAULT_SCAN_TIMEOUT, build_site

    project_root = (project or Path.cwd()).resolve()
    model = _run_build(
        project_root,
        max_workers=workers,
        timeout=timeout if timeout is not None else DEFAULT_SCAN_TIMEOUT,
        build_site=build_site,
    )
    for warning in model.warnings:
        click.echo(click.style(f"warning: {warning}", fg="yellow"), err=True)
    click.echo(
        f"Built {model.config.title}: {len(model.posts)} posts, "
        f"{len(model.authors)} authors, {len(model.warnings)} warnings"
    )


@cli.command()
@_project_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
    help="Output format",
)
def dump(project: Path | None, fmt: str):
    """Print the assembled site model."""
    from .build import build_site

    project_root = (project or Path.cwd()).resolve()
    model = _run_build(project_root, build_site=build_site)
    data = model.to_dict()
    if fmt == "json":
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)


@cli.command()
@click.argument("kind", type=click.Choice([k.value for k in ContentKind]))
@_project_option
def new(kind: str, project: Path | None):
    """Create a new post or author profile interactively."""
    project_root = (project or Path.cwd()).resolve()
    try:
        config = load_config_file(project_root / CONFIG_FILENAME)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None

    content_kind = ContentKind(kind)
    source = next(
        (s for s in config.content_sources() if s.kind is content_kind), None
    )
    if source is None:
        raise click.ClickException(
            f"No local {kind} directory is configured in {CONFIG_FILENAME}."
        )
    target_dir = project_root / source.path

    prompt = "Post title:" if content_kind is ContentKind.POST else "Author name:"
    title = questionary.text(
        prompt,
        validate=lambda x: len(x.strip()) > 0 or "Value cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    if content_kind is ContentKind.POST:
        author = questionary.text("Author:", style=_questionary_style()).ask()
        if author is None:
            raise click.Abort()
        today = datetime.now()
        filename = f"{today:%Y-%m-%d}-{_filename_stem(title)}.md"
        frontmatter = {
            "title": title,
            "author": author.strip(),
            "date": today.strftime("%Y-%m-%d"),
            "excerpt": "",
        }
    else:
        filename = f"{_filename_stem(title)}.md"
        frontmatter = {"name": title, "bio": "", "featured": False}

    target_path = target_dir / filename
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {target_path.relative_to(project_root)}"
        )
    slug = derive_slug(Path(filename))
    conflicting = _find_slug(target_dir, slug)
    if conflicting is not None:
        raise click.ClickException(
            f"A {kind} with slug '{slug}' already exists: {conflicting.relative_to(project_root)}"
        )

    target_dir.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    target_path.write_text(f"---\n{header}---\n\n", encoding="utf-8")
    click.echo(f"Created {target_path.relative_to(project_root)}")


def _run_build(project_root: Path, build_site, **kwargs):
    """Run a build, turning Blogsmith errors into a styled report and exit 1."""
    try:
        return build_site(project_root, **kwargs)
    except BlogsmithError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Kind: {exc.kind}", fg="yellow"), err=True)
        location = _error_location(exc, project_root)
        if location:
            click.echo(click.style(f"  At: {location}", fg="yellow"), err=True)
        click.echo(f"  Error: {getattr(exc, 'message', str(exc))}", err=True)
        raise SystemExit(1) from None


def _error_location(exc: BlogsmithError, project_root: Path) -> str:
    for attr in ("path", "root", "field"):
        value = getattr(exc, attr, None)
        if not value:
            continue
        if isinstance(value, Path):
            try:
                return str(value.relative_to(project_root))
            except ValueError:
                return str(value)
        return str(value)
    return ""


def _filename_stem(title: str) -> str:
    words = "".join(ch if ch.isalnum() else " " for ch in title.lower()).split()
    return "-".join(words) or "untitled"


def _find_slug(folder: Path, slug: str) -> Path | None:
    """Return an existing content file in folder that already uses slug."""
    if not folder.exists():
        return None
    for path in sorted(folder.rglob("*")):
        if path.is_file() and is_content_file(path):
            if derive_slug(path.relative_to(folder)) == slug:
                return path
    return None


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
