"""Command-line interface for Sigil.

This module defines the CLI commands using Click framework.

Commands:
- list: Show every known shortcode and where it comes from.
- expand: Expand the shortcodes in a content file.
- check: Parse and validate shortcodes in content files without rendering.
- eject: Copy a built-in shortcode template into the project for editing.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import click

from . import __version__
from .config import (
    ConfigError,
    load_config,
    load_registry,
    shortcodes_path,
    site_context,
)
from .content import check_content_file, expand_content_file
from .errors import RegistryError, ShortcodeError
from .registry import BUILTIN_DIR, TEMPLATE_SUFFIX, ShortcodeRegistry
from .renderers import MarkdownRenderer

_project_option = click.option(
    "--project",
    "project",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root containing sigil.yaml (defaults to the current directory)",
)


@click.group()
@click.version_option(version=__version__, prog_name="sigil")
def cli():
    """Sigil shortcode expander."""


def _project_root(project: Path | None) -> Path:
    return (project or Path.cwd()).resolve()


def _load(project_root: Path, verbose: bool = False):
    """Load configuration and registry, reporting failures like a build error."""
    try:
        config = load_config(project_root)
        registry = load_registry(project_root, config)
    except (ConfigError, RegistryError) as exc:
        _report(
            "Configuration failed:", exc.source_path, None, exc.message, project_root
        )
        raise SystemExit(1) from None
    if verbose:
        user_dir = registry.shortcodes_dir
        click.echo(f"Built-in shortcodes: {registry.builtin_dir}", err=True)
        if user_dir is not None and user_dir.is_dir():
            click.echo(f"Project shortcodes: {user_dir}", err=True)
        click.echo(f"Loaded {len(registry)} shortcodes", err=True)
    return config, registry


def _display_path(path: Path, project_root: Path) -> Path:
    """Show a path relative to the project when it lies inside it."""
    try:
        return path.resolve().relative_to(project_root)
    except ValueError:
        return path


def _report(
    headline: str,
    source_path: Path,
    line: int | None,
    message: str,
    project_root: Path,
) -> None:
    """Display a user-friendly error message."""
    shown = _display_path(source_path, project_root)
    click.echo(click.style(headline, fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
    if line is not None:
        click.echo(click.style(f"  Line: {line}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)


@cli.command(name="list")
@_project_option
def list_shortcodes(project: Path | None):
    """List known shortcodes."""
    project_root = _project_root(project)
    _, registry = _load(project_root)
    width = max((len(name) for name in registry.names), default=0)
    for name in registry.names:
        origin = registry.origin(name)
        label = click.style(origin, fg="cyan" if origin == "user" else "white")
        click.echo(f"{name.ljust(width)}  {label}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_project_option
@click.option("--html", is_flag=True, help="Render the expanded markdown to HTML")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result to a file instead of stdout",
)
@click.option("-v", "--verbose", is_flag=True, help="Show where shortcodes load from")
def expand(
    file: Path, project: Path | None, html: bool, output: Path | None, verbose: bool
):
    """Expand the shortcodes in FILE."""
    project_root = _project_root(project)
    config, registry = _load(project_root, verbose)
    content_root = project_root / str(config.get("content_dir") or "")
    try:
        _, expanded = expand_content_file(
            file, registry, site_context(config), content_root
        )
    except ShortcodeError as exc:
        _report(
            "Expansion failed:", exc.source_path, exc.line, exc.message, project_root
        )
        raise SystemExit(1) from None

    if html:
        expanded = MarkdownRenderer().render(expanded)
    if output is None:
        click.echo(expanded, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(expanded, encoding="utf-8")
    click.echo(f"Wrote {output}", err=True)


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@_project_option
@click.option("-v", "--verbose", is_flag=True, help="Show where shortcodes load from")
def check(files: tuple[Path, ...], project: Path | None, verbose: bool):
    """Validate the shortcodes in FILES without rendering them."""
    project_root = _project_root(project)
    _, registry = _load(project_root, verbose)
    failures = 0
    total = 0
    for path in files:
        try:
            calls = check_content_file(path, registry)
        except ShortcodeError as exc:
            failures += 1
            _report(
                "Check failed:", exc.source_path, exc.line, exc.message, project_root
            )
            continue
        total += len(calls)
        if verbose:
            click.echo(f"{path}: {len(calls)} shortcodes", err=True)
    if failures:
        raise SystemExit(1)
    click.echo(f"Checked {len(files)} files, {total} shortcodes OK")


@cli.command()
@click.argument("name")
@_project_option
@click.option("--force", is_flag=True, help="Overwrite an existing project template")
def eject(name: str, project: Path | None, force: bool):
    """Copy the built-in NAME template into the project for customisation."""
    project_root = _project_root(project)
    source = BUILTIN_DIR / f"{name}{TEMPLATE_SUFFIX}"
    if not source.is_file():
        builtins = ", ".join(ShortcodeRegistry(None).names)
        raise click.ClickException(
            f"No built-in shortcode named '{name}'. Available: {builtins}"
        )
    try:
        config = load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    target_dir = shortcodes_path(project_root, config)
    if target_dir is None:
        raise click.ClickException("shortcodes_dir is disabled in sigil.yaml")
    target = target_dir / source.name
    if target.exists() and not force:
        raise click.ClickException(
            f"File already exists: {_display_path(target, project_root)}"
        )
    target_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)
    click.echo(f"Created {_display_path(target, project_root)}")


def main():
    """Entry point for the CLI application."""
    cli()
