"""Content files for Sigil.

A thin stand-in for a site's page-build pipeline: it splits a markdown file
into YAML frontmatter and body, derives the ambient `page` value, and expands
the body's shortcodes. Collections, URLs, and markdown rendering belong to the
build pipeline that embeds Sigil.

Key classes and functions:
- ContentFile: Dataclass for a loaded content file.
- load_content_file: Read and split a content file.
- page_context: Build the ambient `page` value for templates.
- expand_content_file: Expand shortcodes in one file's body.
- check_content_file: Validate shortcodes in one file without rendering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ShortcodeError
from .expansion import ShortcodeExpander
from .parser import ShortcodeCall
from .protocols import TemplateStore
from .utils import line_of, slugify, titleize

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
        if not isinstance(data, dict):
            return {}, text
        return data, text[match.end() :]
    except yaml.YAMLError:
        return {}, text


@dataclass
class ContentFile:
    """A markdown content file split into frontmatter and body.

    Attributes:
        path: Path to the source file.
        body: Markdown body after the frontmatter.
        frontmatter: Parsed YAML frontmatter.
        body_line_offset: Number of lines before the body starts.
    """

    path: Path
    body: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body_line_offset: int = 0


def load_content_file(path: Path) -> ContentFile:
    """Read a content file and split off its frontmatter."""
    raw = path.read_text(encoding="utf-8")
    frontmatter, body = extract_frontmatter(raw)
    offset = line_of(raw, len(raw) - len(body)) - 1
    return ContentFile(
        path=path, body=body, frontmatter=frontmatter, body_line_offset=offset
    )


def page_context(
    content: ContentFile, content_root: Path | None = None
) -> dict[str, Any]:
    """Build the ambient `page` value for a content file.

    Args:
        content: Loaded content file.
        content_root: Directory the collection folders live in. The first
            folder below it names the page's collection.

    Returns:
        Dictionary with title, slug, collection, and tags.
    """
    frontmatter = content.frontmatter
    collection = ""
    if content_root is not None:
        try:
            relative = content.path.resolve().relative_to(content_root.resolve())
            parts = relative.parts
        except ValueError:
            parts = ()
        if len(parts) > 1:
            collection = parts[0]

    tags = frontmatter.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]

    return {
        "title": frontmatter.get("title") or titleize(content.path.name),
        "slug": str(frontmatter.get("slug") or slugify(content.path.stem)),
        "collection": collection,
        "tags": [str(tag) for tag in tags],
    }


def expand_content_file(
    path: Path,
    store: TemplateStore,
    site: dict[str, Any] | None = None,
    content_root: Path | None = None,
) -> tuple[ContentFile, str]:
    """Expand the shortcodes in one content file's body.

    Args:
        path: Path to the markdown file.
        store: Template store (usually a ShortcodeRegistry).
        site: Ambient `site` value.
        content_root: Directory used to derive the page's collection.

    Returns:
        Tuple of (loaded content file, expanded body).

    Raises:
        ShortcodeError: With the line number counted from the top of the file.
    """
    content = load_content_file(path)
    page = page_context(content, content_root)
    try:
        expanded = ShortcodeExpander(store).expand(
            content.body, path, page, site or {}
        )
    except ShortcodeError as exc:
        _shift_line(exc, content.body_line_offset)
        raise
    return content, expanded


def _shift_line(exc: ShortcodeError, offset: int) -> None:
    """Make an error's line relative to the whole file instead of the body."""
    if not offset:
        return
    exc.line += offset
    exc.args = (f"{exc.source_path}:{exc.line}: {exc.message}",)


def check_content_file(path: Path, store: TemplateStore) -> list[ShortcodeCall]:
    """Parse and validate one content file's shortcodes without rendering.

    Returns:
        The calls found in the body, in document order.

    Raises:
        ShortcodeError: With the line number counted from the top of the file.
    """
    content = load_content_file(path)
    try:
        return ShortcodeExpander(store).collect(content.body, path)
    except ShortcodeError as exc:
        _shift_line(exc, content.body_line_offset)
        raise
