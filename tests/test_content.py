from pathlib import Path

import pytest

from sigil.content import (
    check_content_file,
    expand_content_file,
    extract_frontmatter,
    load_content_file,
    page_context,
)
from sigil.errors import UnknownShortcodeError
from sigil.registry import ShortcodeRegistry


def create_content(tmp_path: Path) -> Path:
    content = tmp_path / "content"
    (content / "posts").mkdir(parents=True)
    (tmp_path / "shortcodes").mkdir()
    (tmp_path / "shortcodes" / "heading.html").write_text(
        "<h2>{{ page.title }} in {{ page.collection }} on {{ site.title }}</h2>",
        encoding="utf-8",
    )
    (content / "posts" / "2024-01-15-my-post.md").write_text(
        "---\ntitle: My Post\ntags: python\n---\n"
        "Intro\n\n{{< heading() >}}\n",
        encoding="utf-8",
    )
    (content / "about.md").write_text("# About\n\n{{< heading() >}}\n", encoding="utf-8")
    return content


def test_extract_frontmatter():
    data, body = extract_frontmatter("---\ntitle: Hi\n---\nBody")
    assert data == {"title": "Hi"}
    assert body == "Body"
    assert extract_frontmatter("No frontmatter") == ({}, "No frontmatter")
    assert extract_frontmatter("---\n- a\n---\nBody") == ({}, "---\n- a\n---\nBody")
    assert extract_frontmatter("---\n: [\n---\nBody")[0] == {}


def test_load_content_file_tracks_body_offset(tmp_path):
    content = create_content(tmp_path)
    loaded = load_content_file(content / "posts" / "2024-01-15-my-post.md")
    assert loaded.frontmatter["title"] == "My Post"
    assert loaded.body.startswith("Intro")
    assert loaded.body_line_offset == 4

    plain = load_content_file(content / "about.md")
    assert plain.frontmatter == {}
    assert plain.body_line_offset == 0


def test_page_context(tmp_path):
    content = create_content(tmp_path)
    post = load_content_file(content / "posts" / "2024-01-15-my-post.md")
    assert page_context(post, content) == {
        "title": "My Post",
        "slug": "my-post",
        "collection": "posts",
        "tags": ["python"],
    }

    about = page_context(load_content_file(content / "about.md"), content)
    assert about["title"] == "About"
    assert about["collection"] == ""
    assert about["tags"] == []


def test_expand_content_file_passes_page_and_site(tmp_path):
    content = create_content(tmp_path)
    registry = ShortcodeRegistry(tmp_path / "shortcodes")
    loaded, expanded = expand_content_file(
        content / "posts" / "2024-01-15-my-post.md",
        registry,
        {"title": "Blog"},
        content,
    )
    assert loaded.frontmatter["tags"] == "python"
    assert expanded == "Intro\n\n<h2>My Post in posts on Blog</h2>\n"


def test_errors_report_file_line_numbers(tmp_path):
    path = tmp_path / "post.md"
    path.write_text("---\ntitle: T\n---\n\n{{< nope() >}}\n", encoding="utf-8")
    registry = ShortcodeRegistry()

    with pytest.raises(UnknownShortcodeError) as excinfo:
        expand_content_file(path, registry)
    assert excinfo.value.line == 5
    assert str(excinfo.value).startswith(f"{path}:5:")

    with pytest.raises(UnknownShortcodeError) as excinfo:
        check_content_file(path, registry)
    assert excinfo.value.line == 5


def test_check_content_file_returns_calls(tmp_path):
    path = tmp_path / "post.md"
    path.write_text(
        '{{< youtube(id="a") >}}\n```\n{{< nope() >}}\n```\n', encoding="utf-8"
    )
    calls = check_content_file(path, ShortcodeRegistry())
    assert [call.name for call in calls] == ["youtube"]
