"""Shortcode call parsing.

Turns a markdown document into an ordered list of ShortcodeCall objects.
Two invocation forms are recognized in prose:

    {{< name(key="value") >}}                         inline, single line
    {{% name(key="value") %}} ...body... {{% end %}}  body, may span lines

Shortcode-looking text inside fenced code blocks and inline code spans is left
alone; the Scanner decides what counts as prose.

Key functions:
- parse_shortcodes: Collect every call in a document, in document order.
- parse_call: Split `name(args)` into a name and parsed arguments.
- match_body: Find the `{{% end %}}` that closes a body shortcode.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .arguments import ShortcodeValue, parse_arguments
from .errors import ShortcodeSyntaxError, UnclosedShortcodeError
from .scanner import (
    BODY_CLOSE,
    BODY_OPEN,
    INLINE_CLOSE,
    INLINE_OPEN,
    Scanner,
    find_tag_close,
)

NAME_RE = re.compile(r"[A-Za-z0-9_-]+")
END_TAG = "end"


class ShortcodeKind(Enum):
    """How a shortcode's output is treated."""

    INLINE = "inline"  # raw markup, never re-read as markdown
    BODY = "body"  # wraps markdown exposed to the template as `body`


@dataclass
class ShortcodeCall:
    """One parsed shortcode invocation.

    Attributes:
        name: Shortcode name (alphanumeric, `_` or `-`).
        args: Named argument values.
        kind: Inline or body.
        span: Half-open (start, end) offsets of the whole invocation,
            through the closing `{{% end %}}` for body shortcodes.
        line: 1-based line of the opening delimiter.
        body: Trimmed text between the open and end tags (body kind only).
    """

    name: str
    args: dict[str, ShortcodeValue]
    kind: ShortcodeKind
    span: tuple[int, int]
    line: int
    body: str | None = None

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]


@dataclass
class _Document:
    text: str
    source_path: Path | str
    calls: list[ShortcodeCall] = field(default_factory=list)


def parse_call(
    text: str, source_path: Path | str = "<string>", line: int = 1
) -> tuple[str, dict[str, ShortcodeValue]]:
    """Parse the trimmed text of a call, e.g. `name(key="v", n=1)`.

    Args:
        text: Text between the delimiter and its closer, already trimmed.
        source_path: Document path, for error messages.
        line: Line of the invocation, for error messages.

    Returns:
        Tuple of (name, arguments).

    Raises:
        ShortcodeSyntaxError: If the name or parentheses are malformed.
        ShortcodeArgumentError: If an argument is malformed.
    """
    paren = text.find("(")
    if paren == -1:
        raise ShortcodeSyntaxError(
            source_path,
            line,
            f"invalid shortcode syntax: `{text}`. Expected `name(args...)`",
        )

    name = text[:paren].strip()
    if not name:
        raise ShortcodeSyntaxError(source_path, line, "empty shortcode name")
    if not NAME_RE.fullmatch(name):
        raise ShortcodeSyntaxError(
            source_path,
            line,
            f"invalid shortcode name `{name}`. "
            "Use only alphanumeric, underscore, or hyphen.",
        )

    close = text.rfind(")")
    if close < paren:
        raise ShortcodeSyntaxError(
            source_path, line, f"unclosed parenthesis in shortcode `{name}`"
        )

    args_text = text[paren + 1 : close].strip()
    if not args_text:
        return name, {}
    return name, parse_arguments(args_text, name, source_path, line)


def match_body(text: str, start: int) -> tuple[int, int] | None:
    """Find the first `{{% end %}}` at or after `start`.

    Whitespace around `end` inside the tag is ignored. Nesting is not
    tracked: the first end tag closes the body.

    Returns:
        Tuple of (body_end, close_end) offsets relative to `start`, or None.
    """
    pos = text.find(BODY_OPEN, start)
    while pos != -1:
        inner = pos + len(BODY_OPEN)
        close = find_tag_close(text, inner, BODY_CLOSE)
        if close != -1 and text[inner:close].strip() == END_TAG:
            return pos - start, close + len(BODY_CLOSE) - start
        pos = text.find(BODY_OPEN, pos + 1)
    return None


def parse_shortcodes(
    text: str, source_path: Path | str = "<string>"
) -> list[ShortcodeCall]:
    """Collect every shortcode invocation in a document.

    Args:
        text: Markdown document.
        source_path: Document path, for error messages.

    Returns:
        Calls in ascending document order with non-overlapping spans.

    Raises:
        ShortcodeSyntaxError: On the first malformed call or unclosed body.
    """
    document = _Document(text, source_path)
    scanner = Scanner(text)
    while True:
        delimiter = scanner.next_delimiter()
        if delimiter is None:
            break
        if delimiter.kind == "<":
            end = _parse_inline(document, delimiter.start, delimiter.line)
        else:
            end = _parse_body(document, delimiter.start, delimiter.line)
        scanner.advance(end if end is not None else delimiter.end)
    return document.calls


def _parse_inline(document: _Document, start: int, line: int) -> int | None:
    call_start = start + len(INLINE_OPEN)
    close = find_tag_close(document.text, call_start, INLINE_CLOSE)
    if close == -1:
        return None
    name, args = parse_call(
        document.text[call_start:close].strip(), document.source_path, line
    )
    end = close + len(INLINE_CLOSE)
    document.calls.append(
        ShortcodeCall(name, args, ShortcodeKind.INLINE, (start, end), line)
    )
    return end


def _parse_body(document: _Document, start: int, line: int) -> int | None:
    text = document.text
    call_start = start + len(BODY_OPEN)
    close = find_tag_close(text, call_start, BODY_CLOSE)
    if close == -1:
        return None
    open_end = close + len(BODY_CLOSE)
    call_text = text[call_start:close].strip()
    if call_text == END_TAG:
        # Stray end tag with no opener: skip it.
        return open_end

    name, args = parse_call(call_text, document.source_path, line)
    matched = match_body(text, open_end)
    if matched is None:
        raise UnclosedShortcodeError(document.source_path, line, name)
    body_end, close_end = matched
    end = open_end + close_end
    document.calls.append(
        ShortcodeCall(
            name,
            args,
            ShortcodeKind.BODY,
            (start, end),
            line,
            body=text[open_end : open_end + body_end].strip(),
        )
    )
    return end
