"""Prose scanner for shortcode delimiters.

The scanner makes one forward pass over a markdown document, classifying
regions as fenced code, inline code, or prose. Only in prose does it report
the two opening delimiters, `{{<` (inline) and `{{%` (body). Line numbers are
tracked through every region, including those it skips.

Offsets are indices into the Python string, so a span never splits a
character.

Key class:
- Scanner: Cursor that yields delimiters and can be advanced past a call.
"""

from __future__ import annotations

from dataclasses import dataclass

FENCE_CHARS = "`~"
INLINE_OPEN = "{{<"
BODY_OPEN = "{{%"
INLINE_CLOSE = ">}}"
BODY_CLOSE = "%}}"


@dataclass
class Delimiter:
    """An opening shortcode delimiter found in prose.

    Attributes:
        start: Offset of the first `{`.
        kind: Either `<` (inline) or `%` (body).
        line: 1-based line of the delimiter.
    """

    start: int
    kind: str
    line: int

    @property
    def end(self) -> int:
        return self.start + 3


def count_run(text: str, pos: int, char: str) -> int:
    """Count consecutive occurrences of `char` starting at `pos`."""
    end = pos
    length = len(text)
    while end < length and text[end] == char:
        end += 1
    return end - pos


def detect_fence_start(text: str, pos: int) -> tuple[str, int] | None:
    """Detect an opening code fence at `pos`.

    Args:
        text: Document text.
        pos: Offset of the first non-indent character of the line.

    Returns:
        Tuple of (fence character, run length), or None if no fence opens here.
    """
    if pos >= len(text) or text[pos] not in FENCE_CHARS:
        return None
    char = text[pos]
    run = count_run(text, pos, char)
    if run >= 3:
        return char, run
    return None


def detect_fence_end(text: str, pos: int, char: str, length: int) -> bool:
    """Check whether the line at `pos` closes a fence of `char` * `length`.

    The closing run must be at least as long as the opening run and the rest
    of the line must be blank.
    """
    if pos >= len(text) or text[pos] != char:
        return False
    run = count_run(text, pos, char)
    if run < length:
        return False
    newline = text.find("\n", pos + run)
    rest = text[pos + run :] if newline == -1 else text[pos + run : newline]
    return rest.strip(" \t\r") == ""


def find_closing_backticks(text: str, start: int, length: int) -> int:
    """Find the next run of exactly `length` backticks at or after `start`.

    Returns:
        Offset of the first backtick of the closing run, or -1.
    """
    pos = text.find("`", start)
    while pos != -1:
        run = count_run(text, pos, "`")
        if run == length:
            return pos
        pos = text.find("`", pos + run)
    return -1


def find_tag_close(text: str, start: int, closer: str) -> int:
    """Find `closer` on the same line, searching from `start`.

    Returns:
        Offset of the closer, or -1 if a newline or the end of text comes first.
    """
    end = text.find(closer, start)
    if end == -1:
        return -1
    if text.find("\n", start, end) != -1:
        return -1
    return end


def _indent_width(text: str, pos: int) -> int:
    # Up to three leading spaces are allowed before a fence.
    width = 0
    while width < 3 and pos + width < len(text) and text[pos + width] == " ":
        width += 1
    return width


class Scanner:
    """Forward cursor over a document that stops at prose delimiters.

    Attributes:
        text: The document being scanned.
        pos: Current offset.
        line: 1-based line number at `pos`.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self._at_line_start = True
        self._fence: tuple[str, int] | None = None

    def next_delimiter(self) -> Delimiter | None:
        """Advance to the next `{{<` or `{{%` that lies in prose.

        The cursor is left on the delimiter's first character; callers move
        past it with `advance()`.

        Returns:
            The delimiter, or None at the end of the document.
        """
        text = self.text
        length = len(text)
        while self.pos < length:
            if self._at_line_start:
                self._at_line_start = False
                if self._check_fence():
                    continue

            char = text[self.pos]
            if char == "\n":
                self.pos += 1
                self.line += 1
                self._at_line_start = True
            elif char == "`":
                self._skip_inline_code()
            elif char == "{" and text.startswith("{{", self.pos):
                kind = text[self.pos + 2 : self.pos + 3]
                if kind in ("<", "%"):
                    return Delimiter(self.pos, kind, self.line)
                self.pos += 1
            else:
                self.pos += 1
        return None

    def advance(self, position: int) -> None:
        """Move the cursor forward to `position`, counting skipped lines."""
        if position <= self.pos:
            return
        position = min(position, len(self.text))
        self.line += self.text.count("\n", self.pos, position)
        self.pos = position
        self._at_line_start = self.text[position - 1] == "\n"

    def _check_fence(self) -> bool:
        """Handle fence state at a line start.

        Returns:
            True if the whole line was consumed as fence or fenced content.
        """
        probe = self.pos + _indent_width(self.text, self.pos)
        if self._fence is None:
            fence = detect_fence_start(self.text, probe)
            if fence is None:
                return False
            self._fence = fence
        elif detect_fence_end(self.text, probe, *self._fence):
            self._fence = None
        self._skip_line()
        return True

    def _skip_line(self) -> None:
        newline = self.text.find("\n", self.pos)
        if newline == -1:
            self.pos = len(self.text)
            return
        self.pos = newline + 1
        self.line += 1
        self._at_line_start = True

    def _skip_inline_code(self) -> None:
        run = count_run(self.text, self.pos, "`")
        close = find_closing_backticks(self.text, self.pos + run, run)
        if close == -1:
            # No matching run: the backticks are ordinary text.
            self.pos += run
            return
        self.advance(close + run)
