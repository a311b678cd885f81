"""Argument parsing for shortcode calls.

Parses the text between a call's parentheses, a comma-separated list of
`key=value` pairs, into typed Python values. Values are tried in a fixed
order: double-quoted string, `true`/`false`, then a numeric literal.

Examples:
    >>> parse_arguments('id="abc", width=800, ratio=1.5, autoplay=true', "video")
    {'id': 'abc', 'width': 800, 'ratio': 1.5, 'autoplay': True}
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from .errors import ShortcodeArgumentError

ShortcodeValue = Union[str, int, float, bool]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class _ArgumentReader:
    """Cursor over one argument list; raises on the first malformed pair."""

    def __init__(self, text: str, shortcode: str, source_path: Path | str, line: int):
        self.text = text
        self.shortcode = shortcode
        self.source_path = source_path
        self.line = line
        self.pos = 0

    def error(self, key: str, message: str) -> ShortcodeArgumentError:
        return ShortcodeArgumentError(
            self.source_path, self.line, message, self.shortcode, key
        )

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def skip_separators(self) -> None:
        while self.pos < len(self.text) and (
            self.text[self.pos].isspace() or self.text[self.pos] == ","
        ):
            self.pos += 1

    def read(self) -> dict[str, ShortcodeValue]:
        args: dict[str, ShortcodeValue] = {}
        while True:
            self.skip_separators()
            if self.pos >= len(self.text):
                return args
            key = self.read_key()
            self.skip_whitespace()
            if self.pos >= len(self.text) or self.text[self.pos] != "=":
                raise self.error(
                    key,
                    f"expected `=` after argument `{key}` in shortcode `{self.shortcode}`",
                )
            self.pos += 1
            self.skip_whitespace()
            if self.pos >= len(self.text):
                raise self.error(
                    key,
                    f"missing value for argument `{key}` in shortcode `{self.shortcode}`",
                )
            args[key] = self.read_value(key)

    def read_key(self) -> str:
        start = self.pos
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "=" or char == "," or char.isspace():
                break
            self.pos += 1
        key = self.text[start : self.pos]
        if not key:
            raise self.error(
                key, f"expected argument name in shortcode `{self.shortcode}`"
            )
        return key

    def read_value(self, key: str) -> ShortcodeValue:
        if self.text[self.pos] == '"':
            return self.read_string(key)
        for literal, value in (("true", True), ("false", False)):
            if self.text.startswith(literal, self.pos):
                after = self.pos + len(literal)
                if after >= len(self.text) or not _is_ident_char(self.text[after]):
                    self.pos = after
                    return value
        number = self.read_number()
        if number is not None:
            return number
        raise self.error(
            key,
            f"invalid value for argument `{key}` in shortcode `{self.shortcode}`. "
            "Expected a quoted string, number, or boolean.",
        )

    def read_string(self, key: str) -> str:
        chars: list[str] = []
        pos = self.pos + 1
        while pos < len(self.text):
            char = self.text[pos]
            if char == "\\" and pos + 1 < len(self.text):
                following = self.text[pos + 1]
                if following in ('"', "\\"):
                    chars.append(following)
                else:
                    chars.append(char + following)
                pos += 2
                continue
            if char == '"':
                self.pos = pos + 1
                return "".join(chars)
            chars.append(char)
            pos += 1
        raise self.error(
            key,
            f"unclosed string for argument `{key}` in shortcode `{self.shortcode}`",
        )

    def read_number(self) -> int | float | None:
        text = self.text
        end = self.pos
        if end < len(text) and text[end] == "-":
            end += 1
        has_dot = False
        while end < len(text) and (text[end] in "0123456789" or text[end] == "."):
            if text[end] == ".":
                if has_dot:
                    break
                has_dot = True
            end += 1
        literal = text[self.pos : end]
        if literal in ("", "-"):
            return None
        if has_dot:
            try:
                value: int | float = float(literal)
            except ValueError:
                return None
        else:
            value = int(literal)
            if not INT64_MIN <= value <= INT64_MAX:
                return None
        self.pos = end
        return value


def parse_arguments(
    text: str,
    shortcode: str,
    source_path: Path | str = "<string>",
    line: int = 1,
) -> dict[str, ShortcodeValue]:
    """Parse a comma-separated `key=value` list.

    Args:
        text: Raw text between the call's parentheses.
        shortcode: Name of the shortcode, for error messages.
        source_path: Document path, for error messages.
        line: Line of the invocation, for error messages.

    Returns:
        Mapping of argument name to value. A repeated key keeps its last value.

    Raises:
        ShortcodeArgumentError: On the first malformed pair.
    """
    return _ArgumentReader(text, shortcode, source_path, line).read()
