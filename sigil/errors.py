"""Error types for Sigil.

Every failure while parsing, validating, or rendering shortcodes is raised as a
ShortcodeError subclass carrying the source path and the 1-based line of the
offending invocation. Nothing here prints; the CLI decides how to report.

Key classes:
- ShortcodeError: Base class with file and line context.
- ShortcodeSyntaxError: Malformed call syntax.
- ShortcodeArgumentError: Malformed key=value argument.
- UnclosedShortcodeError: Body shortcode without a matching end tag.
- UnknownShortcodeError: Name not present in the registry.
- ShortcodeRenderError: Template failed while rendering a call.
- RegistryError: Shortcode template failed to load.
"""

from __future__ import annotations

from pathlib import Path


class ShortcodeError(Exception):
    """Error in a document's shortcodes with file context.

    Attributes:
        source_path: Path of the document being expanded.
        line: 1-based line of the invocation's opening delimiter.
        message: Human-readable error message.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        source_path: Path | str,
        line: int,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = Path(source_path)
        self.line = line
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}:{line}: {message}")


class ShortcodeSyntaxError(ShortcodeError):
    """Invalid call syntax: missing parentheses, empty or invalid name."""


class ShortcodeArgumentError(ShortcodeSyntaxError):
    """A key=value pair could not be parsed."""

    def __init__(
        self,
        source_path: Path | str,
        line: int,
        message: str,
        shortcode: str,
        argument: str,
    ):
        self.shortcode = shortcode
        self.argument = argument
        super().__init__(source_path, line, message)


class UnclosedShortcodeError(ShortcodeSyntaxError):
    """A body shortcode has no `{{% end %}}` before the end of the document."""

    def __init__(self, source_path: Path | str, line: int, shortcode: str):
        self.shortcode = shortcode
        super().__init__(
            source_path,
            line,
            f"unclosed body shortcode `{shortcode}`. Expected `{{{{% end %}}}}`.",
        )


class UnknownShortcodeError(ShortcodeError):
    """The invoked name is not registered.

    Attributes:
        shortcode: The unknown name.
        available: Sorted list of every known name.
    """

    def __init__(
        self,
        source_path: Path | str,
        line: int,
        shortcode: str,
        available: list[str],
    ):
        self.shortcode = shortcode
        self.available = list(available)
        listing = ", ".join(self.available) or "(none)"
        super().__init__(
            source_path,
            line,
            f"unknown shortcode `{shortcode}`. Available: {listing}",
        )


class ShortcodeRenderError(ShortcodeError):
    """The template registered for a shortcode failed to render."""

    def __init__(
        self,
        source_path: Path | str,
        line: int,
        shortcode: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.shortcode = shortcode
        super().__init__(
            source_path,
            line,
            f"rendering shortcode `{shortcode}`: {message}",
            original_error,
        )


class RegistryError(Exception):
    """A shortcode template could not be loaded or compiled.

    Attributes:
        source_path: Path to the template file.
        message: Human-readable error message.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        source_path: Path | str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = Path(source_path)
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")
