"""Sigil shortcode expander.

This package expands shortcodes, small macro invocations embedded in markdown,
into the output of reusable Jinja2 templates:

    {{< youtube(id="dQw4w9WgXcQ") >}}
    {{% callout(type="warning") %}}
    Markdown body
    {{% end %}}

Shortcode-looking text inside fenced code blocks and inline code spans is left
untouched. A static-site build creates one ShortcodeRegistry, then calls its
`expand()` once per content file.
"""

from .errors import (
    RegistryError,
    ShortcodeArgumentError,
    ShortcodeError,
    ShortcodeRenderError,
    ShortcodeSyntaxError,
    UnclosedShortcodeError,
    UnknownShortcodeError,
)
from .expansion import ShortcodeExpander, expand_shortcodes
from .parser import ShortcodeCall, ShortcodeKind, parse_shortcodes
from .registry import ShortcodeRegistry

__all__ = [
    "RegistryError",
    "ShortcodeArgumentError",
    "ShortcodeCall",
    "ShortcodeError",
    "ShortcodeExpander",
    "ShortcodeKind",
    "ShortcodeRegistry",
    "ShortcodeRenderError",
    "ShortcodeSyntaxError",
    "UnclosedShortcodeError",
    "UnknownShortcodeError",
    "__version__",
    "expand_shortcodes",
    "parse_shortcodes",
]
__version__ = "0.1.0"
