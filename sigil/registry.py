"""Shortcode registry backed by Jinja2.

The registry maps shortcode names to compiled templates. It is built once per
site build from the built-in templates shipped with Sigil plus any
`<name>.html` files in the project's shortcodes directory; a project file
replaces the built-in of the same name. After construction the registry is
read-only and can be shared between concurrent expansions.

Key class:
- ShortcodeRegistry: Template store for validation and rendering.

Rendering context for a call:
- each argument under its own name;
- `body` for body shortcodes;
- `page` and `site`, the ambient values supplied by the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
)

from .errors import RegistryError, ShortcodeRenderError, UnknownShortcodeError
from .expansion import ShortcodeExpander
from .parser import ShortcodeCall
from .renderers import render_markdown

BUILTIN_DIR = Path(__file__).parent / "builtins"
TEMPLATE_SUFFIX = ".html"


def _template_names(directory: Path | None) -> list[str]:
    """List shortcode names defined by top-level `*.html` files in a directory."""
    if directory is None or not directory.is_dir():
        return []
    return sorted(
        path.stem
        for path in directory.iterdir()
        if path.is_file() and path.suffix == TEMPLATE_SUFFIX
    )


def _format_error_message(exc: Exception) -> str:
    """Format a template exception into a user-friendly message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if isinstance(exc, TemplateSyntaxError):
        return f"Template syntax error on line {exc.lineno}: {exc.message}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"


class ShortcodeRegistry:
    """Known shortcodes and their compiled templates.

    Attributes:
        shortcodes_dir: Project directory with user templates, if any.
        builtin_dir: Directory with the built-in templates.
        env: Jinja2 environment dedicated to shortcode templates.
    """

    def __init__(
        self,
        shortcodes_dir: Path | None = None,
        builtin_dir: Path = BUILTIN_DIR,
    ):
        """Load and compile every built-in and user template.

        Args:
            shortcodes_dir: Directory with `<name>.html` overrides. A missing
                directory is treated as empty.
            builtin_dir: Directory with the built-in templates.

        Raises:
            RegistryError: If a template fails to compile.
        """
        self.shortcodes_dir = shortcodes_dir
        self.builtin_dir = builtin_dir

        search_path = [builtin_dir]
        user_names = _template_names(shortcodes_dir)
        if shortcodes_dir is not None and shortcodes_dir.is_dir():
            # Earlier entries win, so user templates shadow built-ins.
            search_path.insert(0, shortcodes_dir)

        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        self.env.filters["markdown"] = render_markdown

        self._origins: dict[str, str] = {
            name: "builtin" for name in _template_names(builtin_dir)
        }
        self._origins.update({name: "user" for name in user_names})
        self._templates: dict[str, Template] = {
            name: self._compile(name) for name in sorted(self._origins)
        }
        self._expander = ShortcodeExpander(self)

    def _compile(self, name: str) -> Template:
        try:
            return self.env.get_template(f"{name}{TEMPLATE_SUFFIX}")
        except (TemplateSyntaxError, UnicodeDecodeError) as exc:
            raise RegistryError(
                self.template_path(name),
                f"shortcode template `{name}`: {_format_error_message(exc)}",
                exc,
            ) from exc

    @property
    def names(self) -> list[str]:
        """Return every known shortcode name, sorted."""
        return sorted(self._templates)

    def is_known(self, name: str) -> bool:
        """Check whether a shortcode name is registered."""
        return name in self._templates

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def origin(self, name: str) -> str:
        """Return "user" or "builtin" for a registered name.

        Raises:
            KeyError: If the name is not registered.
        """
        return self._origins[name]

    def template_path(self, name: str) -> Path:
        """Return the file a registered template was loaded from."""
        if self.origin(name) == "user" and self.shortcodes_dir is not None:
            return self.shortcodes_dir / f"{name}{TEMPLATE_SUFFIX}"
        return self.builtin_dir / f"{name}{TEMPLATE_SUFFIX}"

    def render(
        self,
        call: ShortcodeCall,
        source_path: Path | str,
        page_context: Any,
        site_context: Any,
    ) -> str:
        """Render one shortcode call.

        Args:
            call: Parsed invocation.
            source_path: Document path, for error messages.
            page_context: Ambient page value, exposed as `page`.
            site_context: Ambient site value, exposed as `site`.

        Returns:
            Rendered output.

        Raises:
            UnknownShortcodeError: If the name is not registered.
            ShortcodeRenderError: If the template fails.
        """
        template = self._templates.get(call.name)
        if template is None:
            raise UnknownShortcodeError(source_path, call.line, call.name, self.names)

        context: dict[str, Any] = dict(call.args)
        if call.body is not None:
            context["body"] = call.body
        context["page"] = page_context
        context["site"] = site_context

        try:
            return template.render(context)
        except Exception as exc:
            raise ShortcodeRenderError(
                source_path, call.line, call.name, _format_error_message(exc), exc
            ) from exc

    def expand(
        self,
        document: str,
        source_path: Path | str = "<string>",
        page_context: Any = None,
        site_context: Any = None,
    ) -> str:
        """Expand every shortcode in a document using this registry.

        See ShortcodeExpander.expand().
        """
        return self._expander.expand(
            document, source_path, page_context, site_context
        )
