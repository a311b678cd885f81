"""Shortcode expansion engine.

Rewrites one document by replacing every shortcode invocation with its
rendered template output. The steps always run in this order:

1. Parse the whole document into calls (document order).
2. Validate every name against the template store; the first unknown name
   fails the document before anything is rendered.
3. Render each call.
4. Splice the rendered text back from the last span to the first, so the
   offsets of spans not yet replaced stay valid.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .errors import UnknownShortcodeError
from .parser import ShortcodeCall, parse_shortcodes
from .protocols import TemplateStore


class ShortcodeExpander:
    """Expands shortcodes in documents against a template store.

    The expander holds no per-document state; a single instance may be shared
    across threads as long as its store is read-only.

    Attributes:
        store: Template store used for validation and rendering.
    """

    def __init__(self, store: TemplateStore):
        self.store = store

    def collect(
        self, document: str, source_path: Path | str = "<string>"
    ) -> list[ShortcodeCall]:
        """Parse a document and validate every shortcode name.

        Args:
            document: Markdown source.
            source_path: Document path, for error messages.

        Returns:
            Calls in document order.

        Raises:
            ShortcodeSyntaxError: If a call is malformed.
            UnknownShortcodeError: On the first unregistered name.
        """
        calls = parse_shortcodes(document, source_path)
        for call in calls:
            if not self.store.is_known(call.name):
                raise UnknownShortcodeError(
                    source_path, call.line, call.name, sorted(self.store.names)
                )
        return calls

    def expand(
        self,
        document: str,
        source_path: Path | str = "<string>",
        page_context: Any = None,
        site_context: Any = None,
    ) -> str:
        """Expand every shortcode in a document.

        Args:
            document: Markdown source.
            source_path: Document path, for error messages.
            page_context: Ambient page value; defaults to an empty mapping.
            site_context: Ambient site value; defaults to an empty mapping.

        Returns:
            The document with each invocation replaced by its output. A
            document without shortcodes is returned unchanged.

        Raises:
            ShortcodeError: On any parse, validation, or render failure. No
                partial output is produced.
        """
        calls = self.collect(document, source_path)
        if not calls:
            return document

        page = {} if page_context is None else page_context
        site = {} if site_context is None else site_context
        rendered = [
            self.store.render(call, source_path, page, site) for call in calls
        ]

        output = document
        for call, text in zip(reversed(calls), reversed(rendered)):
            start, end = call.span
            output = output[:start] + text + output[end:]
        return output


def expand_shortcodes(
    document: str,
    store: TemplateStore,
    source_path: Path | str = "<string>",
    page_context: Any = None,
    site_context: Any = None,
) -> str:
    """Expand shortcodes in a single document.

    Convenience wrapper around ShortcodeExpander.expand().
    """
    return ShortcodeExpander(store).expand(
        document, source_path, page_context, site_context
    )
