"""Protocol definitions for Sigil.

The expansion engine depends on these interfaces rather than on the
Jinja2-backed registry, so tests and embedding build pipelines can supply
their own template store.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .parser import ShortcodeCall


@runtime_checkable
class TemplateStore(Protocol):
    """Protocol for looking up and rendering shortcode templates.

    Implementations must be read-only once constructed so that one store can
    serve many concurrent document expansions.
    """

    @property
    @abstractmethod
    def names(self) -> list[str]:
        """Return every known shortcode name, sorted."""
        ...

    @abstractmethod
    def is_known(self, name: str) -> bool:
        """Check whether a shortcode name is registered.

        Args:
            name: Shortcode name.

        Returns:
            True if a template exists for the name.
        """
        ...

    @abstractmethod
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
            ShortcodeRenderError: If the template fails.
        """
        ...
