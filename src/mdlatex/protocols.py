"""Protocols for the collaborators of the block converters.

The block converters only know these interfaces. Default implementations
live in mdlatex.markdown (markdown rendering, div recursion) and
mdlatex.macros (math-body translation, macro resolution); a host pipeline
plugs in its own by passing them to BlockConverter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from mdlatex.blocks import Block
    from mdlatex.context import RenderContext
    from mdlatex.macros import MacroDefs


class MarkdownRenderer(Protocol):
    """Renders markdown text to HTML.

    Thread Safety:
        Implementations should be stateless between calls.
    """

    def render(self, text: str, *, inline: bool = False) -> str:
        """Render ``text``.

        Args:
            text: Markdown source
            inline: Render as inline content (no wrapping paragraph)

        Returns:
            HTML fragment
        """
        ...


class MathTranslator(Protocol):
    """Resolves LaTeX commands inside the body of a math block."""

    def translate(self, inner: str, macro_defs: MacroDefs, offset: int) -> str:
        """Translate a fence-free math body.

        Args:
            inner: Math body, fences already removed, terminated by EOS
            macro_defs: Active macro definitions
            offset: Start offset of the math block (for error locality)

        Returns:
            Body ready to be placed between renderer delimiters
        """
        ...


class MacroResolver(Protocol):
    """Turns a standalone macro invocation into HTML."""

    def resolve(self, block: Block, macro_defs: MacroDefs) -> str: ...


class DocumentConverter(Protocol):
    """The top-level converter, re-entered for the body of div blocks."""

    def convert(self, text: str, ctx: RenderContext) -> str:
        """Convert a document fragment to HTML.

        Args:
            text: Fragment terminated by the EOS sentinel
            ctx: Sub-context of the enclosing conversion

        Returns:
            HTML for the whole fragment
        """
        ...
