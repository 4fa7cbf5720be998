"""Default markdown collaborators backed by markdown-it-py.

MarkdownItRenderer renders inline and block markdown; MarkdownDocumentConverter
uses it to convert the body of div blocks when the host pipeline does not
provide its own top-level converter.

Thread Safety:
MarkdownIt instances keep no per-render state; a renderer may be shared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

from mdlatex.blocks import EOS

if TYPE_CHECKING:
    from mdlatex.context import RenderContext
    from mdlatex.protocols import MarkdownRenderer


class MarkdownItRenderer:
    """MarkdownRenderer implementation using markdown-it-py.

    Usage:
        >>> MarkdownItRenderer().render("`x < y`", inline=True)
        '<code>x &lt; y</code>'

    """

    __slots__ = ("_md",)

    def __init__(self, md: MarkdownIt | None = None) -> None:
        """Initialize renderer.

        Args:
            md: Configured MarkdownIt instance (CommonMark preset if None)
        """
        self._md = md or MarkdownIt("commonmark")

    def render(self, text: str, *, inline: bool = False) -> str:
        text = text.removesuffix(EOS)
        if inline:
            return self._md.renderInline(text)
        return self._md.render(text)


class MarkdownDocumentConverter:
    """DocumentConverter that renders a fragment as plain block markdown.

    Blocks nested in the fragment (math, macros, nested divs) are not
    segmented again; a host pipeline with a segmenter supplies its own
    converter instead.
    """

    __slots__ = ("_markdown",)

    def __init__(self, markdown: MarkdownRenderer | None = None) -> None:
        self._markdown = markdown or MarkdownItRenderer()

    def convert(self, text: str, ctx: RenderContext) -> str:
        return self._markdown.render(text.removesuffix(EOS))
