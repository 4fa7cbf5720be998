"""Block dispatcher.

BlockConverter is the single entry point of this package: the host pipeline
calls it once per segmented block, in document order, and splices the
returned fragments into the page.

Routing by tag:
- CODE_INLINE / CODE_BLOCK: markdown renderer (inline / block)
- CODE_BLOCK_EVAL: CodeBlockExtractor
- ESCAPE: the raw span without its three-character fences
- math tags: MathNormalizer
- DIV: recursive conversion of the body, wrapped in a named div
- MACRO_INVOCATION: macro resolver

Error Handling:
Invariant violations and write failures propagate as BlockError with the
block location attached. A relative script path only affects its own block:
it is logged and the block renders as plain code.

Thread Safety:
BlockConverter holds no per-document state; everything that changes during a
render lives in the RenderContext's session.

"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from mdlatex.blocks import EOS, MATH_TAGS, BlockTag
from mdlatex.code import CodeBlockExtractor, html_code, parse_code_block
from mdlatex.errors import BlockError, UnsupportedRelativePath
from mdlatex.macros import MacroExpander
from mdlatex.markdown import MarkdownDocumentConverter, MarkdownItRenderer
from mdlatex.math import MathNormalizer
from mdlatex.utils.logger import get_logger
from mdlatex.utils.text import escape_attr

if TYPE_CHECKING:
    from mdlatex.blocks import Block
    from mdlatex.config import RenderConfig
    from mdlatex.context import RenderContext
    from mdlatex.protocols import (
        DocumentConverter,
        MacroResolver,
        MarkdownRenderer,
        MathTranslator,
    )

logger = get_logger(__name__)

# Length of the ~~~ fence on each side of an escape block
_ESCAPE_FENCE = 3

_ATTR_NAME_RE = re.compile(r"^\{\s*(.*?)\s*\}$")


def div_name(open_token: str) -> str:
    """Class name(s) of a div from its opening token.

    The two marker characters are dropped; an attribute form such as
    ``{.note .wide}`` is unwrapped to ``note wide``.

    Examples:
        >>> div_name("@@note")
        'note'
        >>> div_name("%%{.note}")
        'note'
    """
    name = open_token[2:].strip()
    match = _ATTR_NAME_RE.match(name)
    if match is not None:
        name = " ".join(part.lstrip(".") for part in match.group(1).split())
    return name


def html_div(name: str, content: str) -> str:
    """Wrap ``content`` in a div carrying ``name`` as its class."""
    return f'<div class="{escape_attr(name)}">{content}</div>\n'


class BlockConverter:
    """Convert segmented blocks to HTML fragments.

    Args:
        markdown: Renderer for code spans and plain code blocks
        translator: Math-body translator (MacroExpander if None)
        resolver: Macro resolver (MacroExpander if None)
        converter: Top-level converter used for div bodies
            (MarkdownDocumentConverter if None)
        config: Render configuration for evaluable code blocks
            (the context's current config if None)

    Usage:
        >>> from mdlatex import Block, BlockTag, new_context
        >>> conv = BlockConverter()
        >>> conv.convert(Block.from_text(BlockTag.ESCAPE, "~~~<b>x</b>~~~"), new_context())
        '<b>x</b>'

    """

    __slots__ = ("_markdown", "_math", "_resolver", "_converter", "_code")

    def __init__(
        self,
        *,
        markdown: MarkdownRenderer | None = None,
        translator: MathTranslator | None = None,
        resolver: MacroResolver | None = None,
        converter: DocumentConverter | None = None,
        config: RenderConfig | None = None,
    ) -> None:
        self._markdown = markdown or MarkdownItRenderer()
        expander = MacroExpander(self._markdown)
        self._math = MathNormalizer(translator or expander)
        self._resolver = resolver or expander
        self._converter = converter or MarkdownDocumentConverter(self._markdown)
        self._code = CodeBlockExtractor(config)

    def set_document_converter(self, converter: DocumentConverter) -> None:
        """Install the top-level converter used for div bodies.

        Host pipelines usually build their converter around this
        BlockConverter, so it can only be supplied after construction.
        """
        self._converter = converter

    def convert(self, block: Block, ctx: RenderContext) -> str:
        """Convert one block to an HTML fragment.

        Args:
            block: Segmented block
            ctx: Rendering context of the enclosing conversion

        Returns:
            HTML fragment (possibly empty)

        Raises:
            BlockError: On invariant violations, macro errors or write failures
        """
        try:
            return self._dispatch(block, ctx)
        except BlockError as exc:
            raise exc.with_location(block.location)

    def _dispatch(self, block: Block, ctx: RenderContext) -> str:
        raw = block.raw_span
        match block.tag:
            case BlockTag.CODE_INLINE:
                return self._markdown.render(raw, inline=True)
            case BlockTag.CODE_BLOCK_EVAL:
                return self._convert_eval_code(block, ctx)
            case BlockTag.CODE_BLOCK:
                return self._markdown.render(raw)
            case BlockTag.ESCAPE:
                return raw[_ESCAPE_FENCE : len(raw) - _ESCAPE_FENCE]
            case tag if tag in MATH_TAGS:
                return self._math.normalize(block, ctx)
            case BlockTag.DIV:
                return self._convert_div(block, ctx)
            case BlockTag.MACRO_INVOCATION:
                return self._resolver.resolve(block, ctx.macro_defs)
            case _:
                # Unreachable with a correct segmenter
                logger.debug("Ignoring block with unexpected tag %r", block.tag)
                return ""

    def _convert_eval_code(self, block: Block, ctx: RenderContext) -> str:
        raw = block.raw_span
        try:
            return self._code.extract(raw, ctx, block=block)
        except UnsupportedRelativePath as exc:
            logger.warning("%s; rendering as plain code", exc)
            code = parse_code_block(raw, block.location)
            return html_code(code.body, code.language)

    def _convert_div(self, block: Block, ctx: RenderContext) -> str:
        content = self._converter.convert(block.content + EOS, ctx.sub_context())
        return html_div(div_name(block.open_token), content)

    def convert_all(self, blocks: Iterable[Block], ctx: RenderContext) -> str:
        """Convert blocks in order and concatenate the fragments."""
        return "".join(self.convert(block, ctx) for block in blocks)

    def render_document(self, blocks: Iterable[Block], ctx: RenderContext) -> str:
        """Render a whole document's blocks.

        Resets the session for the new document, converts every block in
        order, then resolves equation references. Pending scripts remain on
        the session for the script runner.
        """
        if not ctx.is_recursive:
            ctx.session.reset()
        html = self.convert_all(blocks, ctx)
        return ctx.session.finalize(html)


_default_converter: BlockConverter | None = None


def convert_block(block: Block, ctx: RenderContext) -> str:
    """Convert a block with the default collaborators."""
    global _default_converter
    if _default_converter is None:
        _default_converter = BlockConverter()
    return _default_converter.convert(block, ctx)
