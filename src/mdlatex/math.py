"""Math block normalization.

Turns a LaTeX-fenced math block into the delimiters KaTeX/MathJax expect,
numbering display equations as they are met and turning ``\\label{...}``
markers into anchors.

Example:
    >>> from mdlatex import Block, BlockTag, new_context
    >>> ctx = new_context()
    >>> block = Block.from_text(BlockTag.MATH_B, "$$x \\\\label{eq:a}$$")
    >>> MathNormalizer().normalize(block, ctx)
    '<a id="eqa"></a>\\\\[x \\\\]'
    >>> ctx.session.equations.number_of("eqa")
    1

Ordering:
Equation numbers follow the order in which blocks are normalized, which is
document order. Numbers are never reassigned.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from mdlatex.blocks import DISPLAY_MATH_TAGS, EOS
from mdlatex.errors import BlockError
from mdlatex.fences import get_fence
from mdlatex.macros import MacroExpander
from mdlatex.stringbuilder import StringBuilder
from mdlatex.utils.text import escape_attr, refstring

if TYPE_CHECKING:
    from mdlatex.blocks import Block
    from mdlatex.context import RenderContext
    from mdlatex.equations import EquationRegistry
    from mdlatex.macros import MacroDefs
    from mdlatex.protocols import MathTranslator

_LABEL_RE = re.compile(r"\\label{(.*?)}")


def normalize_math_block(
    block: Block,
    macro_defs: MacroDefs,
    registry: EquationRegistry,
    translator: MathTranslator,
) -> str:
    """Convert one math block to renderer-ready markup.

    Args:
        block: A block whose tag is in the fence table
        macro_defs: Macro definitions for the translator
        registry: Equation registry of the current document
        translator: Math-body translator

    Returns:
        Optional anchor followed by the delimited math body

    Raises:
        UnrecognizedMathTag: If the block tag has no fence
    """
    try:
        fence = get_fence(block.tag)
    except BlockError as exc:
        raise exc.with_location(block.location) from None

    inner = fence.strip(block.raw_span)
    sb = StringBuilder()

    if block.tag in DISPLAY_MATH_TAGS:
        number = registry.next_number()
        match = _LABEL_RE.search(inner)
        if match is not None:
            anchor = refstring(match.group(1).strip())
            inner = _LABEL_RE.sub("", inner)
            # A redefined label keeps its first equation and its only anchor
            if registry.register(anchor, number) == number:
                sb.append(f'<a id="{escape_attr(anchor)}"></a>')

    try:
        resolved = translator.translate(inner + EOS, macro_defs, block.source_offset)
    except BlockError as exc:
        raise exc.with_location(block.location)

    sb.append(fence.open_delim).append(resolved).append(fence.close_delim)
    return sb.build()


class MathNormalizer:
    """Math converter bound to a translator.

    Args:
        translator: Math-body translator (MacroExpander if None)

    """

    __slots__ = ("_translator",)

    def __init__(self, translator: MathTranslator | None = None) -> None:
        self._translator = translator or MacroExpander()

    def normalize(self, block: Block, ctx: RenderContext) -> str:
        """Normalize ``block`` using the context's macros and registry."""
        return normalize_math_block(
            block,
            ctx.macro_defs,
            ctx.session.equations,
            self._translator,
        )
