"""Math fence table.

Maps each math block tag to the number of characters to chop off the front
and back of the raw span (the LaTeX fences) and to the replacement
delimiters understood by KaTeX and MathJax. For instance ``$ ... $`` becomes
``\\( ... \\)``, chopping one character at each end.

Thread Safety:
The table is a read-only mapping of frozen dataclasses.

"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from mdlatex.blocks import BlockTag
from mdlatex.errors import UnrecognizedMathTag


@dataclass(frozen=True, slots=True)
class MathFence:
    """How one kind of math block is fenced and re-fenced.

    Attributes:
        strip_head: Characters to remove at the start of the raw span
        strip_tail: Characters to remove at the end of the raw span
        open_delim: Renderer delimiter emitted before the body
        close_delim: Renderer delimiter emitted after the body

    """

    strip_head: int
    strip_tail: int
    open_delim: str
    close_delim: str

    def strip(self, raw: str) -> str:
        """Remove the source fences from ``raw``."""
        return raw[self.strip_head : len(raw) - self.strip_tail]

    def wrap(self, inner: str) -> str:
        """Surround ``inner`` with the renderer delimiters."""
        return f"{self.open_delim}{inner}{self.close_delim}"


MATH_FENCES: Mapping[BlockTag, MathFence] = MappingProxyType(
    {
        BlockTag.MATH_A: MathFence(1, 1, "\\(", "\\)"),
        BlockTag.MATH_B: MathFence(2, 2, "\\[", "\\]"),
        BlockTag.MATH_C: MathFence(2, 2, "\\[", "\\]"),
        # \begin{align} ... \end{align}
        BlockTag.MATH_ALIGN: MathFence(13, 11, "\\[\\begin{aligned}", "\\end{aligned}\\]"),
        # \begin{eqnarray} ... \end{eqnarray}
        BlockTag.MATH_EQARRAY: MathFence(16, 14, "\\[\\begin{array}{c}", "\\end{array}\\]"),
        BlockTag.MATH_INLINE: MathFence(4, 4, "", ""),
    }
)


def get_fence(tag: BlockTag) -> MathFence:
    """Look up the fence for a math tag.

    Raises:
        UnrecognizedMathTag: If ``tag`` is not a math tag
    """
    try:
        return MATH_FENCES[tag]
    except KeyError:
        raise UnrecognizedMathTag(tag) from None
