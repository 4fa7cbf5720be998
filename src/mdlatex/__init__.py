"""
mdlatex — block rendering for markdown with embedded LaTeX

Converts segmented markdown/LaTeX blocks (code spans, fenced and evaluable
code, escapes, math fences, div containers, macro invocations) to HTML
fragments, numbering display equations and materializing evaluable code
blocks for a script runner.

Quick Start:
    >>> from mdlatex import Block, BlockConverter, BlockTag, new_context
    >>> ctx = new_context()
    >>> conv = BlockConverter()
    >>> conv.convert(Block.from_text(BlockTag.MATH_A, "$x^2$"), ctx)
    '\\\\(x^2\\\\)'

Evaluable code:
    >>> from pathlib import Path
    >>> from mdlatex import RenderConfig
    >>> conv = BlockConverter(config=RenderConfig(file_root=Path("site")))
    >>> # ```julia:/scripts/ex1 ...``` is written to site/scripts/ex1.jl and
    >>> # queued on ctx.session.pending_scripts for the script runner

Installation:
    pip install mdlatex
"""

from mdlatex.blocks import DISPLAY_MATH_TAGS, EOS, INLINE_MATH_TAGS, MATH_TAGS, Block, BlockTag
from mdlatex.code import CodeBlock, CodeBlockExtractor, parse_code_block, resolve_script_path
from mdlatex.config import (
    RenderConfig,
    get_render_config,
    render_config_context,
    reset_render_config,
    set_render_config,
)
from mdlatex.context import PendingScript, RenderContext, RenderSession, new_context
from mdlatex.dispatch import BlockConverter, convert_block, div_name, html_div
from mdlatex.equations import EquationRegistry, eqref_placeholder
from mdlatex.errors import (
    BlockError,
    MacroArgumentError,
    MacroRecursionError,
    MalformedCodeBlock,
    MdLatexError,
    ScriptPathOutsideRoot,
    ScriptWriteError,
    UndefinedMacroError,
    UnrecognizedMathTag,
    UnsupportedRelativePath,
)
from mdlatex.fences import MATH_FENCES, MathFence, get_fence
from mdlatex.location import SourceLocation
from mdlatex.macros import MacroDef, MacroDefs, MacroExpander, macro_defs
from mdlatex.markdown import MarkdownDocumentConverter, MarkdownItRenderer
from mdlatex.math import MathNormalizer, normalize_math_block

__version__ = "0.1.0"

__all__ = [
    # Blocks
    "Block",
    "BlockTag",
    "DISPLAY_MATH_TAGS",
    "EOS",
    "INLINE_MATH_TAGS",
    "MATH_TAGS",
    "SourceLocation",
    # Conversion
    "BlockConverter",
    "convert_block",
    "div_name",
    "html_div",
    "CodeBlock",
    "CodeBlockExtractor",
    "parse_code_block",
    "resolve_script_path",
    "MathNormalizer",
    "normalize_math_block",
    "MATH_FENCES",
    "MathFence",
    "get_fence",
    # State
    "EquationRegistry",
    "eqref_placeholder",
    "PendingScript",
    "RenderContext",
    "RenderSession",
    "new_context",
    # Macros and collaborators
    "MacroDef",
    "MacroDefs",
    "MacroExpander",
    "macro_defs",
    "MarkdownDocumentConverter",
    "MarkdownItRenderer",
    # Config
    "RenderConfig",
    "get_render_config",
    "render_config_context",
    "reset_render_config",
    "set_render_config",
    # Errors
    "BlockError",
    "MacroArgumentError",
    "MacroRecursionError",
    "MalformedCodeBlock",
    "MdLatexError",
    "ScriptPathOutsideRoot",
    "ScriptWriteError",
    "UndefinedMacroError",
    "UnrecognizedMathTag",
    "UnsupportedRelativePath",
    "__version__",
]
