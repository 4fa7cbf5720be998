"""Render a handful of segmented blocks: math, a div, a reference, a script."""

import tempfile
from pathlib import Path

from mdlatex import Block, BlockConverter, BlockTag, MacroDef, RenderConfig, macro_defs, new_context

source = (
    "$$e^{i\\pi} + 1 = 0 \\label{euler}$$\n"
    "@@note\nSee *below*.\n@@\n"
    "\\eqref{euler}\n"
    "```julia:/scripts/hello\nprintln(\"hi\")\n```\n"
)


def span(tag: BlockTag, text: str, **kwargs) -> Block:
    start = source.index(text)
    return Block(tag, source, start, start + len(text), **kwargs)


note = "@@note\nSee *below*.\n@@"
note_start = source.index(note)
blocks = [
    span(BlockTag.MATH_B, "$$e^{i\\pi} + 1 = 0 \\label{euler}$$"),
    Block(
        BlockTag.DIV,
        source,
        note_start,
        note_start + len(note),
        note_start + len("@@note"),
        note_start + len(note) - 2,
    ),
    span(BlockTag.MACRO_INVOCATION, "\\eqref{euler}"),
    span(BlockTag.CODE_BLOCK_EVAL, "```julia:/scripts/hello\nprintln(\"hi\")\n```"),
]

with tempfile.TemporaryDirectory() as root:
    converter = BlockConverter(config=RenderConfig(file_root=Path(root)))
    ctx = new_context(macro_defs(MacroDef("e", 0, "\\mathrm{e}")))
    print(converter.render_document(blocks, ctx))
    for script in ctx.session.drain_pending():
        print("pending:", script.path.relative_to(root), "at", script.location)
