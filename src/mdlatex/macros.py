"""LaTeX-style macro definitions and their substitution.

This is deliberately a small ``\\newcommand`` substitution engine: a macro has
a name, a fixed number of arguments and a definition in which ``#1`` ...
``#9`` stand for the arguments. Expansion is repeated until no defined macro
remains, so definitions may use other macros.

MacroExpander plays two roles for the block converters:

- as the math-body translator, it expands defined macros inside math and
  leaves every other command alone for KaTeX/MathJax;
- as the macro resolver, it turns a standalone invocation block into HTML.

Example:
    >>> defs = macro_defs(MacroDef("R", 0, "\\\\mathbb{R}"))
    >>> MacroExpander().expand("x \\\\in \\\\R", defs)
    'x \\\\in \\\\mathbb{R}'

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from mdlatex.blocks import EOS
from mdlatex.equations import eqref_placeholder
from mdlatex.errors import MacroArgumentError, MacroRecursionError, UndefinedMacroError
from mdlatex.utils.text import refstring

if TYPE_CHECKING:
    from mdlatex.blocks import Block
    from mdlatex.location import SourceLocation
    from mdlatex.protocols import MarkdownRenderer


@dataclass(frozen=True, slots=True)
class MacroDef:
    """A ``\\newcommand{\\name}[nargs]{definition}`` declaration.

    Attributes:
        name: Command name without the leading backslash
        nargs: Number of brace arguments the command takes
        definition: Replacement text, ``#k`` marks the k-th argument
        offset: Where the definition was declared (diagnostics only)

    """

    name: str
    nargs: int
    definition: str
    offset: int = 0


MacroDefs = Mapping[str, MacroDef]


def macro_defs(*defs: MacroDef) -> MacroDefs:
    """Build a read-only macro set; later definitions override earlier ones."""
    return MappingProxyType({d.name: d for d in defs})


# A doubled backslash is a LaTeX line break, never the start of a command
_COMMAND_RE = re.compile(r"\\\\|\\([A-Za-z]+)")
_ARG_RE = re.compile(r"#([1-9])")


def _read_brace_group(text: str, pos: int) -> tuple[str, int] | None:
    """Read a balanced ``{...}`` group starting at ``pos``.

    Returns:
        (content, position after the closing brace), or None when there is
        no complete group at ``pos``
    """
    if pos >= len(text) or text[pos] != "{":
        return None
    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[pos + 1 : i], i + 1
        i += 1
    return None


def parse_invocation(
    text: str,
    start: int = 0,
    nargs: int | None = None,
) -> tuple[str, list[str], int]:
    """Parse ``\\name{arg1}{arg2}...`` at ``start``.

    Args:
        text: Text containing the invocation
        start: Position of the backslash
        nargs: Number of groups to read (None reads every adjacent group)

    Returns:
        (name, arguments, end position)

    Raises:
        ValueError: If there is no command at ``start``
    """
    match = _COMMAND_RE.match(text, start)
    if match is None or match.group(1) is None:
        raise ValueError(f"No command at position {start}: {text[start:start + 20]!r}")
    name = match.group(1)
    pos = match.end()
    args: list[str] = []
    while nargs is None or len(args) < nargs:
        group = _read_brace_group(text, pos)
        if group is None:
            break
        arg, pos = group
        args.append(arg)
    return name, args, pos


def substitute(definition: str, args: list[str]) -> str:
    """Replace ``#k`` placeholders in ``definition`` by the arguments."""

    def _sub(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        return args[index] if index < len(args) else match.group(0)

    return _ARG_RE.sub(_sub, definition)


class MacroExpander:
    """Default math-body translator and macro resolver.

    Args:
        markdown: Renderer for the expansion of standalone invocations
            (defaults to the markdown-it based renderer)
        max_depth: Expansion passes allowed before giving up

    """

    __slots__ = ("_markdown", "_max_depth")

    def __init__(
        self,
        markdown: MarkdownRenderer | None = None,
        *,
        max_depth: int = 20,
    ) -> None:
        self._markdown = markdown
        self._max_depth = max_depth

    @property
    def markdown(self) -> MarkdownRenderer:
        if self._markdown is None:
            from mdlatex.markdown import MarkdownItRenderer

            self._markdown = MarkdownItRenderer()
        return self._markdown

    def _expand_once(
        self,
        text: str,
        defs: MacroDefs,
        location: SourceLocation | None,
    ) -> tuple[str, bool]:
        parts: list[str] = []
        changed = False
        pos = 0
        for match in _COMMAND_RE.finditer(text):
            if match.start() < pos:
                continue
            name = match.group(1)
            mdef = defs.get(name) if name else None
            if mdef is None:
                continue
            _, args, end = parse_invocation(text, match.start(), mdef.nargs)
            if len(args) != mdef.nargs:
                raise MacroArgumentError(name, mdef.nargs, len(args), location)
            parts.append(text[pos : match.start()])
            parts.append(substitute(mdef.definition, args))
            pos = end
            changed = True
        parts.append(text[pos:])
        return "".join(parts), changed

    def expand(
        self,
        text: str,
        defs: MacroDefs,
        location: SourceLocation | None = None,
    ) -> str:
        """Expand every defined macro in ``text``.

        Raises:
            MacroArgumentError: A macro is given too few arguments
            MacroRecursionError: Expansion does not settle within max_depth
        """
        for _ in range(self._max_depth):
            text, changed = self._expand_once(text, defs, location)
            if not changed:
                return text
        raise MacroRecursionError(
            f"Macro expansion exceeded {self._max_depth} passes", location
        )

    def translate(self, inner: str, macro_defs: MacroDefs, offset: int) -> str:
        """Math-body translator: expand macros, keep other commands."""
        return self.expand(inner.removesuffix(EOS), macro_defs)

    def resolve(self, block: Block, macro_defs: MacroDefs) -> str:
        """Convert a macro invocation block to HTML.

        ``\\eqref{a, b}`` produces equation reference placeholders; any other
        command must be defined and is expanded then rendered inline.
        """
        raw = block.raw_span
        try:
            name, args, end = parse_invocation(raw)
        except ValueError as exc:
            raise UndefinedMacroError(raw.strip(), block.location) from exc

        if name == "eqref":
            labels = args[0].split(",") if args else []
            return ", ".join(eqref_placeholder(refstring(label.strip())) for label in labels)

        mdef = macro_defs.get(name)
        if mdef is None:
            raise UndefinedMacroError(name, block.location)
        if len(args) < mdef.nargs:
            raise MacroArgumentError(name, mdef.nargs, len(args), block.location)

        # Groups beyond nargs are ordinary text, as in LaTeX
        extra = "".join("{" + a + "}" for a in args[mdef.nargs :])
        expanded = substitute(mdef.definition, args[: mdef.nargs]) + extra + raw[end:]
        expanded = self.expand(expanded, macro_defs, block.location)
        return self.markdown.render(expanded, inline=True)
