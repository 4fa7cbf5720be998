"""Per-document render session and rendering context.

RenderSession holds everything that changes while one document renders:
the equation registry and the scripts waiting to be evaluated.
RenderContext is what gets passed down into every conversion; it pairs the
active macro definitions with the session and the recursion flags.

Thread Safety:
All per-document state lives in RenderSession, created fresh for each
document. Concurrent renders must each own their own session.

"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType

from mdlatex.equations import EquationRegistry
from mdlatex.location import SourceLocation
from mdlatex.macros import MacroDefs


@dataclass(frozen=True, slots=True)
class PendingScript:
    """An evaluable code block written to disk and waiting to be run.

    The script runner consumes these after every block has been rendered and
    splices the captured output back at ``insertion_index``.

    Attributes:
        path: Resolved script path the code was written to
        language: Language of the code block
        block_offset: Start offset of the code block in the document
        location: Source location of the code block
        insertion_index: Position of this block among the document's
            evaluable blocks (0-based)

    """

    path: Path
    language: str
    block_offset: int
    location: SourceLocation
    insertion_index: int


@dataclass(slots=True)
class RenderSession:
    """Mutable state for one document render."""

    equations: EquationRegistry = field(default_factory=EquationRegistry)
    pending_scripts: list[PendingScript] = field(default_factory=list)
    source_file: str | None = None

    def add_pending(
        self,
        path: Path,
        language: str,
        block_offset: int,
        location: SourceLocation,
    ) -> PendingScript:
        """Record a script awaiting evaluation."""
        pending = PendingScript(
            path=path,
            language=language,
            block_offset=block_offset,
            location=location,
            insertion_index=len(self.pending_scripts),
        )
        self.pending_scripts.append(pending)
        return pending

    def drain_pending(self) -> list[PendingScript]:
        """Hand the pending scripts to the runner and forget them."""
        scripts = self.pending_scripts
        self.pending_scripts = []
        return scripts

    def finalize(self, html: str) -> str:
        """Resolve equation references in the rendered document."""
        return self.equations.resolve_references(html)

    def reset(self) -> None:
        """Prepare the session for a new document."""
        self.equations.reset()
        self.pending_scripts.clear()


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Macro definitions and recursion flags for one (sub-)conversion.

    Attributes:
        macro_defs: Macro definitions visible to this conversion
        session: The document's render session (shared with sub-contexts)
        is_recursive: True inside a container being rendered recursively
        has_mddefs: Whether page metadata definitions may be declared

    """

    macro_defs: MacroDefs
    session: RenderSession
    is_recursive: bool = False
    has_mddefs: bool = True

    def sub_context(self) -> RenderContext:
        """Context for the body of a container block.

        Shares the macro set and the session; metadata parsing is disabled.
        """
        return replace(self, is_recursive=True, has_mddefs=False)


def new_context(
    macro_defs: MacroDefs | None = None,
    source_file: str | None = None,
) -> RenderContext:
    """Create a context with a fresh session for a new document."""
    return RenderContext(
        macro_defs=macro_defs if macro_defs is not None else MappingProxyType({}),
        session=RenderSession(source_file=source_file),
    )
