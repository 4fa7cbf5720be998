"""Exception classes for mdlatex.

Errors fall into three groups:

- Invariant violations (the upstream segmenter handed over something it
  should never produce): UnrecognizedMathTag, MalformedCodeBlock.
- Authoring errors (a single block is misconfigured): UnsupportedRelativePath,
  ScriptPathOutsideRoot, UndefinedMacroError, MacroArgumentError,
  MacroRecursionError.
- Environment errors: ScriptWriteError.

All of them derive from BlockError, which carries the location of the block
being converted when it is known.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdlatex.location import SourceLocation


class MdLatexError(Exception):
    """Base exception for all mdlatex errors.

    Subclass this for specific error categories.
    """

    pass


class BlockError(MdLatexError):
    """Error raised while converting a single block.

    The message is prefixed with the block location ("file.md:3:1 ...")
    once a location is attached.
    """

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        """Initialize block error with optional location.

        Args:
            message: Error description
            location: Location of the offending block (optional)
        """
        self.message = message
        self.location = location
        super().__init__(self._format())

    def _format(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location} {self.message}"

    def with_location(self, location: SourceLocation) -> BlockError:
        """Attach a location unless one is already set.

        Returns:
            self, so the error can be re-raised directly
        """
        if self.location is None:
            self.location = location
            self.args = (self._format(),)
        return self


class UnrecognizedMathTag(BlockError):
    """A math block tag has no entry in the fence table."""

    def __init__(self, tag: object, location: SourceLocation | None = None) -> None:
        self.tag = tag
        super().__init__(f"Unrecognised math block tag {tag!r}", location)


class MalformedCodeBlock(BlockError):
    """A fenced code block lacks its fence pair or body."""

    pass


class UnsupportedRelativePath(BlockError):
    """An evaluable code block names a ``./relative`` script path."""

    def __init__(self, path: str, location: SourceLocation | None = None) -> None:
        self.path = path
        super().__init__(
            f"Relative script path {path!r} is not supported, "
            "use an absolute path or a bare name",
            location,
        )


class ScriptPathOutsideRoot(BlockError):
    """An evaluable code block's script path leaves its base directory."""

    def __init__(self, path: str, base: object, location: SourceLocation | None = None) -> None:
        self.path = path
        self.base = base
        super().__init__(f"Script path {path!r} resolves outside {base}", location)


class ScriptWriteError(BlockError):
    """Writing an evaluable code block to disk failed."""

    def __init__(self, path: object, location: SourceLocation | None = None) -> None:
        self.path = path
        super().__init__(f"Could not write script to {path}", location)


class UndefinedMacroError(BlockError):
    """A macro invocation refers to a command with no definition."""

    def __init__(self, name: str, location: SourceLocation | None = None) -> None:
        self.name = name
        super().__init__(f"Command '\\{name}' was not defined", location)


class MacroArgumentError(BlockError):
    """A macro was invoked with the wrong number of arguments."""

    def __init__(
        self,
        name: str,
        expected: int,
        got: int,
        location: SourceLocation | None = None,
    ) -> None:
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(
            f"Command '\\{name}' expects {expected} argument(s), got {got}",
            location,
        )


class MacroRecursionError(BlockError):
    """Macro expansion did not terminate within the depth limit."""

    pass
