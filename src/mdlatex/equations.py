"""Equation numbering and label registry.

One EquationRegistry lives for the duration of a single document render.
The math normalizer increments the counter for every display block and
records ``\\label{...}`` anchors; ``\\eqref{...}`` commands emit placeholders
that are swapped for the final numbers once every block has been rendered,
so references may point both backwards and forwards in the document.

Thread Safety:
Not thread-safe. Each concurrent render owns its own registry.

"""

from __future__ import annotations

import re

from mdlatex.utils.logger import get_logger

logger = get_logger(__name__)

_EQREF_RE = re.compile(r"##EQREF:([^#\s]+)##")


def eqref_placeholder(anchor: str) -> str:
    """Marker for a reference to ``anchor``, resolved after rendering."""
    return f"##EQREF:{anchor}##"


class EquationRegistry:
    """Running equation counter plus label -> number mapping.

    The counter only increases. A label keeps the number it was first
    assigned; registering it again is ignored with a warning.

    Usage:
        >>> reg = EquationRegistry()
        >>> reg.next_number()
        1
        >>> reg.register("euler", 1)
        1
        >>> reg.number_of("euler")
        1

    """

    __slots__ = ("_counter", "_labels")

    def __init__(self) -> None:
        self._counter = 0
        self._labels: dict[str, int] = {}

    @property
    def counter(self) -> int:
        """Number of the most recent display equation (0 if none yet)."""
        return self._counter

    @property
    def labels(self) -> dict[str, int]:
        """Copy of the anchor -> equation number mapping."""
        return dict(self._labels)

    def next_number(self) -> int:
        """Advance the counter and return the new equation number."""
        self._counter += 1
        return self._counter

    def register(self, anchor: str, number: int) -> int:
        """Record that ``anchor`` refers to equation ``number``.

        Returns:
            The number stored for ``anchor`` (the first one assigned)
        """
        existing = self._labels.get(anchor)
        if existing is not None:
            logger.warning(
                "Label %r already refers to equation %d, ignoring redefinition as %d",
                anchor,
                existing,
                number,
            )
            return existing
        self._labels[anchor] = number
        return number

    def number_of(self, anchor: str) -> int | None:
        return self._labels.get(anchor)

    def reset(self) -> None:
        """Start a new document: counter to zero, labels cleared."""
        self._counter = 0
        self._labels.clear()

    def resolve_references(self, html: str) -> str:
        """Replace equation reference placeholders with linked numbers.

        Unknown labels render as ``(??)`` and are logged.
        """

        def _sub(match: re.Match[str]) -> str:
            anchor = match.group(1)
            number = self._labels.get(anchor)
            if number is None:
                logger.warning("Reference to undefined equation label %r", anchor)
                return '<span class="eqref">(??)</span>'
            return f'<span class="eqref">(<a href="#{anchor}">{number}</a>)</span>'

        return _EQREF_RE.sub(_sub, html)

    def __contains__(self, anchor: object) -> bool:
        return anchor in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"EquationRegistry(counter={self._counter}, labels={self._labels!r})"
