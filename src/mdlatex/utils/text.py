"""Text processing utilities for mdlatex.

Provides the reference-string scheme used for equation anchors and HTML
escaping helpers.

Example:
    >>> from mdlatex.utils.text import refstring
    >>> refstring("Euler Identity")
    'euler_identity'
"""

from __future__ import annotations

import html as html_module
import re

from mdlatex.utils.hashing import hash_str

_TAG_RE = re.compile(r"</?[a-zA-Z][a-zA-Z0-9]*\s*/?>")
_ENTITY_RE = re.compile(r"&#?[a-zA-Z0-9]+;")
_NON_REF_RE = re.compile(r"[^a-zA-Z0-9_\-\s]")
_SPACE_RE = re.compile(r"\s+")


def refstring(text: str) -> str:
    """Convert a label name to a stable anchor identifier.

    The same label always maps to the same identifier, so that references
    resolved later in the pipeline can reuse it exactly. Labels made only of
    characters that cannot appear in an identifier fall back to a truncated
    hash of the original text.

    Args:
        text: Label name as written in ``\\label{...}``

    Returns:
        Anchor identifier (lowercase ASCII, words joined by ``_``)

    Examples:
        >>> refstring("  Eq. 1  ")
        'eq_1'
        >>> refstring("a<b>c</b>")
        'ac'
    """
    cleaned = _TAG_RE.sub("", text)
    cleaned = _ENTITY_RE.sub("", cleaned)
    cleaned = _NON_REF_RE.sub("", cleaned)
    cleaned = _SPACE_RE.sub("_", cleaned.strip().lower())
    if not cleaned:
        return hash_str(text, truncate=16)
    return cleaned


def escape_html(text: str) -> str:
    """Escape HTML special characters for element content.

    Escapes ``<``, ``>``, ``&`` and ``"`` but not single quotes.
    """
    return html_module.escape(text, quote=False).replace('"', "&quot;")


def escape_attr(text: str) -> str:
    """Escape text for use inside a double-quoted HTML attribute."""
    if not text:
        return ""
    return html_module.escape(text, quote=True)
