"""Stable short digests for anchors.

``refstring`` falls back to a digest when a label has no character that can
appear in an anchor id (e.g. ``\\label{∑}``).
"""

import hashlib


def hash_str(content: str, truncate: int | None = None) -> str:
    """SHA-256 hex digest of ``content``, optionally cut to ``truncate`` chars.

    Example:
        >>> hash_str("hello", truncate=16)
        '2cf24dba5fb0a30e'
    """
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return digest[:truncate] if truncate is not None else digest
