"""Utility modules for mdlatex.

Provides:
- text: refstring, escape_html, escape_attr for text processing
- hashing: hash_str for anchor fallbacks
- logger: get_logger for logging
"""

from mdlatex.utils.hashing import hash_str
from mdlatex.utils.logger import get_logger
from mdlatex.utils.text import escape_attr, escape_html, refstring

__all__ = [
    "escape_attr",
    "escape_html",
    "get_logger",
    "hash_str",
    "refstring",
]
