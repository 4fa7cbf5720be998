"""Loggers for the mdlatex.* hierarchy.

Every module logs under ``mdlatex.<module>``, so a host pipeline controls
all block-rendering diagnostics through the ``mdlatex`` logger:

- ``mdlatex.code`` warns when a code block with a script path is not in the
  evaluation language
- ``mdlatex.dispatch`` warns when a ``./`` script path is rendered as plain code
- ``mdlatex.equations`` warns on redefined labels and unresolved ``\\eqref``

Example:
    >>> import logging
    >>> logging.getLogger("mdlatex").setLevel(logging.ERROR)  # silence warnings
"""

from __future__ import annotations

import logging

_ROOT = "mdlatex"


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` inside the mdlatex hierarchy.

    Module names already under ``mdlatex`` are used as is; anything else is
    nested below it.

    Example:
        >>> get_logger("mdlatex.math").name
        'mdlatex.math'
        >>> get_logger("host.plugin").name
        'mdlatex.host.plugin'
    """
    if name != _ROOT and not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
