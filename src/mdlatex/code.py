"""Fenced code block extraction and script materialization.

A fenced code block may carry a target path after its language tag::

    ```julia:/assets/scripts/s1.jl
    x = 1 + 1
    ```

Blocks without a path render as ``<pre><code>``. Blocks in the evaluation
language with a path are written to disk and recorded as pending scripts;
their fragment is empty and the runner's captured output is spliced in at
the block position later. Execution itself happens elsewhere.

Path resolution:
- ``/scripts/s1.jl``: under the project file root
- ``scripts/s1``: under the assets directory
- ``./s1.jl``: not supported (UnsupportedRelativePath)
- ``/../x`` or ``//abs/x``: must stay under its base (ScriptPathOutsideRoot)

Partial writes:
When a write fails after the file was opened, the partially written file is
deleted on a best-effort basis before ScriptWriteError is raised. A failure
to create or open the file leaves an existing script in place.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from mdlatex.config import RenderConfig, get_render_config
from mdlatex.errors import (
    MalformedCodeBlock,
    ScriptPathOutsideRoot,
    ScriptWriteError,
    UnsupportedRelativePath,
)
from mdlatex.location import SourceLocation
from mdlatex.utils.logger import get_logger
from mdlatex.utils.text import escape_attr, escape_html

if TYPE_CHECKING:
    from mdlatex.blocks import Block
    from mdlatex.context import RenderContext

logger = get_logger(__name__)

_CODE_BLOCK_RE = re.compile(
    r"```([a-z-]*)(:[\w\\/.\-]+)?\s*\n?(.*)```",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """Parts of a fenced code block.

    Attributes:
        language: Language tag (may be empty)
        path: Target script path without the leading colon, if any
        body: Code between the header and the closing fence

    """

    language: str
    path: str | None
    body: str


def parse_code_block(raw: str, location: SourceLocation | None = None) -> CodeBlock:
    """Split a raw fenced code block into language, path and body.

    Raises:
        MalformedCodeBlock: If the fence pair or the body cannot be found
    """
    match = _CODE_BLOCK_RE.search(raw)
    if match is None:
        raise MalformedCodeBlock(f"Not a fenced code block: {raw[:40]!r}", location)
    lang, path, body = match.groups()
    return CodeBlock(
        language=lang,
        path=path[1:] if path is not None else None,
        body=body,
    )


def html_code(body: str, language: str) -> str:
    """Plain ``<pre><code>`` rendering of a code body."""
    if language:
        return f'<pre><code class="{escape_attr(language)}">{escape_html(body)}</code></pre>'
    return f"<pre><code>{escape_html(body)}</code></pre>"


def resolve_script_path(
    path: str,
    config: RenderConfig,
    location: SourceLocation | None = None,
) -> Path:
    """Map a code block path annotation to a file path.

    Raises:
        MalformedCodeBlock: If the path is too short to name a file
        UnsupportedRelativePath: For ``./`` relative paths
        ScriptPathOutsideRoot: If the path climbs out of its base directory
    """
    if len(path) <= 1:
        raise MalformedCodeBlock(f"Code block path {path!r} does not look like a path", location)
    if path.startswith("/"):
        base = config.file_root
        relative = path.lstrip("/")
    elif path.startswith("./"):
        raise UnsupportedRelativePath(path, location)
    else:
        base = config.assets_path
        relative = path
    if not relative:
        raise MalformedCodeBlock(f"Code block path {path!r} does not look like a path", location)

    resolved = base / relative
    if not resolved.name.endswith(config.eval_extension):
        resolved = resolved.with_name(resolved.name + config.eval_extension)
    # ".." segments must stay inside the base directory
    if not resolved.resolve().is_relative_to(base.resolve()):
        raise ScriptPathOutsideRoot(path, base, location)
    return resolved


def write_script(
    path: Path,
    code: str,
    *,
    create_dirs: bool = True,
    location: SourceLocation | None = None,
) -> None:
    """Write ``code`` to ``path``, replacing any previous content.

    A file left half-written by a failed write is removed. A failure before
    the file is opened leaves any previous script at ``path`` untouched.

    Raises:
        ScriptWriteError: If the file cannot be written
    """
    try:
        if create_dirs:
            path.parent.mkdir(parents=True, exist_ok=True)
        f = path.open("w", encoding="utf-8")
    except OSError as exc:
        raise ScriptWriteError(path, location) from exc

    try:
        with f:
            f.write(code)
    except OSError as exc:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove partial script %s", path, exc_info=True)
        raise ScriptWriteError(path, location) from exc


class CodeBlockExtractor:
    """Converter for fenced code blocks that may be evaluated.

    Args:
        config: Render configuration (the context's current config if None)

    """

    __slots__ = ("_config",)

    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config

    @property
    def config(self) -> RenderConfig:
        return self._config or get_render_config()

    def extract(
        self,
        raw: str,
        ctx: RenderContext | None = None,
        *,
        block: Block | None = None,
    ) -> str:
        """Convert a fenced code block.

        Args:
            raw: Raw block text, fences included
            ctx: Rendering context; evaluable blocks are queued on its session
            block: The block being converted (for diagnostics)

        Returns:
            ``<pre><code>`` HTML, or an empty string for a materialized script
        """
        location = block.location if block is not None else None
        code = parse_code_block(raw, location)

        if code.path is None:
            return html_code(code.body, code.language)

        config = self.config
        if code.language != config.eval_language:
            logger.warning(
                "%sEvaluation of %r code blocks is not supported, only %r; "
                "rendering %s as plain code",
                f"{location}: " if location else "",
                code.language,
                config.eval_language,
                code.path,
            )
            return html_code(code.body, code.language)

        path = resolve_script_path(code.path, config, location)
        write_script(path, code.body, create_dirs=config.create_dirs, location=location)
        logger.debug("Wrote %s code block to %s", code.language, path)

        if ctx is not None:
            ctx.session.add_pending(
                path=path,
                language=code.language,
                block_offset=block.source_offset if block is not None else 0,
                location=location or SourceLocation.unknown(),
            )
        return ""
