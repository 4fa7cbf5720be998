"""ContextVar-based render configuration for mdlatex.

Holds the project layout used to resolve evaluable script paths and the
language that may be evaluated. Config is set once per build and read by
every converter in the context.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so concurrent builds with different project roots do not interfere.

Usage:
    from mdlatex.config import RenderConfig, render_config_context

    with render_config_context(RenderConfig(file_root=Path("site"))):
        html = convert_block(block, ctx)

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        file_root: Project root; absolute script paths are placed under it
        assets_dir: Directory for bare script names (defaults to
            ``file_root / "assets"``)
        eval_language: The one language whose code blocks may be evaluated
        eval_extension: File extension appended to script paths lacking it
        create_dirs: Create missing parent directories before writing

    """

    file_root: Path = Path(".")
    assets_dir: Path | None = None
    eval_language: str = "julia"
    eval_extension: str = ".jl"
    create_dirs: bool = True

    @property
    def assets_path(self) -> Path:
        """Resolved assets directory."""
        if self.assets_dir is not None:
            return self.assets_dir
        return self.file_root / "assets"

    @classmethod
    def from_dict(cls, config_dict: dict) -> RenderConfig:
        """Create RenderConfig from dictionary.

        Only keys that are RenderConfig fields are used; unknown keys are
        ignored. Path-valued fields accept strings.

        Example:
            >>> config = RenderConfig.from_dict({"file_root": "site", "other": 1})
            >>> config.assets_path
            PosixPath('site/assets')

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        for key in ("file_root", "assets_dir"):
            if isinstance(filtered.get(key), str):
                filtered[key] = Path(filtered[key])
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: RenderConfig = RenderConfig()

_render_config: ContextVar[RenderConfig] = ContextVar(
    "render_config",
    default=_DEFAULT_CONFIG,
)


def get_render_config() -> RenderConfig:
    """Get current render configuration (thread-local)."""
    return _render_config.get()


def set_render_config(config: RenderConfig) -> None:
    """Set render configuration for current context."""
    _render_config.set(config)


def reset_render_config() -> None:
    """Reset to default configuration."""
    _render_config.set(_DEFAULT_CONFIG)


@contextmanager
def render_config_context(config: RenderConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with render_config_context(RenderConfig(eval_language="python")):
        ...     get_render_config().eval_language
        'python'

    """
    previous = _render_config.get()
    _render_config.set(config)
    try:
        yield
    finally:
        _render_config.set(previous)


__all__ = [
    "RenderConfig",
    "get_render_config",
    "set_render_config",
    "reset_render_config",
    "render_config_context",
]
