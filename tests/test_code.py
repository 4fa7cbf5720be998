"""Tests for fenced code block extraction and script materialization."""

import io
import logging
from pathlib import Path

import pytest

from mdlatex.blocks import Block, BlockTag
from mdlatex.code import (
    CodeBlock,
    CodeBlockExtractor,
    html_code,
    parse_code_block,
    resolve_script_path,
    write_script,
)
from mdlatex.config import RenderConfig, render_config_context
from mdlatex.context import new_context
from mdlatex.errors import (
    MalformedCodeBlock,
    ScriptPathOutsideRoot,
    ScriptWriteError,
    UnsupportedRelativePath,
)


def all_files(root: Path) -> list[Path]:
    return [p for p in root.rglob("*") if p.is_file()]


@pytest.fixture
def extractor(tmp_path: Path) -> CodeBlockExtractor:
    return CodeBlockExtractor(RenderConfig(file_root=tmp_path))


# =========================================================================
# Parsing
# =========================================================================


class TestParseCodeBlock:
    """Tests for splitting a raw block into language, path and body."""

    def test_language_and_body(self) -> None:
        assert parse_code_block("```julia blah blah```") == CodeBlock("julia", None, "blah blah")

    def test_path_suffix(self) -> None:
        code = parse_code_block("```julia:/assets/scripts/s1.jl blah blah```")
        assert code.language == "julia"
        assert code.path == "/assets/scripts/s1.jl"
        assert code.body == "blah blah"

    def test_multiline_body(self) -> None:
        code = parse_code_block("```python\nx = 1\ny = 2\n```")
        assert code.language == "python"
        assert code.path is None
        assert code.body == "x = 1\ny = 2\n"

    def test_hyphenated_language(self) -> None:
        assert parse_code_block("```objective-c\nint x;\n```").language == "objective-c"

    def test_no_language(self) -> None:
        code = parse_code_block("```\ncode\n```")
        assert code.language == ""
        assert code.body == "code\n"

    def test_missing_closing_fence(self) -> None:
        with pytest.raises(MalformedCodeBlock):
            parse_code_block("```julia x = 1")

    def test_not_a_code_block(self) -> None:
        with pytest.raises(MalformedCodeBlock):
            parse_code_block("just text")


class TestHtmlCode:
    def test_with_language(self) -> None:
        assert html_code("x", "julia") == '<pre><code class="julia">x</code></pre>'

    def test_without_language(self) -> None:
        assert html_code("x", "") == "<pre><code>x</code></pre>"

    def test_body_is_escaped(self) -> None:
        assert html_code("a < b && c", "julia") == (
            '<pre><code class="julia">a &lt; b &amp;&amp; c</code></pre>'
        )


# =========================================================================
# Path resolution
# =========================================================================


class TestResolveScriptPath:
    """Tests for mapping path annotations to files."""

    def test_absolute_path_under_file_root(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path)
        assert resolve_script_path("/scripts/a.jl", config) == tmp_path / "scripts" / "a.jl"

    def test_bare_name_under_assets(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path)
        assert resolve_script_path("scripts/a", config) == tmp_path / "assets" / "scripts" / "a.jl"

    def test_custom_assets_dir(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path, assets_dir=tmp_path / "static")
        assert resolve_script_path("a.jl", config) == tmp_path / "static" / "a.jl"

    def test_extension_not_duplicated(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path)
        assert resolve_script_path("/s1.jl", config).name == "s1.jl"

    def test_extension_appended(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path)
        assert resolve_script_path("/s1", config).name == "s1.jl"

    def test_custom_extension(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path, eval_language="python", eval_extension=".py")
        assert resolve_script_path("/run", config).name == "run.py"

    def test_relative_path_unsupported(self, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedRelativePath) as excinfo:
            resolve_script_path("./s1.jl", RenderConfig(file_root=tmp_path))
        assert excinfo.value.path == "./s1.jl"

    def test_too_short(self, tmp_path: Path) -> None:
        with pytest.raises(MalformedCodeBlock):
            resolve_script_path("/", RenderConfig(file_root=tmp_path))

    def test_only_slashes(self, tmp_path: Path) -> None:
        with pytest.raises(MalformedCodeBlock):
            resolve_script_path("///", RenderConfig(file_root=tmp_path))

    def test_double_slash_stays_under_file_root(self, tmp_path: Path) -> None:
        root = tmp_path / "site"
        config = RenderConfig(file_root=root)
        outside = tmp_path / "outside"
        expected = root / (str(outside).lstrip("/") + ".jl")
        assert resolve_script_path(f"/{outside}", config) == expected
        assert resolve_script_path(f"/{outside}.jl", config).is_relative_to(root)

    def test_parent_traversal_rejected(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path / "site")
        with pytest.raises(ScriptPathOutsideRoot) as excinfo:
            resolve_script_path("/../../etc/s1", config)
        assert excinfo.value.path == "/../../etc/s1"

    def test_parent_traversal_out_of_assets_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ScriptPathOutsideRoot):
            resolve_script_path("../s1", RenderConfig(file_root=tmp_path))

    def test_parent_segment_inside_root_allowed(self, tmp_path: Path) -> None:
        config = RenderConfig(file_root=tmp_path)
        resolved = resolve_script_path("/scripts/../s1", config)
        assert resolved.resolve() == (tmp_path / "s1.jl").resolve()


# =========================================================================
# Extraction
# =========================================================================


class TestExtract:
    """Tests for CodeBlockExtractor.extract."""

    def test_plain_block_no_side_effect(self, extractor, tmp_path: Path) -> None:
        out = extractor.extract("```julia blah blah```")
        assert out == '<pre><code class="julia">blah blah</code></pre>'
        assert all_files(tmp_path) == []

    def test_evaluable_block_written(self, extractor, tmp_path: Path) -> None:
        out = extractor.extract("```julia:/assets/scripts/s1.jl blah blah```")
        assert out == ""
        target = tmp_path / "assets" / "scripts" / "s1.jl"
        assert target.read_text(encoding="utf-8") == "blah blah"
        assert all_files(tmp_path) == [target]

    def test_bare_name_written_to_assets(self, extractor, tmp_path: Path) -> None:
        assert extractor.extract("```julia:ex1\nx = 1\n```") == ""
        assert (tmp_path / "assets" / "ex1.jl").read_text(encoding="utf-8") == "x = 1\n"

    def test_overwrite_replaces_content(self, extractor, tmp_path: Path) -> None:
        extractor.extract("```julia:/s.jl a long first version```")
        extractor.extract("```julia:/s.jl short```")
        assert (tmp_path / "s.jl").read_text(encoding="utf-8") == "short"

    def test_other_language_with_path_warns(self, extractor, tmp_path: Path, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="mdlatex"):
            out = extractor.extract("```python:/scripts/s1.py print(1)```")
        assert out == '<pre><code class="python">print(1)</code></pre>'
        assert all_files(tmp_path) == []
        assert "python" in caplog.text
        assert caplog.records[0].levelno == logging.WARNING

    def test_relative_path_raises(self, extractor, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedRelativePath):
            extractor.extract("```julia:./s1.jl x```")
        assert all_files(tmp_path) == []

    def test_uses_context_config_when_unbound(self, tmp_path: Path) -> None:
        with render_config_context(RenderConfig(file_root=tmp_path)):
            CodeBlockExtractor().extract("```julia:/ctx x```")
        assert (tmp_path / "ctx.jl").exists()

    def test_pending_scripts_recorded(self, extractor, tmp_path: Path) -> None:
        source = "intro\n```julia:/a x```\n```julia:/b y```\n"
        first = Block(BlockTag.CODE_BLOCK_EVAL, source, 6, 22, source_file="page.md")
        second = Block(BlockTag.CODE_BLOCK_EVAL, source, 23, 39, source_file="page.md")
        ctx = new_context()

        extractor.extract(first.raw_span, ctx, block=first)
        extractor.extract(second.raw_span, ctx, block=second)

        pending = ctx.session.pending_scripts
        assert [p.path for p in pending] == [tmp_path / "a.jl", tmp_path / "b.jl"]
        assert [p.insertion_index for p in pending] == [0, 1]
        assert pending[0].block_offset == 6
        assert pending[0].language == "julia"
        assert str(pending[1].location) == "page.md:3:1"

    def test_plain_block_records_nothing(self, extractor) -> None:
        ctx = new_context()
        extractor.extract("```julia x```", ctx)
        assert ctx.session.pending_scripts == []


class TestWriteFailures:
    """File system errors are fatal for the block."""

    def test_write_error_propagates(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        extractor = CodeBlockExtractor(RenderConfig(file_root=blocker))

        with pytest.raises(ScriptWriteError) as excinfo:
            extractor.extract("```julia:/sub/s.jl x```")
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_missing_directory_without_create_dirs(self, tmp_path: Path) -> None:
        with pytest.raises(ScriptWriteError):
            write_script(tmp_path / "nope" / "s.jl", "x", create_dirs=False)
        assert not (tmp_path / "nope").exists()

    def test_failed_open_keeps_previous_script(self, tmp_path: Path, monkeypatch) -> None:
        script = tmp_path / "s.jl"
        script.write_text("previous good script", encoding="utf-8")

        def deny(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "open", deny)
        with pytest.raises(ScriptWriteError) as excinfo:
            write_script(script, "x = 1")
        monkeypatch.undo()

        assert isinstance(excinfo.value.__cause__, PermissionError)
        assert script.read_text(encoding="utf-8") == "previous good script"

    def test_failed_write_removes_partial_file(self, tmp_path: Path, monkeypatch) -> None:
        script = tmp_path / "s.jl"
        real_open = Path.open

        class DiskFull(io.StringIO):
            def write(self, s):
                raise OSError(28, "No space left on device")

        def open_then_fail(self, *args, **kwargs):
            real_open(self, *args, **kwargs).close()
            return DiskFull()

        monkeypatch.setattr(Path, "open", open_then_fail)
        with pytest.raises(ScriptWriteError):
            write_script(script, "x = 1")
        monkeypatch.undo()

        assert not script.exists()

    def test_extract_rejects_escaping_path(self, tmp_path: Path) -> None:
        root = tmp_path / "site"
        extractor = CodeBlockExtractor(RenderConfig(file_root=root))
        with pytest.raises(ScriptPathOutsideRoot):
            extractor.extract("```julia:/../outside\nx = 1\n```")
        assert all_files(tmp_path) == []

    def test_extract_double_slash_written_under_root(self, tmp_path: Path) -> None:
        root = tmp_path / "site"
        extractor = CodeBlockExtractor(RenderConfig(file_root=root))
        extractor.extract(f"```julia:/{tmp_path}/outside\nx = 1\n```")
        written = all_files(tmp_path)
        assert len(written) == 1
        assert written[0].is_relative_to(root)
        assert not (tmp_path / "outside.jl").exists()
