"""Tests for the wattle CLI, config, and error rendering."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from wattle.cli import main
from wattle.config import WattleConfig, config_for, find_config, load_config
from wattle.errors import (
    CompileError,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    LookaheadError,
    OrderError,
    Severity,
)
from wattle.source import SourceFile, Span

GOOD = "(module $m\n  (type $t (func (param i32) (result i32))))\n"
BAD = "(module\n  (type (func (result i32) (param i32))))\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path):
    """Create a minimal project with config and one .wat file."""
    (tmp_path / "wattle.toml").write_text(
        "[check]\nmax_depth = 16\n"
        "[output]\ncolor = false\n"
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "types.wat").write_text(GOOD)
    return tmp_path


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("check", "format", "view", "highlight", "lsp"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_check_ok(self, runner, tmp_project):
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 0
        assert "checked 1 file(s)" in result.output

    def test_check_error(self, runner, tmp_project):
        (tmp_project / "src" / "bad.wat").write_text(BAD)
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 1
        assert "error[E201]: cannot list params after results" in result.output
        assert "\033[" not in result.output

    def test_check_single_file(self, runner, tmp_path):
        wat = tmp_path / "one.wat"
        wat.write_text("(memory 1 anyfunc)")
        result = runner.invoke(main, ["check", str(wat)])
        assert result.exit_code == 1
        assert "E200" in result.output

    def test_check_no_files(self, runner, tmp_path):
        result = runner.invoke(main, ["check", str(tmp_path)])
        assert result.exit_code == 0
        assert "no .wat files found" in result.output

    def test_check_respects_max_depth(self, runner, tmp_path):
        (tmp_path / "wattle.toml").write_text("[check]\nmax_depth = 2\n")
        (tmp_path / "deep.wat").write_text(GOOD)
        result = runner.invoke(main, ["check", str(tmp_path)])
        assert result.exit_code == 1
        assert "E100" in result.output

    def test_format_rewrites(self, runner, tmp_path):
        wat = tmp_path / "a.wat"
        wat.write_text("(type (func (param i32) (param i32)))")
        result = runner.invoke(main, ["format", str(wat)])
        assert result.exit_code == 0
        assert wat.read_text() == "(type (func (param i32 i32)))\n"

    def test_format_check(self, runner, tmp_path):
        wat = tmp_path / "a.wat"
        wat.write_text("(table 1 anyfunc)")
        result = runner.invoke(main, ["format", "--check", str(wat)])
        assert result.exit_code == 1
        assert "would reformat" in result.output
        assert wat.read_text() == "(table 1 anyfunc)"

    def test_format_stdin(self, runner):
        result = runner.invoke(main, ["format", "--stdin"], input="(global (mut f32))")
        assert result.exit_code == 0
        assert result.output == "(global (mut f32))\n"

    def test_view(self, runner, tmp_project):
        result = runner.invoke(main, ["view", str(tmp_project / "src" / "types.wat")])
        assert result.exit_code == 0
        assert "TypeModule" in result.output
        assert "TypeDecl" in result.output
        assert "i32" in result.output

    def test_highlight_without_color(self, runner, tmp_project):
        wat = tmp_project / "src" / "types.wat"
        result = runner.invoke(main, ["highlight", str(wat)])
        assert result.exit_code == 0
        assert result.output == GOOD


# --- Config tests ---


class TestConfig:
    def test_find_config(self, tmp_project):
        assert find_config(tmp_project / "src") == (tmp_project / "wattle.toml").resolve()

    def test_find_config_from_file(self, tmp_project):
        found = find_config(tmp_project / "src" / "types.wat")
        assert found == (tmp_project / "wattle.toml").resolve()

    def test_load_config(self, tmp_project):
        config = load_config(tmp_project / "wattle.toml")
        assert config.check.max_depth == 16
        assert config.output.color is False

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "wattle.toml"
        toml.write_text("")
        config = load_config(toml)
        assert config.check.max_depth is None
        assert config.output.color is True

    def test_config_for_missing_file(self, monkeypatch, tmp_path):
        def missing(start_path=None):
            raise FileNotFoundError

        monkeypatch.setattr("wattle.config.find_config", missing)
        assert config_for(tmp_path) == WattleConfig()


# --- Error rendering tests ---


class TestDiagnosticRenderer:
    def test_render_without_color(self):
        diag = Diagnostic(
            severity=Severity.ERROR,
            code="E200",
            message="expected `)`, found `i32`",
            labels=[DiagnosticLabel(span=Span("test.wat", 1, 5, 1, 7), message="")],
        )
        output = DiagnosticRenderer(color=False).render(diag)
        assert "error[E200]: expected `)`, found `i32`" in output
        assert "--> test.wat:1:5" in output

    def test_render_remembered_source(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.remember_source("<stdin>", "(param $x i32 i32)")
        diag = Diagnostic(
            severity=Severity.ERROR,
            code="E200",
            message="expected `)`, found `i32`",
            labels=[DiagnosticLabel(span=Span("<stdin>", 1, 15, 1, 17), message="")],
        )
        output = renderer.render(diag)
        assert "(param $x i32 i32)" in output
        assert " " * 14 + "^^^" in output

    def test_render_notes(self):
        diag = OrderError(Span("t.wat", 1, 1, 1, 6)).to_diagnostic()
        output = DiagnosticRenderer(color=False).render(diag)
        assert "error[E201]: cannot list params after results" in output
        assert "note: parameters must precede results in a signature" in output

    def test_render_with_color(self):
        diag = Diagnostic(severity=Severity.ERROR, code="E201", message="x")
        assert "\033[" in DiagnosticRenderer(color=True).render(diag)


class TestErrors:
    def test_lookahead_single(self):
        err = LookaheadError(("`)`",), "`i32`", Span("t.wat", 1, 1, 1, 3))
        assert str(err) == "expected `)`, found `i32`"

    def test_lookahead_many(self):
        err = LookaheadError(("u32", "identifier"), "`)`", Span("t.wat", 1, 1, 1, 1))
        assert err.message == "expected one of {u32, identifier}, found `)`"
        assert err.to_diagnostic().code == "E200"

    def test_order_diagnostic(self):
        diag = OrderError(Span("t.wat", 2, 3, 2, 7)).to_diagnostic()
        assert diag.code == "E201"
        assert diag.labels[0].span.start_line == 2
        assert diag.notes == ["parameters must precede results in a signature"]

    def test_compile_error_message(self):
        diag = Diagnostic(severity=Severity.ERROR, code="E100", message="boom")
        assert str(CompileError([diag])) == "1 error(s): boom"


class TestSourceFile:
    def test_line_at(self, tmp_path):
        path = tmp_path / "a.wat"
        path.write_text("(type $t\n  (func))\n")
        sf = SourceFile.load(path)
        assert sf.line_at(2) == "  (func))"
        assert sf.line_at(9) == ""
