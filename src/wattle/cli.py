"""wattle command-line interface."""

from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path

import click

from wattle import __version__
from wattle.ast_nodes import TypeModule
from wattle.config import WattleConfig, config_for
from wattle.errors import CompileError, DiagnosticRenderer
from wattle.formatter import WatFormatter
from wattle.module import parse_module


def _wat_files(target: Path) -> list[Path]:
    if target.is_dir():
        return sorted([*target.rglob("*.wat"), *target.rglob("*.wast")])
    return [target]


def _parse_source(
    source: str, filename: str, config: WattleConfig, renderer: DiagnosticRenderer,
) -> TypeModule | None:
    """Parse one source text; print diagnostics and return None on failure."""
    try:
        return parse_module(source, filename, max_depth=config.check.max_depth)
    except CompileError as e:
        renderer.remember_source(filename, source)
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        return None


@click.group()
@click.version_option(__version__, prog_name="wattle")
def main() -> None:
    """Type-grammar front end for the WebAssembly text format."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse .wat files and report grammar errors."""
    target = Path(path)
    config = config_for(target)
    renderer = DiagnosticRenderer(color=config.output.color)

    files = _wat_files(target)
    if not files:
        click.echo("warning: no .wat files found", err=True)
        return

    had_errors = False
    for wat_file in files:
        module = _parse_source(wat_file.read_text(), str(wat_file), config, renderer)
        if module is None:
            had_errors = True

    if had_errors:
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s) — no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Rewrite .wat files in canonical shorthand form."""
    config = config_for(Path(path))
    renderer = DiagnosticRenderer(color=config.output.color)
    formatter = WatFormatter()

    if use_stdin:
        source = sys.stdin.read()
        module = _parse_source(source, "<stdin>", config, renderer)
        if module is None:
            raise SystemExit(1)
        formatted = formatter.format(module)
        if check:
            if formatted != source:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    files = _wat_files(Path(path))
    if not files:
        click.echo("no .wat files found", err=True)
        return

    needs_formatting = False
    had_errors = False
    for wat_file in files:
        source = wat_file.read_text()
        filename = str(wat_file)
        module = _parse_source(source, filename, config, renderer)
        if module is None:
            had_errors = True
            continue

        formatted = formatter.format(module)
        if formatted != source:
            if check:
                click.echo(f"would reformat {filename}")
                needs_formatting = True
            else:
                wat_file.write_text(formatted)
                click.echo(f"formatted {filename}")

    if had_errors or (check and needs_formatting):
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """Print the parsed tree of a .wat file."""
    config = config_for(Path(file))
    renderer = DiagnosticRenderer(color=config.output.color)
    module = _parse_source(Path(file).read_text(), file, config, renderer)
    if module is None:
        raise SystemExit(1)
    _dump_tree(module, 0)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def highlight(file: str) -> None:
    """Print a .wat file with syntax highlighting."""
    from pygments import highlight as pygments_highlight
    from pygments.formatters import TerminalFormatter

    from wattle.highlight import WatLexer

    source = Path(file).read_text()
    if config_for(Path(file)).output.color:
        click.echo(pygments_highlight(source, WatLexer(), TerminalFormatter()), nl=False)
    else:
        click.echo(source, nl=False)


@main.command()
def lsp() -> None:
    """Start the wattle language server."""
    from wattle.lsp import main as lsp_main

    lsp_main()


def _dump_tree(node: object, depth: int) -> None:
    """Print a readable tree dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            if field_name.endswith("span"):
                continue
            value = getattr(node, field_name)
            if isinstance(value, (list, tuple)):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_tree(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_tree(value, depth + 2)
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {_leaf(value)}")
    else:
        click.echo(f"{indent}{_leaf(node)}")


def _leaf(value: object) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return repr(value)
