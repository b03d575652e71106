"""Bra-ket lambda calculus CLI."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

import click

from braket import __version__
from braket.config import BraketConfig, discover_config, load_config
from braket.errors import CompileError, DiagnosticRenderer
from braket.lexer import tokenize
from braket.parser import parse
from braket.printer import format_term, to_source
from braket.terms import Term, describe, free_index


def _read_input(expr: str | None, file: str | None) -> tuple[str, str]:
    """Return (source, filename) from an argument, a file, or stdin."""
    if expr is not None and file is not None:
        raise click.UsageError("give either EXPR or --file, not both")
    if file is not None:
        return Path(file).read_text(), file
    if expr is not None:
        return expr, "<arg>"
    return sys.stdin.read(), "<stdin>"


def _report(ctx: click.Context, err: CompileError, source: str, filename: str) -> None:
    renderer = DiagnosticRenderer(color=ctx.obj["color"])
    renderer.add_source(filename, source)
    for diag in err.diagnostics:
        click.echo(renderer.render(diag), err=True)


_TOO_DEEP = "term is nested too deeply to process"


@contextmanager
def _nesting_guard():
    """Exit with status 1 when a term overflows the interpreter stack."""
    try:
        yield
    except RecursionError:
        click.echo(f"error: {_TOO_DEEP}", err=True)
        raise SystemExit(1)


def _load(ctx: click.Context, expr: str | None, file: str | None) -> tuple[Term, list[str]]:
    """Run tokenize and parse, exiting with status 1 on a diagnostic."""
    source, filename = _read_input(expr, file)
    try:
        with _nesting_guard():
            return parse(tokenize(source, filename), filename)
    except CompileError as e:
        _report(ctx, e, source, filename)
        raise SystemExit(1)


def _config(ctx: click.Context) -> BraketConfig:
    return ctx.obj["config"]


_file_option = click.option(
    "--file", "-f", type=click.Path(exists=True, dir_okay=False),
    help="Read the term from a file.",
)


@click.group()
@click.version_option(__version__, prog_name="braket")
@click.option("--color/--no-color", default=True, help="Colour diagnostics.")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False),
    help="Use this braket.toml instead of searching for one.",
)
@click.pass_context
def main(ctx: click.Context, color: bool, config_path: str | None) -> None:
    """Bra-ket lambda calculus: parse, resolve scopes, pretty-print."""
    ctx.ensure_object(dict)
    ctx.obj["color"] = color
    try:
        if config_path is not None:
            ctx.obj["config"] = load_config(Path(config_path))
        else:
            ctx.obj["config"] = discover_config()
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command(name="print")
@click.argument("expr", required=False)
@_file_option
@click.option("--threshold", type=click.IntRange(min=0), default=None,
              help="Override the parenthesization length threshold.")
@click.pass_context
def print_cmd(ctx: click.Context, expr: str | None, file: str | None,
              threshold: int | None) -> None:
    """Pretty-print a term in display form."""
    term, free_vars = _load(ctx, expr, file)
    fmt = _config(ctx).format
    if threshold is not None:
        fmt.paren_threshold = threshold
    with _nesting_guard():
        text = format_term(term, free_vars, fmt.printer_options())
    click.echo(text)


@main.command()
@click.argument("expr", required=False)
@_file_option
@click.pass_context
def tokens(ctx: click.Context, expr: str | None, file: str | None) -> None:
    """List the tokens of a term, one per line."""
    source, filename = _read_input(expr, file)
    try:
        toks = tokenize(source, filename)
    except CompileError as e:
        _report(ctx, e, source, filename)
        raise SystemExit(1)
    for tok in toks:
        click.echo(str(tok))


@main.command()
@click.argument("expr", required=False)
@_file_option
@click.option("--compact", is_flag=True, help="Print the tree on one line.")
@click.pass_context
def view(ctx: click.Context, expr: str | None, file: str | None, compact: bool) -> None:
    """View the resolved term tree and free-variable table."""
    term, free_vars = _load(ctx, expr, file)
    with _nesting_guard():
        if compact:
            click.echo(f"{describe(term)} free={free_vars!r}")
            return
        _dump_term(term, 0)
    if free_vars:
        click.echo("free:")
        for slot, name in enumerate(free_vars):
            click.echo(f"  {free_index(slot)}: {name}")
    else:
        click.echo("free: []")


def _dump_term(node: object, depth: int) -> None:
    """Print a readable term dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        scalars = []
        children = []
        for field_name in fields:
            value = getattr(node, field_name)
            if hasattr(value, "__dataclass_fields__"):
                children.append((field_name, value))
            else:
                scalars.append(f"{field_name}={value!r}")
        header = f"{indent}{name}"
        if scalars:
            header += f" {' '.join(scalars)}"
        click.echo(header)
        for field_name, child in children:
            click.echo(f"{indent}  {field_name}:")
            _dump_term(child, depth + 2)
    else:
        click.echo(f"{indent}{name}: {node!r}")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
@click.pass_context
def format_cmd(ctx: click.Context, path: str, check: bool, use_stdin: bool) -> None:
    """Rewrite .lam files to canonical source form."""
    if use_stdin:
        source = sys.stdin.read()
        try:
            with _nesting_guard():
                term, free_vars = parse(tokenize(source, "<stdin>"), "<stdin>")
                formatted = to_source(term, free_vars) + "\n"
        except CompileError as e:
            _report(ctx, e, source, "<stdin>")
            raise SystemExit(1)
        if check:
            if formatted != source:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    target = Path(path)
    lam_files = sorted(target.rglob("*.lam")) if target.is_dir() else [target]

    if not lam_files:
        click.echo("no .lam files found", err=True)
        return

    needs_formatting = False
    had_errors = False
    for lam_file in lam_files:
        source = lam_file.read_text()
        filename = str(lam_file)
        try:
            term, free_vars = parse(tokenize(source, filename), filename)
            formatted = to_source(term, free_vars) + "\n"
        except CompileError as e:
            _report(ctx, e, source, filename)
            had_errors = True
            continue
        except RecursionError:
            click.echo(f"error: {filename}: {_TOO_DEEP}", err=True)
            had_errors = True
            continue

        if formatted != source:
            if check:
                click.echo(f"would reformat {filename}")
                needs_formatting = True
            else:
                lam_file.write_text(formatted)
                click.echo(f"formatted {filename}")

    if had_errors or (check and needs_formatting):
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def highlight(file: str) -> None:
    """Print a .lam file with terminal syntax colours."""
    from braket.highlight import highlight as colorize

    click.echo(colorize(Path(file).read_text()), nl=False)


@main.command()
def lsp() -> None:
    """Start the bra-ket language server."""
    from braket.lsp import main as lsp_main

    lsp_main()
