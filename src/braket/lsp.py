"""Bra-ket language server: pygls-based LSP for .lam files.

Provides diagnostics, hover and formatting via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from braket import __version__
from braket.config import discover_config
from braket.errors import CompileError, Severity
from braket.lexer import tokenize
from braket.parser import parse
from braket.printer import PrinterOptions, format_term, to_source
from braket.terms import Term, Variable, free_index
from braket.tokens import Token, TokenKind

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}


def span_to_range(span: object) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    sl = getattr(span, "start_line", 1)
    sc = getattr(span, "start_col", 1)
    el = getattr(span, "end_line", sl)
    ec = getattr(span, "end_col", sc)
    return lsp.Range(
        start=lsp.Position(line=sl - 1, character=sc - 1),
        end=lsp.Position(line=el - 1, character=ec),
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    tokens: list[Token] = field(default_factory=list)
    term: Term | None = None
    free_vars: list[str] = field(default_factory=list)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)
    options: PrinterOptions = field(default_factory=PrinterOptions)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "braket-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _compile_diag(d: object) -> lsp.Diagnostic:
    """Convert a braket Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if hasattr(d, "labels") and d.labels:
        span_range = span_to_range(d.labels[0].span)
    sev = _SEVERITY_MAP.get(getattr(d, "severity", None), lsp.DiagnosticSeverity.Error)
    code = getattr(d, "code", "E000")
    msg = getattr(d, "message", str(d))
    return lsp.Diagnostic(
        range=span_range, severity=sev, source="braket",
        code=code, message=f"[{code}] {msg}",
    )


def _internal_diag(phase: str, e: Exception) -> lsp.Diagnostic:
    return lsp.Diagnostic(
        range=lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0)),
        severity=lsp.DiagnosticSeverity.Error, source="braket",
        message=f"[internal] {phase} error: {e}",
    )


def _printer_options(uri: str) -> PrinterOptions:
    """Display options from the braket.toml nearest the document."""
    path = to_fs_path(uri)
    if path is None:
        return PrinterOptions()
    return discover_config(Path(path)).format.printer_options()


def _analyze(uri: str, source: str) -> DocumentState:
    """Run tokenize → parse, cache results, return state."""
    ds = DocumentState(source=source)
    try:
        ds.options = _printer_options(uri)
    except ValueError as e:
        ds.diagnostics.append(lsp.Diagnostic(
            range=lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0)),
            severity=lsp.DiagnosticSeverity.Warning, source="braket",
            message=f"[config] {e}",
        ))
    _state[uri] = ds

    # Phase 1: Lex
    try:
        ds.tokens = tokenize(source, uri)
    except CompileError as e:
        ds.diagnostics += [_compile_diag(d) for d in e.diagnostics]
        return ds
    except Exception as e:
        ds.diagnostics.append(_internal_diag("lexer", e))
        return ds

    # Phase 2: Parse
    try:
        ds.term, ds.free_vars = parse(ds.tokens, uri)
    except CompileError as e:
        ds.diagnostics += [_compile_diag(d) for d in e.diagnostics]
    except Exception as e:
        ds.diagnostics.append(_internal_diag("parser", e))
    return ds


def _token_at(tokens: list[Token], line: int, character: int) -> int | None:
    """Index of the token covering the 0-indexed position, if any."""
    for i, tok in enumerate(tokens):
        span = tok.span
        if span is None or span.start_line - 1 != line:
            continue
        if span.start_col - 1 <= character <= span.end_col - 1:
            return i
    return None


def _resolve_occurrences(tokens: list[Token], free_vars: list[str]) -> dict[int, int | None]:
    """Map each identifier token position to its variable index.

    Binder parameters map to None. Assumes the tokens parsed successfully,
    so every '{' opens a lambda body and every '}' closes one.
    """
    resolved: dict[int, int | None] = {}
    env: list[str] = []
    pending: str | None = None
    for i, tok in enumerate(tokens):
        if tok.kind == TokenKind.IDENTIFIER:
            if i > 0 and tokens[i - 1].kind == TokenKind.LAMBDA:
                resolved[i] = None
                pending = tok.value
                continue
            for depth, bound in enumerate(reversed(env), start=1):
                if bound == tok.value:
                    resolved[i] = depth
                    break
            else:
                resolved[i] = free_index(free_vars.index(tok.value))
        elif tok.kind == TokenKind.LBRACE and pending is not None:
            env.append(pending)
            pending = None
        elif tok.kind == TokenKind.RBRACE:
            env.pop()
    return resolved


def _hover_text(ds: DocumentState, line: int, character: int) -> str | None:
    if ds.term is None:
        return None
    idx = _token_at(ds.tokens, line, character)
    if idx is None or ds.tokens[idx].kind != TokenKind.IDENTIFIER:
        return None
    name = ds.tokens[idx].value
    index = _resolve_occurrences(ds.tokens, ds.free_vars)[idx]
    if index is None:
        head = f"**binder** `{name}`"
    elif index > 0:
        head = f"**bound** `{name}` : de Bruijn index `{index}`"
    else:
        head = f"**free** `{name}` : slot `{Variable(index).free_slot}` (index `{index}`)"
    return f"{head}\n\n`{format_term(ds.term, ds.free_vars, ds.options)}`"


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take the last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    content = _hover_text(ds, params.position.line, params.position.character)
    if content is None:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


def _formatting_edits(ds: DocumentState) -> list[lsp.TextEdit] | None:
    if ds.term is None:
        return None

    formatted = to_source(ds.term, ds.free_vars) + "\n"
    if formatted == ds.source:
        return None

    # Replace entire document
    lines = ds.source.splitlines()
    if not lines or ds.source.endswith("\n"):
        end_line, end_char = len(lines), 0
    else:
        end_line, end_char = len(lines) - 1, len(lines[-1])

    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(0, 0),
            end=lsp.Position(end_line, end_char),
        ),
        new_text=formatted,
    )]


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return _formatting_edits(ds)


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the bra-ket language server on stdio."""
    server.start_io()
