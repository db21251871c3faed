"""Minimal LSP server for Turing machine programs — diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from tmlang import __version__
from tmlang.errors import LineIndex
from tmlang.parser import compile_source

server = LanguageServer("tmlang-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Compile the document and publish its diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    result = compile_source(source)
    index = LineIndex(source)
    # Columns count code points; the client expects its negotiated encoding (UTF-16 by default)
    lines = source.split("\n")
    codec = doc.position_codec
    diagnostics: list[Diagnostic] = []

    for diag in result.diagnostics:
        if diag.position is None:
            start = end = Position(line=0, character=0)
        else:
            first = index.position(diag.position)
            last = index.position(diag.position + max(1, diag.length))
            start = codec.position_to_client_units(
                lines, Position(line=first.line - 1, character=first.column - 1)
            )
            end = codec.position_to_client_units(
                lines, Position(line=last.line - 1, character=last.column - 1)
            )
        diagnostics.append(
            Diagnostic(
                range=Range(start=start, end=end),
                message=diag.message,
                severity=DiagnosticSeverity.Error,
                source="tmlang",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
