"""Minimal LSP server for cfmlscan: unresolved component reference diagnostics."""

from __future__ import annotations

import logging
from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    WORKSPACE_DID_CHANGE_WATCHED_FILES,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidChangeWatchedFilesParams,
    DidOpenTextDocumentParams,
    FileChangeType,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from cfmlscan import positions
from cfmlscan.component import parse_component
from cfmlscan.document import Document, is_cfc_file
from cfmlscan.resolver import ComponentPathCache, ComponentResolver

logger = logging.getLogger(__name__)

server = LanguageServer("cfmlscan-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

# Shared by every open document; invalidated from watched-file events
path_cache = ComponentPathCache()


def _to_lsp_range(r: positions.Range) -> Range:
    return Range(
        start=Position(line=r.start.line, character=r.start.character),
        end=Position(line=r.end.line, character=r.end.character),
    )


def _workspace_roots(ls: LanguageServer) -> list[Path]:
    roots: list[Path] = []
    for folder in ls.workspace.folders.values():
        fs_path = to_fs_path(folder.uri)
        if fs_path:
            roots.append(Path(fs_path))
    root_path = ls.workspace.root_path
    if root_path and Path(root_path) not in roots:
        roots.append(Path(root_path))
    return roots


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse a component document and publish unresolved-reference warnings."""
    text_doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    if text_doc.path and is_cfc_file(text_doc.path):
        doc = Document(text_doc.source, text_doc.path)
        resolver = ComponentResolver(roots=_workspace_roots(ls), cache=path_cache)
        component = parse_component(doc, resolver)
        if component is not None:
            for ref in component.unresolved:
                diagnostics.append(
                    Diagnostic(
                        range=_to_lsp_range(ref.range),
                        message=f"cannot resolve component '{ref.dot_path}'",
                        severity=DiagnosticSeverity.Warning,
                        source="cfmlscan",
                    )
                )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _invalidate(params: DidChangeWatchedFilesParams) -> None:
    """Drop cached resolutions affected by file-system changes."""
    for event in params.changes:
        fs_path = to_fs_path(event.uri)
        if not fs_path or not is_cfc_file(fs_path):
            continue
        if event.type in (FileChangeType.Created, FileChangeType.Deleted):
            dropped = path_cache.invalidate_target(fs_path)
        else:
            dropped = path_cache.invalidate_referencing(fs_path)
        logger.debug("%s %s: dropped %d cached resolutions", event.type.name, fs_path, dropped)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(WORKSPACE_DID_CHANGE_WATCHED_FILES)
def did_change_watched_files(ls: LanguageServer, params: DidChangeWatchedFilesParams) -> None:
    _invalidate(params)


def main() -> None:
    server.start_io()
