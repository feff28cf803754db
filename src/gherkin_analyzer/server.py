from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    Diagnostic,
    InitializeParams,
    PublishDiagnosticsParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from gherkin_analyzer import __version__
from gherkin_analyzer.config import merge_settings, project_settings
from gherkin_analyzer.engine import AnalysisEngine
from gherkin_analyzer.session import DocumentSession

logger = logging.getLogger(__name__)

server = LanguageServer(
    "gherkin-analyzer",
    __version__,
    text_document_sync_kind=TextDocumentSyncKind.Full,
)

_SESSION_ATTR = "gherkin_session"


def _publish(ls: LanguageServer, uri: str, diagnostics: list[Diagnostic]) -> None:
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def session_for(ls: LanguageServer) -> DocumentSession:
    session = getattr(ls, _SESSION_ATTR, None)
    if session is None:
        session = DocumentSession(
            AnalysisEngine(), lambda uri, diagnostics: _publish(ls, uri, diagnostics)
        )
        setattr(ls, _SESSION_ATTR, session)
    return session


def _workspace_root(ls: LanguageServer) -> Path | None:
    root = getattr(ls.workspace, "root_path", None)
    return Path(root) if root else None


def _effective_settings(ls: LanguageServer, editor: object) -> dict[str, object]:
    editor_settings = editor if isinstance(editor, Mapping) else {}
    root = _workspace_root(ls)
    base = project_settings(root=root) if root is not None else {}
    return merge_settings(base, editor_settings)


@server.feature(INITIALIZE)
def initialize(ls: LanguageServer, params: InitializeParams) -> None:
    settings = _effective_settings(ls, params.initialization_options)
    logger.info("initializing with %d configured rules", len(settings.get("rules") or {}))
    session_for(ls).reconfigure(settings)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    document = params.text_document
    session_for(ls).open(document.uri, document.text)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    doc = ls.workspace.get_text_document(uri)
    session_for(ls).change(uri, doc.source)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: LanguageServer, params: DidCloseTextDocumentParams) -> None:
    session_for(ls).close(params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: LanguageServer, params: DidSaveTextDocumentParams) -> None:
    session_for(ls).save(params.text_document.uri)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: LanguageServer, params: DidChangeConfigurationParams
) -> None:
    settings = _effective_settings(ls, params.settings)
    session_for(ls).reconfigure(settings)


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Serve LSP over stdio; logs go to stderr."""
    logging.basicConfig(level=logging.INFO)
    (start_fn or server.start_io)()


if __name__ == "__main__":  # pragma: no cover
    start()  # pragma: no cover
