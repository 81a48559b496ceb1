"""语言服务器

通过 stdio 与编辑器通信，只支持全量文档同步和诊断发布。
initialize / shutdown 由 pygls 应答，未注册的方法返回标准的 MethodNotFound。
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lsprotocol import types as lsp
from pygls.server import LanguageServer

from .. import __version__
from .bridge import DiagnosticBridge, Linter, SessionConfig
from .protocol import DocumentSnapshot, DocumentUri

logger = logging.getLogger(__name__)

SERVER_NAME = "homescript-ls"


class HomescriptSession:
    """一次编辑器会话

    持有 DiagnosticBridge，并把 didOpen / didChange 转发给它。
    """

    def __init__(
        self,
        linter: Linter,
        config: Optional[SessionConfig] = None,
        server: Optional[LanguageServer] = None,
    ):
        self.config = config or SessionConfig()
        self.server = server or LanguageServer(
            SERVER_NAME,
            __version__,
            text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
        )
        self.bridge = DiagnosticBridge(linter, self.publish, self.config)
        self._register()

    def _register(self) -> None:
        @self.server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
        async def did_open(ls: LanguageServer, params: lsp.DidOpenTextDocumentParams):
            await self.did_open(params)

        @self.server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
        async def did_change(ls: LanguageServer, params: lsp.DidChangeTextDocumentParams):
            await self.did_change(params)

    async def did_open(self, params: lsp.DidOpenTextDocumentParams) -> None:
        snapshot = DocumentSnapshot.from_item(params.text_document)
        logger.debug(f"didOpen {snapshot.uri} v{snapshot.version}")
        await self.bridge.update(snapshot, reopened=True)

    async def did_change(self, params: lsp.DidChangeTextDocumentParams) -> None:
        try:
            snapshot = DocumentSnapshot.from_change(params)
        except ValueError as e:
            logger.warning(str(e))
            return
        logger.debug(f"didChange {snapshot.uri} v{snapshot.version}")
        await self.bridge.update(snapshot)

    def publish(
        self, uri: DocumentUri, diagnostics: List[lsp.Diagnostic], version: Optional[int]
    ) -> None:
        """发布诊断，替换该 URI 之前的全部诊断"""
        self.server.publish_diagnostics(uri, diagnostics, version=version)

    def start_io(self) -> None:
        """在 stdin/stdout 上运行，直到编辑器发送 exit"""
        logger.info(f"{SERVER_NAME} {__version__} 正在监听 stdio (variant={self.config.variant.value})")
        self.server.start_io()


def start_service(linter: Linter, config: Optional[SessionConfig] = None) -> None:
    """启动语言服务器"""
    HomescriptSession(linter, config).start_io()
