"""LSP 侧的数据类型

编辑器协议本身的类型来自 lsprotocol，这里只定义语言服务器内部使用的文档快照。
"""

from __future__ import annotations

from dataclasses import dataclass

from lsprotocol import types as lsp

# 基础类型
DocumentUri = str

LANGUAGE_ID = "homescript"

# 诊断来源标识
DIAGNOSTIC_SOURCE = "homescript-analyzer"


@dataclass(frozen=True)
class DocumentSnapshot:
    """文档快照

    每次 didOpen / didChange 都生成一个新快照，整体替换旧内容。
    """

    uri: DocumentUri
    text: str
    version: int
    language_id: str = LANGUAGE_ID

    @classmethod
    def from_item(cls, item: lsp.TextDocumentItem) -> "DocumentSnapshot":
        return cls(uri=item.uri, text=item.text, version=item.version)

    @classmethod
    def from_change(cls, params: lsp.DidChangeTextDocumentParams) -> "DocumentSnapshot":
        """只使用第一条变更 (全量同步)"""
        if not params.content_changes:
            raise ValueError(f"didChange without content changes: {params.text_document.uri}")
        return cls(
            uri=params.text_document.uri,
            text=params.content_changes[0].text,
            version=params.text_document.version,
        )
