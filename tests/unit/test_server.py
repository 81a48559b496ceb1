"""
语言服务器会话测试
"""

from unittest.mock import MagicMock

import pytest
from lsprotocol import types as lsp

from homescript_ls import __version__
from homescript_ls.lsp.bridge import SessionConfig
from homescript_ls.lsp.server import SERVER_NAME, HomescriptSession
from homescript_ls.smarthome.protocol import LintVariant
from homescript_fakes import FakeLinter, syntax_record


def open_params(uri, text="let x = ", version=1):
    return lsp.DidOpenTextDocumentParams(
        text_document=lsp.TextDocumentItem(uri=uri, language_id="homescript", version=version, text=text)
    )


def change_params(uri, texts, version):
    return lsp.DidChangeTextDocumentParams(
        text_document=lsp.VersionedTextDocumentIdentifier(uri=uri, version=version),
        content_changes=[lsp.TextDocumentContentChangeEvent_Type2(text=text) for text in texts],
    )


@pytest.fixture
def server():
    return MagicMock()


class TestHomescriptSession:
    """测试会话"""

    def test_registers_document_features(self, server):
        """测试只注册 didOpen / didChange"""
        HomescriptSession(FakeLinter(), server=server)
        registered = [call.args[0] for call in server.feature.call_args_list]
        assert registered == [lsp.TEXT_DOCUMENT_DID_OPEN, lsp.TEXT_DOCUMENT_DID_CHANGE]

    @pytest.mark.asyncio
    async def test_did_open_publishes(self, server, manifest, document_uri):
        """测试 didOpen 发布诊断"""
        session = HomescriptSession(FakeLinter([syntax_record()]), server=server)

        await session.did_open(open_params(document_uri, version=3))

        server.publish_diagnostics.assert_called_once()
        call = server.publish_diagnostics.call_args
        uri, diagnostics = call.args
        assert uri == document_uri
        assert call.kwargs["version"] == 3
        assert diagnostics[0].severity == lsp.DiagnosticSeverity.Error

    @pytest.mark.asyncio
    async def test_did_change_uses_first_change(self, server, manifest, document_uri):
        """测试只使用第一条变更"""
        linter = FakeLinter()
        session = HomescriptSession(linter, server=server)

        await session.did_change(change_params(document_uri, ["first", "second"], version=2))

        assert linter.calls[0][0] == "first"
        assert server.publish_diagnostics.call_args.kwargs["version"] == 2

    @pytest.mark.asyncio
    async def test_did_change_without_changes(self, server, document_uri):
        """测试空变更被忽略"""
        linter = FakeLinter()
        session = HomescriptSession(linter, server=server)

        await session.did_change(change_params(document_uri, [], version=2))

        assert linter.calls == []
        server.publish_diagnostics.assert_not_called()

    @pytest.mark.asyncio
    async def test_config_passed_to_bridge(self, server, document_uri):
        """测试会话配置"""
        config = SessionConfig(variant=LintVariant.STANDALONE, lint_timeout=1.0)
        linter = FakeLinter()
        session = HomescriptSession(linter, config, server=server)

        await session.did_open(open_params(document_uri))

        assert session.bridge.config is config
        assert linter.calls[0][1] is None

    def test_real_server_identity(self):
        """测试服务器名称与版本"""
        session = HomescriptSession(FakeLinter())
        assert session.server.name == SERVER_NAME
        assert session.server.version == __version__
