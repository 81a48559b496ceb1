"""
Smarthome 客户端测试
"""

import json

import httpx
import pytest

from homescript_ls.errors import ContractViolation, RemoteCallFailed, RemoteTimeout
from homescript_ls.smarthome import LINT_PATH, VERSION_PATH, SmarthomeClient
from homescript_ls.smarthome.client import parse_version
from homescript_ls.smarthome.protocol import ContextualRecord, FlatRecord, WorkspaceContext
from homescript_fakes import make_span

TOKEN = "a" * 32


class MockServer:
    """记录请求的 MockTransport 处理器"""

    def __init__(self, lint_body=None, version="0.1.0", status=200):
        self.lint_body = lint_body if lint_body is not None else {"success": True, "errors": []}
        self.version = version
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"message": "nope"})
        if request.url.path == VERSION_PATH:
            return httpx.Response(200, json={"version": self.version, "goVersion": "go1.21"})
        if request.url.path == LINT_PATH:
            return httpx.Response(200, json=self.lint_body)
        return httpx.Response(404)


def make_client(handler) -> SmarthomeClient:
    return SmarthomeClient("http://smarthome.box/", TOKEN, transport=httpx.MockTransport(handler))


class TestParseVersion:
    """测试版本解析"""

    @pytest.mark.parametrize(
        "text, expected",
        [("0.1.2", (0, 1, 2)), ("v1.2", (1, 2, 0)), ("0.0.48-beta", (0, 0, 48)), ("2", (2, 0, 0))],
    )
    def test_parse(self, text, expected):
        """测试各种格式"""
        assert parse_version(text) == expected

    def test_garbage(self):
        """测试无法识别的版本"""
        with pytest.raises(RemoteCallFailed):
            parse_version("latest")


class TestConnect:
    """测试连接检查"""

    @pytest.mark.asyncio
    async def test_connect_sends_token(self):
        """测试 token 作为 query 参数"""
        server = MockServer()
        async with make_client(server) as client:
            version = await client.connect()

        assert version == "0.1.0"
        assert client.server_version == "0.1.0"
        assert server.requests[0].url.params["token"] == TOKEN

    @pytest.mark.asyncio
    async def test_old_server_rejected(self):
        """测试版本过低"""
        async with make_client(MockServer(version="0.0.1")) as client:
            with pytest.raises(RemoteCallFailed, match="not supported"):
                await client.connect()

    @pytest.mark.asyncio
    async def test_skip_version_check(self):
        """测试跳过版本检查"""
        async with make_client(MockServer(version="0.0.1")) as client:
            assert await client.connect(check_version=False) == "0.0.1"

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        """测试 token 被拒绝"""
        async with make_client(MockServer(status=401)) as client:
            with pytest.raises(RemoteCallFailed, match="authentication token"):
                await client.connect()

    @pytest.mark.asyncio
    async def test_unreachable(self):
        """测试无法连接"""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteCallFailed, match="connection refused"):
                await client.connect()

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        """测试非法服务器地址"""

        def handler(request):
            raise httpx.InvalidURL("Invalid port: 'abc'")

        async with make_client(handler) as client:
            with pytest.raises(RemoteCallFailed, match="invalid Smarthome URL"):
                await client.connect()


class TestLint:
    """测试 lint 调用"""

    @pytest.mark.asyncio
    async def test_payload_with_context(self):
        """测试带上下文的请求体"""
        server = MockServer()
        context = WorkspaceContext(id="living_room", is_driver=True)
        async with make_client(server) as client:
            await client.lint("let x = 1;", context)

        request = server.requests[0]
        assert request.method == "POST"
        assert request.url.path == LINT_PATH
        assert json.loads(request.content) == {
            "code": "let x = 1;",
            "args": [],
            "moduleName": "living_room",
            "isDriver": True,
        }

    @pytest.mark.asyncio
    async def test_payload_without_context(self):
        """测试不带上下文的请求体"""
        server = MockServer()
        async with make_client(server) as client:
            await client.lint("let x = 1;")

        assert json.loads(server.requests[0].content) == {"code": "let x = 1;", "args": []}

    @pytest.mark.asyncio
    async def test_parses_record_shapes(self):
        """测试解析两种记录形态"""
        body = {
            "success": False,
            "errors": [
                {"syntaxError": {"message": "expected expression"}, "span": make_span(1, 9, 1, 9)},
                {"diagnosticError": {"kind": 2, "message": "unused", "notes": []}, "span": make_span()},
                {"kind": "Warning", "message": "flat", "span": make_span()},
            ],
        }
        async with make_client(MockServer(lint_body=body)) as client:
            records = await client.lint("let x = ")

        assert [type(r) for r in records] == [ContextualRecord, ContextualRecord, FlatRecord]
        assert records[0].syntax_error.message == "expected expression"
        assert records[1].diagnostic_error.kind == 2
        assert records[2].kind == "Warning"

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        """测试响应格式错误"""
        body = {"errors": [{"syntaxError": {"message": "x"}}]}  # 缺少 span
        async with make_client(MockServer(lint_body=body)) as client:
            with pytest.raises(ContractViolation):
                await client.lint("x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [True, 2.0])
    async def test_non_integer_kind_is_contract_violation(self, kind):
        """测试 kind 为布尔值或浮点数时不被接受"""
        body = {
            "errors": [
                {"diagnosticError": {"kind": kind, "message": "x"}, "span": make_span()},
            ]
        }
        async with make_client(MockServer(lint_body=body)) as client:
            with pytest.raises(ContractViolation):
                await client.lint("x")

    @pytest.mark.asyncio
    async def test_flat_boolean_kind_is_contract_violation(self):
        """测试扁平记录的布尔 kind"""
        body = {"errors": [{"kind": True, "message": "x", "span": make_span()}]}
        async with make_client(MockServer(lint_body=body)) as client:
            with pytest.raises(ContractViolation):
                await client.lint("x")

    @pytest.mark.asyncio
    async def test_server_error(self):
        """测试 HTTP 错误状态"""
        async with make_client(MockServer(status=500)) as client:
            with pytest.raises(RemoteCallFailed, match="500"):
                await client.lint("x")

    @pytest.mark.asyncio
    async def test_timeout(self):
        """测试超时"""

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteTimeout):
                await client.lint("x")

    @pytest.mark.asyncio
    async def test_reusable_after_close(self):
        """测试 aclose 之后可以继续使用"""
        server = MockServer()
        client = make_client(server)
        await client.connect()
        await client.aclose()
        await client.lint("x")
        await client.aclose()
        assert len(server.requests) == 2
