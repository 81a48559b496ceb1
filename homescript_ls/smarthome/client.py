"""Smarthome 客户端

通过 Smarthome 的 HTTP API 执行 Homescript lint。认证方式为 query token。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from ..errors import ContractViolation, RemoteCallFailed, RemoteTimeout
from .protocol import (
    LintRequest,
    LintResponse,
    RemoteDiagnostic,
    VersionResponse,
    WorkspaceContext,
)

logger = logging.getLogger(__name__)

VERSION_PATH = "/api/version"
LINT_PATH = "/api/homescript/lint/live"

# 低于此版本的服务器不提供 lint 接口
MIN_SERVER_VERSION: Tuple[int, int, int] = (0, 0, 48)

DEFAULT_TIMEOUT = 10.0


def parse_version(version: str) -> Tuple[int, int, int]:
    """解析 "v0.1.2" / "0.1.2-beta" 形式的版本号"""
    core = version.strip().lstrip("v").split("-", 1)[0].split("+", 1)[0]
    parts = core.split(".")
    try:
        numbers = [int(part) for part in parts[:3]]
    except ValueError:
        raise RemoteCallFailed(f"unrecognized Smarthome version: {version!r}")
    while len(numbers) < 3:
        numbers.append(0)
    return numbers[0], numbers[1], numbers[2]


class SmarthomeClient:
    """Smarthome 客户端

    httpx.AsyncClient 延迟创建，aclose() 之后再次调用会重新创建，
    因此同一个实例可以先在启动探测中使用，再交给语言服务器的事件循环。

    使用示例:
        client = SmarthomeClient("http://smarthome.box", token)
        await client.connect()
        errors = await client.lint("println('hi')")
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """初始化客户端

        Args:
            url: 服务器地址
            token: 32 位认证 token
            timeout: HTTP 超时时间 (秒)
            transport: 自定义 httpx 传输层 (测试用)
        """
        self.url = url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self.server_version: Optional[str] = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.url,
                params={"token": self._token},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http

    async def _call(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> Any:
        """发送请求并返回 JSON 响应体"""
        try:
            response = await self._client().request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise RemoteTimeout(f"Smarthome request {path} timed out: {e}")
        except httpx.HTTPError as e:
            raise RemoteCallFailed(f"Smarthome request {path} failed: {e}")
        except httpx.InvalidURL as e:
            raise RemoteCallFailed(f"invalid Smarthome URL {self.url!r}: {e}")

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise RemoteCallFailed("Smarthome rejected the authentication token")
        if response.is_error:
            raise RemoteCallFailed(
                f"Smarthome request {path} failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise ContractViolation(f"Smarthome returned invalid JSON for {path}: {e}")

    async def connect(self, check_version: bool = True) -> str:
        """检查服务器是否可达，并按需检查版本"""
        data = await self._call("GET", VERSION_PATH)
        try:
            info = VersionResponse.model_validate(data)
        except ValidationError as e:
            raise ContractViolation(f"unexpected version response: {e}", record=data)

        self.server_version = info.version
        logger.info(f"已连接 Smarthome {self.url} (版本 {info.version})")

        if check_version and parse_version(info.version) < MIN_SERVER_VERSION:
            required = ".".join(str(n) for n in MIN_SERVER_VERSION)
            raise RemoteCallFailed(
                f"Smarthome version {info.version} is not supported (requires >= {required})"
            )
        return info.version

    async def lint(
        self, code: str, context: Optional[WorkspaceContext] = None
    ) -> List[RemoteDiagnostic]:
        """lint 一段 Homescript 代码

        Args:
            code: 完整源码
            context: 模块上下文，为 None 时不限定模块
        """
        request = LintRequest(
            code=code,
            module_name=context.module_id if context else None,
            is_driver=context.is_driver if context else None,
        )
        payload = request.model_dump(by_alias=True, exclude_none=True)

        logger.debug(f"lint 请求: module={request.module_name} ({len(code)} 字符)")
        data = await self._call("POST", LINT_PATH, payload)

        try:
            result = LintResponse.model_validate(data)
        except ValidationError as e:
            raise ContractViolation(f"unexpected lint response: {e}", record=data)

        logger.debug(f"lint 返回 {len(result.errors)} 条记录")
        return list(result.errors)

    async def aclose(self) -> None:
        """关闭连接池"""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "SmarthomeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
