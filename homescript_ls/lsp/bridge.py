"""诊断桥接

把文档事件转换为 Smarthome lint 调用，再把结果发布回编辑器。

单个文档处理中的所有错误都会变成该文档的一条诊断，不会终止会话。
同一 URI 上新的事件会取消旧事件仍在进行的 lint 调用；
版本号低于已见最新版本的快照不会被发布。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from lsprotocol import types as lsp

from ..errors import ContractViolation, RemoteCallFailed, RemoteTimeout, WorkspaceError
from ..smarthome.protocol import LintVariant, RemoteDiagnostic, WorkspaceContext
from .diagnostics import error_diagnostic, format_diagnostic, to_lsp_diagnostics
from .protocol import DocumentSnapshot, DocumentUri
from .workspace import resolve_context

logger = logging.getLogger(__name__)

# (uri, diagnostics, version)
Publisher = Callable[[DocumentUri, List[lsp.Diagnostic], Optional[int]], None]

DEFAULT_LINT_TIMEOUT = 10.0


class Linter(Protocol):
    """远端 lint 能力"""

    async def lint(
        self, code: str, context: Optional[WorkspaceContext] = None
    ) -> List[RemoteDiagnostic]: ...


@dataclass(frozen=True)
class SessionConfig:
    """会话配置，启动时确定，之后不变"""

    variant: LintVariant = LintVariant.WORKSPACE
    lint_timeout: float = DEFAULT_LINT_TIMEOUT


class DiagnosticBridge:
    """诊断桥接器"""

    def __init__(
        self,
        linter: Linter,
        publish: Publisher,
        config: Optional[SessionConfig] = None,
        resolver: Callable[[DocumentUri], WorkspaceContext] = resolve_context,
    ):
        self.linter = linter
        self.publish = publish
        self.config = config or SessionConfig()
        self._resolve = resolver

        # 每个打开过的 URI 一项；不处理 didClose，所以条目在会话内一直保留
        self._latest_versions: Dict[DocumentUri, int] = {}
        self._inflight: Dict[DocumentUri, asyncio.Task] = {}

    def is_stale(self, snapshot: DocumentSnapshot) -> bool:
        """快照是否已被更新的版本取代"""
        latest = self._latest_versions.get(snapshot.uri)
        return latest is not None and snapshot.version < latest

    async def update(self, snapshot: DocumentSnapshot, reopened: bool = False) -> None:
        """处理一次 didOpen / didChange

        Args:
            snapshot: 文档快照
            reopened: 为 True 时 (didOpen) 清除该 URI 的版本记录
        """
        uri = snapshot.uri
        if reopened:
            self._latest_versions.pop(uri, None)

        if self.is_stale(snapshot):
            logger.debug(f"丢弃过期事件: {uri} v{snapshot.version}")
            return
        self._latest_versions[uri] = snapshot.version

        previous = self._inflight.get(uri)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.create_task(self._diagnose(snapshot))
        self._inflight[uri] = task
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(f"lint 已被新版本取代: {uri} v{snapshot.version}")
        finally:
            if self._inflight.get(uri) is task:
                del self._inflight[uri]

    async def _diagnose(self, snapshot: DocumentSnapshot) -> None:
        diagnostics = await self.collect(snapshot)
        if self.is_stale(snapshot):
            logger.debug(f"丢弃过期诊断: {snapshot.uri} v{snapshot.version}")
            return
        self.publish(snapshot.uri, diagnostics, snapshot.version)

    async def collect(self, snapshot: DocumentSnapshot) -> List[lsp.Diagnostic]:
        """计算快照的诊断列表，失败时返回单条说明性诊断"""
        context: Optional[WorkspaceContext] = None
        if self.config.variant.requires_context:
            try:
                context = self._resolve(snapshot.uri)
            except WorkspaceError as e:
                logger.warning(f"无法解析工作区: {e}")
                return [error_diagnostic(f"index workspace: {e}")]

        try:
            records = await asyncio.wait_for(
                self.linter.lint(snapshot.text, context),
                timeout=self.config.lint_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"lint 超时 ({self.config.lint_timeout}s): {snapshot.uri}")
            return [error_diagnostic(f"lint timed out after {self.config.lint_timeout:g}s")]
        except RemoteTimeout as e:
            logger.error(f"lint 超时: {e}")
            return [error_diagnostic(f"lint timed out: {e}")]
        except RemoteCallFailed as e:
            logger.error(f"lint 调用失败: {e}")
            return [error_diagnostic(f"lint failed: {e}")]
        except ContractViolation as e:
            logger.error(f"Smarthome 返回了无法识别的响应: {e}")
            return [error_diagnostic(f"internal error: {e}")]

        try:
            diagnostics = to_lsp_diagnostics(records)
        except ContractViolation as e:
            logger.error(f"无法分类的诊断记录: {e} (record={e.record!r})")
            return [error_diagnostic(f"internal error: {e}")]

        for diagnostic in diagnostics:
            logger.debug(format_diagnostic(diagnostic))
        return diagnostics
