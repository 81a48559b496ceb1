"""LSP (Language Server Protocol) 支持

主要组件:
- HomescriptSession: 语言服务器会话，负责与编辑器通信
- DiagnosticBridge: 文档事件 -> Smarthome lint -> 诊断发布
- resolve_context: 读取文档旁边的 .hms.toml
"""

from .bridge import DiagnosticBridge, Linter, SessionConfig
from .diagnostics import (
    error_diagnostic,
    format_diagnostic,
    severity_of,
    span_to_range,
    to_lsp_diagnostic,
    to_lsp_diagnostics,
)
from .protocol import DIAGNOSTIC_SOURCE, LANGUAGE_ID, DocumentSnapshot, DocumentUri
from .server import HomescriptSession, start_service
from .workspace import WORKSPACE_MANIFEST_NAME, resolve_context

__all__ = [
    "DiagnosticBridge",
    "Linter",
    "SessionConfig",
    "HomescriptSession",
    "start_service",
    "DocumentSnapshot",
    "DocumentUri",
    "DIAGNOSTIC_SOURCE",
    "LANGUAGE_ID",
    "WORKSPACE_MANIFEST_NAME",
    "resolve_context",
    "error_diagnostic",
    "format_diagnostic",
    "severity_of",
    "span_to_range",
    "to_lsp_diagnostic",
    "to_lsp_diagnostics",
]
