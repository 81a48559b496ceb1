"""Smarthome 服务器接口

Homescript 的 lint 由 Smarthome 服务器完成，这里只实现调用它所需的客户端和类型。
"""

from .client import LINT_PATH, MIN_SERVER_VERSION, VERSION_PATH, SmarthomeClient
from .protocol import (
    ContextualRecord,
    DiagnosticErrorInfo,
    FlatRecord,
    LintResponse,
    LintVariant,
    Location,
    RemoteDiagnostic,
    Span,
    SyntaxErrorInfo,
    WorkspaceContext,
)

__all__ = [
    "SmarthomeClient",
    "LINT_PATH",
    "VERSION_PATH",
    "MIN_SERVER_VERSION",
    "ContextualRecord",
    "DiagnosticErrorInfo",
    "FlatRecord",
    "LintResponse",
    "LintVariant",
    "Location",
    "RemoteDiagnostic",
    "Span",
    "SyntaxErrorInfo",
    "WorkspaceContext",
]
