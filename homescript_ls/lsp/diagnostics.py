"""诊断转换

把 Smarthome 返回的诊断记录转换为 LSP Diagnostic：
- span_to_range: 1-indexed 闭区间 -> 0-indexed 右开区间
- severity_of: 记录 -> DiagnosticSeverity
"""

from __future__ import annotations

from typing import Callable, Dict, List, Union

from lsprotocol import types as lsp

from ..errors import ContractViolation
from ..smarthome.protocol import ContextualRecord, FlatRecord, RemoteDiagnostic, Span
from .protocol import DIAGNOSTIC_SOURCE

# 按严重程度升序
KIND_SEVERITY: Dict[int, lsp.DiagnosticSeverity] = {
    0: lsp.DiagnosticSeverity.Hint,
    1: lsp.DiagnosticSeverity.Information,
    2: lsp.DiagnosticSeverity.Warning,
    3: lsp.DiagnosticSeverity.Error,
}

KIND_NAME_SEVERITY: Dict[str, lsp.DiagnosticSeverity] = {
    "hint": lsp.DiagnosticSeverity.Hint,
    "info": lsp.DiagnosticSeverity.Information,
    "information": lsp.DiagnosticSeverity.Information,
    "warning": lsp.DiagnosticSeverity.Warning,
    "error": lsp.DiagnosticSeverity.Error,
}


def span_to_range(span: Span) -> lsp.Range:
    """转换区间

    起点行列各减一；终点列本身已是右开，只转换行号。
    不按文档长度截断。
    """
    return lsp.Range(
        start=lsp.Position(line=span.start.line - 1, character=span.start.column - 1),
        end=lsp.Position(line=span.end.line - 1, character=span.end.column),
    )


def kind_to_severity(kind: Union[int, str], record: object = None) -> lsp.DiagnosticSeverity:
    """把 kind (整数或名称) 映射为严重程度，未知值直接报错"""
    if isinstance(kind, bool):
        raise ContractViolation(f"illegal diagnostic kind: {kind!r}", record=record)
    if isinstance(kind, int):
        severity = KIND_SEVERITY.get(kind)
    else:
        severity = KIND_NAME_SEVERITY.get(kind.strip().lower())
    if severity is None:
        raise ContractViolation(f"illegal diagnostic kind: {kind!r}", record=record)
    return severity


def _contextual_severity(record: ContextualRecord) -> tuple[str, lsp.DiagnosticSeverity]:
    syntax, diagnostic = record.syntax_error, record.diagnostic_error
    if syntax is not None and diagnostic is None:
        return syntax.message, lsp.DiagnosticSeverity.Error
    if diagnostic is not None and syntax is None:
        return diagnostic.message, kind_to_severity(diagnostic.kind, record)
    state = "both" if syntax is not None else "neither"
    raise ContractViolation(
        f"illegal diagnostic record: {state} syntaxError and diagnosticError set",
        record=record,
    )


def _flat_severity(record: FlatRecord) -> tuple[str, lsp.DiagnosticSeverity]:
    return record.message, kind_to_severity(record.kind, record)


_MAPPERS: Dict[type, Callable[..., tuple[str, lsp.DiagnosticSeverity]]] = {
    ContextualRecord: _contextual_severity,
    FlatRecord: _flat_severity,
}


def classify(record: RemoteDiagnostic) -> tuple[str, lsp.DiagnosticSeverity]:
    """返回记录的 (消息, 严重程度)"""
    mapper = _MAPPERS.get(type(record))
    if mapper is None:
        raise ContractViolation(
            f"unknown diagnostic record type: {type(record).__name__}", record=record
        )
    return mapper(record)


def severity_of(record: RemoteDiagnostic) -> lsp.DiagnosticSeverity:
    """记录的严重程度"""
    return classify(record)[1]


def to_lsp_diagnostic(record: RemoteDiagnostic) -> lsp.Diagnostic:
    """转换单条记录"""
    message, severity = classify(record)
    return lsp.Diagnostic(
        range=span_to_range(record.span),
        message=message,
        severity=severity,
        source=DIAGNOSTIC_SOURCE,
    )


def to_lsp_diagnostics(records: List[RemoteDiagnostic]) -> List[lsp.Diagnostic]:
    """按原顺序转换全部记录，任何一条无法分类都会抛出 ContractViolation"""
    return [to_lsp_diagnostic(record) for record in records]


def error_diagnostic(message: str) -> lsp.Diagnostic:
    """位于文档开头、宽度为 0 的错误诊断"""
    origin = lsp.Position(line=0, character=0)
    return lsp.Diagnostic(
        range=lsp.Range(start=origin, end=origin),
        message=message,
        severity=lsp.DiagnosticSeverity.Error,
        source=DIAGNOSTIC_SOURCE,
    )


def format_diagnostic(diagnostic: lsp.Diagnostic) -> str:
    """格式化诊断信息 (日志用)"""
    line = diagnostic.range.start.line + 1  # 转为 1-indexed
    col = diagnostic.range.start.character + 1
    severity = diagnostic.severity.name if diagnostic.severity else "Unknown"
    source = f"[{diagnostic.source}] " if diagnostic.source else ""
    return f"{source}{severity} at line {line}:{col}: {diagnostic.message}"
