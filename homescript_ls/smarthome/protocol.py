"""Smarthome Homescript API 类型定义

Homescript lint 接口返回的诊断记录有三种历史形态：
- 带工作区上下文 (moduleName/isDriver) 的 syntaxError/diagnosticError 记录
- 不带工作区上下文的同形记录
- 顶层带 kind 字符串的扁平记录

前两种共用 ContextualRecord，第三种为 FlatRecord，二者组成 RemoteDiagnostic。
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    Tag,
)

# =============================================================================
# 位置信息 (1-indexed)
# =============================================================================


class Location(BaseModel):
    """源码位置"""

    line: int
    column: int
    index: Optional[int] = None


class Span(BaseModel):
    """源码区间，起止都包含在内"""

    start: Location
    end: Location
    filename: Optional[str] = None


# =============================================================================
# 诊断记录
# =============================================================================


class SyntaxErrorInfo(BaseModel):
    """语法错误"""

    message: str


class DiagnosticErrorInfo(BaseModel):
    """语义 / lint 诊断"""

    # 不做宽松转换: true / 2.0 不是合法的 kind
    kind: Union[StrictInt, StrictStr]
    message: str
    notes: List[str] = Field(default_factory=list)


class ContextualRecord(BaseModel):
    """syntaxError / diagnosticError 二选一的记录"""

    model_config = ConfigDict(populate_by_name=True)

    syntax_error: Optional[SyntaxErrorInfo] = Field(default=None, alias="syntaxError")
    diagnostic_error: Optional[DiagnosticErrorInfo] = Field(
        default=None, alias="diagnosticError"
    )
    span: Span


class FlatRecord(BaseModel):
    """顶层带 kind 的扁平记录"""

    kind: Union[StrictInt, StrictStr]
    message: str
    span: Span


def _record_tag(value: Any) -> str:
    if isinstance(value, dict):
        return "flat" if "kind" in value else "contextual"
    return "flat" if isinstance(value, FlatRecord) else "contextual"


RemoteDiagnostic = Annotated[
    Union[
        Annotated[ContextualRecord, Tag("contextual")],
        Annotated[FlatRecord, Tag("flat")],
    ],
    Discriminator(_record_tag),
]


# =============================================================================
# 工作区上下文
# =============================================================================


class WorkspaceContext(BaseModel):
    """模块上下文，对应 .hms.toml 的内容

    id 为模块名，is_driver 标记该模块是否为驱动。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    module_id: StrictStr = Field(alias="id")
    is_driver: StrictBool


# =============================================================================
# 请求 / 响应
# =============================================================================


class LintVariant(str, Enum):
    """lint 接口的协议形态"""

    WORKSPACE = "workspace"  # 需要 .hms.toml 中的模块信息
    STANDALONE = "standalone"  # 不需要工作区上下文
    LEGACY = "legacy"  # 扁平 kind 字符串记录

    @property
    def requires_context(self) -> bool:
        return self is LintVariant.WORKSPACE


class LintRequest(BaseModel):
    """lint 请求体"""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    args: List[str] = Field(default_factory=list)
    module_name: Optional[str] = Field(default=None, alias="moduleName")
    is_driver: Optional[bool] = Field(default=None, alias="isDriver")


class LintResponse(BaseModel):
    """lint 响应"""

    success: bool = True
    errors: List[RemoteDiagnostic] = Field(default_factory=list)


class VersionResponse(BaseModel):
    """/api/version 响应"""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    go_version: Optional[str] = Field(default=None, alias="goVersion")
