"""错误类型

所有错误都继承自 HomescriptLSError。单个文档处理过程中的错误由
DiagnosticBridge 捕获并转换成诊断信息，启动阶段的错误由 CLI 报告。
"""

from __future__ import annotations


class HomescriptLSError(Exception):
    """homescript-ls 基础错误"""

    pass


class ConfigError(HomescriptLSError):
    """配置文件无效或服务器 Profile 不存在"""

    pass


class WorkspaceError(HomescriptLSError):
    """无法解析工作区上下文"""

    pass


class InvalidPath(WorkspaceError):
    """文档 URI 不是本地文件"""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"invalid document file path: {uri}")


class ManifestMissing(WorkspaceError):
    """工作区清单文件无法读取"""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"workspace manifest not found: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ManifestInvalid(WorkspaceError):
    """工作区清单解析或校验失败"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid workspace manifest {path}: {reason}")


class RemoteCallFailed(HomescriptLSError):
    """Smarthome 服务器调用失败（网络、HTTP 状态或执行错误）"""

    pass


class RemoteTimeout(RemoteCallFailed):
    """Smarthome 服务器调用超时"""

    pass


class ContractViolation(HomescriptLSError):
    """远端返回了无法分类的诊断记录

    通常意味着 homescript-ls 与 Smarthome 服务器的版本不匹配。
    """

    def __init__(self, message: str, record: object = None):
        self.record = record
        super().__init__(message)
