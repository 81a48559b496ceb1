"""
homescript-ls - Homescript 语言服务器

通过 Smarthome 服务器对 Homescript 代码进行 lint，并以 LSP 诊断的形式展示在编辑器中。
"""

__version__ = "0.1.0"

from .config import Config, LintConfig, ServerProfile
from .errors import (
    ConfigError,
    ContractViolation,
    HomescriptLSError,
    InvalidPath,
    ManifestInvalid,
    ManifestMissing,
    RemoteCallFailed,
    RemoteTimeout,
    WorkspaceError,
)

__all__ = [
    "__version__",
    "Config",
    "LintConfig",
    "ServerProfile",
    "ConfigError",
    "ContractViolation",
    "HomescriptLSError",
    "InvalidPath",
    "ManifestInvalid",
    "ManifestMissing",
    "RemoteCallFailed",
    "RemoteTimeout",
    "WorkspaceError",
]
