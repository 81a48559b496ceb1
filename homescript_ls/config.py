"""配置管理

配置文件位于 $XDG_CONFIG_HOME/homescript-ls/config.yaml
(或 ~/.config/homescript-ls/config.yaml)，首次运行时自动创建:

    servers:
      - id: default
        url: http://smarthome.box
        token: "--------------------------------"
    lint:
      variant: workspace
      timeout: 10.0
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import ConfigError
from .lsp.bridge import DEFAULT_LINT_TIMEOUT, SessionConfig
from .smarthome.protocol import LintVariant

logger = logging.getLogger(__name__)

APP_DIR_NAME = "homescript-ls"
CONFIG_FILE_NAME = "config.yaml"
TOKEN_LENGTH = 32


@dataclass
class ServerProfile:
    """Smarthome 服务器"""

    id: str = "default"
    url: str = "http://smarthome.box"
    token: str = "-" * TOKEN_LENGTH


@dataclass
class LintConfig:
    """lint 配置"""

    variant: str = LintVariant.WORKSPACE.value
    timeout: float = DEFAULT_LINT_TIMEOUT

    def to_session_config(self) -> SessionConfig:
        return SessionConfig(variant=LintVariant(self.variant), lint_timeout=self.timeout)


@dataclass
class Config:
    """主配置"""

    servers: List[ServerProfile] = field(default_factory=lambda: [ServerProfile()])
    lint: LintConfig = field(default_factory=LintConfig)

    @staticmethod
    def default_path() -> Optional[Path]:
        """默认配置文件路径，无法确定用户目录时返回 None"""
        home = os.environ.get("HOME")
        if not home:
            return None

        xdg_home = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg_home) if xdg_home else Path(home) / ".config"
        return base / APP_DIR_NAME / CONFIG_FILE_NAME

    @classmethod
    def read_or_create(cls, config_path: str | Path) -> Optional["Config"]:
        """读取配置；文件不存在时写入默认配置并返回 None"""
        config_path = Path(config_path)

        if not config_path.exists():
            cls().save(config_path)
            logger.debug(f"已创建默认配置文件 {config_path}")
            return None

        logger.debug(f"找到配置文件 {config_path}")
        return cls.from_yaml(config_path)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "Config":
        """从 YAML 文件加载并校验配置"""
        config_path = Path(config_path)

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"could not read config file {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {config_path}: {e}")

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("config file must contain a mapping")

        servers_data = data.get("servers") or []
        if not isinstance(servers_data, list):
            raise ConfigError("`servers` must be a list")

        servers: List[ServerProfile] = []
        for index, server_data in enumerate(servers_data):
            if not isinstance(server_data, dict):
                raise ConfigError(f"server #{index + 1} must be a mapping")
            servers.append(
                ServerProfile(
                    id=str(server_data.get("id", "")),
                    url=str(server_data.get("url", "")),
                    token=str(server_data.get("token", "")),
                )
            )

        # lint 配置
        lint_data = data.get("lint") or {}
        if not isinstance(lint_data, dict):
            raise ConfigError("`lint` must be a mapping")
        lint_config = LintConfig(
            variant=str(lint_data.get("variant", LintVariant.WORKSPACE.value)),
            timeout=lint_data.get("timeout", DEFAULT_LINT_TIMEOUT),
        )

        config = cls(servers=servers, lint=lint_config)
        config.validate()
        return config

    def validate(self) -> None:
        """校验配置"""
        if not self.servers:
            raise ConfigError("No servers specified: at least one server must be specified")

        seen: set[str] = set()
        for server in self.servers:
            # ID 必须唯一
            if server.id in seen:
                raise ConfigError(f"Duplicate server ID: the ID `{server.id}` must be unique")
            seen.add(server.id)

            if not server.token:
                raise ConfigError(f"No authentication token provided for server `{server.id}`")
            if len(server.token) != TOKEN_LENGTH:
                raise ConfigError(
                    f"Malformed access token for server {server.id}: "
                    f"token is not {TOKEN_LENGTH} characters long"
                )
            if any(ch.isspace() for ch in server.token) or not server.token.isascii():
                raise ConfigError(
                    f"Malformed access token for server {server.id}: "
                    "may not contain whitespace or non-ASCII characters"
                )

        try:
            LintVariant(self.lint.variant)
        except ValueError:
            choices = ", ".join(v.value for v in LintVariant)
            raise ConfigError(f"Invalid lint variant `{self.lint.variant}` (expected one of: {choices})")

        if isinstance(self.lint.timeout, bool) or not isinstance(self.lint.timeout, (int, float)):
            raise ConfigError("`lint.timeout` must be a number")
        if self.lint.timeout <= 0:
            raise ConfigError("`lint.timeout` must be greater than zero")

    def select_profile(self, server_id: Optional[str] = None) -> ServerProfile:
        """选择服务器，未指定时使用第一个"""
        if server_id is None:
            return self.servers[0]

        for server in self.servers:
            if server.id == server_id:
                return server

        raise ConfigError(
            f"Invalid server id from args: the id `{server_id}` was not found in the server list"
        )

    def save(self, config_path: str | Path) -> None:
        """写入 YAML 文件"""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(self), f, default_flow_style=False, sort_keys=False)
