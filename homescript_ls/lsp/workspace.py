"""工作区上下文

每个 Homescript 文件旁边都有一个 .hms.toml，声明模块名和是否为驱动:

    id = "living_room_lights"
    is_driver = false

清单可能在文档打开期间被单独修改，所以每次诊断都重新读取。
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from urllib.parse import urlparse

from pydantic import ValidationError
from pygls.uris import to_fs_path

from ..errors import InvalidPath, ManifestInvalid, ManifestMissing
from ..smarthome.protocol import WorkspaceContext
from .protocol import DocumentUri

logger = logging.getLogger(__name__)

WORKSPACE_MANIFEST_NAME = ".hms.toml"


def manifest_path_for(uri: DocumentUri) -> Path:
    """文档对应的清单路径，URI 不是本地文件时抛出 InvalidPath"""
    if urlparse(uri).scheme != "file":
        raise InvalidPath(uri)

    fs_path = to_fs_path(uri)
    if not fs_path:
        raise InvalidPath(uri)

    return Path(fs_path).with_name(WORKSPACE_MANIFEST_NAME)


def load_manifest(path: Path) -> WorkspaceContext:
    """读取并校验清单"""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestMissing(str(path))
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestMissing(str(path), reason=str(e))

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestInvalid(str(path), f"TOML syntax error: {e}")

    try:
        return WorkspaceContext.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ManifestInvalid(str(path), problems)


def resolve_context(uri: DocumentUri) -> WorkspaceContext:
    """解析文档的工作区上下文"""
    path = manifest_path_for(uri)
    context = load_manifest(path)
    logger.debug(f"工作区上下文 {uri}: module={context.module_id} driver={context.is_driver}")
    return context
