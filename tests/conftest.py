"""pytest 配置"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录和测试目录到 Python 路径
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))
sys.path.insert(0, str(Path(__file__).parent))

from homescript_fakes import RecordingPublisher  # noqa: E402


@pytest.fixture
def workspace_dir(tmp_path):
    """创建临时工作目录"""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def manifest(workspace_dir):
    """创建 .hms.toml"""
    path = workspace_dir / ".hms.toml"
    path.write_text('id = "living_room"\nis_driver = false\n', encoding="utf-8")
    return path


@pytest.fixture
def document_uri(workspace_dir):
    """工作目录中 Homescript 文件的 URI"""
    path = workspace_dir / "main.hms"
    path.write_text("", encoding="utf-8")
    return path.as_uri()


@pytest.fixture
def publisher():
    return RecordingPublisher()
