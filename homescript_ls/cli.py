"""
homescript-ls CLI 入口

读取配置、选择 Smarthome 服务器、检查连接，然后在 stdio 上启动语言服务器。
stdout 是 LSP 通道，所有日志和提示都写到 stderr。
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import Config, ServerProfile
from .errors import HomescriptLSError
from .lsp.server import SERVER_NAME, start_service
from .smarthome import SmarthomeClient

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """只为本包配置日志，输出到 stderr"""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger(__package__)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Homescript 语言服务器 (通过 Smarthome 服务器进行 lint)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  homescript-ls                     # 使用配置中的第一个服务器
  homescript-ls -s home             # 使用 id 为 home 的服务器
  homescript-ls -c ./config.yaml -v # 指定配置文件并输出调试日志
        """,
    )

    parser.add_argument(
        "-s", "--server-id",
        type=str,
        help="要连接的服务器 id (默认: 列表中的第一个)",
    )
    parser.add_argument(
        "-c", "--config-file-path",
        type=str,
        help="覆盖配置文件路径",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="输出更多信息",
    )
    parser.add_argument(
        "-n", "--no-version-check",
        action="store_true",
        help="连接时不检查服务器版本",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{SERVER_NAME} v{__version__}",
    )
    return parser


async def probe_server(profile: ServerProfile, check_version: bool, timeout: float) -> str:
    """启动前检查服务器是否可达"""
    async with SmarthomeClient(profile.url, profile.token, timeout=timeout) as client:
        return await client.connect(check_version=check_version)


def run(args: argparse.Namespace) -> int:
    """执行 CLI，返回退出码"""
    # 选择配置文件路径
    if args.config_file_path:
        config_path = args.config_file_path
    else:
        config_path = Config.default_path()
        if config_path is None:
            console.print(
                "[red]Your home directory could not be determined.[/red]\n"
                "HINT: To use this program, please use the manual config file path command-line-flag"
            )
            return 1

    # 读取或创建配置文件
    try:
        config = Config.read_or_create(config_path)
    except OSError as e:
        console.print(f"[red]Could not read or create config file (at {config_path}):[/red] {e}")
        return 1
    except HomescriptLSError as e:
        console.print(f"[red]Could not read config file (at {config_path}):[/red] {e}")
        return 1

    if config is None:
        console.print(
            f"Created a new configuration file (at `{config_path}`).\n"
            "HINT: To get started, edit this file to set up your server(s) and run this program again."
        )
        return 0

    try:
        profile = config.select_profile(args.server_id)
    except HomescriptLSError as e:
        console.print(f"[red]Could not select server:[/red] {e}")
        return 1

    try:
        asyncio.run(
            probe_server(profile, check_version=not args.no_version_check, timeout=config.lint.timeout)
        )
    except HomescriptLSError as e:
        console.print(f"[red]Could not connect to Smarthome:[/red] {e}")
        return 1

    logger.debug(f"使用服务器 `{profile.id}` ({profile.url})")

    client = SmarthomeClient(profile.url, profile.token, timeout=config.lint.timeout)
    start_service(client, config.lint.to_session_config())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """主入口"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
