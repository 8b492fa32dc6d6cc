"""
CLI Network Viewer 启动脚本

启动 WebSocket 中转服务与终端界面。界面运行期间日志写入文件，终端留给界面使用。
"""

import socket
import sys

from loguru import logger

from .. import __version__, config
from ..config import Settings

# 启动阶段的日志输出到终端
_CONSOLE_FORMAT = "<level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} - {message}"


def configure_console_logging(level: str = config.DEFAULT_LOG_LEVEL) -> int:
    """日志只输出到 stderr，返回 sink id"""
    logger.remove()
    return logger.add(sys.stderr, format=_CONSOLE_FORMAT, level=level, colorize=True)


def configure_file_logging(settings: Settings) -> int:
    """日志只写入文件，返回 sink id"""
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.remove()
    return logger.add(
        settings.log_file,
        format=_FILE_FORMAT,
        level=settings.log_level,
        rotation="10 MB",
        retention=3,
        encoding="utf-8",
    )


def check_port_available(host: str, port: int) -> bool:
    """检查端口是否可用"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((host, port))
        s.close()
        return True
    except OSError:
        return False


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="终端网络请求查看器")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", help=f"监听地址 (默认: {config.DEFAULT_HOST})")
    parser.add_argument("--port", type=int, help=f"监听端口 (默认: {config.DEFAULT_PORT})")
    parser.add_argument("--inner-path", help=f"控制端路径 (默认: {config.INNER_PATH})")
    parser.add_argument(
        "--trace-timeout",
        type=float,
        help=f"请求超时秒数 (默认: {config.TRACE_TIMEOUT_SECONDS})",
    )
    parser.add_argument(
        "--status-ttl",
        type=float,
        help=f"状态栏提示保留秒数 (默认: {config.STATUS_MESSAGE_TTL_SECONDS})",
    )
    parser.add_argument("--log-file", help=f"日志文件 (默认: {config.DEFAULT_LOG_FILE})")
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"日志级别 (默认: {config.DEFAULT_LOG_LEVEL})",
    )
    return parser


def resolve_settings(argv: list[str] | None = None, environ: dict[str, str] | None = None) -> Settings:
    """
    合并配置：命令行参数 > 环境变量 > 默认值
    """
    from pathlib import Path

    args = build_parser().parse_args(argv)
    settings = Settings.from_env(environ)

    if args.host:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.inner_path:
        settings.inner_path = args.inner_path
    if args.trace_timeout is not None:
        settings.trace_timeout = args.trace_timeout
    if args.status_ttl is not None:
        settings.status_ttl = args.status_ttl
    if args.log_file:
        settings.log_file = Path(args.log_file).expanduser()
    if args.log_level:
        settings.log_level = args.log_level

    return settings


def main(argv: list[str] | None = None):
    """主函数"""
    configure_console_logging()

    try:
        settings = resolve_settings(argv)
    except ValueError as e:
        logger.error(f"✗ 配置错误: {e}")
        sys.exit(1)

    if not check_port_available(settings.host, settings.port):
        logger.error(f"✗ 端口 {settings.port} 已被占用，无法监听 {settings.host}")
        sys.exit(1)

    from ..ui.app import NetworkViewerApp

    configure_file_logging(settings)
    logger.info(f"CLI Network Viewer {__version__} 启动，监听 ws://{settings.host}:{settings.port}")

    app = NetworkViewerApp(settings)
    app.run()

    configure_console_logging()

    if app.startup_error is not None:
        logger.error(f"✗ 无法监听 {settings.host}:{settings.port}: {app.startup_error}")
        sys.exit(1)

    logger.opt(colors=True).info(f"<green>已退出</green>，日志: {settings.log_file}")


if __name__ == "__main__":
    main()
