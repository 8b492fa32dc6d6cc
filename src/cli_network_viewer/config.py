"""
配置

默认值以模块常量给出，运行时由命令行参数与环境变量覆盖。
"""

import os
from dataclasses import dataclass
from pathlib import Path

# WebSocket 服务
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9999
INNER_PATH = "/inner"

# 定时器（秒）
TRACE_TIMEOUT_SECONDS = 5.0
STATUS_MESSAGE_TTL_SECONDS = 5.0

# 日志
DEFAULT_LOG_FILE = Path.home() / ".cache" / "cli-network-viewer" / "app.log"
DEFAULT_LOG_LEVEL = "INFO"
MAX_DIAGNOSTICS = 200

# 各面板中不可用于展示内容的行数（边框、表头）
TRACES_LIST_UNUSABLE_VERTICAL_SPACE = 3
REQUEST_HEADERS_UNUSABLE_VERTICAL_SPACE = 3
RESPONSE_HEADERS_UNUSABLE_VERTICAL_SPACE = 3
QUERY_PARAMS_UNUSABLE_VERTICAL_SPACE = 3
BODY_UNUSABLE_VERTICAL_SPACE = 2
BODY_UNUSABLE_HORIZONTAL_SPACE = 2

ENV_PREFIX = "CLI_NETWORK_VIEWER_"


@dataclass
class Settings:
    """运行时配置"""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    inner_path: str = INNER_PATH
    trace_timeout: float = TRACE_TIMEOUT_SECONDS
    status_ttl: float = STATUS_MESSAGE_TTL_SECONDS
    log_file: Path = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        从环境变量读取监听地址

        Args:
            environ: 环境变量字典，默认 os.environ
        """
        environ = os.environ if environ is None else environ
        settings = cls()

        host = environ.get(f"{ENV_PREFIX}HOST")
        if host:
            settings.host = host

        port = environ.get(f"{ENV_PREFIX}PORT")
        if port:
            try:
                settings.port = int(port)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}PORT 必须是整数: {port!r}")

        return settings
