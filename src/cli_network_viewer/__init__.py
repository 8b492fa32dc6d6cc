"""
CLI Network Viewer

终端中查看 HTTP 请求的工具。被检测的程序通过 WebSocket 推送请求记录，
本工具解析、去重、排序后在终端界面中展示。
"""

__version__ = "0.1.0"

from .config import Settings
from .core import ParseError, Trace, TraceState, TraceStore, generate_curl_command, parse_payload

__all__ = [
    "__version__",
    "Settings",
    "ParseError",
    "Trace",
    "TraceState",
    "TraceStore",
    "generate_curl_command",
    "parse_payload",
]
