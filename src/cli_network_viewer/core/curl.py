"""
cURL 命令生成

将 Trace 转换为可复现请求的 curl 命令。
"""

from .models import Trace

# 不输出为 -H 参数的 Header（curl 会根据 Body 自动计算）
_SKIPPED_HEADERS = {"content-length"}


def escape_header_value(value: str) -> str:
    """转义 Header 值中的反斜杠和双引号"""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _single_quote(value: str) -> str:
    """包裹为 shell 单引号字符串"""
    return "'" + value.replace("'", "'\\''") + "'"


def generate_curl_command(trace: Trace) -> str:
    """
    生成 curl 命令

    格式：curl '<url>' -X <METHOD> -H "<name>: <value>" ... [--data-binary '<body>'] [--compressed]

    Args:
        trace: 待复现的 Trace

    Returns:
        单行 curl 命令
    """
    parts = ["curl", _single_quote(trace.uri), "-X", trace.method]

    for name, value in trace.request_headers:
        if name.lower() in _SKIPPED_HEADERS:
            continue
        parts.append(f'-H "{name}: {escape_header_value(value)}"')

    if trace.request_body:
        parts.append(f"--data-binary {_single_quote(trace.request_body)}")

    if "accept-encoding" in trace.request_headers:
        parts.append("--compressed")

    return " ".join(parts)
