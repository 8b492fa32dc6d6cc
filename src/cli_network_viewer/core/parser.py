"""
信封解析器

将 WebSocket 收到的一帧 JSON 文本转换为 Trace 或 ConnectionStatus。

解析策略：
- 顶层 type 与 trace 的 id / http.url 为必填，缺失即抛出 ParseError
- 其余字段尽力解析，类型不符时退化为 None 或默认值，不影响整条 trace
"""

import json
import math
from typing import Any, Union

from ..utils.encoding import count_lines, pretty_parse_body
from .models import ConnectionStatus, HeaderMap, Timings, Trace, TraceState

Payload = Union[Trace, ConnectionStatus]

TRACE_TYPE = "trace"
CONNECTIONS_TYPE = "connections"

# 信封中的 httpVersion 到规范写法的映射
_HTTP_VERSIONS = {
    "HTTP/0.9": "HTTP/0.9",
    "HTTP/1.0": "HTTP/1.0",
    "HTTP/1.1": "HTTP/1.1",
    "HTTP/2.0": "HTTP/2.0",
    "HTTP/2": "HTTP/2.0",
    "HTTP/3.0": "HTTP/3.0",
    "HTTP/3": "HTTP/3.0",
    "0.9": "HTTP/0.9",
    "1.0": "HTTP/1.0",
    "1.1": "HTTP/1.1",
    "2.0": "HTTP/2.0",
    "2": "HTTP/2.0",
    "3.0": "HTTP/3.0",
    "3": "HTTP/3.0",
}

_TIMING_FIELDS = ("blocked", "dns", "connect", "send", "wait", "receive", "ssl")


class ParseError(Exception):
    """信封解析错误，对应的帧会被丢弃"""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


def parse_payload(text: str) -> Payload:
    """
    解析一帧 WebSocket 文本

    Args:
        text: 原始 JSON 文本

    Returns:
        Trace 或 ConnectionStatus

    Raises:
        ParseError: JSON 非法、type 无法识别或缺少必填字段
    """
    try:
        envelope = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"Invalid JSON: {e}", text) from e

    if not isinstance(envelope, dict):
        raise ParseError("Envelope is not a JSON object", text)

    payload_type = envelope.get("type")

    if payload_type == TRACE_TYPE:
        return _parse_trace(envelope.get("data"), text)
    if payload_type == CONNECTIONS_TYPE:
        return _parse_connections(envelope.get("data"), text)

    raise ParseError(f"Unknown payload type: {payload_type!r}", text)


def parse_raw_trace(text: str) -> Trace:
    """解析一帧文本，并要求其为 trace 类型"""
    payload = parse_payload(text)
    if not isinstance(payload, Trace):
        raise ParseError("Payload is not a trace", text)
    return payload


def _parse_connections(data: Any, raw: str) -> ConnectionStatus:
    if _is_int(data):
        return ConnectionStatus(clients=max(0, data))
    if isinstance(data, list):
        return ConnectionStatus(clients=len(data))
    if isinstance(data, dict):
        for key in ("clients", "count"):
            if _is_int(data.get(key)):
                return ConnectionStatus(clients=max(0, data[key]))
    raise ParseError("Connections payload carries no client count", raw)


def _parse_trace(data: Any, raw: str) -> Trace:
    if not isinstance(data, dict):
        raise ParseError("Trace payload has no data object", raw)

    trace_id = data.get("id")
    if _is_int(trace_id):
        trace_id = str(trace_id)
    if not isinstance(trace_id, str) or not trace_id:
        raise ParseError("Trace is missing data.id", raw)

    http = data.get("http")
    if not isinstance(http, dict):
        http = {}

    url = http.get("url")
    if not isinstance(url, str) or not url:
        raise ParseError(f"Trace {trace_id} is missing data.http.url", raw)

    status = _optional_int(http.get("statusCode"))
    if status is not None and not 100 <= status <= 999:
        status = None

    if "state" in http:
        state = TraceState.from_wire(http.get("state"))
    else:
        # 旧版本的生产者不发送 state：有状态码即视为已收到响应
        state = TraceState.RECEIVED if status is not None else TraceState.SENT

    method = http.get("method")
    method = method.strip().upper() if isinstance(method, str) and method.strip() else "GET"

    request_body = _optional_str(http.get("requestBody"))
    response_body = _optional_str(http.get("responseBody"))
    pretty_request_body = pretty_parse_body(request_body) if request_body else None
    pretty_response_body = pretty_parse_body(response_body) if response_body else None

    return Trace(
        id=trace_id,
        timestamp=_timestamp(data.get("timestamp")),
        method=method,
        uri=url,
        host=_optional_str(http.get("host")),
        port=_optional_number(http.get("port")),
        path=_optional_str(http.get("path")),
        http_version=_http_version(http.get("httpVersion")),
        service_name=_optional_str(data.get("serviceName")),
        state=state,
        status=status,
        status_message=_optional_str(http.get("statusMessage")),
        duration=_optional_number(http.get("duration")),
        timings=_timings(http.get("timings")),
        request_headers=populate_header_map(http.get("requestHeaders")),
        response_headers=populate_header_map(http.get("responseHeaders")),
        request_body=request_body,
        response_body=response_body,
        pretty_request_body=pretty_request_body,
        pretty_request_body_lines=count_lines(pretty_request_body) if pretty_request_body else None,
        pretty_response_body=pretty_response_body,
        pretty_response_body_lines=count_lines(pretty_response_body) if pretty_response_body else None,
        raw=raw,
    )


def populate_header_map(raw_headers: Any) -> HeaderMap:
    """
    将信封中的 Header 对象转换为 HeaderMap

    - 数组值：每个字符串元素生成一条记录，保持原顺序
    - 字符串值：生成一条记录
    - 其他类型：静默跳过
    """
    headers = HeaderMap()
    if not isinstance(raw_headers, dict):
        return headers

    for name, value in raw_headers.items():
        if not isinstance(name, str) or not name:
            continue
        if isinstance(value, list):
            for element in value:
                if isinstance(element, str):
                    headers.append(name, element)
        elif isinstance(value, str):
            headers.append(name, value)

    return headers


def _is_int(value: Any) -> bool:
    # bool 是 int 的子类，需要排除
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_int(value: Any) -> int | None:
    if _is_int(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _optional_number(value: Any) -> int | None:
    """数值或数字字符串 -> int，其余返回 None"""
    if _is_int(value):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None
    return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _timestamp(value: Any) -> int:
    """时间戳接受数值或数字字符串，无法解析时为 0"""
    parsed = _optional_number(value)
    return parsed if parsed is not None else 0


def _http_version(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return _HTTP_VERSIONS.get(value.strip().upper())


def _timings(value: Any) -> Timings | None:
    if not isinstance(value, dict):
        return None

    timings = Timings()
    for name in _TIMING_FIELDS:
        item = value.get(name)
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            setattr(timings, name, float(item))
    return timings
