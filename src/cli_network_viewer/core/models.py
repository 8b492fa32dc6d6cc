"""
数据模型定义

定义一次被捕获的 HTTP 交换（Trace）及其附属结构。
Trace 由 parser 从 WebSocket 推送的 JSON 信封构造，由 TraceStore 按 id 去重保存。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class TraceState(str, Enum):
    """请求生命周期状态"""

    SENT = "sent"
    RECEIVED = "received"
    ABORTED = "aborted"
    BLOCKED = "blocked"
    TIMEOUT = "timeout"
    ERROR = "error"

    @classmethod
    def from_wire(cls, value: Any) -> "TraceState":
        """
        将信封中的 http.state 映射为状态枚举

        无法识别的值统一映射为 ERROR，而不是让整条 trace 解析失败。
        """
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.ERROR

    @property
    def is_terminal(self) -> bool:
        return self is not TraceState.SENT


class HeaderMap:
    """
    有序多值 Header 表

    保留插入顺序，同名 Header 可以出现多次；按名称查找不区分大小写。
    """

    def __init__(self, items: list[tuple[str, str]] | None = None):
        self._items: list[tuple[str, str]] = list(items or [])

    def append(self, name: str, value: str) -> None:
        self._items.append((name, value))

    def get(self, name: str, default: str | None = None) -> str | None:
        """返回第一个匹配名称的值"""
        lower = name.lower()
        for key, value in self._items:
            if key.lower() == lower:
                return value
        return default

    def items(self) -> list[tuple[str, str]]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        lower = name.lower()
        return any(key.lower() == lower for key, _ in self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"HeaderMap({self._items!r})"


@dataclass
class Timings:
    """各阶段耗时（毫秒），字段对应信封中的 http.timings"""

    blocked: float | None = None
    dns: float | None = None
    connect: float | None = None
    send: float | None = None
    wait: float | None = None
    receive: float | None = None
    ssl: float | None = None

    def as_rows(self) -> list[tuple[str, float]]:
        """返回有值的阶段，按请求发生顺序排列"""
        rows = []
        for name in ("blocked", "dns", "connect", "ssl", "send", "wait", "receive"):
            value = getattr(self, name)
            if value is not None:
                rows.append((name, value))
        return rows


@dataclass
class Trace:
    """
    单次 HTTP 交换

    id 是唯一身份标识；timestamp 仅用于排序。
    """

    # 基础标识
    id: str
    timestamp: int  # Unix 时间戳（毫秒）

    # 请求信息
    method: str
    uri: str
    host: str | None = None
    port: int | None = None
    path: str | None = None
    http_version: str | None = None
    service_name: str | None = None

    # 响应信息
    state: TraceState = TraceState.SENT
    status: int | None = None
    status_message: str | None = None
    duration: int | None = None  # 毫秒
    timings: Timings | None = None

    # Header 与 Body
    request_headers: HeaderMap = field(default_factory=HeaderMap)
    response_headers: HeaderMap = field(default_factory=HeaderMap)
    request_body: str | None = None
    response_body: str | None = None
    pretty_request_body: str | None = None
    pretty_request_body_lines: int | None = None
    pretty_response_body: str | None = None
    pretty_response_body_lines: int | None = None

    # 原始信封
    raw: str = ""

    @property
    def request_body_text(self) -> str | None:
        """用于展示的请求体：优先格式化后的文本"""
        if self.pretty_request_body is not None:
            return self.pretty_request_body
        return self.request_body

    @property
    def response_body_text(self) -> str | None:
        """用于展示的响应体：优先格式化后的文本"""
        if self.pretty_response_body is not None:
            return self.pretty_response_body
        return self.response_body

    @property
    def status_class(self) -> str | None:
        """状态码分类，如 2xx；无状态码时返回 None"""
        if self.status is None:
            return None
        return f"{self.status // 100}xx"

    def to_summary(self) -> dict[str, Any]:
        """
        转换为摘要格式（不含 Body）

        用于调试面板与日志。
        """
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "method": self.method,
            "url": self.uri,
            "status": self.status,
            "state": self.state.value,
            "duration": self.duration,
            "source": self.service_name,
        }


@dataclass(frozen=True)
class ConnectionStatus:
    """连接状态通知：当前已连接的普通客户端数量"""

    clients: int
