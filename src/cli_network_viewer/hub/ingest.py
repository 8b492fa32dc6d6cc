"""
数据接入

把中转服务收到的帧解析后以 Action 的形式提交给调度器。
解析失败的帧被丢弃，错误记录到日志和调试面板，不会影响调度器。
"""

from typing import Callable

from loguru import logger

from ..core.models import ConnectionStatus
from ..core.parser import ParseError, parse_payload
from ..dispatcher.actions import Action, AddTrace, RecordDiagnostic, SetConnectionStatus


class IngestionBridge:
    """
    帧到 Action 的桥接

    Args:
        submit: 非阻塞地提交 Action
    """

    def __init__(self, submit: Callable[[Action], None]):
        self.submit = submit
        self.accepted = 0
        self.rejected = 0

    def __call__(self, text: str) -> None:
        try:
            payload = parse_payload(text)
        except ParseError as e:
            self.rejected += 1
            logger.warning(f"丢弃无法解析的消息: {e}")
            self.submit(RecordDiagnostic(f"ParseError: {e}"))
            return

        self.accepted += 1

        if isinstance(payload, ConnectionStatus):
            self.submit(SetConnectionStatus(payload.clients))
        else:
            self.submit(AddTrace(payload))

    def peers_changed(self, count: int) -> None:
        self.submit(SetConnectionStatus(count))
