"""
内存 Trace 存储

按 id 去重、按时间倒序排列的 Trace 集合。
所有修改都发生在 Dispatcher 所在的单个任务中，因此无需加锁。
"""

from bisect import bisect_left, insort
from dataclasses import replace
from typing import Iterator

from loguru import logger

from .models import Trace, TraceState

# 超时后写入 Body 的固定提示
TIMEOUT_BODY = "TIMEOUT WAITING FOR RESPONSE"

_IndexKey = tuple[int, str]


class TraceStore:
    """
    Trace 存储

    特性：
    - 身份与排序相互独立：id -> Trace 映射 + (时间戳, id) 排序索引
    - 同一时间戳的不同 Trace 不会互相覆盖
    - 迭代顺序：时间戳降序，时间戳相同时 id 升序
    """

    def __init__(self):
        self._records: dict[str, Trace] = {}
        # 键为 (-timestamp, id)，升序即 “最新在前、同时间按 id 升序”
        self._index: list[_IndexKey] = []

    @staticmethod
    def _key(trace: Trace) -> _IndexKey:
        return (-trace.timestamp, trace.id)

    def upsert(self, trace: Trace) -> None:
        """
        插入或替换 Trace

        已存在相同 id 时整体替换，后到的事件（如 received）覆盖先前的状态。

        Args:
            trace: 待保存的 Trace
        """
        existing = self._records.get(trace.id)
        if existing is not None:
            self._drop_key(self._key(existing))

        self._records[trace.id] = trace
        insort(self._index, self._key(trace))

    def mark_timed_out(self, trace_id: str) -> bool:
        """
        将仍处于 SENT 状态的 Trace 标记为超时

        已到达终态的 Trace 保持不变，避免迟到的超时覆盖已收到的响应。

        Args:
            trace_id: Trace ID

        Returns:
            True 表示状态发生了变化
        """
        trace = self._records.get(trace_id)
        if trace is None or trace.state.is_terminal:
            return False

        self._records[trace_id] = replace(
            trace,
            state=TraceState.TIMEOUT,
            status=None,
            response_body=TIMEOUT_BODY,
            pretty_response_body=TIMEOUT_BODY,
            pretty_response_body_lines=1,
        )
        logger.debug(f"Trace {trace_id} 超时未收到响应")
        return True

    def remove(self, trace_id: str) -> Trace | None:
        """删除 Trace，返回被删除的记录；不存在时返回 None"""
        trace = self._records.pop(trace_id, None)
        if trace is not None:
            self._drop_key(self._key(trace))
        return trace

    def get(self, trace_id: str) -> Trace | None:
        """根据 ID 获取 Trace"""
        return self._records.get(trace_id)

    def clear(self) -> None:
        """清空所有 Trace"""
        self._records.clear()
        self._index.clear()

    def iterate_newest_first(self) -> Iterator[Trace]:
        """
        按时间倒序迭代

        每次调用都返回基于当前索引快照的新迭代器，可重复调用。
        """
        snapshot = list(self._index)
        return (self._records[trace_id] for _, trace_id in snapshot if trace_id in self._records)

    def _drop_key(self, key: _IndexKey) -> None:
        position = bisect_left(self._index, key)
        if position < len(self._index) and self._index[position] == key:
            del self._index[position]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, trace_id: object) -> bool:
        return trace_id in self._records
