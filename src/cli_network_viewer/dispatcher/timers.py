"""
延迟任务

定时器到期后把 Action 提交回调度队列；同一组内的定时器可以一次性取消。
"""

import asyncio
from typing import Callable

from loguru import logger

from .actions import Action


class TimerGroup:
    """
    一组 fire-and-forget 的延迟任务

    Args:
        name: 组名，仅用于日志
        submit: 到期时调用，参数为要提交的 Action
    """

    def __init__(self, name: str, submit: Callable[[Action], None]):
        self.name = name
        self._submit = submit
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, delay: float, action: Action) -> asyncio.Task:
        """在 delay 秒后提交 action，需要在事件循环中调用"""
        task = asyncio.get_running_loop().create_task(self._fire(delay, action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fire(self, delay: float, action: Action) -> None:
        await asyncio.sleep(delay)
        self._submit(action)

    def cancel_all(self) -> int:
        """取消所有未到期的定时器，返回取消数量"""
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        self._tasks.clear()
        if pending:
            logger.debug(f"定时器组 {self.name}: 取消 {len(pending)} 个")
        return len(pending)

    def __len__(self) -> int:
        return sum(1 for task in self._tasks if not task.done())
