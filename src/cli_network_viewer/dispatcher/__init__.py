"""调度器：Action、处理函数表与上下文"""

from . import actions
from .context import AppContext
from .dispatcher import Dispatcher
from .handlers import HANDLERS
from .timers import TimerGroup

__all__ = [
    "actions",
    "AppContext",
    "Dispatcher",
    "HANDLERS",
    "TimerGroup",
]
