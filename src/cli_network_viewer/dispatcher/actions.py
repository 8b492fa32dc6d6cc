"""
Action 定义

所有状态变更都以 Action 的形式进入调度器。来源包括按键、数据接入、定时器和渲染器。
"""

from dataclasses import dataclass

from ..core.models import Trace
from ..navigation.state import RenderMetadata


class Action:
    """所有 Action 的基类"""

    __slots__ = ()


# ============== 导航 ==============

@dataclass(frozen=True)
class NavigateUp(Action):
    ctrl: bool = False


@dataclass(frozen=True)
class NavigateDown(Action):
    ctrl: bool = False


@dataclass(frozen=True)
class NavigateLeft(Action):
    pass


@dataclass(frozen=True)
class NavigateRight(Action):
    pass


@dataclass(frozen=True)
class GoToStart(Action):
    pass


@dataclass(frozen=True)
class GoToEnd(Action):
    pass


@dataclass(frozen=True)
class GoToLeft(Action):
    pass


@dataclass(frozen=True)
class GoToRight(Action):
    pass


@dataclass(frozen=True)
class NextSection(Action):
    pass


@dataclass(frozen=True)
class PreviousSection(Action):
    pass


@dataclass(frozen=True)
class NextPane(Action):
    pass


@dataclass(frozen=True)
class PreviousPane(Action):
    pass


@dataclass(frozen=True)
class ShowTraceDetails(Action):
    """Enter：进入详情，或在筛选/排序覆盖层中选择当前项"""


@dataclass(frozen=True)
class FocusOnTraces(Action):
    """Esc"""


@dataclass(frozen=True)
class SelectTrace(Action):
    """Trace 列表选中项变化后刷新详情面板"""


# ============== 覆盖层与应用 ==============

@dataclass(frozen=True)
class Quit(Action):
    pass


@dataclass(frozen=True)
class QuitApplication(Action):
    pass


@dataclass(frozen=True)
class Help(Action):
    pass


@dataclass(frozen=True)
class ToggleDebug(Action):
    pass


@dataclass(frozen=True)
class ShowFilter(Action):
    pass


@dataclass(frozen=True)
class ShowSort(Action):
    pass


# ============== 搜索 ==============

@dataclass(frozen=True)
class NewSearch(Action):
    pass


@dataclass(frozen=True)
class UpdateSearchQuery(Action):
    char: str


@dataclass(frozen=True)
class DeleteSearchQuery(Action):
    pass


@dataclass(frozen=True)
class ExitSearch(Action):
    pass


# ============== Trace ==============

@dataclass(frozen=True)
class AddTrace(Action):
    trace: Trace


@dataclass(frozen=True)
class MarkTraceAsTimedOut(Action):
    id: str


@dataclass(frozen=True)
class DeleteItem(Action):
    pass


@dataclass(frozen=True)
class CopyToClipboard(Action):
    pass


# ============== 状态 ==============

@dataclass(frozen=True)
class SetConnectionStatus(Action):
    clients: int


@dataclass(frozen=True)
class SetServerState(Action):
    running: bool
    address: str | None = None


@dataclass(frozen=True)
class RecordDiagnostic(Action):
    message: str


@dataclass(frozen=True)
class SetStatusMessage(Action):
    message: str


@dataclass(frozen=True)
class ClearStatusMessage(Action):
    pass


@dataclass(frozen=True)
class UpdateMeta(Action):
    metadata: RenderMetadata
