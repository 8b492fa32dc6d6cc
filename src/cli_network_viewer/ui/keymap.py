"""
默认按键映射

把终端按键解析为 Action。搜索模式下所有可打印字符都写入搜索词。
"""

from ..dispatcher.actions import (
    Action,
    CopyToClipboard,
    DeleteItem,
    DeleteSearchQuery,
    ExitSearch,
    FocusOnTraces,
    GoToEnd,
    GoToLeft,
    GoToRight,
    GoToStart,
    Help,
    NavigateDown,
    NavigateLeft,
    NavigateRight,
    NavigateUp,
    NewSearch,
    NextPane,
    NextSection,
    PreviousPane,
    PreviousSection,
    Quit,
    ShowFilter,
    ShowSort,
    ShowTraceDetails,
    ToggleDebug,
    UpdateSearchQuery,
)
from ..navigation.blocks import ActiveBlock

# 按键名（textual 的 event.key）
KEYS: dict[str, Action] = {
    "up": NavigateUp(),
    "down": NavigateDown(),
    "ctrl+up": NavigateUp(ctrl=True),
    "ctrl+down": NavigateDown(ctrl=True),
    "left": NavigateLeft(),
    "right": NavigateRight(),
    "home": GoToStart(),
    "end": GoToEnd(),
    "tab": NextSection(),
    "shift+tab": PreviousSection(),
    "enter": ShowTraceDetails(),
    "escape": FocusOnTraces(),
}

# 可打印字符（textual 的 event.character）
CHARACTERS: dict[str, Action] = {
    "q": Quit(),
    "?": Help(),
    "p": ToggleDebug(),
    "f": ShowFilter(),
    "s": ShowSort(),
    "d": DeleteItem(),
    "y": CopyToClipboard(),
    "/": NewSearch(),
    "<": GoToStart(),
    ">": GoToEnd(),
    "g": GoToStart(),
    "G": GoToEnd(),
    "]": NextPane(),
    "[": PreviousPane(),
    "k": NavigateUp(),
    "j": NavigateDown(),
    "h": NavigateLeft(),
    "l": NavigateRight(),
    "H": GoToLeft(),
    "L": GoToRight(),
}

# 帮助面板内容
HELP_ROWS = [
    ("q", "关闭覆盖层 / 退出"),
    ("?", "帮助"),
    ("p", "调试面板"),
    ("/", "搜索 URL"),
    ("f", "筛选"),
    ("s", "排序"),
    ("d", "删除选中的请求"),
    ("y", "复制 cURL 命令 / Body"),
    ("Tab / Shift+Tab", "切换区域"),
    ("] / [", "切换查询参数与 Header"),
    ("Enter", "查看详情 / 选择"),
    ("Esc", "返回请求列表"),
    ("↑ ↓ / k j", "移动光标"),
    ("← → / h l", "横向滚动 Body"),
    ("H / L", "滚动到最左 / 最右"),
    ("< > / g G", "跳到开头 / 结尾"),
    ("Ctrl+↑ / Ctrl+↓", "在请求详情与响应详情间跳转"),
]


def resolve_key(key: str, character: str | None, searching: bool = False) -> Action | None:
    """
    解析一次按键

    Args:
        key: 按键名，如 "up"、"shift+tab"
        character: 按键对应的字符，非可打印按键为 None
        searching: 是否处于搜索输入模式

    Returns:
        对应的 Action；未绑定的按键返回 None
    """
    if searching:
        if key in ("enter", "escape"):
            return ExitSearch()
        if key == "backspace":
            return DeleteSearchQuery()
        if character and character.isprintable():
            return UpdateSearchQuery(character)
        return None

    if key in KEYS:
        return KEYS[key]

    if character and character in CHARACTERS:
        return CHARACTERS[character]

    return None


class KeyResolver:
    """
    带搜索模式预判的按键解析

    NewSearch / ExitSearch 提交到调度队列后要等调度器处理完才会改变焦点，
    在此之前到达的按键按预判的模式解析，避免 "/" 之后紧跟的字符被当作命令。
    调度器每处理完一批 Action 后调用 synced()，恢复以实际焦点为准。
    """

    def __init__(self):
        self.pending_searching: bool | None = None

    def searching(self, active_block: ActiveBlock) -> bool:
        if self.pending_searching is not None:
            return self.pending_searching
        return active_block is ActiveBlock.SEARCH_QUERY

    def resolve(self, key: str, character: str | None, active_block: ActiveBlock) -> Action | None:
        """
        解析一次按键并更新预判

        Args:
            key: 按键名
            character: 按键对应的字符
            active_block: 调度器当前的焦点（可能尚未反映排队中的 Action）

        Returns:
            对应的 Action；未绑定的按键返回 None
        """
        searching = self.searching(active_block)
        action = resolve_key(key, character, searching)

        if isinstance(action, NewSearch) and active_block is ActiveBlock.TRACES_LIST:
            self.pending_searching = True
        elif isinstance(action, ExitSearch):
            self.pending_searching = False

        return action

    def synced(self) -> None:
        self.pending_searching = None
