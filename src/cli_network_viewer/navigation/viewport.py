"""
视口与滚动计算

每个可滚动面板持有一个 Viewport。列表类面板（Trace 列表、Header、查询参数）
按条目移动光标，视口跟随光标；Body 面板按行滚动，selected_index 与 offset 保持一致。

所有函数只依赖 (内容长度, 可用高度, 当前偏移, 移动方向)，结果是确定的。
"""

from dataclasses import dataclass


@dataclass
class Viewport:
    selected_index: int = 0
    offset: int = 0
    horizontal_offset: int = 0
    content_length: int = 0
    horizontal_content_length: int = 0
    scrollbar_position: int = 0
    horizontal_scrollbar_position: int = 0

    def reset(self) -> None:
        """光标、偏移与滚动条归零，保留内容长度"""
        self.selected_index = 0
        self.offset = 0
        self.horizontal_offset = 0
        self.scrollbar_position = 0
        self.horizontal_scrollbar_position = 0

    @property
    def last_index(self) -> int:
        return max(0, self.content_length - 1)


def usable_space(reported: int, unusable: int) -> int:
    """面板报告的尺寸减去边框、表头等占用"""
    return max(0, reported - unusable)


def calculate_scrollbar_position(content_length: int, offset: int, overflown_number_count: int) -> int:
    """
    滚动条位置

    将 offset 的取值范围 [0, V] 线性映射到滚动条轨道的 [0, L]：
    round(offset * L / V)，在 offset == V 时恰好等于 L。

    Args:
        content_length: 内容总长度 L
        offset: 当前偏移
        overflown_number_count: 溢出行数 V = L - 可用高度，必须大于 0
    """
    if overflown_number_count <= 0:
        return 0
    # 整数运算下的四舍五入
    return (2 * offset * content_length + overflown_number_count) // (2 * overflown_number_count)


def refresh_scrollbar(viewport: Viewport, usable_height: int) -> None:
    """根据当前偏移重新计算纵向滚动条；内容未溢出时归零"""
    length = viewport.content_length
    if usable_height <= 0 or length <= usable_height:
        viewport.scrollbar_position = 0
        return
    viewport.scrollbar_position = calculate_scrollbar_position(length, viewport.offset, length - usable_height)


def refresh_horizontal_scrollbar(viewport: Viewport, usable_width: int) -> None:
    width = viewport.horizontal_content_length
    if usable_width <= 0 or width <= usable_width:
        viewport.horizontal_scrollbar_position = 0
        return
    viewport.horizontal_scrollbar_position = calculate_scrollbar_position(
        width, viewport.horizontal_offset, width - usable_width
    )


# ============== 列表类面板：光标移动，视口跟随 ==============

def move_cursor_down(viewport: Viewport, usable_height: int) -> bool:
    """
    光标下移一行

    光标越过可见窗口底部、且窗口尚未到达内容底部时，offset 恰好加 1。

    Returns:
        光标是否移动
    """
    length = viewport.content_length
    moved = False

    if viewport.selected_index + 1 < length:
        viewport.selected_index += 1
        moved = True

    if (
        usable_height > 0
        and viewport.selected_index - viewport.offset >= usable_height
        and viewport.offset + usable_height < length
    ):
        viewport.offset += 1

    refresh_scrollbar(viewport, usable_height)
    return moved


def move_cursor_up(viewport: Viewport, usable_height: int) -> bool:
    """
    光标上移一行

    光标移到窗口顶部之上时，offset 恰好减 1。
    """
    moved = False

    if viewport.selected_index > 0:
        viewport.selected_index -= 1
        moved = True

    if viewport.selected_index < viewport.offset:
        viewport.offset -= 1

    refresh_scrollbar(viewport, usable_height)
    return moved


def cursor_to_start(viewport: Viewport) -> bool:
    moved = viewport.selected_index != 0
    viewport.selected_index = 0
    viewport.offset = 0
    viewport.scrollbar_position = 0
    return moved


def cursor_to_end(viewport: Viewport, usable_height: int) -> bool:
    """光标跳到最后一项，offset = max(0, L - 可用高度)"""
    target = viewport.last_index
    moved = viewport.selected_index != target
    viewport.selected_index = target
    if usable_height > 0:
        viewport.offset = max(0, viewport.content_length - usable_height)
    refresh_scrollbar(viewport, usable_height)
    return moved


def clamp_cursor(viewport: Viewport, usable_height: int) -> None:
    """
    内容长度或可用高度变化后，恢复 “视口跟随光标” 的约束
    """
    viewport.selected_index = min(max(0, viewport.selected_index), viewport.last_index)

    if usable_height > 0:
        max_offset = max(0, viewport.content_length - usable_height)
        if viewport.selected_index >= viewport.offset + usable_height:
            viewport.offset = viewport.selected_index - usable_height + 1
        viewport.offset = min(viewport.offset, max_offset)

    viewport.offset = min(max(0, viewport.offset), viewport.selected_index)
    refresh_scrollbar(viewport, usable_height)


# ============== Body 面板：按行滚动 ==============

def scroll_down(viewport: Viewport, usable_height: int) -> None:
    if usable_height > 0 and viewport.offset + usable_height < viewport.content_length:
        viewport.offset += 1
    viewport.selected_index = viewport.offset
    refresh_scrollbar(viewport, usable_height)


def scroll_up(viewport: Viewport, usable_height: int) -> None:
    if viewport.offset > 0:
        viewport.offset -= 1
    viewport.selected_index = viewport.offset
    refresh_scrollbar(viewport, usable_height)


def scroll_to_end(viewport: Viewport, usable_height: int) -> None:
    if usable_height > 0:
        viewport.offset = max(0, viewport.content_length - usable_height)
    viewport.selected_index = viewport.offset
    refresh_scrollbar(viewport, usable_height)


def scroll_to_start(viewport: Viewport) -> None:
    viewport.offset = 0
    viewport.selected_index = 0
    viewport.scrollbar_position = 0


def scroll_right(viewport: Viewport, usable_width: int) -> None:
    if usable_width > 0 and viewport.horizontal_offset + usable_width < viewport.horizontal_content_length:
        viewport.horizontal_offset += 1
    refresh_horizontal_scrollbar(viewport, usable_width)


def scroll_left(viewport: Viewport, usable_width: int) -> None:
    if viewport.horizontal_offset > 0:
        viewport.horizontal_offset -= 1
    refresh_horizontal_scrollbar(viewport, usable_width)


def scroll_to_right(viewport: Viewport, usable_width: int) -> None:
    if usable_width > 0:
        viewport.horizontal_offset = max(0, viewport.horizontal_content_length - usable_width)
    refresh_horizontal_scrollbar(viewport, usable_width)


def scroll_to_left(viewport: Viewport) -> None:
    viewport.horizontal_offset = 0
    viewport.horizontal_scrollbar_position = 0


def clamp_scroll(viewport: Viewport, usable_height: int, usable_width: int) -> None:
    """Body 内容或面板尺寸变化后，把偏移限制在合法范围内"""
    max_offset = max(0, viewport.content_length - usable_height) if usable_height > 0 else 0
    viewport.offset = min(max(0, viewport.offset), max_offset)
    viewport.selected_index = viewport.offset

    max_horizontal = max(0, viewport.horizontal_content_length - usable_width) if usable_width > 0 else 0
    viewport.horizontal_offset = min(max(0, viewport.horizontal_offset), max_horizontal)

    refresh_scrollbar(viewport, usable_height)
    refresh_horizontal_scrollbar(viewport, usable_width)
