"""导航：焦点状态机与视口计算"""

from .blocks import SECTION_RING, ActiveBlock, RequestDetailsPane
from .state import ContentLengths, NavigationState, RenderMetadata
from .viewport import Viewport, calculate_scrollbar_position

__all__ = [
    "SECTION_RING",
    "ActiveBlock",
    "RequestDetailsPane",
    "ContentLengths",
    "NavigationState",
    "RenderMetadata",
    "Viewport",
    "calculate_scrollbar_position",
]
