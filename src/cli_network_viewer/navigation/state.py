"""
导航状态

焦点、子面板、各面板视口以及渲染器上报的尺寸。
"""

from dataclasses import dataclass, field

from .. import config
from ..core.models import Trace
from ..utils.encoding import count_lines, longest_line
from ..utils.urls import parse_query_params
from .blocks import ActiveBlock, RequestDetailsPane
from .viewport import Viewport, usable_space


@dataclass
class RenderMetadata:
    """渲染器每帧上报的面板尺寸（单元格）"""

    main_height: int = 0
    request_body_height: int = 0
    request_body_width: int = 0
    response_body_height: int = 0
    response_body_width: int = 0


@dataclass
class ContentLengths:
    """选中 Trace 对应的各详情面板内容长度"""

    request_headers: int = 0
    query_params: int = 0
    response_headers: int = 0
    request_body: int = 0
    request_body_width: int = 0
    response_body: int = 0
    response_body_width: int = 0

    @classmethod
    def from_trace(cls, trace: Trace | None) -> "ContentLengths":
        if trace is None:
            return cls()

        request_body = trace.request_body_text
        response_body = trace.response_body_text

        return cls(
            request_headers=len(trace.request_headers),
            query_params=len(parse_query_params(trace.uri)),
            response_headers=len(trace.response_headers),
            request_body=count_lines(request_body),
            request_body_width=longest_line(request_body),
            response_body=count_lines(response_body),
            response_body_width=longest_line(response_body),
        )


@dataclass
class NavigationState:
    active_block: ActiveBlock = ActiveBlock.TRACES_LIST
    previous_blocks: list[ActiveBlock] = field(default_factory=list)
    request_details_pane: RequestDetailsPane = RequestDetailsPane.HEADERS

    main: Viewport = field(default_factory=Viewport)
    request_details: Viewport = field(default_factory=Viewport)
    query_params: Viewport = field(default_factory=Viewport)
    response_details: Viewport = field(default_factory=Viewport)
    request_body: Viewport = field(default_factory=Viewport)
    response_body: Viewport = field(default_factory=Viewport)

    metadata: RenderMetadata = field(default_factory=RenderMetadata)

    # 覆盖层中的光标
    filter_main_index: int = 0
    filter_value_index: int = 0
    sort_index: int = 0

    # ============== 可用空间 ==============

    @property
    def main_usable_height(self) -> int:
        return usable_space(self.metadata.main_height, config.TRACES_LIST_UNUSABLE_VERTICAL_SPACE)

    @property
    def request_details_usable_height(self) -> int:
        return usable_space(self.metadata.request_body_height, config.REQUEST_HEADERS_UNUSABLE_VERTICAL_SPACE)

    @property
    def query_params_usable_height(self) -> int:
        return usable_space(self.metadata.request_body_height, config.QUERY_PARAMS_UNUSABLE_VERTICAL_SPACE)

    @property
    def response_details_usable_height(self) -> int:
        return usable_space(self.metadata.response_body_height, config.RESPONSE_HEADERS_UNUSABLE_VERTICAL_SPACE)

    @property
    def request_body_usable_height(self) -> int:
        return usable_space(self.metadata.request_body_height, config.BODY_UNUSABLE_VERTICAL_SPACE)

    @property
    def request_body_usable_width(self) -> int:
        return usable_space(self.metadata.request_body_width, config.BODY_UNUSABLE_HORIZONTAL_SPACE)

    @property
    def response_body_usable_height(self) -> int:
        return usable_space(self.metadata.response_body_height, config.BODY_UNUSABLE_VERTICAL_SPACE)

    @property
    def response_body_usable_width(self) -> int:
        return usable_space(self.metadata.response_body_width, config.BODY_UNUSABLE_HORIZONTAL_SPACE)

    def detail_viewports(self) -> list[Viewport]:
        """随选中 Trace 变化而重置的视口"""
        return [
            self.request_details,
            self.query_params,
            self.response_details,
            self.request_body,
            self.response_body,
        ]
