"""焦点区域定义"""

from enum import Enum


class ActiveBlock(str, Enum):
    """当前获得焦点的界面区域，任意时刻只有一个"""

    TRACES_LIST = "traces_list"
    REQUEST_SUMMARY = "request_summary"
    REQUEST_DETAILS = "request_details"
    REQUEST_BODY = "request_body"
    RESPONSE_DETAILS = "response_details"
    RESPONSE_BODY = "response_body"
    SEARCH_QUERY = "search_query"
    HELP = "help"
    DEBUG = "debug"
    FILTER_MAIN = "filter_main"
    FILTER_SOURCE = "filter_source"
    FILTER_STATUS = "filter_status"
    FILTER_METHOD = "filter_method"
    SORT = "sort"


class RequestDetailsPane(str, Enum):
    """REQUEST_DETAILS 内部的子面板"""

    QUERY = "query"
    HEADERS = "headers"

    def toggled(self) -> "RequestDetailsPane":
        if self is RequestDetailsPane.QUERY:
            return RequestDetailsPane.HEADERS
        return RequestDetailsPane.QUERY


# Tab / Shift+Tab 循环的固定顺序
SECTION_RING = (
    ActiveBlock.TRACES_LIST,
    ActiveBlock.REQUEST_SUMMARY,
    ActiveBlock.REQUEST_DETAILS,
    ActiveBlock.REQUEST_BODY,
    ActiveBlock.RESPONSE_DETAILS,
    ActiveBlock.RESPONSE_BODY,
)

DETAIL_BLOCKS = SECTION_RING[1:]

FILTER_VALUE_SCREENS = (
    ActiveBlock.FILTER_METHOD,
    ActiveBlock.FILTER_SOURCE,
    ActiveBlock.FILTER_STATUS,
)

FILTER_SCREENS = (ActiveBlock.FILTER_MAIN, *FILTER_VALUE_SCREENS)

# 以压栈方式打开、关闭时恢复之前焦点的覆盖层
OVERLAYS = (ActiveBlock.HELP, ActiveBlock.DEBUG, ActiveBlock.SORT, *FILTER_SCREENS)

# FILTER_MAIN 中可选的筛选类别，顺序与 FILTER_VALUE_SCREENS 一致
FILTER_CATEGORIES = ("method", "source", "status")
