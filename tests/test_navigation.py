"""导航引擎测试"""

from cli_network_viewer.navigation import engine
from cli_network_viewer.navigation.blocks import SECTION_RING, ActiveBlock, RequestDetailsPane
from cli_network_viewer.navigation.state import ContentLengths, NavigationState, RenderMetadata

from factories import make_trace


class TestSectionRing:
    """Tab / Shift+Tab"""

    def setup_method(self):
        self.state = NavigationState()

    def test_six_tabs_return_to_traces(self):
        visited = []
        for _ in range(6):
            engine.next_section(self.state)
            visited.append(self.state.active_block)

        assert visited == [*SECTION_RING[1:], ActiveBlock.TRACES_LIST]

    def test_six_shift_tabs_return_to_traces(self):
        visited = []
        for _ in range(6):
            engine.previous_section(self.state)
            visited.append(self.state.active_block)

        assert visited == [*reversed(SECTION_RING[1:]), ActiveBlock.TRACES_LIST]

    def test_tab_is_noop_outside_ring(self):
        self.state.active_block = ActiveBlock.HELP

        assert engine.next_section(self.state) is False
        assert self.state.active_block is ActiveBlock.HELP


class TestFocus:
    """Enter / Esc / 交叉跳转"""

    def setup_method(self):
        self.state = NavigationState()

    def test_enter_opens_request_details(self):
        assert engine.show_trace_details(self.state) is True
        assert self.state.active_block is ActiveBlock.REQUEST_DETAILS

    def test_esc_from_detail_block(self):
        for block in SECTION_RING[1:]:
            self.state.active_block = block
            engine.focus_on_traces(self.state)
            assert self.state.active_block is ActiveBlock.TRACES_LIST

    def test_cross_jumps(self):
        self.state.active_block = ActiveBlock.REQUEST_DETAILS

        assert engine.jump_to_response_details(self.state) is True
        assert self.state.active_block is ActiveBlock.RESPONSE_DETAILS

        assert engine.jump_to_request_details(self.state) is True
        assert self.state.active_block is ActiveBlock.REQUEST_DETAILS

    def test_cross_jump_from_wrong_block(self):
        assert engine.jump_to_response_details(self.state) is False
        assert self.state.active_block is ActiveBlock.TRACES_LIST

    def test_pane_toggle_only_in_request_details(self):
        assert engine.toggle_request_details_pane(self.state) is False

        self.state.active_block = ActiveBlock.REQUEST_DETAILS
        engine.toggle_request_details_pane(self.state)
        assert self.state.request_details_pane is RequestDetailsPane.QUERY

        engine.toggle_request_details_pane(self.state)
        assert self.state.request_details_pane is RequestDetailsPane.HEADERS


class TestOverlays:
    """覆盖层栈"""

    def setup_method(self):
        self.state = NavigationState()

    def test_open_and_close_restores_previous(self):
        self.state.active_block = ActiveBlock.RESPONSE_BODY

        engine.open_overlay(self.state, ActiveBlock.HELP)
        assert self.state.active_block is ActiveBlock.HELP

        assert engine.close_overlay(self.state) is True
        assert self.state.active_block is ActiveBlock.RESPONSE_BODY
        assert self.state.previous_blocks == []

    def test_reopen_same_overlay_is_noop(self):
        engine.open_overlay(self.state, ActiveBlock.SORT)

        assert engine.open_overlay(self.state, ActiveBlock.SORT) is False
        assert self.state.previous_blocks == [ActiveBlock.TRACES_LIST]

    def test_stacked_overlays(self):
        engine.open_overlay(self.state, ActiveBlock.SORT)
        engine.open_overlay(self.state, ActiveBlock.HELP)

        engine.close_overlay(self.state)
        assert self.state.active_block is ActiveBlock.SORT
        engine.close_overlay(self.state)
        assert self.state.active_block is ActiveBlock.TRACES_LIST

    def test_close_outside_overlay(self):
        assert engine.close_overlay(self.state) is False

    def test_filter_value_screen_esc_returns_to_main(self):
        engine.open_overlay(self.state, ActiveBlock.FILTER_MAIN)
        self.state.filter_main_index = 1

        assert engine.open_filter_values(self.state) is ActiveBlock.FILTER_SOURCE

        engine.focus_on_traces(self.state)
        assert self.state.active_block is ActiveBlock.FILTER_MAIN

        engine.focus_on_traces(self.state)
        assert self.state.active_block is ActiveBlock.TRACES_LIST

    def test_filter_reopen_from_value_screen_is_noop(self):
        engine.open_overlay(self.state, ActiveBlock.FILTER_MAIN)
        engine.open_filter_values(self.state)

        assert engine.open_overlay(self.state, ActiveBlock.FILTER_MAIN) is False
        assert self.state.active_block is ActiveBlock.FILTER_METHOD


class TestMovement:
    """按焦点分派的光标移动"""

    def setup_method(self):
        self.state = NavigationState(metadata=RenderMetadata(
            main_height=8,
            request_body_height=6,
            request_body_width=12,
            response_body_height=6,
            response_body_width=12,
        ))

    def test_main_list_reports_selection_change(self):
        engine.set_trace_count(self.state, 3)

        assert engine.navigate_down(self.state) is True
        assert engine.navigate_up(self.state) is True
        assert engine.navigate_up(self.state) is False

    def test_main_list_uses_chrome_allowance(self):
        engine.set_trace_count(self.state, 20)

        for _ in range(5):
            engine.navigate_down(self.state)

        # 8 - 3 = 5 行可用
        assert self.state.main.selected_index == 5
        assert self.state.main.offset == 1

    def test_detail_movement_does_not_report_selection(self):
        engine.apply_content_lengths(self.state, ContentLengths(request_headers=5))
        self.state.active_block = ActiveBlock.REQUEST_DETAILS

        assert engine.navigate_down(self.state) is False
        assert self.state.request_details.selected_index == 1

    def test_query_pane_moves_query_viewport(self):
        engine.apply_content_lengths(self.state, ContentLengths(query_params=4))
        self.state.active_block = ActiveBlock.REQUEST_DETAILS
        self.state.request_details_pane = RequestDetailsPane.QUERY

        engine.navigate_down(self.state)

        assert self.state.query_params.selected_index == 1
        assert self.state.request_details.selected_index == 0

    def test_body_scroll_and_horizontal(self):
        engine.apply_content_lengths(self.state, ContentLengths(response_body=10, response_body_width=30))
        self.state.active_block = ActiveBlock.RESPONSE_BODY

        engine.go_to_end(self.state)
        engine.go_to_right(self.state)

        # 6 - 2 = 4 行，12 - 2 = 10 列可用
        assert self.state.response_body.offset == 6
        assert self.state.response_body.horizontal_offset == 20

        engine.go_to_start(self.state)
        engine.go_to_left(self.state)
        assert self.state.response_body.offset == 0
        assert self.state.response_body.horizontal_offset == 0

    def test_sort_cursor_bounded(self):
        engine.open_overlay(self.state, ActiveBlock.SORT)

        for _ in range(20):
            engine.navigate_down(self.state)

        assert self.state.sort_index == len(engine.SORT_OPTIONS) - 1

    def test_filter_value_cursor_uses_option_count(self):
        engine.open_overlay(self.state, ActiveBlock.FILTER_MAIN)
        engine.open_filter_values(self.state)

        for _ in range(10):
            engine.navigate_down(self.state, option_count=3)

        assert self.state.filter_value_index == 2

    def test_reset_detail_viewports(self):
        engine.apply_content_lengths(self.state, ContentLengths(request_headers=10, response_body=10))
        self.state.request_details.selected_index = 4
        self.state.response_body.offset = 3

        trace = make_trace("1", request_headers=[("Accept", "*/*")], response_body="a\nb")
        engine.reset_detail_viewports(self.state, ContentLengths.from_trace(trace))

        for viewport in self.state.detail_viewports():
            assert viewport.offset == 0
            assert viewport.selected_index == 0
        assert self.state.request_details.content_length == 1
        assert self.state.response_body.content_length == 2


class TestContentLengths:
    """详情面板内容长度"""

    def test_from_trace(self):
        trace = make_trace(
            "1",
            uri="http://h/x?a=1&b=2&a=3",
            request_headers=[("Accept", "*/*"), ("Cookie", "a"), ("Cookie", "b")],
            response_headers=[("Content-Type", "text/plain")],
            request_body="line one\nline two is longer",
        )

        lengths = ContentLengths.from_trace(trace)

        assert lengths.request_headers == 3
        assert lengths.query_params == 3
        assert lengths.response_headers == 1
        assert lengths.request_body == 2
        assert lengths.request_body_width == len("line two is longer")
        assert lengths.response_body == 0

    def test_no_trace(self):
        assert ContentLengths.from_trace(None) == ContentLengths()
