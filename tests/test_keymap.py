"""按键映射测试"""

from cli_network_viewer.dispatcher import Dispatcher
from cli_network_viewer.dispatcher.actions import (
    AddTrace,
    DeleteSearchQuery,
    ExitSearch,
    GoToEnd,
    NavigateDown,
    NewSearch,
    Quit,
    UpdateSearchQuery,
)
from cli_network_viewer.navigation.blocks import ActiveBlock
from cli_network_viewer.ui.keymap import KeyResolver, resolve_key

from factories import make_trace


class TestResolveKey:
    """按键解析"""

    def test_named_keys(self):
        assert resolve_key("down", None) == NavigateDown()
        assert resolve_key("ctrl+down", None) == NavigateDown(ctrl=True)

    def test_characters(self):
        assert resolve_key("q", "q") == Quit()
        assert resolve_key("slash", "/") == NewSearch()
        assert resolve_key("G", "G") == GoToEnd()

    def test_unbound_key(self):
        assert resolve_key("z", "z") is None
        assert resolve_key("f5", None) is None

    def test_search_mode_captures_characters(self):
        assert resolve_key("q", "q", searching=True) == UpdateSearchQuery("q")
        assert resolve_key("slash", "/", searching=True) == UpdateSearchQuery("/")

    def test_search_mode_controls(self):
        assert resolve_key("backspace", None, searching=True) == DeleteSearchQuery()
        assert resolve_key("enter", "\r", searching=True) == ExitSearch()
        assert resolve_key("escape", None, searching=True) == ExitSearch()
        assert resolve_key("tab", "\t", searching=True) is None


class TestKeyResolver:
    """调度器尚未处理 NewSearch 时的按键"""

    def setup_method(self):
        self.keys = KeyResolver()

    def test_characters_after_slash_edit_query(self):
        assert self.keys.resolve("slash", "/", ActiveBlock.TRACES_LIST) == NewSearch()

        # 焦点仍是 TRACES_LIST，但已按搜索模式解析
        assert self.keys.resolve("q", "q", ActiveBlock.TRACES_LIST) == UpdateSearchQuery("q")
        assert self.keys.resolve("d", "d", ActiveBlock.TRACES_LIST) == UpdateSearchQuery("d")

    def test_exit_search_before_sync(self):
        self.keys.resolve("slash", "/", ActiveBlock.TRACES_LIST)

        assert self.keys.resolve("enter", "\r", ActiveBlock.TRACES_LIST) == ExitSearch()
        assert self.keys.resolve("q", "q", ActiveBlock.SEARCH_QUERY) == Quit()

    def test_synced_uses_actual_focus(self):
        self.keys.resolve("slash", "/", ActiveBlock.TRACES_LIST)
        self.keys.synced()

        assert self.keys.resolve("q", "q", ActiveBlock.TRACES_LIST) == Quit()
        assert self.keys.resolve("q", "q", ActiveBlock.SEARCH_QUERY) == UpdateSearchQuery("q")

    def test_slash_outside_traces_list_not_predicted(self):
        self.keys.resolve("slash", "/", ActiveBlock.RESPONSE_BODY)

        assert self.keys.resolve("q", "q", ActiveBlock.RESPONSE_BODY) == Quit()

    def test_queued_keys_after_slash(self):
        dispatcher = Dispatcher()
        ctx = dispatcher.context
        dispatcher.dispatch(AddTrace(make_trace("1", 1, uri="http://h/qd")))

        # 三个按键都在调度器处理之前解析
        queued = [self.keys.resolve(key, key, ctx.nav.active_block) for key in ("/", "q", "d")]
        for action in queued:
            dispatcher.dispatch(action)

        assert ctx.should_quit is False
        assert ctx.search_query == "qd"
        assert "1" in ctx.store
        assert ctx.nav.active_block is ActiveBlock.SEARCH_QUERY
