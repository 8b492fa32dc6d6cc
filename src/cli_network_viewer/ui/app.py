"""
终端界面

textual 应用：启动 WebSocket 中转服务和调度器，把按键转换为 Action，
调度器每处理完一批 Action 后重绘。
"""

from loguru import logger
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static

from ..config import Settings
from ..dispatcher import AppContext, Dispatcher
from ..dispatcher.actions import SetServerState, UpdateMeta
from ..hub import IngestionBridge, WebSocketHub
from ..navigation.state import RenderMetadata
from . import render
from .keymap import KeyResolver


class NetworkViewerApp(App):
    """网络请求查看器"""

    CSS = """
    Screen {
        layers: base overlay;
    }
    #traces {
        height: 1fr;
    }
    #summary {
        height: 4;
    }
    .details-row {
        height: 1fr;
    }
    #request-details, #response-details {
        width: 2fr;
    }
    #request-body, #response-body {
        width: 3fr;
    }
    #status {
        height: 1;
    }
    #overlay {
        layer: overlay;
        display: none;
        width: 70%;
        height: auto;
        max-height: 80%;
        offset: 10 3;
        background: $surface;
    }
    """

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self.settings = settings or Settings()
        self.dispatcher = Dispatcher(
            settings=self.settings,
            clipboard=self.copy_to_clipboard,
            on_change=self._on_state_changed,
        )
        self.bridge = IngestionBridge(self.dispatcher.submit)
        self.hub = WebSocketHub(
            host=self.settings.host,
            port=self.settings.port,
            inner_path=self.settings.inner_path,
            on_frame=self.bridge,
            on_peers_changed=self.bridge.peers_changed,
        )
        self.keys = KeyResolver()
        # 监听地址无法绑定时记录错误并以状态码 1 退出
        self.startup_error: OSError | None = None

    @property
    def context(self) -> AppContext:
        return self.dispatcher.context

    def compose(self) -> ComposeResult:
        yield Static(id="traces")
        yield Static(id="summary")
        with Horizontal(classes="details-row"):
            yield Static(id="request-details")
            yield Static(id="request-body")
        with Horizontal(classes="details-row"):
            yield Static(id="response-details")
            yield Static(id="response-body")
        yield Static(id="status")
        yield Static(id="overlay")

    async def on_mount(self) -> None:
        try:
            await self.hub.start()
        except OSError as e:
            logger.error(f"无法监听 {self.hub.address}: {e}")
            self.startup_error = e
            self.exit(return_code=1)
            return

        self.dispatcher.submit(SetServerState(running=True, address=self.hub.address))
        self.run_worker(self.dispatcher.run(), name="dispatcher", exit_on_error=True)
        self.call_after_refresh(self._report_layout)

    async def on_unmount(self) -> None:
        await self.hub.stop()
        self.context.shutdown()

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self._report_layout)

    def _report_layout(self) -> None:
        """把各面板的实际尺寸上报给调度器"""
        request_body = self.query_one("#request-body", Static).size
        response_body = self.query_one("#response-body", Static).size
        metadata = RenderMetadata(
            main_height=self.query_one("#traces", Static).size.height,
            request_body_height=request_body.height,
            request_body_width=request_body.width,
            response_body_height=response_body.height,
            response_body_width=response_body.width,
        )
        self.dispatcher.submit(UpdateMeta(metadata))

    def on_key(self, event: events.Key) -> None:
        action = self.keys.resolve(event.key, event.character, self.context.nav.active_block)
        if action is None:
            return

        event.stop()
        event.prevent_default()
        self.dispatcher.submit(action)

    def _on_state_changed(self, ctx: AppContext) -> None:
        self.keys.synced()

        if ctx.should_quit:
            self.exit()
            return

        self.query_one("#traces", Static).update(render.render_traces(ctx))
        self.query_one("#summary", Static).update(render.render_summary(ctx))
        self.query_one("#request-details", Static).update(render.render_request_details(ctx))
        self.query_one("#request-body", Static).update(render.render_request_body(ctx))
        self.query_one("#response-details", Static).update(render.render_response_details(ctx))
        self.query_one("#response-body", Static).update(render.render_response_body(ctx))
        self.query_one("#status", Static).update(render.render_status_bar(ctx))

        overlay = self.query_one("#overlay", Static)
        content = render.render_overlay(ctx)
        overlay.display = content is not None
        if content is not None:
            overlay.update(content)
