"""WebSocket 中转与数据接入"""

from .ingest import IngestionBridge
from .websocket_hub import Peer, WebSocketHub

__all__ = [
    "IngestionBridge",
    "Peer",
    "WebSocketHub",
]
