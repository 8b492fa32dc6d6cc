"""终端界面"""

from .app import NetworkViewerApp
from .keymap import KeyResolver, resolve_key

__all__ = [
    "KeyResolver",
    "NetworkViewerApp",
    "resolve_key",
]
