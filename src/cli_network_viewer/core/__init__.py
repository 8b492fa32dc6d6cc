"""核心模块"""

from .models import ConnectionStatus, HeaderMap, Timings, Trace, TraceState
from .parser import ParseError, Payload, parse_payload, parse_raw_trace
from .trace_store import TIMEOUT_BODY, TraceStore
from .curl import generate_curl_command

__all__ = [
    "ConnectionStatus",
    "HeaderMap",
    "Timings",
    "Trace",
    "TraceState",
    "ParseError",
    "Payload",
    "parse_payload",
    "parse_raw_trace",
    "TIMEOUT_BODY",
    "TraceStore",
    "generate_curl_command",
]
