"""数据接入测试"""

import json

from cli_network_viewer.dispatcher.actions import AddTrace, RecordDiagnostic, SetConnectionStatus
from cli_network_viewer.hub import IngestionBridge

from factories import make_envelope


class TestIngestionBridge:
    """帧到 Action"""

    def setup_method(self):
        self.submitted = []
        self.bridge = IngestionBridge(self.submitted.append)

    def test_trace_frame(self):
        self.bridge(make_envelope("abc", method="POST", statusCode=201))

        assert len(self.submitted) == 1
        action = self.submitted[0]
        assert isinstance(action, AddTrace)
        assert action.trace.id == "abc"
        assert self.bridge.accepted == 1

    def test_connection_status_frame(self):
        self.bridge(json.dumps({"type": "connections", "data": {"clients": 3}}))

        assert self.submitted == [SetConnectionStatus(3)]

    def test_malformed_frame_becomes_diagnostic(self):
        self.bridge("{not json")

        assert self.bridge.rejected == 1
        assert len(self.submitted) == 1
        action = self.submitted[0]
        assert isinstance(action, RecordDiagnostic)
        assert action.message.startswith("ParseError: ")

    def test_unknown_type_rejected(self):
        self.bridge(json.dumps({"type": "mystery", "data": {}}))

        assert isinstance(self.submitted[0], RecordDiagnostic)

    def test_peers_changed(self):
        self.bridge.peers_changed(2)

        assert self.submitted == [SetConnectionStatus(2)]
