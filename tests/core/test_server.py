import dataclasses

from flow_export_mcp.core.config import CollectorOutput, LogOutput
from flow_export_mcp.core.router import OutputRouter
from flow_export_mcp.core.server import FlowExportMCPServer


class ListSink:
    def __init__(self, output):
        self.records = []

    def write(self, record):
        self.records.append(record)

    def close(self):
        pass


def _server(config):
    cfg = dataclasses.replace(config, outputs=(LogOutput(file="flows.json"),))
    return FlowExportMCPServer(cfg, router=OutputRouter(cfg, sink_factory=ListSink))


def test_list_templates(config):
    rows = _server(config).list_templates()
    assert rows[0] == {
        "id": 1001,
        "fields": ["SourceIPv4Address", "DestinationIPv4Address"],
        "record_length": 8,
        "records_per_message": 5,
    }


def test_template_message(config):
    msg = _server(config).template_message()
    assert msg["templates"][1]["fields"][2] == {"field_type": 4, "field_length": 1}


def test_fragment_flow_file(config):
    flows = [{"seq": i} for i in range(12)]
    out = _server(config).fragment_flow_file({"flowsets": [{"templateId": 1001, "flows": flows}]})
    assert [m["flows"] for m in out["messages"]] == [5, 5, 2]
    assert [m["sequence_number"] for m in out["messages"]] == [0, 5, 10]
    assert out["next_sequence_number"] == 12


def test_export_flow_file(config):
    out = _server(config).export_flow_file({"flowsets": [{"templateId": 1002, "flows": [{"x": 1}]}]})
    assert out["outputs"] == [{"output": "log:flows.json", "written": 1, "dropped": 0}]


def test_errors_returned_as_dict(config):
    server = _server(config)
    out = server._call("fragment_flow_file", lambda: server.fragment_flow_file({"flowsets": [{"templateId": 5}]}))
    assert out["error"] == "UNKNOWN_TEMPLATE"
    assert out["details"] == {"template_id": 5}


def test_config_summary(config):
    summary = _server(config).config_summary()
    assert summary["timer_force_drain_seconds"] == 30
    assert summary["outputs"] == ["log:flows.json"]


def test_malformed_flow_file_returned_as_dict(config):
    server = _server(config)
    out = server._call("export_flow_file", lambda: server.export_flow_file({"flowsets": [{"flows": []}]}))
    assert out["error"] == "INVALID_FLOW_FILE"
    assert out["details"] == {"index": 0}


class ListTransport:
    def __init__(self, output):
        self.datagrams = []

    def send(self, datagram):
        self.datagrams.append(datagram)

    def close(self):
        pass


def test_unencodable_flow_reported_per_collector(config):
    cfg = dataclasses.replace(
        config, outputs=(CollectorOutput(remote_address="127.0.0.1:2100"), LogOutput(file="flows.json"))
    )
    router = OutputRouter(cfg, transport_factory=ListTransport, sink_factory=ListSink)
    server = FlowExportMCPServer(cfg, router=router)

    flow_file = {"flowsets": [{"templateId": 1001, "flows": [{"SourceIPv4Address": "host-a"}]}]}
    out = server._call("export_flow_file", lambda: server.export_flow_file(flow_file))

    collector, log = out["outputs"]
    assert collector["output"] == "collector:127.0.0.1:2100"
    assert collector["sent"] == 0
    assert "SourceIPv4Address" in collector["error"]
    assert log == {"output": "log:flows.json", "written": 1, "dropped": 0}
