from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .config import Config
from .errors import FlowExportError
from .fragment import fragment, next_sequence_number
from .logging import get_logger
from .models import FlowFile
from .router import OutputRouter
from .templates import build_template_message, records_per_message, template_length, validate_config


class FlowExportMCPServer:
    """
    MCP server around the export pipeline.

    Responsibilities:
      Validate the config once at startup
      Expose template and fragmentation tools for inspection
      Run export cycles against the configured outputs

    Tools delegate to plain methods so they can be called without MCP.
    Errors are returned to the client as {"error", "message", "details"}.
    """

    def __init__(self, config: Config, router: Optional[OutputRouter] = None):
        validate_config(config)
        self.config = config
        self.router = router or OutputRouter(config)
        self.log = get_logger(__name__)
        self.mcp = FastMCP("flow_export_mcp")
        self._register_tools()

    def list_templates(self) -> List[Dict[str, Any]]:
        rows = []
        for t in self.config.templates:
            length = template_length(t.id, self.config)
            rows.append(
                {
                    "id": t.id,
                    "fields": t.field_names(),
                    "record_length": length,
                    "records_per_message": records_per_message(length, t.id, self.config),
                }
            )
        return rows

    def template_message(self) -> Dict[str, Any]:
        return build_template_message(self.config).to_dict()

    def fragment_flow_file(self, flow_file: Dict[str, Any], seqnum_start: int = 0) -> Dict[str, Any]:
        messages = fragment(FlowFile.from_dict(flow_file), self.config, seqnum_start)
        return {
            "messages": [
                {
                    "sequence_number": m.header.sequence_number,
                    "template_id": m.flow_sets[0].set_id,
                    "flows": m.flow_count(),
                }
                for m in messages
            ],
            "next_sequence_number": next_sequence_number(messages, seqnum_start),
        }

    def export_flow_file(self, flow_file: Dict[str, Any], seqnum_start: int = 0) -> Dict[str, Any]:
        return self.router.export(FlowFile.from_dict(flow_file), seqnum_start)

    def send_templates(self) -> Dict[str, Any]:
        return self.router.send_templates()

    def config_summary(self) -> Dict[str, Any]:
        return {
            "max_ipfix_message_len": self.config.max_ipfix_message_len,
            "timer_template_flush_seconds": self.config.timer_template_flush_seconds,
            "timer_finished_drain_seconds": self.config.timer_finished_drain_seconds,
            "timer_force_drain_seconds": self.config.timer_force_drain_seconds,
            "outputs": [o.label for o in self.config.outputs],
            "templates": [t.id for t in self.config.templates],
        }

    def _call(self, tool: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except FlowExportError as exc:
            self.log.error("tool_failed", tool=tool, error=exc.error_code, message=exc.message)
            return exc.to_dict()

    def _register_tools(self) -> None:
        @self.mcp.tool()
        def list_templates() -> Any:
            return self._call("list_templates", self.list_templates)

        @self.mcp.tool()
        def template_message() -> Any:
            return self._call("template_message", self.template_message)

        @self.mcp.tool()
        def fragment_flow_file(flow_file: Dict[str, Any], seqnum_start: int = 0) -> Any:
            return self._call("fragment_flow_file", lambda: self.fragment_flow_file(flow_file, seqnum_start))

        @self.mcp.tool()
        def export_flow_file(flow_file: Dict[str, Any], seqnum_start: int = 0) -> Any:
            return self._call("export_flow_file", lambda: self.export_flow_file(flow_file, seqnum_start))

        @self.mcp.tool()
        def send_templates() -> Any:
            return self._call("send_templates", self.send_templates)

        @self.mcp.tool()
        def config_summary() -> Dict[str, Any]:
            return self.config_summary()

    def run(self) -> None:
        self.mcp.run()
