from __future__ import annotations
import os
from flow_export_mcp.core.config import load_config
from flow_export_mcp.core.logging import get_logger, setup_logging
from flow_export_mcp.core.server import FlowExportMCPServer


def main() -> None:
    """
    Load the exporter config from the FLOW_EXPORT_CONFIG path.

    Example:
      export FLOW_EXPORT_CONFIG=/etc/flowctl/config.json
      export FLOW_EXPORT_LOG_LEVEL=DEBUG
      python -m flow_export_mcp.cli.run_server
    """
    setup_logging(
        level=os.environ.get("FLOW_EXPORT_LOG_LEVEL", "INFO"),
        fmt=os.environ.get("FLOW_EXPORT_LOG_FORMAT", "json"),
    )
    path = os.environ.get("FLOW_EXPORT_CONFIG", "config.json")
    config = load_config(path)
    get_logger(__name__).info(
        "config_loaded",
        path=path,
        outputs=len(config.outputs),
        templates=len(config.templates),
    )

    server = FlowExportMCPServer(config)
    server.run()


if __name__ == "__main__":
    main()
