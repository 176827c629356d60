import json
import random
import sys

from flow_export_mcp.core.config import load_config
from flow_export_mcp.core.logging import setup_logging
from flow_export_mcp.core.models import FlowFile
from flow_export_mcp.core.router import OutputRouter


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    setup_logging(level="DEBUG", fmt="console")
    config = load_config(path)
    router = OutputRouter(config)

    flowsets = []
    for t in config.templates:
        flows = []
        for i in range(200):
            flows.append(
                {
                    "SourceIPv4Address": "10.0.0.1",
                    "DestinationIPv4Address": "10.0.0.2",
                    "SourceTransportPort": 51514,
                    "DestinationTransportPort": random.choice([53, 80, 443]),
                    "ProtocolIdentifier": 6,
                    "OctetDeltaCount": 1200,
                    "PacketDeltaCount": 10,
                }
            )
        flowsets.append({"templateId": t.id, "flows": flows})

    router.send_templates()
    result = router.export(FlowFile.from_dict({"flowsets": flowsets}))
    router.close()
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
