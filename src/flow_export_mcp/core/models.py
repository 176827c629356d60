from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .errors import InvalidFlowFileError

# A flow is produced upstream by the capture agent. The core only counts
# and groups flows; the encoder and the hooks read them by field name.
Flow = Mapping[str, Any]

IPFIX_VERSION = 10

# Message header (16) plus one set header (4).
IPFIX_HEADER_LEN = 16
SET_HEADER_LEN = 4
FLOW_MESSAGE_OVERHEAD = IPFIX_HEADER_LEN + SET_HEADER_LEN

TEMPLATE_SET_ID = 2


@dataclass
class Header:
    """
    IPFIX message header without the length field.

    The length is computed by the encoder. export_time and
    observation_domain_id are always zero for this exporter.
    """

    sequence_number: int = 0
    version: int = IPFIX_VERSION
    export_time: int = 0
    observation_domain_id: int = 0


@dataclass
class FlowSet:
    """
    Data set. set_id equals the template id the flows are encoded with.
    """

    set_id: int
    flows: List[Flow] = field(default_factory=list)


@dataclass
class FlowDataMessage:
    header: Header
    flow_sets: List[FlowSet] = field(default_factory=list)

    def flow_count(self) -> int:
        return sum(len(fs.flows) for fs in self.flow_sets)


@dataclass(frozen=True)
class FlowTemplateField:
    field_type: int
    field_length: int


@dataclass
class FlowTemplate:
    template_id: int
    fields: List[FlowTemplateField] = field(default_factory=list)

    def record_length(self) -> int:
        return sum(f.field_length for f in self.fields)


@dataclass
class TemplateMessage:
    header: Header
    templates: List[FlowTemplate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": vars(self.header).copy(),
            "templates": [
                {
                    "template_id": t.template_id,
                    "fields": [
                        {"field_type": f.field_type, "field_length": f.field_length}
                        for f in t.fields
                    ],
                }
                for t in self.templates
            ],
        }


@dataclass
class FlowFileSet:
    template_id: int
    flows: List[Flow] = field(default_factory=list)


@dataclass
class FlowFile:
    """
    Batch handed over by the capture agent.

    File format:
      {"flowsets": [{"templateId": 1024, "flows": [{...}, {...}]}]}
    """

    flow_sets: List[FlowFileSet] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlowFile":
        sets = []
        for i, item in enumerate(data.get("flowsets") or []):
            if not isinstance(item, Mapping) or item.get("templateId") is None:
                raise InvalidFlowFileError(
                    f"flowsets[{i}] must be an object with a templateId", details={"index": i}
                )
            try:
                template_id = int(item["templateId"])
            except (TypeError, ValueError):
                raise InvalidFlowFileError(
                    f"flowsets[{i}] templateId must be an integer, got {item['templateId']!r}",
                    details={"index": i},
                ) from None
            sets.append(FlowFileSet(template_id=template_id, flows=list(item.get("flows") or [])))
        return cls(flow_sets=sets)

    def flow_count(self) -> int:
        return sum(len(fs.flows) for fs in self.flow_sets)
