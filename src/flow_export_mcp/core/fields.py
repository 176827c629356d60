from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping

from .errors import UnknownFieldError

# Information element IDs and lengths follow the IANA IPFIX registry.
# Lengths are the fixed wire lengths this exporter writes, not the
# reduced-size encodings a collector may also accept.


@dataclass(frozen=True)
class FieldRegistryEntry:
    name: str
    type_code: int
    length: int


_FIELD_TABLE = (
    FieldRegistryEntry("OctetDeltaCount", 1, 8),
    FieldRegistryEntry("PacketDeltaCount", 2, 8),
    FieldRegistryEntry("ProtocolIdentifier", 4, 1),
    FieldRegistryEntry("IpClassOfService", 5, 1),
    FieldRegistryEntry("TcpControlBits", 6, 2),
    FieldRegistryEntry("SourceTransportPort", 7, 2),
    FieldRegistryEntry("SourceIPv4Address", 8, 4),
    FieldRegistryEntry("SourceIPv4PrefixLength", 9, 1),
    FieldRegistryEntry("IngressInterface", 10, 4),
    FieldRegistryEntry("DestinationTransportPort", 11, 2),
    FieldRegistryEntry("DestinationIPv4Address", 12, 4),
    FieldRegistryEntry("DestinationIPv4PrefixLength", 13, 1),
    FieldRegistryEntry("EgressInterface", 14, 4),
    FieldRegistryEntry("IpNextHopIPv4Address", 15, 4),
    FieldRegistryEntry("BgpSourceAsNumber", 16, 4),
    FieldRegistryEntry("BgpDestinationAsNumber", 17, 4),
    FieldRegistryEntry("SourceIPv6Address", 27, 16),
    FieldRegistryEntry("DestinationIPv6Address", 28, 16),
    FieldRegistryEntry("FlowLabelIPv6", 31, 4),
    FieldRegistryEntry("IcmpTypeCodeIPv4", 32, 2),
    FieldRegistryEntry("MinimumTTL", 52, 1),
    FieldRegistryEntry("MaximumTTL", 53, 1),
    FieldRegistryEntry("SourceMacAddress", 56, 6),
    FieldRegistryEntry("VlanId", 58, 2),
    FieldRegistryEntry("IpVersion", 60, 1),
    FieldRegistryEntry("FlowDirection", 61, 1),
    FieldRegistryEntry("DestinationMacAddress", 80, 6),
    FieldRegistryEntry("FlowEndReason", 136, 1),
    FieldRegistryEntry("FlowStartSeconds", 150, 4),
    FieldRegistryEntry("FlowEndSeconds", 151, 4),
    FieldRegistryEntry("FlowStartMilliseconds", 152, 8),
    FieldRegistryEntry("FlowEndMilliseconds", 153, 8),
)


def _build_index(entries: Iterable[FieldRegistryEntry]) -> Mapping[str, FieldRegistryEntry]:
    index = {}
    for entry in entries:
        if entry.name in index:
            raise ValueError(f"duplicate field name {entry.name}")
        index[entry.name] = entry
    return MappingProxyType(index)


# Built once at import. Type and length accessors both read this mapping.
IPFIX_FIELDS: Mapping[str, FieldRegistryEntry] = _build_index(_FIELD_TABLE)


def lookup_field(name: str) -> FieldRegistryEntry:
    entry = IPFIX_FIELDS.get(name)
    if entry is None:
        raise UnknownFieldError(name)
    return entry


def field_type(name: str) -> int:
    return lookup_field(name).type_code


def field_length(name: str) -> int:
    return lookup_field(name).length


def registered_fields() -> List[str]:
    return list(IPFIX_FIELDS.keys())
