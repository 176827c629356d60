from __future__ import annotations

import ipaddress
import struct
from typing import Any, Dict, List, Tuple

from flow_export_mcp.core.config import Config
from flow_export_mcp.core.errors import FlowEncodeError
from flow_export_mcp.core.fields import lookup_field
from flow_export_mcp.core.models import (
    IPFIX_HEADER_LEN,
    SET_HEADER_LEN,
    TEMPLATE_SET_ID,
    Flow,
    FlowDataMessage,
    Header,
    TemplateMessage,
)

# IPFIX protocol spec RFC 7011.
# Message header:  version(2) length(2) export_time(4) sequence(4) obs_domain(4)
# Set header:      set_id(2) length(2)
# Template record: template_id(2) field_count(2), then ie_id(2) length(2) per field


def _header_bytes(header: Header, length: int) -> bytes:
    return struct.pack(
        "!HHIII",
        header.version,
        length,
        header.export_time,
        header.sequence_number,
        header.observation_domain_id,
    )


def _set_bytes(set_id: int, body: bytes) -> bytes:
    return struct.pack("!HH", set_id, SET_HEADER_LEN + len(body)) + body


def encode_template_message(msg: TemplateMessage) -> bytes:
    body = b""
    for t in msg.templates:
        body += struct.pack("!HH", t.template_id, len(t.fields))
        for f in t.fields:
            body += struct.pack("!HH", f.field_type, f.field_length)

    sets = _set_bytes(TEMPLATE_SET_ID, body) if msg.templates else b""
    return _header_bytes(msg.header, IPFIX_HEADER_LEN + len(sets)) + sets


def encode_value(value: Any, length: int) -> bytes:
    """
    Encode one field value at the fixed registry length.

    int
      Big endian, unsigned. Values that do not fit raise OverflowError.

    str
      IPv4 or IPv6 address when length is 4 or 16, MAC address when 6.

    bytes
      Right padded with zeros, truncated when too long.

    None
      All zeros.
    """
    if value is None:
        return b"\x00" * length

    if isinstance(value, bool):
        value = int(value)

    if isinstance(value, int):
        return value.to_bytes(length, "big")

    if isinstance(value, str):
        if length in (4, 16):
            packed = ipaddress.ip_address(value).packed
            if len(packed) != length:
                raise ValueError(f"address {value} does not fit {length} bytes")
            return packed
        if length == 6:
            return bytes(int(b, 16) for b in value.replace("-", ":").split(":"))
        return encode_value(int(value, 0), length)

    if isinstance(value, (bytes, bytearray)):
        return bytes(value[:length]).ljust(length, b"\x00")

    raise TypeError(f"cannot encode {type(value).__name__} as IPFIX field")


class IPFIXEncoder:
    """
    Turns data messages into datagrams.

    Field layouts are resolved once from the config. Flows are read by
    field name, so a flow for template 1024 needs keys such as
    "SourceIPv4Address" and "OctetDeltaCount". Missing keys encode as
    zero. A value that does not fit its field raises FlowEncodeError.
    """

    def __init__(self, config: Config):
        self._layouts: Dict[int, List[Tuple[str, int]]] = {}
        for t in config.templates:
            self._layouts[t.id] = [(name, lookup_field(name).length) for name in t.field_names()]

    def encode_record(self, template_id: int, flow: Flow) -> bytes:
        layout = self._layouts.get(template_id)
        if layout is None:
            raise KeyError(f"no layout for template {template_id}")
        parts = []
        for name, length in layout:
            try:
                parts.append(encode_value(flow.get(name), length))
            except (ValueError, TypeError, OverflowError) as exc:
                raise FlowEncodeError(template_id, name, str(exc)) from exc
        return b"".join(parts)

    def encode_flow_data_message(self, msg: FlowDataMessage) -> bytes:
        sets = b""
        for fs in msg.flow_sets:
            body = b"".join(self.encode_record(fs.set_id, f) for f in fs.flows)
            sets += _set_bytes(fs.set_id, body)
        return _header_bytes(msg.header, IPFIX_HEADER_LEN + len(sets)) + sets


def encode_flow_data_message(msg: FlowDataMessage, config: Config) -> bytes:
    return IPFIXEncoder(config).encode_flow_data_message(msg)
