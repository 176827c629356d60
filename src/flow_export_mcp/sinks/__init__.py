"""
Destinations for exported data.

collector_udp sends encoded IPFIX datagrams, file_log appends records as
JSON lines.
"""

from .collector_udp import UdpCollectorTransport
from .file_log import FileLogSink

__all__ = ["UdpCollectorTransport", "FileLogSink"]
