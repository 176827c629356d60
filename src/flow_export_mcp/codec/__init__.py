"""
Wire encoding of assembled messages.

Message assembly in core never produces bytes; this package does.
"""

from .ipfix import IPFIXEncoder, encode_flow_data_message, encode_template_message

__all__ = ["IPFIXEncoder", "encode_flow_data_message", "encode_template_message"]
