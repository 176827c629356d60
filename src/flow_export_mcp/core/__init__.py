"""
Message assembly core.

Template resolution, fragmentation and the hook chain live here. Wire
encoding, sockets and files live in codec and sinks; the router in
core.router is the one place that ties them together, and is not
imported here.
"""

from .config import CollectorOutput, Config, LogOutput, load_config
from .fragment import fragment, next_sequence_number
from .hooks import Hook, HookChain
from .models import FlowDataMessage, FlowFile, TemplateMessage
from .templates import build_template_message, template_field_types, template_length, validate_config

__all__ = [
    "CollectorOutput",
    "Config",
    "LogOutput",
    "load_config",
    "fragment",
    "next_sequence_number",
    "Hook",
    "HookChain",
    "FlowDataMessage",
    "FlowFile",
    "TemplateMessage",
    "build_template_message",
    "template_field_types",
    "template_length",
    "validate_config",
]
