"""
Exporter configuration.

The file is JSON with the same keys the capture agent uses:

  {
    "maxIpfixMessageLen": 1400,
    "timerTemplateFlushSeconds": 60,
    "timerFinishedDrainSeconds": 1,
    "timerForceDrainSeconds": 30,
    "outputs": [
      {"collector": {"remoteAddress": "10.0.0.1:2100", "localAddress": "0.0.0.0:50101"}},
      {"log": {"file": "/var/log/flows.json", "hooks": [{"name": "h1", "shell": "..."}]}}
    ],
    "templates": [
      {"id": 1024, "template": [{"name": "SourceIPv4Address"}, {"name": "DestinationIPv4Address"}]}
    ]
  }

Outputs and hooks are checked while parsing. Field names are checked by
templates.validate_config, since that needs the field registry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from .errors import (
    ConfigurationError,
    InvalidHookConfigurationError,
    InvalidOutputConfigurationError,
    UnknownTemplateError,
)
from .hooks import Hook, HookChain, hook_from_dict
from .models import FLOW_MESSAGE_OVERHEAD
from .registry import HookBackendRegistry, default_registry

DEFAULT_MAX_IPFIX_MESSAGE_LEN = 1400
# Message length and set ids are 16 bit fields on the wire.
MAX_IPFIX_MESSAGE_LEN = 0xFFFF
MIN_TEMPLATE_ID = 256
MAX_TEMPLATE_ID = 0xFFFF


@dataclass(frozen=True)
class TemplateField:
    name: str


@dataclass(frozen=True)
class Template:
    id: int
    fields: tuple = ()

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class CollectorOutput:
    """
    IPFIX collector destination. Addresses are "host:port" strings.
    """

    remote_address: str
    local_address: Optional[str] = None

    @property
    def label(self) -> str:
        return f"collector:{self.remote_address}"


@dataclass(frozen=True)
class LogOutput:
    """
    File destination. Records pass through hooks, in order, before writing.
    If a hook fails the record is lost for this output.
    """

    file: str
    hooks: tuple = ()

    @property
    def label(self) -> str:
        return f"log:{self.file}"

    def chain(self) -> HookChain:
        return HookChain(hooks=list(self.hooks))


Output = Union[CollectorOutput, LogOutput]


@dataclass(frozen=True)
class Config:
    max_ipfix_message_len: int = DEFAULT_MAX_IPFIX_MESSAGE_LEN
    # Read by the agent's timer loop, not by message assembly.
    timer_template_flush_seconds: int = 0
    timer_finished_drain_seconds: int = 0
    timer_force_drain_seconds: int = 0
    outputs: tuple = ()
    templates: tuple = ()

    def template(self, template_id: int) -> Template:
        for t in self.templates:
            if t.id == template_id:
                return t
        raise UnknownTemplateError(template_id)

    def collectors(self) -> List[CollectorOutput]:
        return [o for o in self.outputs if isinstance(o, CollectorOutput)]

    def logs(self) -> List[LogOutput]:
        return [o for o in self.outputs if isinstance(o, LogOutput)]

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        registry: Optional[HookBackendRegistry] = None,
    ) -> "Config":
        registry = registry or default_registry()

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"config must be an object, got {type(data).__name__}")

        max_len = _int(data, "maxIpfixMessageLen", DEFAULT_MAX_IPFIX_MESSAGE_LEN)
        if not FLOW_MESSAGE_OVERHEAD < max_len <= MAX_IPFIX_MESSAGE_LEN:
            raise ConfigurationError(
                f"maxIpfixMessageLen must be between {FLOW_MESSAGE_OVERHEAD + 1} "
                f"and {MAX_IPFIX_MESSAGE_LEN}, got {max_len}",
                details={"max_ipfix_message_len": max_len},
            )

        outputs = tuple(
            output_from_dict(o, registry, index=i) for i, o in enumerate(data.get("outputs") or [])
        )

        templates: List[Template] = []
        seen = set()
        for i, item in enumerate(data.get("templates") or []):
            template = template_from_dict(item, index=i)
            if template.id in seen:
                raise ConfigurationError(
                    f"duplicate template id {template.id}", details={"template_id": template.id}
                )
            seen.add(template.id)
            templates.append(template)

        return cls(
            max_ipfix_message_len=max_len,
            timer_template_flush_seconds=_int(data, "timerTemplateFlushSeconds", 0),
            timer_finished_drain_seconds=_int(data, "timerFinishedDrainSeconds", 0),
            timer_force_drain_seconds=_int(data, "timerForceDrainSeconds", 0),
            outputs=outputs,
            templates=tuple(templates),
        )


def _int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}", details={"key": key}) from None


def template_from_dict(data: Any, index: int = 0) -> Template:
    """
    Parse one templates[] entry.

    Ids 0 to 255 are reserved for set headers (2 is a template set), so
    data templates use 256 and up.
    """
    if not isinstance(data, Mapping) or "id" not in data:
        raise ConfigurationError(f"templates[{index}] must be an object with an id", details={"index": index})

    tid = _int(data, "id", 0)
    if not MIN_TEMPLATE_ID <= tid <= MAX_TEMPLATE_ID:
        raise ConfigurationError(
            f"template id {tid} must be between {MIN_TEMPLATE_ID} and {MAX_TEMPLATE_ID}",
            details={"template_id": tid},
        )

    fields = []
    for j, f in enumerate(data.get("template") or []):
        if not isinstance(f, Mapping) or not f.get("name"):
            raise ConfigurationError(
                f"template {tid} field {j} needs a name",
                details={"template_id": tid, "field_index": j},
            )
        fields.append(TemplateField(name=str(f["name"])))
    return Template(id=tid, fields=tuple(fields))


def output_from_dict(data: Any, registry: HookBackendRegistry, index: int = 0) -> Output:
    if not isinstance(data, Mapping):
        raise InvalidOutputConfigurationError(
            f"outputs[{index}] must be an object, got {type(data).__name__}",
            details={"index": index},
        )

    collector = data.get("collector")
    log = data.get("log")

    if (collector is None) == (log is None):
        raise InvalidOutputConfigurationError(
            f"outputs[{index}] must set exactly one of collector or log",
            details={"index": index, "keys": sorted(data.keys())},
        )

    if collector is not None:
        remote = collector.get("remoteAddress") if isinstance(collector, Mapping) else None
        if not remote:
            raise InvalidOutputConfigurationError(
                f"outputs[{index}] collector needs remoteAddress", details={"index": index}
            )
        return CollectorOutput(remote_address=str(remote), local_address=collector.get("localAddress"))

    path = log.get("file") if isinstance(log, Mapping) else None
    if not path:
        raise InvalidOutputConfigurationError(f"outputs[{index}] log needs file", details={"index": index})

    hooks: List[Hook] = []
    for j, h in enumerate(log.get("hooks") or []):
        if not isinstance(h, Mapping):
            raise InvalidHookConfigurationError(
                f"outputs[{index}] hooks[{j}] must be an object", details={"index": index, "hook_index": j}
            )
        hooks.append(hook_from_dict(h, registry))
    return LogOutput(file=str(path), hooks=tuple(hooks))


def load_config(path: Union[str, Path], registry: Optional[HookBackendRegistry] = None) -> Config:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return Config.from_dict(data, registry=registry)
