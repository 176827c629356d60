from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Protocol

from .errors import HookExecutionError, InvalidHookConfigurationError


class HookBackend(Protocol):
    """
    Required interface for a hook backend.

    A backend receives the current record and returns a new mapping that
    fully replaces it. Any exception it raises is a hook failure and the
    record is lost for that output.

    Backends are built from configuration by the HookBackendRegistry.
    The chain never imports specific backends directly.
    """

    kind: str

    def execute(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class Hook:
    """
    A named hook with exactly one backend.

    The name is what operators see when a hook fails, so keep it unique
    within one output.
    """

    name: str
    backend: HookBackend

    def execute(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            result = self.backend.execute(dict(record))
        except HookExecutionError:
            raise
        except Exception as exc:
            raise HookExecutionError(self.name, f"{type(exc).__name__}: {exc}") from exc

        if not isinstance(result, Mapping):
            raise HookExecutionError(
                self.name, f"backend {self.backend.kind} returned {type(result).__name__}, not an object"
            )
        return dict(result)


@dataclass(frozen=True)
class HookChain:
    """
    Ordered, all or nothing list of hooks for one log output.

    Output of hook i is input of hook i+1. The first failure raises
    HookExecutionError and later hooks do not run.
    """

    hooks: List[Hook] = field(default_factory=list)

    def run(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        current = dict(record)
        for hook in self.hooks:
            current = hook.execute(current)
        return current


def hook_from_dict(data: Mapping[str, Any], registry: Any) -> Hook:
    """
    Build a Hook from configuration.

    Example:
      {"name": "add-hostname", "shell": "#!/bin/sh\\ncat", "timeout": 5}

    Exactly one key naming a registered backend must be present. Zero or
    several raise InvalidHookConfigurationError before anything runs.
    """
    name = str(data.get("name") or "")
    kinds = [k for k in registry.kinds() if data.get(k) is not None]

    if len(kinds) != 1:
        raise InvalidHookConfigurationError(
            f"hook {name!r} must set exactly one of {registry.kinds()}, got {kinds or 'none'}",
            details={"hook": name, "backends": kinds},
        )

    kind = kinds[0]
    timeout = data.get("timeout")
    backend = registry.build(kind, data[kind], None if timeout is None else float(timeout))
    return Hook(name=name or kind, backend=backend)
