from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .hooks import HookBackend

BackendFactory = Callable[[Any, Optional[float]], HookBackend]


@dataclass
class LoadedBackend:
    """
    Wrapper for a registered backend factory.
    """
    kind: str
    factory: BackendFactory


class HookBackendRegistry:
    """
    Maps hook configuration keys to backend factories.

    Important:
      Config parsing never imports backend modules directly.
      Extra backends are loaded from import strings.

    Import string format:
      "some.module.path:register"

    The target is called with the registry and registers one or more kinds.

    Example:
      "flow_export_mcp.backends.command:register"
    """

    def __init__(self):
        self._backends: Dict[str, LoadedBackend] = {}

    def register(self, kind: str, factory: BackendFactory) -> None:
        if kind in self._backends:
            raise ValueError(f"duplicate hook backend {kind}")
        self._backends[kind] = LoadedBackend(kind=kind, factory=factory)

    def build(self, kind: str, value: Any, timeout: Optional[float] = None) -> HookBackend:
        if kind not in self._backends:
            raise KeyError(f"hook backend not registered {kind}")
        return self._backends[kind].factory(value, timeout)

    def kinds(self) -> List[str]:
        return sorted(self._backends.keys())

    def load_from_import_paths(self, import_paths: List[str]) -> None:
        for path in import_paths:
            module_path, func_name = path.split(":")
            module = importlib.import_module(module_path)
            getattr(module, func_name)(self)


DEFAULT_BACKENDS = [
    "flow_export_mcp.backends.command:register",
    "flow_export_mcp.backends.shell:register",
]


def default_registry() -> HookBackendRegistry:
    reg = HookBackendRegistry()
    reg.load_from_import_paths(DEFAULT_BACKENDS)
    return reg
