from __future__ import annotations

import shlex
from typing import Any, Dict, List, Optional

from .process import exchange_json


class CommandBackend:
    """
    Runs an external program, similar to how CNI plugins are invoked.

    The record goes to the program on stdin as JSON, the updated record is
    read back from stdout. The command line is split with shell rules but
    is not run through a shell.

    Config:
      hooks:
      - name: enrich
        command: /usr/local/bin/enrich --site tokyo
    """

    kind = "command"

    def __init__(self, command: str, timeout: Optional[float] = None):
        self.argv: List[str] = shlex.split(command)
        if not self.argv:
            raise ValueError("command hook needs a program to run")
        self.timeout = timeout

    def execute(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return exchange_json(self.argv, record, timeout=self.timeout)


def register(registry: Any) -> None:
    registry.register(CommandBackend.kind, lambda value, timeout: CommandBackend(str(value), timeout))
