from __future__ import annotations

import os
import shlex
import tempfile
from typing import Any, Dict, List, Optional

from .process import exchange_json

DEFAULT_INTERPRETER = "/bin/sh"


class ShellBackend:
    """
    Runs a script written inline in the config file.

    Meant for small edits, for example adding the hostname with jq:

      hooks:
      - name: add-hostname
        shell: |
          #!/bin/sh
          echo `cat` | jq --arg hostname $(hostname) '. + {hostname: $hostname}'

    The script is written to a temporary file and run by the interpreter
    named on its #! line, or by /bin/sh when there is none.
    """

    kind = "shell"

    def __init__(self, script: str, timeout: Optional[float] = None):
        if not script.strip():
            raise ValueError("shell hook needs a script")
        self.script = script
        self.timeout = timeout
        self.interpreter = self._interpreter(script)

    @staticmethod
    def _interpreter(script: str) -> List[str]:
        first = script.lstrip().splitlines()[0]
        if first.startswith("#!"):
            argv = shlex.split(first[2:])
            if argv:
                return argv
        return [DEFAULT_INTERPRETER]

    def execute(self, record: Dict[str, Any]) -> Dict[str, Any]:
        fd, path = tempfile.mkstemp(prefix="flow-export-hook-", suffix=".sh")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(self.script)
            return exchange_json(self.interpreter + [path], record, timeout=self.timeout)
        finally:
            os.unlink(path)


def register(registry: Any) -> None:
    registry.register(ShellBackend.kind, lambda value, timeout: ShellBackend(str(value), timeout))
