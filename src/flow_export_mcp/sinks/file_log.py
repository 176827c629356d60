from __future__ import annotations

import json
import os
from typing import Any, Mapping


class FileLogSink:
    """
    Appends one JSON object per line to a file.

    The file is opened per write so log rotation tools can move it away
    between export cycles.
    """

    def __init__(self, path: str):
        self.path = path
        self.written = 0

    def write(self, record: Mapping[str, Any]) -> None:
        line = json.dumps(record, separators=(",", ":"), sort_keys=True, default=str)
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        self.written += 1

    def close(self) -> None:
        pass
