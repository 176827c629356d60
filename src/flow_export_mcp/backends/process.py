from __future__ import annotations

import json
import subprocess
from typing import Any, Dict, List, Optional


def exchange_json(argv: List[str], record: Dict[str, Any], timeout: Optional[float] = None) -> Dict[str, Any]:
    """
    Run argv, write record as JSON to stdin, read a JSON object from stdout.

    Failures raise:
      subprocess.TimeoutExpired when timeout is set and exceeded
      RuntimeError on a non zero exit status
      ValueError when stdout is not a JSON object
    """
    payload = json.dumps(record, separators=(",", ":")).encode("utf-8")
    proc = subprocess.run(
        argv,
        input=payload,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=timeout,
        check=False,
    )

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise RuntimeError(f"exit status {proc.returncode}: {stderr[:200]}")

    out = json.loads(proc.stdout.decode("utf-8"))
    if not isinstance(out, dict):
        raise ValueError(f"expected JSON object on stdout, got {type(out).__name__}")
    return out
