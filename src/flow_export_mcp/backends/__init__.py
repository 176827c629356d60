"""
Hook backends run an external program for every log record.

Each backend module exposes a register(registry) function that adds its
configuration key to a HookBackendRegistry.
"""

__all__ = ["command", "shell"]
