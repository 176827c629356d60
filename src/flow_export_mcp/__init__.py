"""
flow_export_mcp

IPFIX export assembly for a flow capture agent, exposed as an MCP server.

Core ideas
1. Templates name fields from a fixed IPFIX field registry
2. Flow batches are fragmented into messages that fit the collector MTU
3. Log outputs rewrite each record through an ordered hook chain
"""

__all__ = ["core", "backends", "codec", "sinks", "cli"]
