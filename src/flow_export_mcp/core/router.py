from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from flow_export_mcp.codec.ipfix import IPFIXEncoder, encode_template_message
from flow_export_mcp.sinks.collector_udp import UdpCollectorTransport
from flow_export_mcp.sinks.file_log import FileLogSink

from .config import CollectorOutput, Config, LogOutput
from .errors import FlowEncodeError, HookExecutionError
from .fragment import fragment, next_sequence_number
from .hooks import HookChain
from .logging import get_logger
from .models import FlowFile
from .templates import build_template_message


class Transport(Protocol):
    def send(self, datagram: bytes) -> None:
        ...

    def close(self) -> None:
        ...


class RecordSink(Protocol):
    def write(self, record: Mapping[str, Any]) -> None:
        ...

    def close(self) -> None:
        ...


def _default_transport(output: CollectorOutput) -> Transport:
    return UdpCollectorTransport(output.remote_address, output.local_address)


def _default_sink(output: LogOutput) -> RecordSink:
    return FileLogSink(output.file)


class OutputRouter:
    """
    Sends one export cycle to every configured output.

    Collector outputs
      Receive the fragmented data messages, encoded as IPFIX datagrams.
      A socket error is logged and counted. Other outputs still receive
      the batch. A flow value that cannot be encoded fails every
      collector for this batch, but log outputs still run.

    Log outputs
      Every flow runs through the output's hook chain, then is written.
      A hook failure drops that record for that output only. A write
      error stops that output for the rest of the batch.

    Factories are injectable so tests can capture datagrams and records
    without sockets or files.
    """

    def __init__(
        self,
        config: Config,
        transport_factory: Optional[Callable[[CollectorOutput], Transport]] = None,
        sink_factory: Optional[Callable[[LogOutput], RecordSink]] = None,
    ):
        self.config = config
        self.encoder = IPFIXEncoder(config)
        self.log = get_logger(__name__)

        transport_factory = transport_factory or _default_transport
        sink_factory = sink_factory or _default_sink

        self._collectors: List[Tuple[CollectorOutput, Transport]] = [
            (o, transport_factory(o)) for o in config.collectors()
        ]
        self._logs: List[Tuple[LogOutput, HookChain, RecordSink]] = [
            (o, o.chain(), sink_factory(o)) for o in config.logs()
        ]

    def export(self, flow_file: FlowFile, seqnum_start: int = 0) -> Dict[str, Any]:
        messages = fragment(flow_file, self.config, seqnum_start)
        next_seq = next_sequence_number(messages, seqnum_start)
        self.log.debug(
            "flow_messages_built",
            messages=len(messages),
            flows=flow_file.flow_count(),
            next_sequence_number=next_seq,
        )

        results: List[Dict[str, Any]] = []

        if self._collectors:
            try:
                datagrams = [self.encoder.encode_flow_data_message(m) for m in messages]
            except FlowEncodeError as exc:
                self.log.error("flow_encode_failed", template_id=exc.template_id, field=exc.field, reason=exc.reason)
                for output, _ in self._collectors:
                    results.append({"output": output.label, "sent": 0, "error": exc.message})
            else:
                for output, transport in self._collectors:
                    results.append(self._send(output, transport, datagrams))

        for output, chain, sink in self._logs:
            results.append(self._write_log(output, chain, sink, flow_file))

        return {
            "messages": len(messages),
            "flows": flow_file.flow_count(),
            "next_sequence_number": next_seq,
            "outputs": results,
        }

    def send_templates(self) -> Dict[str, Any]:
        """
        Send the template message to every collector.

        Called by the agent on timerTemplateFlushSeconds so collectors
        that restarted learn the templates again.
        """
        datagram = encode_template_message(build_template_message(self.config))
        results = [self._send(o, t, [datagram]) for o, t in self._collectors]
        return {"templates": len(self.config.templates), "outputs": results}

    def _send(self, output: CollectorOutput, transport: Transport, datagrams: List[bytes]) -> Dict[str, Any]:
        sent = 0
        error = None
        try:
            for d in datagrams:
                transport.send(d)
                sent += 1
        except OSError as exc:
            error = str(exc)
            self.log.error("collector_send_failed", output=output.label, sent=sent, error=error)
        else:
            self.log.debug("collector_send", output=output.label, sent=sent)

        row: Dict[str, Any] = {"output": output.label, "sent": sent}
        if error is not None:
            row["error"] = error
        return row

    def _write_log(self, output: LogOutput, chain: HookChain, sink: RecordSink, flow_file: FlowFile) -> Dict[str, Any]:
        written = 0
        dropped = 0

        for fs in flow_file.flow_sets:
            for flow in fs.flows:
                try:
                    record = chain.run(flow)
                except HookExecutionError as exc:
                    dropped += 1
                    self.log.warning(
                        "hook_failed",
                        output=output.label,
                        hook=exc.hook_name,
                        reason=exc.reason,
                    )
                    continue
                try:
                    sink.write(record)
                except OSError as exc:
                    self.log.error("log_write_failed", output=output.label, written=written, error=str(exc))
                    return {
                        "output": output.label,
                        "written": written,
                        "dropped": dropped,
                        "error": str(exc),
                    }
                written += 1

        return {"output": output.label, "written": written, "dropped": dropped}

    def close(self) -> None:
        for _, transport in self._collectors:
            transport.close()
        for _, _, sink in self._logs:
            sink.close()
