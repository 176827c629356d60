from __future__ import annotations

from typing import List

from .config import Config
from .models import FlowDataMessage, FlowFile, FlowSet, Header
from .templates import records_per_message, template_length

# The IPFIX sequence number is an unsigned 32 bit counter.
SEQUENCE_MODULO = 1 << 32


def fragment(flow_file: FlowFile, config: Config, seqnum_start: int = 0) -> List[FlowDataMessage]:
    """
    Split a flow file into data messages that fit maxIpfixMessageLen.

    A large batch does not fit in one UDP datagram, so every flow set is
    cut into chunks of at most N records:

      N = (maxIpfixMessageLen - 20) // record_length

    20 is the message header (16) plus the set header (4).

    Ordering:
      Groups are processed in file order and flows keep their order.
      Each message carries one flow set of a single template.

    Sequence numbers:
      The header carries the number of data records sent before this
      message, as IPFIX requires. It starts at seqnum_start and grows by
      the record count of each message, across all groups.

    Empty groups produce no message.
    """
    seq = seqnum_start % SEQUENCE_MODULO
    msgs: List[FlowDataMessage] = []

    for fs in flow_file.flow_sets:
        record_len = template_length(fs.template_id, config)
        n_flows = records_per_message(record_len, fs.template_id, config)

        flows = fs.flows
        for start in range(0, len(flows), n_flows):
            chunk = list(flows[start : start + n_flows])
            msgs.append(
                FlowDataMessage(
                    header=Header(sequence_number=seq),
                    flow_sets=[FlowSet(set_id=fs.template_id, flows=chunk)],
                )
            )
            seq = (seq + len(chunk)) % SEQUENCE_MODULO

    return msgs


def next_sequence_number(messages: List[FlowDataMessage], seqnum_start: int = 0) -> int:
    """
    Sequence number to pass as seqnum_start for the next batch.
    """
    return (seqnum_start + sum(m.flow_count() for m in messages)) % SEQUENCE_MODULO
