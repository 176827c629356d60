import pytest

from flow_export_mcp.core.config import Config
from flow_export_mcp.core.errors import InvalidFlowFileError, MessageLengthError, UnknownTemplateError
from flow_export_mcp.core.fragment import fragment, next_sequence_number
from flow_export_mcp.core.models import FlowFile, FlowFileSet
from tests.helpers import make_flows


def _counts(msgs):
    return [m.flow_count() for m in msgs]


def test_twelve_flows_into_three_messages(config):
    ff = FlowFile(flow_sets=[FlowFileSet(template_id=1001, flows=make_flows(12))])
    msgs = fragment(ff, config, seqnum_start=0)

    assert _counts(msgs) == [5, 5, 2]
    assert [m.header.sequence_number for m in msgs] == [0, 5, 10]
    assert next_sequence_number(msgs, 0) == 12
    assert all(m.flow_sets[0].set_id == 1001 for m in msgs)
    assert all(len(m.flow_sets) == 1 for m in msgs)


@pytest.mark.parametrize("n", [1, 4, 5, 6, 10, 11, 37])
def test_chunks_reassemble_in_order(config, n):
    flows = make_flows(n)
    msgs = fragment(FlowFile(flow_sets=[FlowFileSet(1001, flows)]), config)

    joined = [f for m in msgs for f in m.flow_sets[0].flows]
    assert joined == flows

    counts = _counts(msgs)
    assert all(0 < c <= 5 for c in counts)
    assert counts[-1] == (n % 5 or 5)


def test_sequence_numbers_span_groups(config):
    # 1001 fits 5 records (8 bytes), 1002 fits 8 records (5 bytes)
    ff = FlowFile(
        flow_sets=[
            FlowFileSet(1001, make_flows(7)),
            FlowFileSet(1002, make_flows(9, start=100)),
        ]
    )
    msgs = fragment(ff, config, seqnum_start=40)

    assert _counts(msgs) == [5, 2, 8, 1]
    assert [m.flow_sets[0].set_id for m in msgs] == [1001, 1001, 1002, 1002]

    seqs = [m.header.sequence_number for m in msgs]
    assert seqs[0] == 40
    for prev, cur, m in zip(seqs, seqs[1:], msgs):
        assert cur - prev == m.flow_count()
    assert next_sequence_number(msgs, 40) == 56


def test_empty_group_yields_no_message(config):
    ff = FlowFile(flow_sets=[FlowFileSet(1001, []), FlowFileSet(1002, make_flows(1))])
    msgs = fragment(ff, config, seqnum_start=3)
    assert len(msgs) == 1
    assert msgs[0].header.sequence_number == 3


def test_sequence_number_wraps_at_32_bits(config):
    ff = FlowFile(flow_sets=[FlowFileSet(1001, make_flows(6))])
    msgs = fragment(ff, config, seqnum_start=(1 << 32) - 2)
    assert [m.header.sequence_number for m in msgs] == [(1 << 32) - 2, 3]


def test_unknown_template_aborts(config):
    ff = FlowFile(flow_sets=[FlowFileSet(1001, make_flows(2)), FlowFileSet(77, make_flows(2))])
    with pytest.raises(UnknownTemplateError):
        fragment(ff, config)


def test_no_capacity_is_rejected():
    cfg = Config.from_dict(
        {"maxIpfixMessageLen": 27, "templates": [{"id": 300, "template": [{"name": "OctetDeltaCount"}]}]}
    )
    ff = FlowFile(flow_sets=[FlowFileSet(300, make_flows(3))])
    with pytest.raises(MessageLengthError) as exc:
        fragment(ff, cfg)
    assert exc.value.template_id == 300


def test_flow_file_from_dict():
    ff = FlowFile.from_dict({"flowsets": [{"templateId": 1001, "flows": [{"a": 1}, {"a": 2}]}]})
    assert ff.flow_sets[0].template_id == 1001
    assert ff.flow_count() == 2


@pytest.mark.parametrize(
    "flowsets",
    [
        [{"templateId": 1001, "flows": []}, {"flows": [{"a": 1}]}],
        [{"templateId": 1001, "flows": []}, "1002"],
        [{"templateId": 1001, "flows": []}, {"templateId": "abc"}],
    ],
)
def test_malformed_flowset_is_rejected(flowsets):
    with pytest.raises(InvalidFlowFileError) as exc:
        FlowFile.from_dict({"flowsets": flowsets})
    assert exc.value.details == {"index": 1}
