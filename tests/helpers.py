from flow_export_mcp.core.hooks import Hook


class FakeBackend:
    """
    In process backend. fn takes and returns a record dict.
    """

    kind = "fake"

    def __init__(self, fn):
        self.fn = fn
        self.calls = []

    def execute(self, record):
        self.calls.append(dict(record))
        return self.fn(record)


def fake_hook(name, fn):
    return Hook(name=name, backend=FakeBackend(fn))


def make_flows(n, start=0):
    return [{"SourceIPv4Address": "10.0.0.1", "seq": i} for i in range(start, start + n)]
