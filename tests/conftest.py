import pytest

from flow_export_mcp.core.config import Config
from flow_export_mcp.core.registry import HookBackendRegistry
from tests.helpers import FakeBackend


@pytest.fixture
def config_dict():
    return {
        "maxIpfixMessageLen": 60,
        "timerTemplateFlushSeconds": 60,
        "timerFinishedDrainSeconds": 1,
        "timerForceDrainSeconds": 30,
        "outputs": [],
        "templates": [
            {
                "id": 1001,
                "template": [
                    {"name": "SourceIPv4Address"},
                    {"name": "DestinationIPv4Address"},
                ],
            },
            {
                "id": 1002,
                "template": [
                    {"name": "SourceTransportPort"},
                    {"name": "DestinationTransportPort"},
                    {"name": "ProtocolIdentifier"},
                ],
            },
        ],
    }


@pytest.fixture
def config(config_dict):
    return Config.from_dict(config_dict)


@pytest.fixture
def registry():
    reg = HookBackendRegistry()
    reg.register("fake", lambda value, timeout: FakeBackend(lambda r: dict(r, fake=value)))
    reg.register("other", lambda value, timeout: FakeBackend(lambda r: dict(r, other=value)))
    return reg
