import pytest

from trafficsim.config import EngineConfig
from trafficsim.models import Packet, ThreatLevel


class ScriptedRandom:
    """정해진 순서대로 값을 돌려주고, 다 쓰면 default 를 반복"""

    def __init__(self, values=(), default=0.99):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


class FakeClock:
    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def make_packet(**overrides) -> Packet:
    values = dict(
        id="p1",
        timestamp=1_700_000_000_000,
        source_ip="10.0.0.1",
        destination_ip="10.0.0.2",
        source_port=50000,
        destination_port=50001,
        protocol="UDP",
        size=100,
        threat_level=ThreatLevel.LOW,
        country="US",
        isp="Akamai",
    )
    values.update(overrides)
    return Packet(**values)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def clock():
    return FakeClock()
