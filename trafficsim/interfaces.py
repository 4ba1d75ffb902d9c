from typing import List, Optional, Sequence
import math
import random

from trafficsim.config import EngineConfig
from trafficsim.generator import RandomSource
from trafficsim.models import NetworkInterface, Packet


def build_interfaces(config: EngineConfig) -> List[NetworkInterface]:
    return [
        NetworkInterface(name=spec.name, ip=spec.ip, status=spec.status)
        for spec in config.interfaces
    ]


class InterfaceStatsUpdater:
    """배치의 일부를 각 인터페이스에 배분해 카운터 갱신

    인터페이스마다 각 패킷을 독립적으로 샘플링한다. 모든 카운터는 감소하지 않는다.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[RandomSource] = None):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()

    def sample(self, batch: Sequence[Packet]) -> List[Packet]:
        probability = self.config.interface_sample_probability
        return [p for p in batch if self.rng.random() < probability]

    def update(self, interfaces: Sequence[NetworkInterface], batch: Sequence[Packet]) -> None:
        cfg = self.config
        for iface in interfaces:
            sampled = self.sample(batch)
            iface.packets_in += len(sampled)
            iface.packets_out += math.floor(len(sampled) * cfg.packets_out_ratio)
            iface.bytes_in += sum(p.size for p in sampled)
            iface.bytes_out = max(iface.bytes_out, math.floor(iface.bytes_in * cfg.bytes_out_ratio))
