from typing import Optional, Protocol, Sequence, TypeVar
import random
import time
import uuid

from trafficsim.config import EngineConfig
from trafficsim.models import Packet

T = TypeVar("T")


class RandomSource(Protocol):
    """random.Random 과 호환되는 난수 공급자. [0, 1) 범위의 float 만 필요"""

    def random(self) -> float:
        ...


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    return items[int(rng.random() * len(items))]


def randint_between(rng: RandomSource, low: int, high: int) -> int:
    """[low, high) 범위의 균등 정수"""
    return low + int(rng.random() * (high - low))


def uniform_between(rng: RandomSource, low: float, high: float) -> float:
    return low + rng.random() * (high - low)


def current_millis() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class PacketGenerator:
    """합성 패킷 생성기"""

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[RandomSource] = None, clock=current_millis):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock

    def random_ip(self) -> str:
        return ".".join(str(randint_between(self.rng, 0, 256)) for _ in range(4))

    def random_port(self) -> int:
        if self.rng.random() < self.config.common_port_probability:
            return pick(self.rng, self.config.common_ports)
        return randint_between(self.rng, 0, self.config.max_random_port + 1)

    def random_flags(self):
        return tuple(
            flag for flag in self.config.tcp_flags
            if self.rng.random() < self.config.flag_probability
        )

    def generate(self) -> Packet:
        """분류 전 패킷 하나 생성 (threat_level=low, threat_type=None)"""
        cfg = self.config
        protocol = pick(self.rng, cfg.protocols)
        source_ip = self.random_ip()
        destination_ip = self.random_ip()
        source_port = self.random_port()
        destination_port = self.random_port()
        size = randint_between(self.rng, cfg.size_min, cfg.size_max)
        country = pick(self.rng, cfg.countries)
        isp = pick(self.rng, cfg.isps)
        flags = self.random_flags() if protocol == "TCP" else None

        return Packet(
            id=new_id(),
            timestamp=self.clock(),
            source_ip=source_ip,
            destination_ip=destination_ip,
            source_port=source_port,
            destination_port=destination_port,
            protocol=protocol,
            size=size,
            flags=flags,
            country=country,
            isp=isp,
        )

    def batch_size(self) -> int:
        return randint_between(self.rng, self.config.batch_min, self.config.batch_max)
