from typing import Dict, Iterable, Optional
import math
import random

from trafficsim.config import EngineConfig
from trafficsim.generator import RandomSource, randint_between, uniform_between
from trafficsim.models import NetworkMetrics, Packet, TopTalker


def round_half_up(value: float) -> int:
    """0.5 는 올림 (음수가 아닌 값 전용)"""
    return int(math.floor(value + 0.5))


class MetricsAggregator:
    """패킷 히스토리에서 윈도우 기반 통계 계산"""

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[RandomSource] = None):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()

    def recent_packets(self, packets: Iterable[Packet], now: int):
        window = self.config.window_ms
        return [p for p in packets if now - p.timestamp < window]

    def compute(self, packets: Iterable[Packet], now: int,
                total_packets: Optional[int] = None,
                total_bytes: Optional[int] = None) -> NetworkMetrics:
        """메트릭 스냅샷 생성

        total_packets/total_bytes 가 주어지지 않으면 히스토리 전체로 계산한다.
        """
        cfg = self.config
        history = list(packets)
        recent = self.recent_packets(history, now)
        window_seconds = cfg.window_ms / 1000

        if total_packets is None:
            total_packets = len(history)
        if total_bytes is None:
            total_bytes = sum(p.size for p in history)

        protocol_distribution: Dict[str, int] = {}
        threat_counts: Dict[str, int] = {}
        # 딕셔너리 삽입 순서 = 처음 나타난 순서
        talkers: Dict[str, Dict] = {}
        recent_bytes = 0

        for packet in recent:
            recent_bytes += packet.size
            protocol_distribution[packet.protocol] = protocol_distribution.get(packet.protocol, 0) + 1
            if packet.threat_type is not None:
                key = packet.threat_type.value
                threat_counts[key] = threat_counts.get(key, 0) + 1

            talker = talkers.get(packet.source_ip)
            if talker is None:
                talker = talkers[packet.source_ip] = {
                    "packets": 0,
                    "bytes": 0,
                    "country": packet.country,
                }
            talker["packets"] += 1
            talker["bytes"] += packet.size

        # sorted 는 안정 정렬이므로 동률이면 처음 나타난 순서 유지
        ranked = sorted(talkers.items(), key=lambda item: item[1]["bytes"], reverse=True)
        top_talkers = tuple(
            TopTalker(ip=ip, **data) for ip, data in ranked[:cfg.top_talkers_limit]
        )

        return NetworkMetrics(
            total_packets=total_packets,
            total_bytes=total_bytes,
            packets_per_second=round_half_up(len(recent) / window_seconds),
            bytes_per_second=round_half_up(recent_bytes / window_seconds),
            active_connections=randint_between(self.rng, cfg.connections_min, cfg.connections_max),
            unique_ips=len(talkers),
            protocol_distribution=protocol_distribution,
            threat_counts=threat_counts,
            top_talkers=top_talkers,
            bandwidth_utilization=min(
                cfg.utilization_cap,
                uniform_between(self.rng, cfg.utilization_min, cfg.utilization_max),
            ),
            latency=uniform_between(self.rng, cfg.latency_min, cfg.latency_max),
            packet_loss=uniform_between(self.rng, 0.0, cfg.packet_loss_max),
        )
