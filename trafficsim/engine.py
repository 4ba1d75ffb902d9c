from typing import Optional, Tuple
import logging
import random
import threading

from trafficsim.alerts import AlertGenerator
from trafficsim.classifier import ThreatClassifier
from trafficsim.config import EngineConfig
from trafficsim.generator import PacketGenerator, RandomSource, current_millis
from trafficsim.history import BoundedHistory
from trafficsim.interfaces import InterfaceStatsUpdater, build_interfaces
from trafficsim.metrics import MetricsAggregator
from trafficsim.models import NetworkInterface, Packet, ThreatAlert, TrafficSnapshot

logger = logging.getLogger(__name__)


class TrafficEngine:
    """합성 트래픽 엔진

    tick() 한 번 = 생성 → 분류 → 저장 → 알림 → 인터페이스 갱신 → 메트릭 계산.
    틱은 내부 락으로 직렬화되므로 한 번에 하나의 틱만 실행된다.
    틱 주기는 외부 스케줄러가 결정한다.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[RandomSource] = None, clock=current_millis):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock

        self.generator = PacketGenerator(self.config, self.rng, clock)
        self.classifier = ThreatClassifier(self.config, self.rng)
        self.aggregator = MetricsAggregator(self.config, self.rng)
        self.alert_generator = AlertGenerator(clock)
        self.interface_updater = InterfaceStatsUpdater(self.config, self.rng)

        self.packet_history: BoundedHistory[Packet] = BoundedHistory(self.config.packet_capacity)
        self.alert_history: BoundedHistory[ThreatAlert] = BoundedHistory(self.config.alert_capacity)
        self._interfaces = build_interfaces(self.config)

        self.total_packets = 0
        self.total_bytes = 0
        self.tick_count = 0
        self.latest: Optional[TrafficSnapshot] = None
        self._lock = threading.Lock()

    @property
    def interfaces(self) -> Tuple[NetworkInterface, ...]:
        """현재 인터페이스 상태의 복사본"""
        return tuple(iface.model_copy() for iface in self._interfaces)

    def generate_batch(self) -> Tuple[Packet, ...]:
        count = self.generator.batch_size()
        return tuple(self.classifier.classify(self.generator.generate()) for _ in range(count))

    def tick(self) -> TrafficSnapshot:
        with self._lock:
            batch = self.generate_batch()

            self.packet_history.extend(batch)
            self.total_packets += len(batch)
            self.total_bytes += sum(p.size for p in batch)

            alert = self.alert_generator.generate(batch)
            if alert is not None:
                self.alert_history.append(alert)
                logger.info(f"⚠️ 위협 알림: {alert.type} {alert.source_ip} -> {alert.destination_ip} [{alert.severity.value}]")

            self.interface_updater.update(self._interfaces, batch)

            metrics = self.aggregator.compute(
                self.packet_history,
                self.clock(),
                total_packets=self.total_packets,
                total_bytes=self.total_bytes,
            )

            self.tick_count += 1
            snapshot = TrafficSnapshot(
                packets=self.packet_history.recent(self.config.packet_view_size),
                metrics=metrics,
                alerts=self.alert_history.recent(self.config.alert_view_size),
                interfaces=self.interfaces,
            )
            self.latest = snapshot
            logger.debug(f"tick {self.tick_count}: {len(batch)} packets, total {self.total_packets}")
            return snapshot

    def reset(self):
        """히스토리와 카운터 초기화"""
        with self._lock:
            logger.info("🔄 통계 초기화")
            self.packet_history.clear()
            self.alert_history.clear()
            self._interfaces = build_interfaces(self.config)
            self.total_packets = 0
            self.total_bytes = 0
            self.tick_count = 0
            self.latest = None
