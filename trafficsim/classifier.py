from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import random

from trafficsim.config import EngineConfig
from trafficsim.generator import RandomSource
from trafficsim.models import Packet, ThreatLevel, ThreatType

Verdict = Tuple[ThreatLevel, Optional[ThreatType]]


@dataclass(frozen=True)
class ThreatRule:
    """(조건, 결과) 쌍. 조건은 패킷과 난수 공급자를 받는다"""
    name: str
    predicate: Callable[[Packet, RandomSource], bool]
    level: ThreatLevel
    threat_type: Optional[ThreatType]


def build_rules(config: EngineConfig) -> List[ThreatRule]:
    """평가 순서대로 정렬된 규칙 목록

    조건 안의 난수 추첨은 앞쪽 조건이 참일 때만 일어난다 (short-circuit).
    """
    return [
        ThreatRule(
            "brute_force",
            lambda p, rng: (p.destination_port == config.brute_force_port
                            and rng.random() < config.brute_force_probability),
            ThreatLevel.HIGH,
            ThreatType.BRUTE_FORCE,
        ),
        ThreatRule(
            "ddos",
            lambda p, rng: p.protocol == "ICMP" and p.size > config.ddos_min_size,
            ThreatLevel.MEDIUM,
            ThreatType.DDOS,
        ),
        ThreatRule(
            "malware",
            lambda p, rng: (p.source_port < config.privileged_port_limit
                            and p.destination_port < config.privileged_port_limit
                            and rng.random() < config.malware_probability),
            ThreatLevel.CRITICAL,
            ThreatType.MALWARE,
        ),
        ThreatRule(
            "data_exfiltration",
            lambda p, rng: (p.size > config.exfiltration_min_size
                            and rng.random() < config.exfiltration_probability),
            ThreatLevel.MEDIUM,
            ThreatType.DATA_EXFILTRATION,
        ),
        ThreatRule(
            "suspicious_traffic",
            lambda p, rng: rng.random() < config.suspicious_probability,
            ThreatLevel.LOW,
            ThreatType.SUSPICIOUS_TRAFFIC,
        ),
    ]


class ThreatClassifier:
    """규칙 기반 위협 분류기 (첫 번째로 일치하는 규칙 적용)

    실제 침입 탐지가 아닌 시연용 휴리스틱이다.
    """

    default_verdict: Verdict = (ThreatLevel.LOW, None)

    def __init__(self, config: Optional[EngineConfig] = None,
                 rng: Optional[RandomSource] = None):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()
        self.rules = build_rules(self.config)

    def evaluate(self, packet: Packet) -> Verdict:
        for rule in self.rules:
            if rule.predicate(packet, self.rng):
                return rule.level, rule.threat_type
        return self.default_verdict

    def classify(self, packet: Packet) -> Packet:
        """분류 결과가 반영된 새 패킷 반환"""
        level, threat_type = self.evaluate(packet)
        return packet.model_copy(update={"threat_level": level, "threat_type": threat_type})
