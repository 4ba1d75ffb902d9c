from typing import Callable, Dict, Iterable, Optional

from trafficsim.generator import current_millis, new_id
from trafficsim.models import Packet, ThreatAlert, ThreatLevel, ThreatType

# 위협 유형별 설명 템플릿
DESCRIPTIONS: Dict[ThreatType, Callable[[Packet], str]] = {
    ThreatType.PORT_SCAN: lambda p: f"Port scanning detected from {p.source_ip}",
    ThreatType.DDOS: lambda p: f"Potential DDoS attack detected targeting {p.destination_ip}",
    ThreatType.MALWARE: lambda p: (
        f"Malware communication detected between {p.source_ip} and {p.destination_ip}"
    ),
    ThreatType.SUSPICIOUS_TRAFFIC: lambda p: f"Suspicious traffic pattern detected from {p.source_ip}",
    ThreatType.BRUTE_FORCE: lambda p: (
        f"Brute force attack detected against {p.destination_ip}:{p.destination_port}"
    ),
    ThreatType.DATA_EXFILTRATION: lambda p: f"Potential data exfiltration detected from {p.source_ip}",
}

RECOMMENDATIONS: Dict[ThreatType, str] = {
    ThreatType.PORT_SCAN: "Block source IP and monitor for additional scanning attempts",
    ThreatType.DDOS: "Implement rate limiting and consider DDoS protection services",
    ThreatType.MALWARE: "Isolate affected systems and run full antivirus scan",
    ThreatType.SUSPICIOUS_TRAFFIC: "Monitor traffic patterns and consider blocking if confirmed malicious",
    ThreatType.BRUTE_FORCE: "Implement account lockout policies and consider IP blocking",
    ThreatType.DATA_EXFILTRATION: "Review data access logs and implement data loss prevention measures",
}

UNKNOWN_TYPE = "unknown"
UNKNOWN_DESCRIPTION = "Unknown threat detected"
UNKNOWN_RECOMMENDATION = "Investigate further"

ALERT_MIN_LEVEL = ThreatLevel.HIGH


def qualifies(packet: Packet) -> bool:
    return packet.threat_level >= ALERT_MIN_LEVEL


class AlertGenerator:
    """새로 생성된 배치에서 최대 하나의 알림 생성"""

    def __init__(self, clock=current_millis):
        self.clock = clock

    def build_alert(self, packet: Packet) -> ThreatAlert:
        threat_type = packet.threat_type
        describe = DESCRIPTIONS.get(threat_type)
        return ThreatAlert(
            id=new_id(),
            timestamp=self.clock(),
            type=threat_type.value if threat_type is not None else UNKNOWN_TYPE,
            severity=packet.threat_level,
            source_ip=packet.source_ip,
            destination_ip=packet.destination_ip,
            description=describe(packet) if describe else UNKNOWN_DESCRIPTION,
            recommendation=RECOMMENDATIONS.get(threat_type, UNKNOWN_RECOMMENDATION),
            packets=(packet,),
        )

    def generate(self, batch: Iterable[Packet]) -> Optional[ThreatAlert]:
        """생성 순서상 첫 번째 high/critical 패킷으로 알림 생성, 없으면 None"""
        for packet in batch:
            if qualifies(packet):
                return self.build_alert(packet)
        return None
