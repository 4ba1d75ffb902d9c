from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ThreatLevel(str, Enum):
    """위협 심각도 (low < medium < high < critical)"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    # str 비교 대신 심각도 순서로 비교
    def __lt__(self, other):
        if not isinstance(other, ThreatLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ThreatLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ThreatLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ThreatLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_RANK = {
    ThreatLevel.LOW: 1,
    ThreatLevel.MEDIUM: 2,
    ThreatLevel.HIGH: 3,
    ThreatLevel.CRITICAL: 4,
}


class ThreatType(str, Enum):
    PORT_SCAN = "port_scan"
    DDOS = "ddos"
    MALWARE = "malware"
    SUSPICIOUS_TRAFFIC = "suspicious_traffic"
    BRUTE_FORCE = "brute_force"
    DATA_EXFILTRATION = "data_exfiltration"


class CamelModel(BaseModel):
    """camelCase 별칭으로 직렬화되는 불변 모델"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Packet(CamelModel):
    """개별 패킷 정보"""
    id: str
    timestamp: int
    source_ip: str
    destination_ip: str
    source_port: int
    destination_port: int
    protocol: str
    size: int
    flags: Optional[Tuple[str, ...]] = None
    threat_level: ThreatLevel = ThreatLevel.LOW
    threat_type: Optional[ThreatType] = None
    country: Optional[str] = None
    isp: Optional[str] = None


class TopTalker(CamelModel):
    ip: str
    packets: int
    bytes: int
    country: Optional[str] = None


class NetworkMetrics(CamelModel):
    """윈도우 기반 네트워크 통계 (매 틱마다 새로 계산)"""
    total_packets: int
    total_bytes: int
    packets_per_second: int
    bytes_per_second: int
    active_connections: int
    unique_ips: int
    protocol_distribution: Dict[str, int]
    threat_counts: Dict[str, int]
    top_talkers: Tuple[TopTalker, ...]
    bandwidth_utilization: float
    latency: float
    packet_loss: float


class ThreatAlert(CamelModel):
    """위협 알림"""
    id: str
    timestamp: int
    type: str
    severity: ThreatLevel
    source_ip: str
    destination_ip: str
    description: str
    recommendation: str
    packets: Tuple[Packet, ...]


class NetworkInterface(BaseModel):
    """인터페이스 상태 (엔진이 매 틱마다 갱신)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    ip: str
    status: str = "active"
    bytes_in: int = 0
    bytes_out: int = 0
    packets_in: int = 0
    packets_out: int = 0


class TrafficSnapshot(CamelModel):
    """한 틱의 결과"""
    packets: Tuple[Packet, ...]
    metrics: NetworkMetrics
    alerts: Tuple[ThreatAlert, ...]
    interfaces: Tuple[NetworkInterface, ...]


class CapturedPacket(CamelModel):
    """캡처 브리지가 전송하는 패킷"""
    timestamp: int
    size: int
    source_ip: str
    destination_ip: str
    protocol: str
    threat_level: ThreatLevel = ThreatLevel.LOW
    threat_type: Optional[ThreatType] = None
    country: str = "Unknown"
    isp: str = "Unknown"


class CaptureMessage(CamelModel):
    packets: List[CapturedPacket]
