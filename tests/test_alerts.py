import pytest

from conftest import FakeClock, make_packet
from trafficsim.alerts import AlertGenerator, DESCRIPTIONS, RECOMMENDATIONS
from trafficsim.models import ThreatLevel, ThreatType


@pytest.fixture
def generator():
    return AlertGenerator(FakeClock(123))


def test_no_alert_for_low_and_medium(generator):
    batch = [
        make_packet(threat_level=ThreatLevel.LOW),
        make_packet(threat_level=ThreatLevel.MEDIUM, threat_type=ThreatType.DDOS),
    ]
    assert generator.generate(batch) is None


def test_first_qualifying_packet_wins(generator):
    first = make_packet(id="a", threat_level=ThreatLevel.HIGH, threat_type=ThreatType.BRUTE_FORCE,
                        destination_ip="10.1.1.1", destination_port=22)
    second = make_packet(id="b", threat_level=ThreatLevel.CRITICAL, threat_type=ThreatType.MALWARE)
    batch = [make_packet(), first, second]

    alert = generator.generate(batch)

    assert alert.type == "brute_force"
    assert alert.severity == ThreatLevel.HIGH
    assert alert.packets == (first,)
    assert alert.timestamp == 123
    assert alert.description == "Brute force attack detected against 10.1.1.1:22"
    assert alert.recommendation == "Implement account lockout policies and consider IP blocking"


def test_critical_malware_alert(generator):
    packet = make_packet(threat_level=ThreatLevel.CRITICAL, threat_type=ThreatType.MALWARE,
                         source_ip="1.2.3.4", destination_ip="5.6.7.8")
    alert = generator.generate([packet])
    assert alert.severity == ThreatLevel.CRITICAL
    assert alert.source_ip == "1.2.3.4"
    assert alert.destination_ip == "5.6.7.8"
    assert alert.description == "Malware communication detected between 1.2.3.4 and 5.6.7.8"


def test_unknown_type_falls_back(generator):
    packet = make_packet(threat_level=ThreatLevel.HIGH, threat_type=None)
    alert = generator.generate([packet])
    assert alert.type == "unknown"
    assert alert.description == "Unknown threat detected"
    assert alert.recommendation == "Investigate further"


def test_tables_cover_every_threat_type():
    assert set(DESCRIPTIONS) == set(ThreatType)
    assert set(RECOMMENDATIONS) == set(ThreatType)


def test_threat_levels_are_ordered_by_severity():
    assert ThreatLevel.LOW < ThreatLevel.MEDIUM < ThreatLevel.HIGH < ThreatLevel.CRITICAL
    assert ThreatLevel.CRITICAL >= ThreatLevel.HIGH
    assert ThreatLevel.MEDIUM <= ThreatLevel.MEDIUM
    assert not ThreatLevel.LOW > ThreatLevel.MEDIUM
    assert max(ThreatLevel) == ThreatLevel.CRITICAL
    assert sorted([ThreatLevel.HIGH, ThreatLevel.LOW, ThreatLevel.CRITICAL, ThreatLevel.MEDIUM]) == [
        ThreatLevel.LOW, ThreatLevel.MEDIUM, ThreatLevel.HIGH, ThreatLevel.CRITICAL,
    ]
    # 값과 직렬화는 그대로 문자열
    assert ThreatLevel.HIGH == "high"
