import random

from conftest import make_packet
from trafficsim.config import EngineConfig
from trafficsim.metrics import MetricsAggregator, round_half_up
from trafficsim.models import ThreatType

NOW = 1_700_000_000_000


def aggregator():
    return MetricsAggregator(EngineConfig(), random.Random(0))


def test_single_source_top_talker():
    packets = [
        make_packet(id=f"p{i}", source_ip="9.9.9.9", size=size, timestamp=NOW - 1000)
        for i, size in enumerate([100, 200, 300])
    ]
    metrics = aggregator().compute(packets, NOW)

    talker = metrics.top_talkers[0]
    assert (talker.ip, talker.packets, talker.bytes) == ("9.9.9.9", 3, 600)
    assert talker.country == "US"
    assert metrics.unique_ips == 1
    assert metrics.total_packets == 3
    assert metrics.total_bytes == 600


def test_empty_history():
    metrics = aggregator().compute([], NOW)
    assert metrics.packets_per_second == 0
    assert metrics.bytes_per_second == 0
    assert metrics.unique_ips == 0
    assert metrics.top_talkers == ()
    assert metrics.protocol_distribution == {}
    assert metrics.threat_counts == {}
    assert metrics.total_packets == 0


def test_stale_history_is_outside_window():
    packets = [make_packet(timestamp=NOW - 60_000), make_packet(timestamp=NOW - 120_000)]
    metrics = aggregator().compute(packets, NOW)
    assert metrics.packets_per_second == 0
    assert metrics.bytes_per_second == 0
    assert metrics.unique_ips == 0
    assert metrics.top_talkers == ()
    # 누적 카운터는 윈도우와 무관
    assert metrics.total_packets == 2
    assert metrics.total_bytes == 200


def test_top_talkers_sorted_with_first_seen_ties():
    packets = [
        make_packet(source_ip="1.1.1.1", size=500, timestamp=NOW),
        make_packet(source_ip="2.2.2.2", size=900, timestamp=NOW),
        make_packet(source_ip="3.3.3.3", size=500, timestamp=NOW),
        make_packet(source_ip="4.4.4.4", size=100, timestamp=NOW),
        make_packet(source_ip="5.5.5.5", size=500, timestamp=NOW),
    ]
    ips = [t.ip for t in aggregator().compute(packets, NOW).top_talkers]
    assert ips == ["2.2.2.2", "1.1.1.1", "3.3.3.3", "5.5.5.5", "4.4.4.4"]


def test_top_talkers_limited_to_ten():
    packets = [make_packet(source_ip=f"10.0.0.{i}", size=100 + i, timestamp=NOW) for i in range(25)]
    talkers = aggregator().compute(packets, NOW).top_talkers
    assert len(talkers) == 10
    assert [t.bytes for t in talkers] == sorted((t.bytes for t in talkers), reverse=True)
    assert talkers[0].ip == "10.0.0.24"


def test_country_of_first_occurrence():
    packets = [
        make_packet(source_ip="7.7.7.7", country="DE", timestamp=NOW),
        make_packet(source_ip="7.7.7.7", country="JP", timestamp=NOW),
    ]
    assert aggregator().compute(packets, NOW).top_talkers[0].country == "DE"


def test_distributions_and_rates():
    packets = [
        make_packet(protocol="TCP", size=3000, timestamp=NOW, threat_type=ThreatType.DDOS),
        make_packet(protocol="TCP", size=3000, timestamp=NOW - 10),
        make_packet(protocol="DNS", size=3000, timestamp=NOW - 20, threat_type=ThreatType.DDOS),
        make_packet(protocol="SSH", size=0, timestamp=NOW - 90_000, threat_type=ThreatType.MALWARE),
    ]
    metrics = aggregator().compute(packets, NOW)
    assert metrics.protocol_distribution == {"TCP": 2, "DNS": 1}
    assert metrics.threat_counts == {"ddos": 2}
    assert metrics.packets_per_second == 0
    assert metrics.bytes_per_second == 150


def test_lifetime_totals_override_history():
    metrics = aggregator().compute([make_packet(timestamp=NOW)], NOW, total_packets=5000, total_bytes=123)
    assert metrics.total_packets == 5000
    assert metrics.total_bytes == 123


def test_gauges_within_ranges():
    agg = aggregator()
    for _ in range(300):
        metrics = agg.compute([], NOW)
        assert 100 <= metrics.active_connections < 600
        assert 10 <= metrics.bandwidth_utilization <= 95
        assert 5 <= metrics.latency < 55
        assert 0 <= metrics.packet_loss < 2


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.49) == 1
    assert round_half_up(0) == 0
