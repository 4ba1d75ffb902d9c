import random

from conftest import ScriptedRandom, make_packet
from trafficsim.config import EngineConfig
from trafficsim.interfaces import InterfaceStatsUpdater, build_interfaces


def test_default_interfaces(config):
    interfaces = build_interfaces(config)
    assert [(i.name, i.ip, i.status) for i in interfaces] == [
        ("eth0", "192.168.1.100", "active"),
        ("wlan0", "10.0.0.50", "active"),
        ("lo", "127.0.0.1", "active"),
    ]
    assert all(i.bytes_in == i.bytes_out == i.packets_in == i.packets_out == 0 for i in interfaces)


def test_update_with_scripted_sampling(config):
    interfaces = build_interfaces(config)[:1]
    batch = [make_packet(size=100), make_packet(size=200), make_packet(size=300)]
    # 1, 3 번째 패킷만 샘플링
    updater = InterfaceStatsUpdater(config, ScriptedRandom([0.1, 0.5, 0.2]))

    updater.update(interfaces, batch)

    eth0 = interfaces[0]
    assert eth0.packets_in == 2
    assert eth0.bytes_in == 400
    assert eth0.packets_out == 1
    assert eth0.bytes_out == 360


def test_bytes_out_tracks_cumulative_bytes_in(config):
    interfaces = build_interfaces(config)[:1]
    updater = InterfaceStatsUpdater(config, ScriptedRandom(default=0.0))
    updater.update(interfaces, [make_packet(size=1000)])
    updater.update(interfaces, [make_packet(size=1000)])
    assert interfaces[0].bytes_in == 2000
    assert interfaces[0].bytes_out == 1800
    assert interfaces[0].packets_out == 0


def test_counters_never_decrease():
    config = EngineConfig()
    interfaces = build_interfaces(config)
    updater = InterfaceStatsUpdater(config, random.Random(11))
    previous = [(0, 0, 0, 0)] * len(interfaces)
    for round_ in range(100):
        batch = [make_packet(size=64 + round_ * 10 + i) for i in range(random.Random(round_).randint(0, 14))]
        updater.update(interfaces, batch)
        current = [(i.bytes_in, i.bytes_out, i.packets_in, i.packets_out) for i in interfaces]
        for before, after in zip(previous, current):
            assert all(b <= a for b, a in zip(before, after))
        previous = current
