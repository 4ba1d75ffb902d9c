from scapy.all import sniff, IP, TCP, UDP, ICMP
import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Optional

from trafficsim.models import CaptureMessage, CapturedPacket, ThreatLevel, ThreatType

logger = logging.getLogger(__name__)

Broadcast = Callable[[dict], Awaitable[int]]


def classify_captured(protocol: str, destination_ip: str):
    """브리지 전용 단일 규칙: TCP 이고 목적지가 .1 로 끝나면 medium/port_scan"""
    if protocol == "TCP" and destination_ip.endswith(".1"):
        return ThreatLevel.MEDIUM, ThreatType.PORT_SCAN
    return ThreatLevel.LOW, None


def decode_packet(packet) -> Optional[CapturedPacket]:
    """scapy 패킷을 CapturedPacket 으로 변환. IPv4 가 아니면 None"""
    if IP not in packet:
        return None

    ip = packet[IP]
    if TCP in packet:
        protocol = "TCP"
    elif UDP in packet:
        protocol = "UDP"
    elif ICMP in packet:
        protocol = "ICMP"
    else:
        protocol = "OTHER"

    level, threat_type = classify_captured(protocol, ip.dst)
    timestamp = getattr(packet, "time", None)
    return CapturedPacket(
        timestamp=int(float(timestamp) * 1000) if timestamp is not None else int(time.time() * 1000),
        size=len(packet),
        source_ip=ip.src,
        destination_ip=ip.dst,
        protocol=protocol,
        threat_level=level,
        threat_type=threat_type,
    )


class CaptureBridge:
    """실시간 패킷 캡처 → 연결된 모든 클라이언트로 전송

    캡처는 별도 스레드에서 실행되고, 브로드캐스트는 이벤트 루프에서 실행된다.
    """

    def __init__(self, broadcast: Broadcast, interface: Optional[str] = None):
        self.broadcast = broadcast
        self.interface = interface
        self.is_running = False
        self.packet_count = 0
        self.skipped_count = 0
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def build_message(self, packet) -> Optional[dict]:
        captured = decode_packet(packet)
        if captured is None:
            return None
        return CaptureMessage(packets=[captured]).model_dump(mode="json", by_alias=True)

    def packet_callback(self, packet):
        """각 패킷을 처리하는 콜백. 디코딩 실패는 기록 후 건너뛴다"""
        try:
            message = self.build_message(packet)
        except Exception as e:
            self.skipped_count += 1
            logger.warning(f"⚠️ 패킷 디코딩 오류: {e}")
            return

        if message is None:
            self.skipped_count += 1
            return

        self.packet_count += 1
        if self.loop is not None and not self.loop.is_closed():
            future = asyncio.run_coroutine_threadsafe(self.broadcast(message), self.loop)
            future.add_done_callback(self._log_broadcast_error)

    @staticmethod
    def _log_broadcast_error(future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"⚠️ 브로드캐스트 오류: {error}")

    def start_sniffing(self, loop: asyncio.AbstractEventLoop):
        """패킷 캡처 시작"""
        self.loop = loop
        self.is_running = True

        def sniff_thread():
            logger.info(f"📡 패킷 캡처 시작... (인터페이스: {self.interface or '기본'})")
            try:
                sniff(
                    iface=self.interface,
                    prn=self.packet_callback,
                    store=False,
                    stop_filter=lambda x: not self.is_running,
                )
            except PermissionError:
                logger.error("❌ 권한 오류: 관리자 권한으로 실행해주세요! (Linux/Mac: sudo)")
                self.is_running = False
            except Exception as e:
                logger.error(f"❌ 패킷 캡처 오류: {e}")
                self.is_running = False

        thread = threading.Thread(target=sniff_thread, daemon=True)
        thread.start()

    def stop_sniffing(self):
        """패킷 캡처 중지"""
        self.is_running = False
        logger.info("🛑 패킷 캡처 중지")
