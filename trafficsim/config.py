from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Tuple
import os

PROTOCOLS: Tuple[str, ...] = ("TCP", "UDP", "HTTP", "HTTPS", "DNS", "SSH", "FTP", "ICMP")
TCP_FLAGS: Tuple[str, ...] = ("SYN", "ACK", "FIN", "RST", "PSH", "URG")
COMMON_PORTS: Tuple[int, ...] = (80, 443, 22, 21, 25, 53, 110, 143, 993, 995, 3389, 5432, 3306)
COUNTRIES: Tuple[str, ...] = ("US", "CN", "RU", "DE", "GB", "FR", "JP", "KR", "IN", "BR")
ISPS: Tuple[str, ...] = (
    "Cloudflare",
    "Amazon AWS",
    "Google Cloud",
    "Microsoft Azure",
    "DigitalOcean",
    "Akamai",
)


class InterfaceSpec(BaseModel):
    """엔진 시작 시 생성되는 인터페이스 정의"""
    name: str
    ip: str
    status: str = "active"


class EngineConfig(BaseModel):
    """시뮬레이션 엔진의 모든 상수"""

    model_config = {"frozen": True}

    # 버퍼 용량
    packet_capacity: int = Field(1000, gt=0)
    alert_capacity: int = Field(50, gt=0)
    packet_view_size: int = Field(100, gt=0)
    alert_view_size: int = Field(10, gt=0)

    # 메트릭 윈도우
    window_ms: int = Field(60_000, gt=0)
    top_talkers_limit: int = Field(10, gt=0)

    # 틱당 배치 크기 [min, max)
    batch_min: int = Field(5, ge=0)
    batch_max: int = Field(15, gt=0)

    # 패킷 생성
    protocols: Tuple[str, ...] = PROTOCOLS
    tcp_flags: Tuple[str, ...] = TCP_FLAGS
    common_ports: Tuple[int, ...] = COMMON_PORTS
    countries: Tuple[str, ...] = COUNTRIES
    isps: Tuple[str, ...] = ISPS
    common_port_probability: float = Field(0.7, ge=0, le=1)
    max_random_port: int = Field(65535, gt=0)
    flag_probability: float = Field(0.3, ge=0, le=1)
    size_min: int = Field(64, ge=0)
    size_max: int = Field(8256, gt=0)

    # 위협 분류 규칙
    brute_force_port: int = 22
    brute_force_probability: float = Field(0.10, ge=0, le=1)
    ddos_min_size: int = 1000
    privileged_port_limit: int = 1024
    malware_probability: float = Field(0.05, ge=0, le=1)
    exfiltration_min_size: int = 5000
    exfiltration_probability: float = Field(0.08, ge=0, le=1)
    suspicious_probability: float = Field(0.02, ge=0, le=1)

    # 인터페이스 통계
    interface_sample_probability: float = Field(0.3, ge=0, le=1)
    packets_out_ratio: float = Field(0.8, ge=0)
    bytes_out_ratio: float = Field(0.9, ge=0)
    interfaces: Tuple[InterfaceSpec, ...] = (
        InterfaceSpec(name="eth0", ip="192.168.1.100"),
        InterfaceSpec(name="wlan0", ip="10.0.0.50"),
        InterfaceSpec(name="lo", ip="127.0.0.1"),
    )

    # 합성 게이지 범위 [min, max)
    connections_min: int = 100
    connections_max: int = 600
    utilization_min: float = 10.0
    utilization_max: float = 90.0
    utilization_cap: float = 95.0
    latency_min: float = 5.0
    latency_max: float = 55.0
    packet_loss_max: float = 2.0

    @model_validator(mode="after")
    def check_ranges(self):
        """최소값이 최대값보다 크면 거부"""
        ranges = [
            ("batch", self.batch_min, self.batch_max),
            ("size", self.size_min, self.size_max),
            ("connections", self.connections_min, self.connections_max),
            ("utilization", self.utilization_min, self.utilization_max),
            ("latency", self.latency_min, self.latency_max),
        ]
        for name, low, high in ranges:
            if low >= high:
                raise ValueError(f"{name} range is empty: [{low}, {high})")
        if not self.protocols or not self.common_ports:
            raise ValueError("protocols and common_ports must not be empty")
        return self


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ServerSettings(BaseModel):
    """서버 및 캡처 브리지 설정 (TRAFFICSIM_* 환경 변수)"""
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"
    tick_interval_ms: int = Field(2000, gt=0)
    capture_enabled: bool = False
    capture_interface: Optional[str] = None
    cors_origins: List[str] = [
        "http://localhost:3000",   # React 기본 포트
        "http://localhost:5173",   # Vite 개발 서버
        "http://localhost:5174",   # Vite 대체 포트
    ]

    @classmethod
    def from_env(cls) -> "ServerSettings":
        values = {}
        env = os.environ
        if "TRAFFICSIM_HOST" in env:
            values["host"] = env["TRAFFICSIM_HOST"]
        if "TRAFFICSIM_PORT" in env:
            values["port"] = env["TRAFFICSIM_PORT"]
        if "TRAFFICSIM_LOG_LEVEL" in env:
            values["log_level"] = env["TRAFFICSIM_LOG_LEVEL"].lower()
        if "TRAFFICSIM_TICK_INTERVAL_MS" in env:
            values["tick_interval_ms"] = env["TRAFFICSIM_TICK_INTERVAL_MS"]
        if env.get("TRAFFICSIM_CAPTURE_INTERFACE"):
            values["capture_interface"] = env["TRAFFICSIM_CAPTURE_INTERFACE"]
        if env.get("TRAFFICSIM_CORS_ORIGINS"):
            values["cors_origins"] = [
                origin.strip()
                for origin in env["TRAFFICSIM_CORS_ORIGINS"].split(",")
                if origin.strip()
            ]
        values["reload"] = _env_bool("TRAFFICSIM_RELOAD", False)
        values["capture_enabled"] = _env_bool("TRAFFICSIM_CAPTURE_ENABLED", False)
        return cls(**values)
