from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import logging
from typing import Optional

from trafficsim.bridge import CaptureBridge
from trafficsim.config import EngineConfig, ServerSettings
from trafficsim.connections import ConnectionManager
from trafficsim.engine import TrafficEngine
from trafficsim.models import TrafficSnapshot
from trafficsim.scheduler import TickScheduler

logger = logging.getLogger(__name__)


def snapshot_payload(snapshot: TrafficSnapshot) -> dict:
    return snapshot.model_dump(mode="json", by_alias=True)


def create_app(settings: Optional[ServerSettings] = None,
               engine: Optional[TrafficEngine] = None) -> FastAPI:
    settings = settings or ServerSettings.from_env()
    engine = engine or TrafficEngine(EngineConfig())

    app = FastAPI(title="Network Traffic Simulator API")

    # CORS 설정 - 대시보드 개발 서버
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    snapshot_clients = ConnectionManager("snapshot")
    live_clients = ConnectionManager("live")
    scheduler = TickScheduler(engine, settings.tick_interval_ms)
    bridge = CaptureBridge(live_clients.broadcast, settings.capture_interface)

    async def push_snapshot(snapshot: TrafficSnapshot):
        if len(snapshot_clients):
            await snapshot_clients.broadcast(snapshot_payload(snapshot))

    scheduler.add_listener(push_snapshot)

    app.state.settings = settings
    app.state.engine = engine
    app.state.scheduler = scheduler
    app.state.bridge = bridge

    @app.on_event("startup")
    async def startup_event():
        """서버 시작 시 모니터링 시작"""
        logger.info("🚀 트래픽 시뮬레이터 서버 시작")
        logger.info("🌐 WebSocket 엔드포인트: /ws (스냅샷), /ws/live (실시간 캡처)")
        scheduler.start()
        if settings.capture_enabled:
            # 주의: 관리자 권한 필요!
            bridge.start_sniffing(asyncio.get_running_loop())

    @app.on_event("shutdown")
    async def shutdown_event():
        """서버 종료 시 모니터링 및 캡처 중지"""
        logger.info("🛑 트래픽 시뮬레이터 서버 종료")
        await scheduler.stop()
        if bridge.is_running:
            bridge.stop_sniffing()

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return {
            "message": "Network Traffic Simulator API",
            "status": "running",
            "endpoints": {
                "snapshot": "/api/snapshot",
                "tick": "/api/tick",
                "health": "/api/health",
                "websocket": "/ws",
                "live": "/ws/live",
            },
        }

    @app.get("/api/health")
    async def health_check():
        """서버 상태 확인"""
        return {
            "status": "healthy",
            "monitoring": scheduler.is_running,
            "capture_running": bridge.is_running,
            "captured_packets": bridge.packet_count,
            "tick_count": engine.tick_count,
            "total_packets": engine.total_packets,
            "active_connections": len(snapshot_clients) + len(live_clients),
        }

    @app.get("/api/snapshot", response_model=TrafficSnapshot)
    def get_snapshot():
        """가장 최근 스냅샷 (아직 없으면 한 번 틱)"""
        return engine.latest or engine.tick()

    @app.post("/api/tick", response_model=TrafficSnapshot)
    def run_tick():
        """즉시 한 번 틱"""
        return engine.tick()

    @app.post("/api/monitoring/start")
    async def start_monitoring():
        scheduler.start()
        return {"monitoring": scheduler.is_running}

    @app.post("/api/monitoring/stop")
    async def stop_monitoring():
        await scheduler.stop()
        return {"monitoring": scheduler.is_running}

    @app.post("/api/reset")
    def reset_engine():
        engine.reset()
        return {"status": "reset", "tick_count": engine.tick_count}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """틱마다 스냅샷을 전송하는 WebSocket"""
        await snapshot_clients.connect(websocket)
        try:
            if engine.latest is not None:
                await websocket.send_json(snapshot_payload(engine.latest))
            while True:
                # 클라이언트 메시지는 무시, 연결 유지용
                await websocket.receive_text()
        except WebSocketDisconnect:
            snapshot_clients.disconnect(websocket)
        except Exception as e:
            logger.warning(f"⚠️ WebSocket 오류: {e}")
            snapshot_clients.disconnect(websocket)

    @app.websocket("/ws/live")
    async def live_endpoint(websocket: WebSocket):
        """캡처 브리지 메시지를 받는 WebSocket"""
        await live_clients.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            live_clients.disconnect(websocket)
        except Exception as e:
            logger.warning(f"⚠️ WebSocket 오류: {e}")
            live_clients.disconnect(websocket)

    return app


app = create_app()
