import logging
from typing import Any, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """WebSocket 연결 관리 및 브로드캐스트"""

    def __init__(self, name: str = "ws"):
        self.name = name
        self.active_connections: List[WebSocket] = []

    def __len__(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"✅ 클라이언트 연결 [{self.name}]: {id(websocket)} (총 {len(self)}개)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"❌ 클라이언트 연결 종료 [{self.name}]: {id(websocket)} (남은 연결: {len(self)}개)")

    async def broadcast(self, message: Any) -> int:
        """모든 클라이언트에 전송. 실패한 클라이언트는 제거하고 나머지는 계속 전송

        전송에 성공한 클라이언트 수 반환.
        """
        delivered = 0
        for websocket in list(self.active_connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"⚠️ 전송 실패 [{self.name}] {id(websocket)}: {e}")
                self.disconnect(websocket)
        return delivered
