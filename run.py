import uvicorn

from trafficsim.config import ServerSettings

if __name__ == "__main__":
    settings = ServerSettings.from_env()

    print("=" * 50)
    print("📡 Network Traffic Simulator")
    print("=" * 50)
    print(f"\n🌐 http://{settings.host}:{settings.port}  (틱 간격 {settings.tick_interval_ms}ms)")
    if settings.capture_enabled:
        print("\n⚠️  주의: 패킷 캡처는 관리자 권한이 필요합니다!")
        print("   - Windows: 관리자 권한으로 실행")
        print("   - Linux/Mac: sudo python run.py\n")

    uvicorn.run(
        "trafficsim.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )
