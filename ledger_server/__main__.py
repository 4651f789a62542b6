import uvicorn

from ledger_server.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "ledger_server.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
