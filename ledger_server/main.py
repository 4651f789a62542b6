from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger_server import __version__
from ledger_server.core.config import get_settings
from ledger_server.core.container import get_container
from ledger_server.core.logging import configure_logging
from ledger_server.infrastructure.database import init_db
from ledger_server.interfaces.http import create_api_router
from ledger_server.interfaces.http.error_handlers import register_error_handlers
from ledger_server.schemas import HealthResponse

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.logging.level)
    await init_db()
    yield
    await get_container().aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Token balance ledger with reviewed withdrawals",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()
