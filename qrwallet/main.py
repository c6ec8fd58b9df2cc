from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qrwallet import __version__
from qrwallet.core.container import ApplicationContainer, get_container
from qrwallet.core.logging import configure_logging
from qrwallet.infrastructure.database.session import init_db
from qrwallet.interfaces.http import create_api_router
from qrwallet.interfaces.http.errors import register_exception_handlers
from qrwallet.schemas import HealthResponse


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or get_container()
    settings = container.settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(container.engine)
        yield
        await container.dispose()

    app = FastAPI(
        title=settings.project_name,
        description="Wallet ledger with token-authorized transfers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=__version__)

    return app


app = create_app()
