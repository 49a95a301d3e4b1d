from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
import logging

from src.core.config import Settings, get_settings
from src.core.database import Base, build_engine, build_session_factory

import src.models  # Ensure models are registered

from src.routes.items import item_router


API_PREFIX = "/api/v1"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---- STARTUP ----
        if not settings.is_production:
            Base.metadata.create_all(bind=engine)

        yield

        # ---- SHUTDOWN ----
        engine.dispose()

    app = FastAPI(
        title="Kabancount Inventory API",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.include_router(item_router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/")
    def root():
        return {"message": "Kabancount Inventory API is running"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:create_app", factory=True, host="0.0.0.0", port=8000)
