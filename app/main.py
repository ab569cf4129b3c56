from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.infrastructure.db.pool import close_pool, open_pool
from app.infrastructure.redis_cache.pool import close_redis
from app.logging import setup_logging
from app.presentation.api import build_api
from app.presentation.dependencies import Services, build_services
from app.settings import Settings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    await open_pool()
    try:
        yield
    finally:
        await close_redis()
        await close_pool()


def create_app(
    services: Optional[Services] = None, config: Optional[Settings] = None
) -> FastAPI:
    """
    Build the API. Tests pass their own `services`; otherwise the Postgres and
    Redis backed ones from build_services() are used.
    """
    config = config or get_settings()
    setup_logging(config.log_level)
    services = services or build_services(config)
    app = FastAPI(title="Imovel Finder API", version="0.1.0", lifespan=lifespan)
    app.state.settings = config
    app.state.services = services
    app.include_router(build_api(services, config))
    return app


app = create_app()
