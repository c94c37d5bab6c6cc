"""
Production FastAPI Application

Registration service: catalog management, register / cancel workflow and
read-side listings, all over one SQLAlchemy store.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, engine_manager, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Registration Service] Starting up...')

    tracing = TracingConfig(service_name='registration-service')
    tracing.setup()
    Logger.base.info('📊 [Registration Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Registration Service] Dependency injection wired')

    engine = get_engine()
    tracing.instrument_sqlalchemy(engine=engine)
    Logger.base.info('🗄️  [Registration Service] Database engine ready + instrumented')

    if settings.DEBUG:
        # Local development without alembic
        await create_db_and_tables()
        Logger.base.info('🗄️  [Registration Service] Tables ensured (DEBUG)')

    Logger.base.info('✅ [Registration Service] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Registration Service] Shutting down...')

    await engine_manager.dispose()
    Logger.base.info('🗄️  [Registration Service] Database engines disposed')

    tracing.shutdown()
    Logger.base.info('📊 [Registration Service] Tracing shutdown complete')

    container.unwire()

    Logger.base.info('👋 [Registration Service] Shutdown complete')


app = create_app(
    lifespan=lifespan,
    description='Event Registration Service - venues, events, ticket types and capacity-safe registrations',
)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
