import asyncio
from contextlib import asynccontextmanager

import sentry_sdk
from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from src.config.logging import setup_logging
from src.config.settings import settings
from src.dinners.handlers import PersistDinnerHandler
from src.dinners.repository.write_models import DinnerWriteModel, SqlDinnerWriteModel
from src.dinners.router import router as dinners_router
from src.dinners.urls import DINNERS_PREFIX
from src.events import DinnerCreatedEvent
from src.messaging import OutboundEventQueue
from src.routers.healthz.router import router as healthz_router


async def run_migrations():
    alembic_cfg = Config("alembic.ini")
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")


def create_event_queue(write_model: DinnerWriteModel | None = None) -> OutboundEventQueue:
    event_queue = OutboundEventQueue()
    event_queue.subscribe(
        DinnerCreatedEvent, PersistDinnerHandler(write_model or SqlDinnerWriteModel())
    )
    return event_queue


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await run_migrations()
    await app.state.event_queue.start()
    yield
    await app.state.event_queue.stop()


setup_logging()

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )

app = FastAPI(
    title="NerdDinner API",
    description="API for hosting and finding nerd dinners",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.event_queue = create_event_queue()

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(dinners_router, prefix=DINNERS_PREFIX, tags=["Dinners"])


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the NerdDinner API"}
