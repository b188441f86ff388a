from fastapi import APIRouter, Request
from pydantic import BaseModel

from src.config.settings import settings

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    event_queue_running: bool
    dead_letter_count: int
    dinner_api_enabled: bool


@router.get("/", response_model=HealthCheckResponse)
async def health_check(request: Request) -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running.
    Also reports the state of new-dinner delivery and where dinners are listed from.
    """
    event_queue = getattr(request.app.state, "event_queue", None)
    return HealthCheckResponse(
        status="healthy",
        event_queue_running=bool(event_queue and event_queue.is_running),
        dead_letter_count=len(event_queue.dead_letters) if event_queue else 0,
        dinner_api_enabled=settings.dinner_api.enabled,
    )
