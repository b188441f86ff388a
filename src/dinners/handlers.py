import logging

from src.dinners.repository.write_models import DinnerWriteModel
from src.events import DinnerCreatedEvent

logger = logging.getLogger(__name__)


class PersistDinnerHandler:
    """Stores the dinner carried by a DinnerCreatedEvent."""

    def __init__(self, write_model: DinnerWriteModel) -> None:
        self._write_model = write_model

    async def __call__(self, event: DinnerCreatedEvent) -> None:
        dinner = await self._write_model.add_dinner(event.dinner)
        logger.info(f"Stored dinner {dinner.id} hosted by {dinner.host_id}")
