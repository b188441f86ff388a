"""Dinner operations: listing, details, create/edit/delete by the host, web slices."""

import calendar
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from src.config.settings import DinnerApiSettings, settings
from src.dinners.catalog import DinnerCatalog
from src.dinners.dtos import (
    DinnerDTO,
    DinnerNotFoundError,
    InvalidOwnerError,
    PageDTO,
    WebSliceDTO,
    paginate,
)
from src.dinners.forms import validate_dinner
from src.dinners.repository.read_models import DinnerReadModel
from src.dinners.repository.write_models import DinnerWriteModel
from src.events import DinnerCreatedEvent
from src.messaging import EventPublisher

logger = logging.getLogger(__name__)

PAGE_SIZE = 25
WEB_SLICE_SIZE = 5
NEW_DINNER_DAYS_AHEAD = 7
UPCOMING_MONTHS_AHEAD = 2


def utcnow() -> datetime:
    return datetime.now(UTC)


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping the day to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class DinnerController:
    def __init__(
        self,
        read_model: DinnerReadModel,
        write_model: DinnerWriteModel,
        catalog: DinnerCatalog,
        publisher: EventPublisher,
        config: DinnerApiSettings = settings.dinner_api,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._read_model = read_model
        self._write_model = write_model
        self._catalog = catalog
        self._publisher = publisher
        self._config = config
        self._clock = clock

    async def list_dinners(self, page_number: int = 1) -> PageDTO:
        """Upcoming dinners, earliest first, one page of PAGE_SIZE."""
        now = self._clock()
        if self._config.enabled:
            dinners = await self._catalog.fetch_dinners()
            upcoming = sorted(
                (dinner for dinner in dinners if dinner.event_date >= now),
                key=lambda dinner: dinner.event_date,
            )
            return paginate(upcoming, page_number, PAGE_SIZE)

        return await self._read_model.get_upcoming_page(now, page_number, PAGE_SIZE)

    async def details(self, dinner_id: int) -> DinnerDTO:
        dinner = await self._read_model.get_dinner(dinner_id)
        if not dinner:
            raise DinnerNotFoundError(dinner_id)
        return dinner

    def new_dinner(self, identity: str) -> DinnerDTO:
        """A blank dinner for the create form, one week ahead and hosted by the caller."""
        return DinnerDTO(
            id=None,
            title="",
            event_date=self._clock() + timedelta(days=NEW_DINNER_DAYS_AHEAD),
            host_id=identity,
        )

    async def create(self, identity: str, submitted: dict[str, Any]) -> DinnerCreatedEvent:
        """
        Validate a new dinner and publish it as a DinnerCreatedEvent.
        Storing it is left to the event's consumers.
        """
        # the caller is the host, whatever the form says
        dinner_input = validate_dinner(submitted, host_id=identity)
        dinner = dinner_input.to_dto()

        event = DinnerCreatedEvent(dinner=replace(dinner), timestamp=self._clock())
        await self._publisher.publish(event)
        logger.info(f"Published {event.event_type} for '{dinner.title}' hosted by {identity}")
        return event

    async def edit_form(self, identity: str, dinner_id: int) -> DinnerDTO:
        return await self._get_hosted_dinner(identity, dinner_id)

    async def edit(self, identity: str, dinner_id: int, submitted: dict[str, Any]) -> DinnerDTO:
        # ownership of the submitted record is checked before validating it
        if submitted.get("host_id") != identity:
            raise InvalidOwnerError(dinner_id, identity)

        dinner_input = validate_dinner(submitted)
        dinner = await self._write_model.update_dinner(dinner_input.to_dto(dinner_id))
        logger.info(f"Dinner {dinner_id} updated by {identity}")
        return dinner

    async def delete_form(self, identity: str, dinner_id: int) -> DinnerDTO:
        return await self._get_hosted_dinner(identity, dinner_id)

    async def delete_confirmed(self, identity: str, dinner_id: int) -> None:
        await self._get_hosted_dinner(identity, dinner_id)
        await self._write_model.delete_dinner(dinner_id)
        logger.info(f"Dinner {dinner_id} deleted by {identity}")

    async def web_slice_popular(self) -> WebSliceDTO:
        dinners = await self._read_model.list_popular(self._clock(), WEB_SLICE_SIZE)
        return WebSliceDTO(title="Popular Nerd Dinners", dinners=dinners)

    async def web_slice_upcoming(self) -> WebSliceDTO:
        cutoff = add_months(self._clock(), UPCOMING_MONTHS_AHEAD)
        # latest first within the window
        dinners = await self._read_model.list_before(cutoff, WEB_SLICE_SIZE)
        return WebSliceDTO(title="Upcoming Nerd Dinners", dinners=dinners)

    async def _get_hosted_dinner(self, identity: str, dinner_id: int) -> DinnerDTO:
        dinner = await self.details(dinner_id)
        if not dinner.is_hosted_by(identity):
            raise InvalidOwnerError(dinner_id, identity)
        return dinner
