"""Dinner write model - returns DTOs, never ORM models."""

from abc import ABC, abstractmethod
from functools import partial

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.dinners.dtos import DinnerDTO, DinnerNotFoundError, InvalidOwnerError
from src.dinners.repository.orm_models import Dinner


class DinnerWriteModel(ABC):
    @abstractmethod
    async def add_dinner(self, dinner: DinnerDTO) -> DinnerDTO:
        """Store a new dinner. Returns it with the id assigned by the store."""
        raise NotImplementedError

    @abstractmethod
    async def update_dinner(self, dinner: DinnerDTO) -> DinnerDTO:
        """
        Replace the stored dinner with the given full record.
        Raises DinnerNotFoundError when it does not exist and InvalidOwnerError
        when the stored host differs from the record's host.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_dinner(self, dinner_id: int) -> None:
        """Remove a dinner and its RSVPs. Raises DinnerNotFoundError."""
        raise NotImplementedError


class SqlDinnerWriteModel(DinnerWriteModel):
    """SQL implementation of dinner write operations."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def _get_dinner(self, session: AsyncSession, dinner_id: int) -> Dinner | None:
        result = await session.execute(select(Dinner).where(Dinner.id == dinner_id))
        return result.scalar_one_or_none()

    async def add_dinner(self, dinner: DinnerDTO) -> DinnerDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            new_dinner = Dinner(
                title=dinner.title,
                event_date=dinner.event_date,
                description=dinner.description,
                host_id=dinner.host_id,
                contact_phone=dinner.contact_phone,
                address=dinner.address,
                country=dinner.country,
                latitude=dinner.latitude,
                longitude=dinner.longitude,
                rsvps=[],
            )
            session.add(new_dinner)
            await session.flush()
            return DinnerDTO.from_dinner(new_dinner)

    async def update_dinner(self, dinner: DinnerDTO) -> DinnerDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            stored = await self._get_dinner(session, dinner.id)
            if not stored:
                raise DinnerNotFoundError(dinner.id)
            if stored.host_id != dinner.host_id:
                raise InvalidOwnerError(dinner.id, dinner.host_id)

            stored.title = dinner.title
            stored.event_date = dinner.event_date
            stored.description = dinner.description
            stored.contact_phone = dinner.contact_phone
            stored.address = dinner.address
            stored.country = dinner.country
            stored.latitude = dinner.latitude
            stored.longitude = dinner.longitude
            await session.flush()
            return DinnerDTO.from_dinner(stored)

    async def delete_dinner(self, dinner_id: int) -> None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            stored = await self._get_dinner(session, dinner_id)
            if not stored:
                raise DinnerNotFoundError(dinner_id)
            await session.delete(stored)
            await session.flush()
