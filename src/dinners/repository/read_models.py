import abc
from datetime import datetime
from functools import partial

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.dinners.dtos import DinnerDTO, PageDTO
from src.dinners.repository.orm_models import RSVP, Dinner


class DinnerReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_dinner(self, dinner_id: int) -> DinnerDTO | None:
        """Get a dinner by id, None when it does not exist."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_upcoming_page(
        self, now: datetime, page_number: int, page_size: int
    ) -> PageDTO:
        """
        Get one page of the dinners taking place at or after `now`,
        earliest first.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def list_popular(self, now: datetime, limit: int) -> list[DinnerDTO]:
        """Dinners at or after `now`, most RSVPs first."""
        raise NotImplementedError

    @abc.abstractmethod
    async def list_before(self, cutoff: datetime, limit: int) -> list[DinnerDTO]:
        """Dinners strictly before `cutoff`, latest first."""
        raise NotImplementedError


class SqlDinnerReadModel(DinnerReadModel):
    """SQL implementation of dinner read model."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_dinner(self, dinner_id: int) -> DinnerDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(select(Dinner).where(Dinner.id == dinner_id))
            dinner = result.scalar_one_or_none()
            if not dinner:
                return None
            return DinnerDTO.from_dinner(dinner)

    async def get_upcoming_page(
        self, now: datetime, page_number: int, page_size: int
    ) -> PageDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            count_stmt = select(func.count()).select_from(Dinner).where(Dinner.event_date >= now)
            total_count = (await session.execute(count_stmt)).scalar_one()

            stmt = (
                select(Dinner)
                .where(Dinner.event_date >= now)
                .order_by(Dinner.event_date, Dinner.id)
                .offset((page_number - 1) * page_size)
                .limit(page_size)
            )
            result = await session.execute(stmt)
            return PageDTO(
                items=[DinnerDTO.from_dinner(dinner) for dinner in result.scalars().all()],
                page_number=page_number,
                page_size=page_size,
                total_count=total_count,
            )

    async def list_popular(self, now: datetime, limit: int) -> list[DinnerDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            stmt = (
                select(Dinner)
                .outerjoin(RSVP, RSVP.dinner_id == Dinner.id)
                .where(Dinner.event_date >= now)
                .group_by(Dinner.id)
                # equal counts: earliest dinner first, then lowest id
                .order_by(func.count(RSVP.id).desc(), Dinner.event_date, Dinner.id)
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [DinnerDTO.from_dinner(dinner) for dinner in result.scalars().all()]

    async def list_before(self, cutoff: datetime, limit: int) -> list[DinnerDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            stmt = (
                select(Dinner)
                .where(Dinner.event_date < cutoff)
                .order_by(Dinner.event_date.desc(), Dinner.id)
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [DinnerDTO.from_dinner(dinner) for dinner in result.scalars().all()]
