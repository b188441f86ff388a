"""Tests for SqlDinnerReadModel and SqlDinnerWriteModel."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from src.dinners.dtos import DinnerNotFoundError, InvalidOwnerError
from src.dinners.repository.orm_models import RSVP, Dinner
from src.dinners.repository.read_models import SqlDinnerReadModel
from src.dinners.repository.write_models import SqlDinnerWriteModel
from src.dinners.tests.inmemory_models import make_dinner

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


async def add_dinner(db_session, days_ahead: int, host_id: str = "alice", rsvps: int = 0):
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)
    dinner = await write_model.add_dinner(
        make_dinner(None, NOW + timedelta(days=days_ahead), host_id=host_id)
    )
    stored = await db_session.get(Dinner, dinner.id)
    for index in range(rsvps):
        stored.rsvps.append(RSVP(attendee_name=f"guest{index}"))
    await db_session.flush()
    return dinner


@pytest.mark.asyncio
async def test_add_dinner_assigns_id(db_session):
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)

    dinner = await write_model.add_dinner(make_dinner(None, NOW, host_id="alice"))

    assert isinstance(dinner.id, int)
    assert dinner.host_id == "alice"
    assert dinner.rsvps == ()


@pytest.mark.asyncio
async def test_get_dinner(db_session):
    created = await add_dinner(db_session, 3, rsvps=2)
    read_model = SqlDinnerReadModel(session_overwrite=db_session)

    dinner = await read_model.get_dinner(created.id)

    assert dinner.id == created.id
    assert dinner.event_date == NOW + timedelta(days=3)
    assert dinner.rsvp_count == 2
    assert await read_model.get_dinner(created.id + 100) is None


@pytest.mark.asyncio
async def test_get_upcoming_page(db_session):
    yesterday = await add_dinner(db_session, -1)
    ten_days = await add_dinner(db_session, 10)
    tomorrow = await add_dinner(db_session, 1)
    read_model = SqlDinnerReadModel(session_overwrite=db_session)

    page = await read_model.get_upcoming_page(NOW, page_number=1, page_size=25)

    assert [dinner.id for dinner in page.items] == [tomorrow.id, ten_days.id]
    assert yesterday.id not in {dinner.id for dinner in page.items}
    assert page.total_count == 2


@pytest.mark.asyncio
async def test_get_upcoming_page_second_page(db_session):
    created = [await add_dinner(db_session, days) for days in range(1, 6)]
    read_model = SqlDinnerReadModel(session_overwrite=db_session)

    page = await read_model.get_upcoming_page(NOW, page_number=2, page_size=2)

    assert [dinner.id for dinner in page.items] == [created[2].id, created[3].id]
    assert page.total_count == 5
    assert page.page_count == 3


@pytest.mark.asyncio
async def test_list_popular(db_session):
    await add_dinner(db_session, -2, rsvps=9)
    quiet = await add_dinner(db_session, 1)
    busy = await add_dinner(db_session, 3, rsvps=4)
    busier = await add_dinner(db_session, 5, rsvps=6)
    tied = await add_dinner(db_session, 2, rsvps=4)
    read_model = SqlDinnerReadModel(session_overwrite=db_session)

    dinners = await read_model.list_popular(NOW, limit=5)

    assert [dinner.id for dinner in dinners] == [busier.id, tied.id, busy.id, quiet.id]


@pytest.mark.asyncio
async def test_list_before(db_session):
    past = await add_dinner(db_session, -2)
    soon = await add_dinner(db_session, 3)
    later = await add_dinner(db_session, 40)
    await add_dinner(db_session, 80)
    read_model = SqlDinnerReadModel(session_overwrite=db_session)

    dinners = await read_model.list_before(NOW + timedelta(days=61), limit=5)

    assert [dinner.id for dinner in dinners] == [later.id, soon.id, past.id]


@pytest.mark.asyncio
async def test_update_dinner(db_session):
    created = await add_dinner(db_session, 3, rsvps=1)
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)
    changed = make_dinner(created.id, NOW + timedelta(days=4), host_id="alice", title="Moved")

    updated = await write_model.update_dinner(changed)

    assert updated.title == "Moved"
    assert updated.rsvp_count == 1
    stored = await SqlDinnerReadModel(session_overwrite=db_session).get_dinner(created.id)
    assert stored.title == "Moved"
    assert stored.event_date == NOW + timedelta(days=4)


@pytest.mark.asyncio
async def test_update_dinner_keeps_host(db_session):
    created = await add_dinner(db_session, 3, host_id="alice")
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)

    with pytest.raises(InvalidOwnerError):
        await write_model.update_dinner(make_dinner(created.id, NOW, host_id="bob"))


@pytest.mark.asyncio
async def test_update_missing_dinner(db_session):
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)

    with pytest.raises(DinnerNotFoundError):
        await write_model.update_dinner(make_dinner(404, NOW))


@pytest.mark.asyncio
async def test_delete_dinner_removes_rsvps(db_session):
    created = await add_dinner(db_session, 3, rsvps=2)
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)

    await write_model.delete_dinner(created.id)

    assert await SqlDinnerReadModel(session_overwrite=db_session).get_dinner(created.id) is None
    remaining = await db_session.execute(select(func.count()).select_from(RSVP))
    assert remaining.scalar_one() == 0


@pytest.mark.asyncio
async def test_delete_missing_dinner(db_session):
    write_model = SqlDinnerWriteModel(session_overwrite=db_session)

    with pytest.raises(DinnerNotFoundError):
        await write_model.delete_dinner(404)
