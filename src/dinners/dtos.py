from dataclasses import dataclass, field
from datetime import UTC, datetime
from math import ceil
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.dinners.repository.orm_models import RSVP, Dinner


class DinnerNotFoundError(Exception):
    """Raised when a dinner id does not resolve to a stored dinner."""

    def __init__(self, dinner_id: int) -> None:
        self.dinner_id = dinner_id
        super().__init__(f"Dinner {dinner_id} not found")


class InvalidOwnerError(Exception):
    """Raised when the caller is not the host of the dinner they try to change."""

    def __init__(self, dinner_id: int | None, identity: str) -> None:
        self.dinner_id = dinner_id
        self.identity = identity
        super().__init__(f"'{identity}' is not the host of dinner {dinner_id}")


class DinnerValidationError(Exception):
    """Raised when a submitted dinner fails validation.

    Carries the submitted values so the form can be shown again as it was sent.
    """

    def __init__(self, submitted: dict[str, Any], errors: list[dict[str, Any]]) -> None:
        self.submitted = submitted
        self.errors = errors
        super().__init__(f"Invalid dinner: {len(errors)} error(s)")


class DinnerCatalogUnavailableError(Exception):
    """Raised when the remote dinner catalog cannot be read."""


def as_utc(value: datetime) -> datetime:
    """Naive datetimes coming from the store or the remote catalog are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class RSVPDTO:
    """DTO for an attendance response to a dinner."""

    id: int
    dinner_id: int
    attendee_name: str

    @classmethod
    def from_rsvp(cls, rsvp: "RSVP") -> "RSVPDTO":
        return cls(id=rsvp.id, dinner_id=rsvp.dinner_id, attendee_name=rsvp.attendee_name)


@dataclass(frozen=True)
class DinnerDTO:
    """DTO for dinner data."""

    id: int | None
    title: str
    event_date: datetime
    host_id: str
    description: str = ""
    contact_phone: str = ""
    address: str = ""
    country: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    rsvps: tuple[RSVPDTO, ...] = field(default_factory=tuple)

    @property
    def rsvp_count(self) -> int:
        return len(self.rsvps)

    def is_hosted_by(self, identity: str | None) -> bool:
        return identity is not None and self.host_id == identity

    @classmethod
    def from_dinner(cls, dinner: "Dinner") -> "DinnerDTO":
        """Create DinnerDTO from Dinner ORM model."""
        return cls(
            id=dinner.id,
            title=dinner.title,
            event_date=as_utc(dinner.event_date),
            host_id=dinner.host_id,
            description=dinner.description,
            contact_phone=dinner.contact_phone,
            address=dinner.address,
            country=dinner.country,
            latitude=dinner.latitude,
            longitude=dinner.longitude,
            rsvps=tuple(RSVPDTO.from_rsvp(rsvp) for rsvp in dinner.rsvps),
        )


@dataclass(frozen=True)
class PageDTO:
    """One page of an ordered result set."""

    items: list[DinnerDTO]
    page_number: int
    page_size: int
    total_count: int

    @property
    def page_count(self) -> int:
        return ceil(self.total_count / self.page_size) if self.total_count else 0

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.page_count


def paginate(items: list[DinnerDTO], page_number: int, page_size: int) -> PageDTO:
    """Slice an already filtered and ordered list into one page."""
    start = (page_number - 1) * page_size
    return PageDTO(
        items=items[start : start + page_size],
        page_number=page_number,
        page_size=page_size,
        total_count=len(items),
    )


@dataclass(frozen=True)
class WebSliceDTO:
    """A small ranked feed of dinners."""

    title: str
    dinners: list[DinnerDTO]
