"""Validation of submitted dinner forms."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.dinners.dtos import DinnerDTO, DinnerValidationError, as_utc


class DinnerInput(BaseModel):
    """A dinner as submitted from the create or edit form."""

    title: str = Field(min_length=1, max_length=50)
    event_date: datetime
    description: str = Field(min_length=1, max_length=256)
    contact_phone: str = Field(min_length=1, max_length=20)
    address: str = Field(min_length=1, max_length=50)
    country: str | None = Field(default=None, max_length=30)
    latitude: float = 0.0
    longitude: float = 0.0
    host_id: str | None = Field(default=None, max_length=20)

    def to_dto(self, dinner_id: int | None = None) -> DinnerDTO:
        return DinnerDTO(
            id=dinner_id,
            title=self.title,
            event_date=as_utc(self.event_date),
            host_id=self.host_id or "",
            description=self.description,
            contact_phone=self.contact_phone,
            address=self.address,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
        )


def validate_dinner(submitted: dict[str, Any], host_id: str | None = None) -> DinnerInput:
    """Validate a submitted dinner, optionally as hosted by `host_id`.

    Errors echo the submission as it was sent.
    """
    record = submitted if host_id is None else {**submitted, "host_id": host_id}
    try:
        return DinnerInput.model_validate(record)
    except ValidationError as e:
        raise DinnerValidationError(
            submitted=submitted,
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e
