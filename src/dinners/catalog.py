import logging
from datetime import datetime
from typing import Protocol

import httpx
from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from src.config.settings import DinnerApiSettings, settings
from src.dinners.dtos import RSVPDTO, DinnerCatalogUnavailableError, DinnerDTO, as_utc

logger = logging.getLogger(__name__)


# =============================================================================
# Remote payload schema
# =============================================================================


class RemoteRSVP(BaseModel):
    id: int = Field(validation_alias=AliasChoices("id", "RsvpID"))
    dinner_id: int = Field(default=0, validation_alias=AliasChoices("dinner_id", "DinnerID"))
    attendee_name: str = Field(
        default="", validation_alias=AliasChoices("attendee_name", "AttendeeName")
    )


class RemoteDinner(BaseModel):
    """A dinner as served by the remote catalog, snake_case or PascalCase keys."""

    id: int = Field(validation_alias=AliasChoices("id", "dinner_id", "DinnerID"))
    title: str = Field(validation_alias=AliasChoices("title", "Title"))
    event_date: datetime = Field(validation_alias=AliasChoices("event_date", "EventDate"))
    host_id: str = Field(
        default="", validation_alias=AliasChoices("host_id", "hosted_by", "HostedBy")
    )
    description: str = Field(default="", validation_alias=AliasChoices("description", "Description"))
    contact_phone: str = Field(
        default="", validation_alias=AliasChoices("contact_phone", "ContactPhone")
    )
    address: str = Field(default="", validation_alias=AliasChoices("address", "Address"))
    country: str | None = Field(default=None, validation_alias=AliasChoices("country", "Country"))
    latitude: float = Field(default=0.0, validation_alias=AliasChoices("latitude", "Latitude"))
    longitude: float = Field(default=0.0, validation_alias=AliasChoices("longitude", "Longitude"))
    rsvps: list[RemoteRSVP] = Field(
        default_factory=list, validation_alias=AliasChoices("rsvps", "RSVPs")
    )

    def to_dto(self) -> DinnerDTO:
        return DinnerDTO(
            id=self.id,
            title=self.title,
            event_date=as_utc(self.event_date),
            host_id=self.host_id,
            description=self.description,
            contact_phone=self.contact_phone,
            address=self.address,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
            rsvps=tuple(
                RSVPDTO(
                    id=rsvp.id,
                    dinner_id=rsvp.dinner_id or self.id,
                    attendee_name=rsvp.attendee_name,
                )
                for rsvp in self.rsvps
            ),
        )


remote_dinners_adapter = TypeAdapter(list[RemoteDinner])


# =============================================================================
# Catalog client
# =============================================================================


class DinnerCatalog(Protocol):
    """Protocol for a source of the full dinner list."""

    async def fetch_dinners(self) -> list[DinnerDTO]:
        """Fetch every dinner the catalog knows about."""
        ...


class HttpDinnerCatalog:
    """Reads dinners from the remote dinner API over HTTP."""

    def __init__(
        self,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
        config: DinnerApiSettings = settings.dinner_api,
    ):
        self._http_client_class = http_client_class
        self._config = config

    @property
    def dinners_url(self) -> str:
        return f"{self._config.url.rstrip('/')}/dinners"

    async def fetch_dinners(self) -> list[DinnerDTO]:
        try:
            async with self._http_client_class(timeout=self._config.timeout_seconds) as client:
                response = await client.get(self.dinners_url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Dinner catalog request to {self.dinners_url} failed: {e}")
            raise DinnerCatalogUnavailableError(str(e)) from e

        try:
            remote_dinners = remote_dinners_adapter.validate_python(payload)
        except ValidationError as e:
            logger.error(f"Dinner catalog returned a malformed payload: {e}")
            raise DinnerCatalogUnavailableError("Malformed dinner catalog payload") from e

        logger.debug(f"Fetched {len(remote_dinners)} dinners from {self.dinners_url}")
        return [dinner.to_dto() for dinner in remote_dinners]
