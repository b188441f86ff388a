from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict

from src.auth import get_current_identity, issue_antiforgery_token, require_antiforgery_token
from src.dinners.catalog import DinnerCatalog, HttpDinnerCatalog
from src.dinners.controller import DinnerController
from src.dinners.dtos import (
    DinnerCatalogUnavailableError,
    DinnerDTO,
    DinnerNotFoundError,
    DinnerValidationError,
    InvalidOwnerError,
    WebSliceDTO,
)
from src.dinners.repository.read_models import DinnerReadModel, SqlDinnerReadModel
from src.dinners.repository.write_models import DinnerWriteModel, SqlDinnerWriteModel
from src.dinners.urls import (
    CREATE_DINNER_URL,
    DELETE_DINNER_URL,
    DINNER_DETAILS_URL,
    EDIT_DINNER_URL,
    LIST_DINNERS_URL,
    WEB_SLICE_POPULAR_URL,
    WEB_SLICE_UPCOMING_URL,
)
from src.messaging import EventPublisher

router = APIRouter()

INVALID_OWNER = "InvalidOwner"


# =============================================================================
# Response schemas
# =============================================================================


class RSVPResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    attendee_name: str


class DinnerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None
    title: str
    event_date: datetime
    host_id: str
    description: str
    contact_phone: str
    address: str
    country: str | None = None
    latitude: float
    longitude: float
    rsvp_count: int
    rsvps: list[RSVPResponse] = []


class DinnerPageResponse(BaseModel):
    dinners: list[DinnerResponse]
    page_number: int
    page_size: int
    total_count: int
    page_count: int
    has_previous_page: bool
    has_next_page: bool


class DinnerFormResponse(BaseModel):
    """A dinner to show in a create, edit or delete form, with the token to submit it."""

    dinner: DinnerResponse
    antiforgery_token: str


class WebSliceResponse(BaseModel):
    title: str
    dinners: list[DinnerResponse]


def _form(dinner: DinnerDTO, identity: str) -> DinnerFormResponse:
    return DinnerFormResponse(
        dinner=DinnerResponse.model_validate(dinner),
        antiforgery_token=issue_antiforgery_token(identity),
    )


def _web_slice(web_slice: WebSliceDTO) -> WebSliceResponse:
    return WebSliceResponse(
        title=web_slice.title,
        dinners=[DinnerResponse.model_validate(dinner) for dinner in web_slice.dinners],
    )


def _redirect_to_list(request: Request) -> RedirectResponse:
    return RedirectResponse(url=str(request.url_for("list_dinners")), status_code=303)


def _invalid_submission(e: DinnerValidationError) -> JSONResponse:
    # the submitted values go back unchanged so the form can be shown again
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"dinner": e.submitted, "errors": e.errors}),
    )


# =============================================================================
# Dependency providers (can be overridden in tests)
# =============================================================================


def get_dinner_read_model() -> DinnerReadModel:
    return SqlDinnerReadModel()


def get_dinner_write_model() -> DinnerWriteModel:
    return SqlDinnerWriteModel()


def get_dinner_catalog() -> DinnerCatalog:
    return HttpDinnerCatalog()


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_queue


def get_dinner_controller(
    read_model: DinnerReadModel = Depends(get_dinner_read_model),
    write_model: DinnerWriteModel = Depends(get_dinner_write_model),
    catalog: DinnerCatalog = Depends(get_dinner_catalog),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> DinnerController:
    return DinnerController(
        read_model=read_model,
        write_model=write_model,
        catalog=catalog,
        publisher=publisher,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(LIST_DINNERS_URL, response_model=DinnerPageResponse, name="list_dinners")
async def list_dinners(
    page: int = Query(default=1, ge=1),
    controller: DinnerController = Depends(get_dinner_controller),
) -> DinnerPageResponse:
    """Upcoming dinners, earliest first, 25 per page."""
    try:
        dinner_page = await controller.list_dinners(page)
    except DinnerCatalogUnavailableError:
        raise HTTPException(status_code=503, detail="Dinner catalog unavailable")

    return DinnerPageResponse(
        dinners=[DinnerResponse.model_validate(dinner) for dinner in dinner_page.items],
        page_number=dinner_page.page_number,
        page_size=dinner_page.page_size,
        total_count=dinner_page.total_count,
        page_count=dinner_page.page_count,
        has_previous_page=dinner_page.has_previous_page,
        has_next_page=dinner_page.has_next_page,
    )


@router.get(DINNER_DETAILS_URL, response_model=DinnerResponse)
async def dinner_details(
    dinner_id: int,
    controller: DinnerController = Depends(get_dinner_controller),
) -> DinnerResponse:
    try:
        dinner = await controller.details(dinner_id)
    except DinnerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DinnerResponse.model_validate(dinner)


@router.get(CREATE_DINNER_URL, response_model=DinnerFormResponse)
async def show_create_form(
    identity: str = Depends(get_current_identity),
    controller: DinnerController = Depends(get_dinner_controller),
) -> DinnerFormResponse:
    return _form(controller.new_dinner(identity), identity)


@router.post(CREATE_DINNER_URL)
async def create_dinner(
    request: Request,
    submitted: dict[str, Any] = Body(),
    identity: str = Depends(require_antiforgery_token),
    controller: DinnerController = Depends(get_dinner_controller),
):
    """
    Publish a new dinner for the caller and redirect to the list.
    The dinner is stored asynchronously by the DinnerCreatedEvent consumer.
    """
    try:
        await controller.create(identity, submitted)
    except DinnerValidationError as e:
        return _invalid_submission(e)
    return _redirect_to_list(request)


@router.get(EDIT_DINNER_URL, response_model=DinnerFormResponse)
async def show_edit_form(
    dinner_id: int,
    identity: str = Depends(get_current_identity),
    controller: DinnerController = Depends(get_dinner_controller),
) -> DinnerFormResponse:
    try:
        dinner = await controller.edit_form(identity, dinner_id)
    except DinnerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOwnerError:
        raise HTTPException(status_code=403, detail=INVALID_OWNER)
    return _form(dinner, identity)


@router.post(EDIT_DINNER_URL)
async def edit_dinner(
    request: Request,
    dinner_id: int,
    submitted: dict[str, Any] = Body(),
    identity: str = Depends(require_antiforgery_token),
    controller: DinnerController = Depends(get_dinner_controller),
):
    try:
        await controller.edit(identity, dinner_id, submitted)
    except InvalidOwnerError:
        raise HTTPException(status_code=403, detail=INVALID_OWNER)
    except DinnerValidationError as e:
        return _invalid_submission(e)
    except DinnerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _redirect_to_list(request)


@router.get(DELETE_DINNER_URL, response_model=DinnerFormResponse)
async def show_delete_form(
    dinner_id: int,
    identity: str = Depends(get_current_identity),
    controller: DinnerController = Depends(get_dinner_controller),
) -> DinnerFormResponse:
    try:
        dinner = await controller.delete_form(identity, dinner_id)
    except DinnerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOwnerError:
        raise HTTPException(status_code=403, detail=INVALID_OWNER)
    return _form(dinner, identity)


@router.post(DELETE_DINNER_URL)
async def delete_dinner(
    request: Request,
    dinner_id: int,
    identity: str = Depends(require_antiforgery_token),
    controller: DinnerController = Depends(get_dinner_controller),
):
    try:
        await controller.delete_confirmed(identity, dinner_id)
    except DinnerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOwnerError:
        raise HTTPException(status_code=403, detail=INVALID_OWNER)
    return _redirect_to_list(request)


@router.get(WEB_SLICE_POPULAR_URL, response_model=WebSliceResponse)
async def web_slice_popular(
    controller: DinnerController = Depends(get_dinner_controller),
) -> WebSliceResponse:
    """The five upcoming dinners with the most RSVPs."""
    return _web_slice(await controller.web_slice_popular())


@router.get(WEB_SLICE_UPCOMING_URL, response_model=WebSliceResponse)
async def web_slice_upcoming(
    controller: DinnerController = Depends(get_dinner_controller),
) -> WebSliceResponse:
    """Five dinners before two months from now, latest first."""
    return _web_slice(await controller.web_slice_upcoming())
