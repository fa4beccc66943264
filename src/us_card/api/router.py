"""us_card REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.application.schemas import CardRequest
from src.us_card.application.service import PaymentCardService
from src.us_card.domain.models import CardFilter
from src.us_common.database import get_db_session
from src.us_common.pagination import PageRequest, page_params
from src.us_common.response import ApiResponse, success_response

router = APIRouter(prefix="/payment-cards", tags=["payment-cards"])

_service = PaymentCardService()


@router.post("/user/{user_id}", status_code=status.HTTP_201_CREATED)
async def create_card(
    body: CardRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="Owning user ID"),
) -> ApiResponse:
    data = await _service.create_card(db, body, user_id)
    resp = success_response(data.model_dump(), message="Payment card created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_cards(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    holder: str | None = Query(None, description="Case-insensitive substring of holder"),
    active: bool | None = Query(None),
    user_id: int | None = Query(None, gt=0),
) -> ApiResponse:
    filters = CardFilter(holder=holder, active=active, user_id=user_id)
    data = await _service.list_cards(db, filters, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/active")
async def list_active_cards(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_active_cards(db, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/number/{number}")
async def get_card_by_number(
    number: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_card_by_number(db, number)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/user/{user_id}")
async def list_cards_for_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    user_id: int = Path(..., gt=0, description="Owning user ID"),
) -> ApiResponse:
    data = await _service.list_cards_for_user(db, user_id, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/user/{user_id}/active")
async def list_active_cards_for_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    user_id: int = Path(..., gt=0, description="Owning user ID"),
) -> ApiResponse:
    data = await _service.list_active_cards_for_user(db, user_id, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/user/{user_id}/card/{card_id}")
async def get_card_for_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="Owning user ID"),
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> ApiResponse:
    data = await _service.get_card_for_user(db, user_id, card_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{card_id}")
async def get_card(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> ApiResponse:
    data = await _service.get_card(db, card_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{card_id}")
async def update_card(
    body: CardRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> ApiResponse:
    data = await _service.update_card(db, card_id, body)
    resp = success_response(data.model_dump(), message="Payment card updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{card_id}/activate")
async def activate_card(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> ApiResponse:
    await _service.activate_card(db, card_id)
    resp = success_response({"id": card_id, "active": True}, message="Payment card activated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{card_id}/deactivate")
async def deactivate_card(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> ApiResponse:
    await _service.deactivate_card(db, card_id)
    resp = success_response({"id": card_id, "active": False}, message="Payment card deactivated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    card_id: int = Path(..., gt=0, description="Payment card ID"),
) -> Response:
    await _service.delete_card(db, card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
