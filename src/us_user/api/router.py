"""us_user REST API.

Static paths (/active, /search, /born-before, /email/...) are registered
before /{user_id} so they are never captured as an id.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.database import get_db_session
from src.us_common.pagination import PageRequest, page_params
from src.us_common.response import ApiResponse, success_response
from src.us_user.application.schemas import UserRequest
from src.us_user.application.service import UserAccountService
from src.us_user.domain.models import UserFilter

router = APIRouter(prefix="/users", tags=["users"])

_service = UserAccountService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_user(db, body)
    resp = success_response(data.model_dump(), message="User created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    name: str | None = Query(None, description="Case-insensitive substring of name"),
    surname: str | None = Query(None, description="Case-insensitive substring of surname"),
    active: bool | None = Query(None),
    born_before: date | None = Query(None),
) -> ApiResponse:
    filters = UserFilter(name=name, surname=surname, active=active, born_before=born_before)
    data = await _service.list_users(db, filters, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/active")
async def list_active_users(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_active_users(db, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/search")
async def search_users(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    name: str | None = Query(None),
    surname: str | None = Query(None),
) -> ApiResponse:
    data = await _service.search_by_name_surname(db, name, surname, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/born-before")
async def list_active_users_born_before(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[PageRequest, Depends(page_params)],
    request: Request,
    birth_date: date = Query(..., description="Exclusive upper bound"),
) -> ApiResponse:
    data = await _service.list_active_users_born_before(db, birth_date, page)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/email/{email}")
async def get_user_by_email(
    email: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_user_by_email(db, email)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{user_id}")
async def get_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    data = await _service.get_user(db, user_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{user_id}/with-cards")
async def get_user_with_cards(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    data = await _service.get_user_with_cards(db, user_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{user_id}/cards")
async def get_user_cards(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    cards = await _service.get_user_cards(db, user_id)
    resp = success_response([c.model_dump() for c in cards])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{user_id}")
async def update_user(
    body: UserRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    data = await _service.update_user(db, user_id, body)
    resp = success_response(data.model_dump(), message="User updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{user_id}/activate")
async def activate_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    await _service.activate_user(db, user_id)
    resp = success_response({"id": user_id, "active": True}, message="User activated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{user_id}/deactivate")
async def deactivate_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    await _service.deactivate_user(db, user_id)
    resp = success_response({"id": user_id, "active": False}, message="User deactivated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    user_id: int = Path(..., gt=0, description="User ID"),
) -> Response:
    await _service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
