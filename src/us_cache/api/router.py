"""Cache admin REST API.

GET  /cache/stats                : key counts per view kind
POST /cache/clear/user/{user_id} : evict the three views of one user
POST /cache/clear/all            : evict every key under the service prefix
GET  /cache/log                  : dump current cache state to the log
"""

from fastapi import APIRouter, Path, Request

from src.us_cache.application.service import CacheAdminService
from src.us_common.response import ApiResponse, success_response

router = APIRouter(prefix="/cache", tags=["cache"])

_service = CacheAdminService()


def _get_request_id(request: Request, resp: ApiResponse) -> str:
    return getattr(request.state, "request_id", resp.request_id)


@router.get("/stats")
async def cache_stats(request: Request) -> ApiResponse:
    stats = await _service.stats()
    resp = success_response(stats.model_dump())
    resp.request_id = _get_request_id(request, resp)
    return resp


@router.post("/clear/user/{user_id}")
async def clear_user_cache(
    request: Request,
    user_id: int = Path(..., gt=0, description="User ID"),
) -> ApiResponse:
    keys = await _service.clear_user(user_id)
    resp = success_response(
        {"user_id": user_id, "evicted_keys": keys},
        message=f"Cache cleared for user: {user_id}",
    )
    resp.request_id = _get_request_id(request, resp)
    return resp


@router.post("/clear/all")
async def clear_all_cache(request: Request) -> ApiResponse:
    deleted = await _service.clear_all()
    resp = success_response({"deleted_keys": deleted}, message="All cache cleared")
    resp.request_id = _get_request_id(request, resp)
    return resp


@router.get("/log")
async def log_cache_state(request: Request) -> ApiResponse:
    stats = await _service.log_state()
    resp = success_response(
        {"total_keys": stats.total_keys},
        message="Cache state logged (check application logs)",
    )
    resp.request_id = _get_request_id(request, resp)
    return resp
