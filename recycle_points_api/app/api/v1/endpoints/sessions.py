"""
Session endpoints for API v1.

A point logs in with the e-mail and password it was registered with
and receives a new access token, the same kind issued on registration.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from recycle_points_api.app.core.config import settings
from recycle_points_api.app.core.security import get_current_point
from recycle_points_api.app.schemas.point import PointDetail, PointWithToken
from recycle_points_api.app.schemas.session import SessionCreate
from recycle_points_api.app.services.point_service import PointService

router = APIRouter()


@router.post("", response_model=PointWithToken)
async def create_session(credentials: SessionCreate) -> PointWithToken:
    """Authenticate a point and return it with a fresh token."""
    return await PointService.authenticate(
        credentials.email,
        credentials.password,
        settings.point_images_base_url,
    )


@router.get("/me", response_model=PointDetail)
async def current_point(claims: Dict[str, Any] = Depends(get_current_point)) -> PointDetail:
    """Return the point the bearer token was issued for."""
    return await PointService.get_point(int(claims["point_id"]), settings.point_images_base_url)
