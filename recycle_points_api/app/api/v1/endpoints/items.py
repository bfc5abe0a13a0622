"""
Item catalog endpoint for API v1.

The catalog is read-only; clients use it to build the item selector
and to decode the item identifiers used by the points endpoints.
"""

from typing import List

from fastapi import APIRouter

from recycle_points_api.app.core.config import settings
from recycle_points_api.app.schemas.item import ItemRead
from recycle_points_api.app.services.item_service import ItemService

router = APIRouter()


@router.get("", response_model=List[ItemRead])
async def list_items() -> List[ItemRead]:
    """Return every item category with its icon URL."""
    return await ItemService.list_items(settings.uploads_base_url)
