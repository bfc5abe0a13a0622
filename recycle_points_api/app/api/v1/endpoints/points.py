"""
Point endpoints for API v1.

Points are registered and updated through multipart forms so that the
image of the point can travel in the same request.  Comma separated
item lists are parsed here, once, into lists of integers.  Stored
images belonging to a request that fails are removed again before the
error is returned.
"""

from typing import List, Optional, Union

import pydantic
from fastapi import APIRouter, File, Form, Query, UploadFile

from recycle_points_api.app.core.config import settings
from recycle_points_api.app.core.errors import ValidationError
from recycle_points_api.app.schemas.point import (
    PointCreate,
    PointDetail,
    PointFilter,
    PointRead,
    PointUpdate,
    PointWithToken,
    parse_item_ids,
)
from recycle_points_api.app.services.point_service import PointService
from recycle_points_api.app.services.upload_service import discard_image, store_image


router = APIRouter()

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def _describe(exc: pydantic.ValidationError) -> str:
    """Flatten pydantic errors into one readable sentence."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "body"
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts)


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


@router.get("", response_model=List[Union[PointDetail, PointRead]])
async def list_points(
    city: str = Query(...),
    uf: str = Query(...),
    items: Optional[str] = Query(None, description="Comma separated item ids"),
    ignore_items: Optional[str] = Query(None, alias="ignoreItems"),
    return_items: Optional[str] = Query(None, alias="returnItems"),
) -> List[Union[PointDetail, PointRead]]:
    """List the points of a city that accept any of the given items.

    ``items`` is required unless ``ignoreItems`` is set.  With
    ``returnItems`` every entry is ``{point, items}``.
    """
    filters = PointFilter(
        city=city,
        uf=uf,
        items=parse_item_ids(items, location="list_points"),
        ignore_items=_flag(ignore_items),
        return_items=_flag(return_items),
    )
    return await PointService.list_points(filters, settings.point_images_base_url)


@router.get("/{point_id}", response_model=PointDetail)
async def show_point(point_id: int) -> PointDetail:
    """Return one point together with the items it accepts."""
    return await PointService.get_point(point_id, settings.point_images_base_url)


@router.post("", response_model=PointWithToken)
async def create_point(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    whatsapp: str = Form(...),
    latitude: float = Form(...),
    longitude: float = Form(...),
    city: str = Form(...),
    uf: str = Form(...),
    items: str = Form(..., description="Comma separated item ids"),
    image: Optional[UploadFile] = File(None),
) -> PointWithToken:
    """Register a point and return it with an access token."""
    location = "create_point"
    try:
        data = PointCreate(
            name=name,
            email=email,
            password=password,
            whatsapp=whatsapp,
            latitude=latitude,
            longitude=longitude,
            city=city,
            uf=uf,
            items=parse_item_ids(items, location=location),
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc), location=location) from exc

    filename = await store_image(image, location=location) if _has_file(image) else None
    try:
        return await PointService.create_point(
            data.model_copy(update={"image": filename}),
            settings.point_images_base_url,
        )
    except BaseException:
        discard_image(filename)
        raise


@router.put("", response_model=PointDetail)
async def update_point(
    originalemail: str = Form(...),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    whatsapp: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    city: Optional[str] = Form(None),
    uf: Optional[str] = Form(None),
    items: Optional[str] = Form(None, description="Comma separated item ids"),
    image: Optional[UploadFile] = File(None),
) -> PointDetail:
    """Update the point registered under ``originalemail``.

    Fields that are not sent keep their value.  ``items`` replaces the
    whole list of accepted items.  A new image replaces and deletes the
    previous one.
    """
    location = "update_point"
    try:
        data = PointUpdate(
            name=name,
            email=email,
            password=password,
            whatsapp=whatsapp,
            latitude=latitude,
            longitude=longitude,
            city=city,
            uf=uf,
            items=parse_item_ids(items, location=location),
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc), location=location) from exc

    filename = await store_image(image, location=location) if _has_file(image) else None
    try:
        return await PointService.update_point(
            originalemail,
            data.model_copy(update={"image": filename}),
            settings.point_images_base_url,
        )
    except BaseException:
        discard_image(filename)
        raise
