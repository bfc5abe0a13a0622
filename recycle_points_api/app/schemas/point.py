"""
Pydantic schemas for collection points.

Request data arrives as multipart form fields; the API layer turns it
into ``PointCreate`` / ``PointUpdate`` instances so that services only
deal with typed values.  ``PointRead`` is the only shape a point is
ever returned in and has no field for the credential hash.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.errors import ValidationError
from .item import ItemBrief

# Largest value SQLite stores in an INTEGER column.
MAX_ROW_ID = 2**63 - 1


def parse_item_ids(raw: Optional[str], location: str = "points") -> Optional[List[int]]:
    """Parse the comma separated item list used by forms and query strings.

    ``None`` means the field was not sent and is returned unchanged.
    An empty string gives an empty list.  Duplicates are dropped while
    keeping the first-seen order.  Identifiers must be positive and fit
    in a SQLite integer.
    """
    if raw is None:
        return None
    ids: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            item_id = int(part)
        except ValueError:
            raise ValidationError(f"Invalid item identifier: {part!r}.", location=location)
        if not 0 < item_id <= MAX_ROW_ID:
            raise ValidationError(f"Invalid item identifier: {part!r}.", location=location)
        if item_id not in ids:
            ids.append(item_id)
    return ids


class PointBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Recicla Centro"])
    email: str = Field(..., min_length=3, examples=["contato@recicla.com"])
    whatsapp: str = Field(..., min_length=1, examples=["62999998888"])
    latitude: float = Field(..., ge=-90, le=90, examples=[-16.3390798])
    longitude: float = Field(..., ge=-180, le=180, examples=[-48.9303596])
    city: str = Field(..., min_length=1, examples=["Anápolis"])
    uf: str = Field(..., min_length=2, max_length=2, examples=["GO"])

    @field_validator("name", "email", "whatsapp", "city", "uf")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PointCreate(PointBase):
    """Candidate point accepted by the create operation.

    ``image`` is the filename of an asset that has already been stored.
    """

    password: str = Field(..., min_length=1)
    items: List[int] = Field(..., min_length=1)
    image: Optional[str] = None


class PointUpdate(BaseModel):
    """Partial update of a point.

    Every field is optional.  ``items=None`` keeps the current item
    associations.  A point always accepts at least one item, so an empty
    list is rejected by the update operation.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    whatsapp: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    city: Optional[str] = None
    uf: Optional[str] = Field(None, min_length=2, max_length=2)
    items: Optional[List[int]] = None
    image: Optional[str] = None

    @field_validator("name", "email", "whatsapp", "city", "uf")
    @classmethod
    def blank_means_unchanged(cls, v: Optional[str]) -> Optional[str]:
        # HTML forms send empty strings for untouched inputs
        if v is None:
            return None
        return v.strip() or None


class PointRead(BaseModel):
    """Point as returned by the API."""

    id: int
    name: str
    email: str
    whatsapp: str
    latitude: float
    longitude: float
    city: str
    uf: str
    image: Optional[str] = None
    image_url: Optional[str] = None


class PointDetail(BaseModel):
    point: PointRead
    items: List[ItemBrief]


class PointWithToken(BaseModel):
    point: PointRead
    token: str


class PointFilter(BaseModel):
    """Filter for listing points."""

    city: str
    uf: str
    items: Optional[List[int]] = None
    ignore_items: bool = False
    return_items: bool = False
