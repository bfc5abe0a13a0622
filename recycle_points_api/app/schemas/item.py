"""
Pydantic schemas for the item catalog.
"""

from pydantic import BaseModel


class ItemBrief(BaseModel):
    """Item as nested under a point."""

    id: int
    title: str


class ItemRead(ItemBrief):
    """Catalog entry with a resolvable icon URL."""

    image_url: str
