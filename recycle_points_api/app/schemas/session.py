"""
Pydantic schema for logging in as a point.
"""

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    email: str = Field(..., examples=["contato@recicla.com"])
    password: str = Field(..., examples=["strongpassword"])
