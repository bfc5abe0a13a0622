"""
Domain errors for the points service.

Every error carries a machine-readable ``code``, a human-readable
``message``, the operation it was raised from (``location``) and the
HTTP status the API layer should answer with.  The handler installed
by ``main.create_app`` renders them as::

    {"error": true, "message": "...",
     "information": {"in": "create_point", "code": "...", "message": "..."}}

Error payloads never include credential values.
"""

from typing import Any, Dict, Optional

from fastapi import status


class PointsError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "POINTS_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, location: str = "points") -> None:
        self.message = message or self.default_message
        self.location = location
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "message": self.message,
            "information": {
                "in": self.location,
                "code": self.code,
                "message": self.message,
            },
        }


class ValidationError(PointsError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid request data."


class MissingImageReference(ValidationError):
    code = "IMAGE_REQUIRED"
    default_message = "An image of the point is required."


class DuplicateIdentity(PointsError):
    code = "EMAIL_ALREADY_REGISTERED"
    default_message = "Only one point per e-mail permited."


class PointNotFound(PointsError):
    code = "POINT_NOT_FOUND"
    default_message = "point not found."


class InvalidCredentials(PointsError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid e-mail or password."


class AssetReleaseFailure(PointsError):
    code = "ASSET_RELEASE_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Could not release the previous image of the point."


class PersistenceFailure(PointsError):
    code = "PERSISTENCE_FAILURE"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "The operation could not be saved."
