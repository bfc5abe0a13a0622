"""
Business logic for collection points.

``PointService`` owns every write to the ``points`` and
``point_items`` tables.  Create and update run inside a single
``unit_of_work`` so that a point row is never visible without its item
associations (or with half of them).  The e-mail of a point is its
contact identity: at most one point may be registered per e-mail.  The
pre-check gives callers a clean error, and the ``UNIQUE`` constraint on
``points.email`` settles concurrent registrations.

Queries rewrite the stored image filename into ``image_url`` using the
base URL handed in by the caller.  The credential hash is never part of
any returned value.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Union

from recycle_points_api.app.core.db import get_connection, unit_of_work
from recycle_points_api.app.core.errors import (
    DuplicateIdentity,
    InvalidCredentials,
    MissingImageReference,
    PersistenceFailure,
    PointNotFound,
    PointsError,
    ValidationError,
)
from recycle_points_api.app.core.security import create_point_token, hash_password, verify_password
from recycle_points_api.app.schemas.point import (
    MAX_ROW_ID,
    PointCreate,
    PointDetail,
    PointFilter,
    PointRead,
    PointUpdate,
    PointWithToken,
)
from recycle_points_api.app.services.item_service import ItemService
from recycle_points_api.app.services.upload_service import image_exists, release_image


logger = logging.getLogger(__name__)

# Columns a point may be updated through ``PointUpdate``; ``password``
# and ``image`` are handled separately.
_UPDATABLE_FIELDS = ("name", "email", "whatsapp", "latitude", "longitude", "city", "uf")


class PointService:
    """Service for registering, updating and looking up points."""

    @classmethod
    async def create_point(cls, data: PointCreate, image_base_url: str) -> PointWithToken:
        """Register a new point and issue its access token.

        Raises ``MissingImageReference`` when no stored image is given,
        ``DuplicateIdentity`` when the e-mail is taken, ``ValidationError``
        for unknown item identifiers and ``PersistenceFailure`` when the
        unit of work cannot be committed.  Nothing is written on failure.
        """
        location = "create_point"
        if not data.image:
            raise MissingImageReference(location=location)
        if not image_exists(data.image):
            raise MissingImageReference("The referenced image has not been stored.", location=location)

        if cls._email_taken(data.email, location):
            logger.warning("Rejected registration: e-mail %s already registered", data.email)
            raise DuplicateIdentity(location=location)

        password_hash = hash_password(data.password)
        logger.info("Registering point for %s", data.email)
        try:
            with unit_of_work() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO points (image, name, email, password, whatsapp, latitude, longitude, city, uf)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data.image,
                        data.name,
                        data.email,
                        password_hash,
                        data.whatsapp,
                        data.latitude,
                        data.longitude,
                        data.city,
                        data.uf,
                    ),
                )
                point_id = cursor.lastrowid
                cls._write_items(conn, point_id, data.items, location)
                row = cls._fetch_point(conn, point_id)
        except sqlite3.Error as exc:
            raise cls._storage_error(exc, location) from exc

        logger.info("Created point %s for %s", point_id, data.email)
        return PointWithToken(
            point=cls._row_to_point_read(row, image_base_url),
            token=create_point_token(point_id),
        )

    @classmethod
    async def update_point(
        cls,
        original_email: str,
        data: PointUpdate,
        image_base_url: str,
    ) -> PointDetail:
        """Update the point registered under ``original_email``.

        Only the fields present in ``data`` change.  A new password is
        hashed; an absent one keeps the stored hash.  ``data.items``
        replaces the whole association set when given and must not be
        empty; ``None`` keeps the current associations.  When a new image
        is given the previous file is released as the last step of the
        unit of work, so a failed release rolls everything back.
        """
        location = "update_point"
        if data.items is not None and not data.items:
            raise ValidationError("A point must accept at least one item.", location=location)
        new_email = data.email if data.email and data.email != original_email else None
        if new_email and cls._email_taken(new_email, location):
            logger.warning("Rejected update of %s: e-mail %s already registered", original_email, new_email)
            raise DuplicateIdentity(location=location)

        password_hash = hash_password(data.password) if data.password else None
        try:
            with unit_of_work() as conn:
                raw = conn.execute(
                    "SELECT * FROM points WHERE email = ?",
                    (original_email,),
                ).fetchone()
                if not raw:
                    logger.warning("Update requested for unknown point %s", original_email)
                    raise PointNotFound("raw point not found.", location=location)
                point_id = raw["id"]

                updates: Dict[str, Any] = {}
                for key in _UPDATABLE_FIELDS:
                    value = getattr(data, key)
                    if value is not None:
                        updates[key] = value
                if new_email is None:
                    updates.pop("email", None)
                if password_hash is not None:
                    updates["password"] = password_hash
                if data.image:
                    updates["image"] = data.image
                if updates:
                    assignments = ", ".join(f"{key} = ?" for key in updates)
                    conn.execute(
                        f"UPDATE points SET {assignments} WHERE id = ?",
                        (*updates.values(), point_id),
                    )

                if data.items is not None:
                    cls._write_items(conn, point_id, data.items, location)

                row = cls._fetch_point(conn, point_id)
                items = ItemService.items_for_point(conn, point_id)

                if data.image and raw["image"] and raw["image"] != data.image:
                    release_image(raw["image"], location=location)
        except sqlite3.Error as exc:
            raise cls._storage_error(exc, location) from exc

        logger.info("Updated point %s", point_id)
        return PointDetail(point=cls._row_to_point_read(row, image_base_url), items=items)

    @classmethod
    async def list_points(
        cls,
        filters: PointFilter,
        image_base_url: str,
    ) -> List[Union[PointRead, PointDetail]]:
        """Return the points of a city that accept any of the given items.

        With ``ignore_items`` the item filter is skipped.  With
        ``return_items`` each entry is a ``PointDetail`` carrying the
        point's items.  Result order is not guaranteed.
        """
        if not filters.ignore_items and filters.items is None:
            raise ValidationError("The items filter is required unless ignoreItems is set.", location="list_points")
        if not filters.ignore_items and not filters.items:
            return []

        sql = (
            "SELECT DISTINCT points.* FROM points "
            "JOIN point_items ON points.id = point_items.point_id "
            "WHERE points.city = ? AND points.uf = ?"
        )
        params: List[Any] = [filters.city, filters.uf]
        if not filters.ignore_items:
            sql += f" AND point_items.item_id IN ({', '.join('?' for _ in filters.items)})"
            params.extend(filters.items)

        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            points = [cls._row_to_point_read(row, image_base_url) for row in rows]
            if not filters.return_items:
                return points
            return [
                PointDetail(point=point, items=ItemService.items_for_point(conn, point.id))
                for point in points
            ]
        except sqlite3.Error as exc:
            raise cls._storage_error(exc, "list_points") from exc
        finally:
            conn.close()

    @classmethod
    async def get_point(cls, point_id: int, image_base_url: str) -> PointDetail:
        """Retrieve a point with its items or raise ``PointNotFound``."""
        location = "show_point"
        if not 0 < point_id <= MAX_ROW_ID:
            # no row can carry this id
            raise PointNotFound("point not found.", location=location)
        conn = get_connection()
        try:
            row = cls._fetch_point(conn, point_id)
            if not row:
                raise PointNotFound("point not found.", location=location)
            items = ItemService.items_for_point(conn, point_id)
            return PointDetail(point=cls._row_to_point_read(row, image_base_url), items=items)
        except sqlite3.Error as exc:
            raise cls._storage_error(exc, location) from exc
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, email: str, password: str, image_base_url: str) -> PointWithToken:
        """Check a point's credentials and issue a fresh token."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM points WHERE email = ?", (email,)).fetchone()
        except sqlite3.Error as exc:
            raise cls._storage_error(exc, "create_session") from exc
        finally:
            conn.close()
        if not row or not verify_password(password, row["password"]):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentials(location="create_session")
        logger.info("Point %s logged in", row["id"])
        return PointWithToken(
            point=cls._row_to_point_read(row, image_base_url),
            token=create_point_token(row["id"]),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _email_taken(email: str, location: str) -> bool:
        conn = get_connection()
        try:
            row = conn.execute("SELECT id FROM points WHERE email = ?", (email,)).fetchone()
            return row is not None
        except sqlite3.Error as exc:
            raise PointService._storage_error(exc, location) from exc
        finally:
            conn.close()

    @staticmethod
    def _fetch_point(conn: sqlite3.Connection, point_id: int) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM points WHERE id = ?", (point_id,)).fetchone()

    @staticmethod
    def _write_items(
        conn: sqlite3.Connection,
        point_id: int,
        item_ids: Sequence[int],
        location: str,
    ) -> None:
        """Make ``item_ids`` the exact association set of a point."""
        item_ids = list(dict.fromkeys(item_ids))
        missing = ItemService.missing_item_ids(conn, item_ids)
        if missing:
            raise ValidationError(
                f"Unknown item identifiers: {', '.join(str(i) for i in sorted(missing))}.",
                location=location,
            )
        conn.execute("DELETE FROM point_items WHERE point_id = ?", (point_id,))
        conn.executemany(
            "INSERT INTO point_items (point_id, item_id) VALUES (?, ?)",
            [(point_id, item_id) for item_id in item_ids],
        )

    @staticmethod
    def _storage_error(exc: sqlite3.Error, location: str) -> PointsError:
        """Translate a database error into the error returned to the caller."""
        if isinstance(exc, sqlite3.IntegrityError) and "points.email" in str(exc):
            logger.warning("E-mail uniqueness constraint rejected %s", location)
            return DuplicateIdentity(location=location)
        logger.error("Database error in %s", location, exc_info=exc)
        return PersistenceFailure(location=location)

    @staticmethod
    def _row_to_point_read(row: sqlite3.Row, image_base_url: str) -> PointRead:
        """Convert a database row to a ``PointRead`` without the credential hash."""
        image = row["image"]
        return PointRead(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            whatsapp=row["whatsapp"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            city=row["city"],
            uf=row["uf"],
            image=image,
            image_url=f"{image_base_url.rstrip('/')}/{image}" if image else None,
        )
