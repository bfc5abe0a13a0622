"""Recycle Points API client.

A thin wrapper around the REST API of the collection point directory,
used by the front ends' scripts and by integrations that register
points in bulk.  The client uses the ``requests`` library internally.

The client exposes high-level methods for every public operation:

* :meth:`list_items` - the item catalog.
* :meth:`list_points` - points of a city filtered by accepted items.
* :meth:`get_point` - a single point with its items.
* :meth:`create_point` - register a point (multipart form + image).
* :meth:`update_point` - update the point registered under an e-mail.
* :meth:`login` - obtain a token for an existing point.

Every method returns a tuple ``(data, error)``.  On failure ``data`` is
``None`` and ``error`` is a dictionary with the keys ``status_code``,
``code`` and ``message``.  Tokens returned by :meth:`create_point` and
:meth:`login` are remembered and sent as ``Authorization: Bearer``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

# (filename, content, mime type)
ImageFile = Tuple[str, bytes, str]
Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(int(i)) for i in ids)


class RecyclePointsAPI:
    """Client for the Recycle Points API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the API, e.g. ``http://localhost:3333``.
            token: Optional access token sent with every request.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
        data: Dict[str, Any] | None = None,
        files: Dict[str, ImageFile] | None = None,
    ) -> Result:
        """Perform an HTTP request and decode the JSON answer."""
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            error = self._error_from_response(exc.response)
            if not error["message"]:
                error["message"] = str(exc)
            logger.error("API request failed (%s): %s", error["status_code"], error["message"])
            return None, error
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "code": None, "message": str(exc)}

    @staticmethod
    def _error_from_response(response: Optional[requests.Response]) -> Dict[str, Any]:
        """Extract ``code`` and ``message`` from an error body."""
        error: Dict[str, Any] = {"status_code": None, "code": None, "message": ""}
        if response is None:
            return error
        error["status_code"] = response.status_code
        try:
            body = response.json()
        except ValueError:
            error["message"] = response.text
            return error
        if isinstance(body, dict):
            info = body.get("information") or {}
            error["code"] = info.get("code")
            error["message"] = body.get("message") or info.get("message") or body.get("detail") or ""
            if not isinstance(error["message"], str):
                error["message"] = str(error["message"])
        return error

    def _remember_token(self, result: Result) -> Result:
        data, error = result
        if data and isinstance(data, dict) and data.get("token"):
            self.token = data["token"]
        return data, error

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def list_items(self) -> Result:
        """Retrieve the item catalog."""
        return self._request("GET", "/items")

    def list_points(
        self,
        city: str,
        uf: str,
        items: Optional[Iterable[int]] = None,
        *,
        ignore_items: bool = False,
        return_items: bool = False,
    ) -> Result:
        """List the points of a city accepting any of ``items``."""
        params: Dict[str, Any] = {"city": city, "uf": uf}
        if items is not None:
            params["items"] = _join_ids(items)
        if ignore_items:
            params["ignoreItems"] = "true"
        if return_items:
            params["returnItems"] = "true"
        return self._request("GET", "/points", params=params)

    def get_point(self, point_id: int) -> Result:
        """Retrieve one point and its items."""
        return self._request("GET", f"/points/{int(point_id)}")

    def create_point(self, fields: Dict[str, Any], image: Optional[ImageFile]) -> Result:
        """Register a point.

        ``fields`` holds the form fields (``name``, ``email``,
        ``password``, ``whatsapp``, ``latitude``, ``longitude``, ``city``,
        ``uf``); ``items`` may be given as a list of identifiers.
        """
        files = {"image": image} if image else None
        return self._remember_token(
            self._request("POST", "/points", data=self._form(fields), files=files)
        )

    def update_point(
        self,
        original_email: str,
        fields: Dict[str, Any],
        image: Optional[ImageFile] = None,
    ) -> Result:
        """Update the point registered under ``original_email``."""
        form = self._form(fields)
        form["originalemail"] = original_email
        files = {"image": image} if image else None
        return self._request("PUT", "/points", data=form, files=files)

    def login(self, email: str, password: str) -> Result:
        """Authenticate as a point and keep the returned token."""
        return self._remember_token(
            self._request("POST", "/sessions", json_body={"email": email, "password": password})
        )

    @staticmethod
    def _form(fields: Dict[str, Any]) -> Dict[str, Any]:
        form: Dict[str, Any] = {}
        for key, value in fields.items():
            if value is None:
                continue
            if key == "items" and not isinstance(value, str):
                value = _join_ids(value)
            form[key] = value
        return form

