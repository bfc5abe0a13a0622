"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (points, items, sessions) has a service in
``services`` and exposes a router defined in ``api/v1/endpoints``.
Versioning is handled by grouping routers under ``api/<version>/``.
"""

from .main import app  # noqa: F401
