"""Domain routers for version 1 of the API."""
