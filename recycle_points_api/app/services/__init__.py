"""
Service layer.

Each service encapsulates the business logic and SQL of one domain so
that API handlers stay limited to HTTP concerns.
"""
