"""
Pydantic schema definitions for API payloads.

Each domain (users, slideshows, catalog, payments, ...) defines its
own models for request and response bodies.  Schemas are kept apart
from the SQL in the services, which convert rows into these models.
"""
