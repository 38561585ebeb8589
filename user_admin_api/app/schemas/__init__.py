"""
Pydantic schema definitions for API payloads.

Schemas describe both the persisted user record and the request and
response bodies of the HTTP API.  JSON field names are camelCase
aliases of the snake_case attribute names.
"""
