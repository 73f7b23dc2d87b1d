"""
Pydantic schema definitions for API payloads.

Each domain (users, tasks) defines its own models for request bodies,
query strings and responses.  Schemas are separated from the storage
layer to decouple the API representation from persistence.
"""
