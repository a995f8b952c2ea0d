"""
Pydantic schema definitions for API payloads.

Each resource (users, contacts, addresses, authors, user categories,
loans) defines its own request and response models.  Schemas are
separated from the database rows to decouple the API representation
from persistence.
"""
