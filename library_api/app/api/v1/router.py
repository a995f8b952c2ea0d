"""
Top-level router for version 1 of the API.

Aggregates the resource routers under a unified prefix.  Addresses are
nested under contacts and therefore carry the ``/contacts`` prefix as
well; their routes start with ``/{contact_id}/addresses``.
"""

from fastapi import APIRouter

from .endpoints import addresses, authors, contacts, loans, user_categories, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
router.include_router(addresses.router, prefix="/contacts", tags=["addresses"])
router.include_router(authors.router, prefix="/authors", tags=["authors"])
router.include_router(user_categories.router, prefix="/user_categories", tags=["user categories"])
router.include_router(loans.router, prefix="/loans", tags=["loans"])
