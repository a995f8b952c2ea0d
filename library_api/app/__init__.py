"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each resource (users, contacts, addresses, authors, user
categories and loans) has a schema module, a service class and a
router defined in ``api/v1/endpoints``.  Shared machinery (settings,
database access, query building, pagination, tokens and blob storage)
lives in ``core``.
"""

from .main import app  # noqa: F401
