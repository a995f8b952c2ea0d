"""
Endpoint subpackage for API v1.

Each module defines an ``APIRouter`` for one resource (users, contacts,
addresses, authors, user categories, loans).  The routers are
aggregated in ``router.py`` at the package level.
"""
