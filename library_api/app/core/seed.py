"""
Default data for a fresh database.

``init_db(seed=True)`` calls ``seed_user_categories`` to create the
standard library roles.  Seeding is idempotent: categories are matched
by name and only missing ones are inserted.
"""

import logging
from typing import List, Tuple

from .db import get_cursor

DEFAULT_USER_CATEGORIES: List[Tuple[str, str]] = [
    ("Superadmin", "Highest administrative level, usually for large organisations."),
    ("Administrator", "Manages the whole e-library: users, digital collections and application settings."),
    ("Pustakawan", "Librarian. Manages the collection and helps members find information."),
    ("Anggota", "Member. The main user who borrows and reads library content."),
    ("Pengunjung Umum", "Public visitor without an account or not logged in."),
    ("Contributor", "Adds new content to the collection, such as authors or publishers."),
]


def seed_user_categories() -> int:
    """Insert the default user categories that do not exist yet.

    Returns the number of categories inserted.
    """
    logger = logging.getLogger(__name__)
    inserted = 0
    with get_cursor() as cursor:
        for name, description in DEFAULT_USER_CATEGORIES:
            exists = cursor.execute("SELECT 1 FROM user_categories WHERE name = ?", (name,)).fetchone()
            if exists:
                continue
            cursor.execute(
                "INSERT INTO user_categories (name, description) VALUES (?, ?)",
                (name, description),
            )
            inserted += 1
    if inserted:
        logger.info("Seeded %d user categories", inserted)
    return inserted
