"""Print a bearer access token for an existing user.

Usage:
    python create_token.py USERNAME [--minutes 525600]
"""
import argparse
import sys

from library_api.app.core import db
from library_api.app.core.config import settings
from library_api.app.core.query import Predicate
from library_api.app.services.token_service import TokenService


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an access token for a Library API user.")
    ap.add_argument("username", help="Username of an existing user")
    ap.add_argument("--minutes", type=int, help="Token lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES")
    args = ap.parse_args()

    db.init_db()
    user = db.find_one("users", Predicate.equals("username", args.username))
    if user is None:
        print(f"[!] No user found with username: {args.username}", file=sys.stderr)
        sys.exit(2)
    if args.minutes:
        settings.access_token_expire_minutes = args.minutes
    print(TokenService.issue_access_token(user["id"], user["username"]))


if __name__ == "__main__":
    main()
