"""
Create a user (e.g. first admin). Run from project root:
  python -m smartware.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m smartware.scripts.create_user admin admin@example.com your-secure-password Admin
"""
import argparse
import logging
import sys

from smartware.core.config import get_settings
from smartware.core.database import SessionLocal
from smartware.core.logging_config import configure_logging
from smartware.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from smartware.models.user import DEFAULT_ROLE, ROLES, User

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a SmartWare user directly in the database.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default=DEFAULT_ROLE, choices=list(ROLES))
    args = parser.parse_args(argv)

    configure_logging(get_settings().LOG_LEVEL)

    username = args.username.strip()
    email = args.email.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email or len(email) > 200:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = (
            db.query(User)
            .filter((User.username == username) | (User.email == email))
            .first()
        )
        if existing:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(args.password),
            role=args.role,
            is_active=True,
            email_confirmed=False,
            is_deleted=False,
        )
        db.add(user)
        db.commit()
        logger.info("Created user %s (id=%s, role=%s)", username, user.id, args.role)
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
