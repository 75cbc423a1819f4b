"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user EMAIL USERNAME PASSWORD NAME [--role ROLE ...]
Example:
  python -m app.scripts.create_user ops@example.org ops 'your-secure-password' 'Ops Team' --role admin --role user

The 'admin' and 'user' roles are created first if they are missing.
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.schemas.admin import DEFAULT_ROLE, UserCreateForm
from app.services.accounts import create_user
from app.services.errors import AdminFormError
from app.services.roles import ensure_system_roles
from app.services.validation import validate_form


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Steward user from the command line.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("username", help="Username (3-20 letters, numbers or underscores)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("name", help="Display name")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        help=f"Role to assign; repeat for several (default: {DEFAULT_ROLE})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    data = {
        "email": args.email,
        "username": args.username,
        "password": args.password,
        "name": args.name,
    }
    if args.roles:
        data["roles"] = args.roles

    db = SessionLocal()
    try:
        ensure_system_roles(db)
        form = validate_form(UserCreateForm, data)
        user = create_user(db, form)
        print(f"Created user '{user.username}' with roles: {', '.join(user.role_names) or '(none)'}.")
        return 0
    except AdminFormError as e:
        for field, messages in e.errors.items():
            print(f"{field}: {messages[0]}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
