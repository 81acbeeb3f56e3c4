"""Command-line helpers for operating the service."""

import argparse
import sys

from sqlalchemy.exc import IntegrityError

from cryptofolio.auth import hash_password
from cryptofolio.db import SessionLocal, engine
from cryptofolio.orm_models import Base, UserORM


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a user account for the portfolio API",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--email", default="test@test.com", help="Login email")
    parser.add_argument("--password", default="password", help="Plain-text password, hashed before storing")
    return parser.parse_args(argv)


def create_user(argv=None) -> int:
    args = parse_args(argv)
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        user = UserORM(email=args.email.strip().lower(), password_hash=hash_password(args.password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            print(f"User {args.email} already exists", file=sys.stderr)
            return 1
        print(f"User created (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(create_user())
