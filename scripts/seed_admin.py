"""
Create the database tables and an initial admin account.

Usage:
    python scripts/seed_admin.py --username admin --password secret [--full-name "Shift Lead"]

Does nothing to the users table if it already has rows.
"""
import sys
import os
import argparse

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.db import Base, SessionLocal, engine
from app.logging import setup_logging
from app.models import models  # noqa: F401  registers tables on Base.metadata
from app.services.bootstrap import ensure_admin, ensure_tables


def seed_admin(username: str, password: str, full_name: str) -> None:
    ensure_tables(engine, Base)
    db = SessionLocal()
    try:
        user = ensure_admin(db, username, password, full_name)
        if user is None:
            print("Users already exist; nothing to do")
        else:
            print(f"Created admin '{user.username}' (id={user.id})")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and the first admin user")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args()

    setup_logging()
    seed_admin(args.username, args.password, args.full_name)
