"""
First-run helpers: create tables and the initial admin account.
"""
from typing import Optional

import structlog
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..auth.security import get_password_hash
from ..models.models import User, ADMIN_ROLE


logger = structlog.get_logger(__name__)


def ensure_tables(engine, base) -> None:
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    missing = set(base.metadata.tables.keys()) - existing_tables
    if missing:
        logger.info("creating_tables", tables=sorted(missing))
        base.metadata.create_all(bind=engine)
    else:
        logger.info("tables_present", count=len(existing_tables))


def ensure_admin(db: Session, username: str, password: str, full_name: str = "Administrator") -> Optional[User]:
    """
    Create an admin user when the users table is empty.

    Returns the created user, or None when users already exist.
    """
    if db.query(User).first() is not None:
        return None
    user = User(
        username=username,
        password_hash=get_password_hash(password),
        full_name=full_name,
        role=ADMIN_ROLE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("admin_bootstrapped", username=username, user_id=user.id)
    return user
