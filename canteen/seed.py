"""
canteen/seed.py

Bootstrap data for a fresh database.

- create_admin(): first (or additional) admin account.
- ensure_current_month(): make sure some month is current so month-scoped
  pages have a period to file rows under. Idempotent.
"""

from __future__ import annotations

import logging
from datetime import date

from .audit import ACTION_CREATE, log_action, serialize_model
from .extensions import db
from .models import ROLE_ADMIN, Month, User
from .months import current_month, start_new_month
from .utils import ARABIC_MONTHS

logger = logging.getLogger(__name__)


def default_month_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"{ARABIC_MONTHS[today.month - 1]} {today.year}"


def ensure_current_month() -> Month:
    """Return the current month, starting one named after today if none exists."""
    month = current_month()
    if month:
        return month
    return start_new_month(default_month_name())


def create_admin(email: str, password: str, name: str) -> User:
    """Create an admin user and commit. Raises ValueError on bad input."""
    email = (email or "").strip().lower()
    name = (name or "").strip()
    if not email or not password or not name:
        raise ValueError("email, password and name are required.")
    if User.query.filter_by(email=email).first():
        raise ValueError(f"User {email} already exists.")

    user = User(email=email, name=name, role=ROLE_ADMIN, is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    log_action(user, ACTION_CREATE, after=serialize_model(user))

    ensure_current_month()
    db.session.commit()

    logger.info("Admin account %s created", email)
    return user
