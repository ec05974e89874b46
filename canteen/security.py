"""
canteen/security.py

Role checks for the canteen accounting app.

Roles:
- admin: everything, plus user management and starting / switching the
  global current month.
- accountant: all bookkeeping pages (suppliers, invoices, sales, goods,
  expenses, closing).

Decorators must preserve wrapped function metadata to avoid Flask endpoint
collisions, hence functools.wraps.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Tuple

from flask import render_template
from flask_login import current_user


def _forbidden() -> Tuple[str, int]:
    """Render a consistent 403 page."""
    return render_template("errors/403.html"), 403


def is_admin() -> bool:
    """Return True if current user is authenticated and admin."""
    return bool(current_user.is_authenticated and getattr(current_user, "is_admin", False))


def admin_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator: admin-only."""
    @wraps(view_func)
    def wrapper(*args: Any, **kwargs: Any):
        if not is_admin():
            return _forbidden()
        return view_func(*args, **kwargs)

    return wrapper
