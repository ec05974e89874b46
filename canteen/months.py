"""
canteen/months.py

Month scope: which accounting period the pages read and write.

- The selection is kept per browser session (session["month_id"]).
- Default selection: the current month, else the newest month.
- The global "current" month is a flag on Month; at most one row carries it.
  Only admins move it (see blueprints/months).

load_selected_month() runs before every request and exposes the result as
g.month; views use scoped() to filter their queries.
"""

from __future__ import annotations

import logging

from flask import g, session
from sqlalchemy import false

from .audit import ACTION_CREATE, ACTION_UPDATE, log_action, serialize_model
from .extensions import db
from .models import Month

logger = logging.getLogger(__name__)

SESSION_KEY = "month_id"


def all_months() -> list[Month]:
    return Month.query.order_by(Month.created_at.desc(), Month.id.desc()).all()


def current_month() -> Month | None:
    return Month.query.filter_by(is_current=True).first()


def default_month() -> Month | None:
    """Current month, else most recently created month, else None."""
    month = current_month()
    if month:
        return month
    return Month.query.order_by(Month.created_at.desc(), Month.id.desc()).first()


def load_selected_month() -> Month | None:
    """
    Resolve the session's month into g.month.

    A stale id (month deleted) falls back to the default month.
    """
    month = None
    month_id = session.get(SESSION_KEY)
    if month_id is not None:
        month = db.session.get(Month, month_id)

    if month is None:
        month = default_month()
        if month is not None:
            session[SESSION_KEY] = month.id
        else:
            session.pop(SESSION_KEY, None)

    g.month = month
    return month


def selected_month() -> Month | None:
    return g.get("month")


def scoped(query, model):
    """Filter a query to the selected month; no month selected -> no rows."""
    month = selected_month()
    if month is None:
        return query.filter(false())
    return query.filter(model.month_id == month.id)


def remember_month(month: Month) -> None:
    session[SESSION_KEY] = month.id
    g.month = month


def set_current_month(month: Month) -> None:
    """
    Move the global current flag to `month`.

    The bulk UPDATE clears the old flag before the new one is flushed, so the
    single-current index never sees two rows. Caller commits.
    """
    before = serialize_model(month)
    (
        Month.query
        .filter(Month.is_current.is_(True), Month.id != month.id)
        .update({Month.is_current: False}, synchronize_session="fetch")
    )
    month.is_current = True
    db.session.flush()
    log_action(month, ACTION_UPDATE, before=before, after=serialize_model(month))


def start_new_month(name: str) -> Month:
    """Create a month and make it current. Caller commits."""
    Month.query.filter(Month.is_current.is_(True)).update(
        {Month.is_current: False}, synchronize_session="fetch"
    )
    month = Month(name=name, is_current=True)
    db.session.add(month)
    db.session.flush()
    log_action(month, ACTION_CREATE, after=serialize_model(month))
    logger.info("Started month %s (id=%s)", month.name, month.id)
    return month
