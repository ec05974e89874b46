"""
Month scope routes.

- POST /months/select     any user picks the month their pages show.
                          Admins also move the global current month.
- POST /months/new        admin starts a new month (becomes current + selected).
"""

from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, request
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...models import Month
from ...months import remember_month, set_current_month, start_new_month
from ...security import admin_required
from ...utils import parse_optional_int, safe_next_url

logger = logging.getLogger(__name__)

months_bp = Blueprint("months", __name__, url_prefix="/months")


def _back():
    """Return to the page that posted the form (hidden "next" field)."""
    return redirect(safe_next_url(request.form.get("next"), "dashboard.index"))


@months_bp.route("/select", methods=["POST"])
@login_required
def select_month():
    month_id = parse_optional_int(request.form.get("month_id"))
    month = db.session.get(Month, month_id) if month_id is not None else None
    if month is None:
        flash("الشهر غير موجود.", "danger")
        return _back()

    if current_user.is_admin:
        try:
            set_current_month(month)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Switching current month to %s failed", month_id)
            flash("حدث خطأ في تغيير الشهر الحالي.", "danger")
            return _back()

    remember_month(month)
    return _back()


@months_bp.route("/new", methods=["POST"])
@login_required
@admin_required
def new_month():
    name = (request.form.get("name") or "").strip()
    if not name:
        flash("اسم الشهر مطلوب.", "danger")
        return _back()

    try:
        month = start_new_month(name)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Starting month %r failed", name)
        flash("حدث خطأ في إنشاء الشهر الجديد.", "danger")
        return _back()

    remember_month(month)
    flash("تم بدء شهر جديد بنجاح.", "success")
    return _back()
