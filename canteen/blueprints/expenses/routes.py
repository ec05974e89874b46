"""
Expenses (النثريات) of the selected month.
"""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ...audit import ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, log_action, serialize_model
from ...calculations import expenses_total
from ...extensions import db
from ...models import Expense
from ...months import scoped, selected_month
from ...utils import form_text, parse_date, parse_decimal, parse_optional_int

logger = logging.getLogger(__name__)

expenses_bp = Blueprint("expenses", __name__, url_prefix="/expenses")


def _expense_form():
    values = {
        "description": form_text("description"),
        "amount": parse_decimal(request.form.get("amount")),
        "date": parse_date(request.form.get("date")),
    }
    if any(v is None for v in values.values()):
        flash("برجاء إدخال البيان والمبلغ والتاريخ.", "danger")
        return None
    values["notes"] = form_text("notes")
    return values


@expenses_bp.route("/")
@login_required
def list_expenses():
    rows = (
        scoped(Expense.query, Expense)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = db.session.get(Expense, edit_id)

    return render_template(
        "expenses/list.html",
        rows=rows,
        total_amount=expenses_total(rows),
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
        today=date.today(),
    )


@expenses_bp.route("/new", methods=["POST"])
@login_required
def create_expense():
    month = selected_month()
    if month is None:
        flash("لا يوجد شهر محدد. ابدأ شهراً جديداً أولاً.", "warning")
        return redirect(url_for("expenses.list_expenses"))

    values = _expense_form()
    if values is None:
        return redirect(url_for("expenses.list_expenses", new=1))

    expense = Expense(month_id=month.id, **values)
    try:
        db.session.add(expense)
        db.session.flush()
        log_action(expense, ACTION_CREATE, after=serialize_model(expense))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating expense failed")
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("expenses.list_expenses"))

    flash("تم إضافة النثرية بنجاح.", "success")
    return redirect(url_for("expenses.list_expenses"))


@expenses_bp.route("/<int:expense_id>/edit", methods=["POST"])
@login_required
def edit_expense(expense_id: int):
    expense = Expense.query.get_or_404(expense_id)

    values = _expense_form()
    if values is None:
        return redirect(url_for("expenses.list_expenses", edit=expense.id))

    before = serialize_model(expense)
    try:
        for key, value in values.items():
            setattr(expense, key, value)
        db.session.flush()
        log_action(expense, ACTION_UPDATE, before=before, after=serialize_model(expense))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating expense %s failed", expense_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("expenses.list_expenses"))

    flash("تم تعديل النثرية بنجاح.", "success")
    return redirect(url_for("expenses.list_expenses"))


@expenses_bp.route("/<int:expense_id>/delete", methods=["POST"])
@login_required
def delete_expense(expense_id: int):
    expense = Expense.query.get_or_404(expense_id)
    before = serialize_model(expense)

    try:
        db.session.delete(expense)
        db.session.flush()
        log_action(expense, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting expense %s failed", expense_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("expenses.list_expenses"))

    flash("تم حذف النثرية بنجاح.", "success")
    return redirect(url_for("expenses.list_expenses"))
