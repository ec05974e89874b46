"""
Cash sales (النقدي) of the selected month.

purchase_price is the line total paid; selling price is per piece.
Row totals: total selling = price per piece * quantity, profit = selling - purchase.
"""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from ...audit import ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, log_action, serialize_model
from ...calculations import ZERO, to_decimal
from ...extensions import db
from ...models import CashSale
from ...months import scoped, selected_month
from ...utils import form_text, parse_date, parse_decimal, parse_optional_int

logger = logging.getLogger(__name__)

cash_sales_bp = Blueprint("cash_sales", __name__, url_prefix="/cash-sales")


def _cash_sale_form():
    values = {
        "item_name": form_text("item_name"),
        "quantity": parse_decimal(request.form.get("quantity")),
        "purchase_price": parse_decimal(request.form.get("purchase_price")),
        "selling_price_per_piece": parse_decimal(request.form.get("selling_price_per_piece")),
        "date": parse_date(request.form.get("date")),
    }
    if any(v is None for v in values.values()):
        flash("برجاء إدخال جميع البيانات المطلوبة بشكل صحيح.", "danger")
        return None
    values["notes"] = form_text("notes")
    return values


@cash_sales_bp.route("/")
@login_required
def list_cash_sales():
    rows = (
        scoped(CashSale.query, CashSale)
        .order_by(CashSale.date.desc(), CashSale.id.desc())
        .all()
    )

    total_purchase = ZERO
    total_selling = ZERO
    for row in rows:
        total_purchase += to_decimal(row.purchase_price)
        total_selling += row.totals.total_selling

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = db.session.get(CashSale, edit_id)

    return render_template(
        "cash_sales/list.html",
        rows=rows,
        total_purchase=total_purchase,
        total_selling=total_selling,
        total_profit=total_selling - total_purchase,
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
        today=date.today(),
    )


@cash_sales_bp.route("/new", methods=["POST"])
@login_required
def create_cash_sale():
    month = selected_month()
    if month is None:
        flash("لا يوجد شهر محدد. ابدأ شهراً جديداً أولاً.", "warning")
        return redirect(url_for("cash_sales.list_cash_sales"))

    values = _cash_sale_form()
    if values is None:
        return redirect(url_for("cash_sales.list_cash_sales", new=1))

    sale = CashSale(month_id=month.id, added_by=current_user.name, **values)
    try:
        db.session.add(sale)
        db.session.flush()
        log_action(sale, ACTION_CREATE, after=serialize_model(sale))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating cash sale failed")
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("cash_sales.list_cash_sales"))

    flash("تم الإضافة بنجاح.", "success")
    return redirect(url_for("cash_sales.list_cash_sales"))


@cash_sales_bp.route("/<int:sale_id>/edit", methods=["POST"])
@login_required
def edit_cash_sale(sale_id: int):
    sale = CashSale.query.get_or_404(sale_id)

    values = _cash_sale_form()
    if values is None:
        return redirect(url_for("cash_sales.list_cash_sales", edit=sale.id))

    before = serialize_model(sale)
    try:
        for key, value in values.items():
            setattr(sale, key, value)
        db.session.flush()
        log_action(sale, ACTION_UPDATE, before=before, after=serialize_model(sale))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating cash sale %s failed", sale_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("cash_sales.list_cash_sales"))

    flash("تم التعديل بنجاح.", "success")
    return redirect(url_for("cash_sales.list_cash_sales"))


@cash_sales_bp.route("/<int:sale_id>/delete", methods=["POST"])
@login_required
def delete_cash_sale(sale_id: int):
    sale = CashSale.query.get_or_404(sale_id)
    before = serialize_model(sale)

    try:
        db.session.delete(sale)
        db.session.flush()
        log_action(sale, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting cash sale %s failed", sale_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("cash_sales.list_cash_sales"))

    flash("تم الحذف بنجاح.", "success")
    return redirect(url_for("cash_sales.list_cash_sales"))
