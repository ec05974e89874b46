"""
Carried goods (البضاعة المرحلة) of the selected month.

Each row is valued at quantity * selling price; the page total is the amount
deducted in the monthly closing.
"""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ...audit import ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, log_action, serialize_model
from ...calculations import carried_goods_value
from ...extensions import db
from ...models import CarriedGood
from ...months import scoped, selected_month
from ...utils import form_text, parse_date, parse_decimal, parse_optional_int

logger = logging.getLogger(__name__)

carried_goods_bp = Blueprint("carried_goods", __name__, url_prefix="/carried-goods")


def _carried_good_form():
    """Quantity is a whole number of pieces."""
    values = {
        "item_name": form_text("item_name"),
        "quantity": parse_optional_int(request.form.get("quantity")),
        "selling_price": parse_decimal(request.form.get("selling_price")),
        "date": parse_date(request.form.get("date")),
    }
    if any(v is None for v in values.values()):
        flash("برجاء إدخال جميع البيانات المطلوبة بشكل صحيح.", "danger")
        return None
    values["notes"] = form_text("notes")
    return values


@carried_goods_bp.route("/")
@login_required
def list_carried_goods():
    rows = (
        scoped(CarriedGood.query, CarriedGood)
        .order_by(CarriedGood.date.desc(), CarriedGood.id.desc())
        .all()
    )

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = db.session.get(CarriedGood, edit_id)

    return render_template(
        "carried_goods/list.html",
        rows=rows,
        total_value=carried_goods_value(rows),
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
        today=date.today(),
    )


@carried_goods_bp.route("/new", methods=["POST"])
@login_required
def create_carried_good():
    month = selected_month()
    if month is None:
        flash("لا يوجد شهر محدد. ابدأ شهراً جديداً أولاً.", "warning")
        return redirect(url_for("carried_goods.list_carried_goods"))

    values = _carried_good_form()
    if values is None:
        return redirect(url_for("carried_goods.list_carried_goods", new=1))

    good = CarriedGood(month_id=month.id, **values)
    try:
        db.session.add(good)
        db.session.flush()
        log_action(good, ACTION_CREATE, after=serialize_model(good))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating carried good failed")
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("carried_goods.list_carried_goods"))

    flash("تم الإضافة بنجاح.", "success")
    return redirect(url_for("carried_goods.list_carried_goods"))


@carried_goods_bp.route("/<int:good_id>/edit", methods=["POST"])
@login_required
def edit_carried_good(good_id: int):
    good = CarriedGood.query.get_or_404(good_id)

    values = _carried_good_form()
    if values is None:
        return redirect(url_for("carried_goods.list_carried_goods", edit=good.id))

    before = serialize_model(good)
    try:
        for key, value in values.items():
            setattr(good, key, value)
        db.session.flush()
        log_action(good, ACTION_UPDATE, before=before, after=serialize_model(good))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating carried good %s failed", good_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("carried_goods.list_carried_goods"))

    flash("تم التعديل بنجاح.", "success")
    return redirect(url_for("carried_goods.list_carried_goods"))


@carried_goods_bp.route("/<int:good_id>/delete", methods=["POST"])
@login_required
def delete_carried_good(good_id: int):
    good = CarriedGood.query.get_or_404(good_id)
    before = serialize_model(good)

    try:
        db.session.delete(good)
        db.session.flush()
        log_action(good, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting carried good %s failed", good_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("carried_goods.list_carried_goods"))

    flash("تم الحذف بنجاح.", "success")
    return redirect(url_for("carried_goods.list_carried_goods"))
