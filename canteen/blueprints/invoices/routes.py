"""
Invoice routes

- /invoices                      invoices of the selected month with totals
- /invoices/print?ids=1,2        printable bundle of selected invoices
- /invoices/<id>                 invoice detail + item lines CRUD
- /invoices/<id>/print           printable single invoice

Item lines store only their inputs; quantities, selling values and profit are
derived on display (InvoiceItem.totals).
"""

from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ...audit import ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, log_action, serialize_model
from ...calculations import combine_totals
from ...extensions import db
from ...models import Invoice, InvoiceItem
from ...months import scoped
from ...utils import form_text, parse_decimal, parse_id_list, parse_optional_int

logger = logging.getLogger(__name__)

invoices_bp = Blueprint("invoices", __name__, url_prefix="/invoices")

ITEM_NUMBER_FIELDS = (
    "quantity_per_carton",
    "cartons_count",
    "total_purchase_price",
    "selling_price_per_piece",
)


def _with_list_eagerloads(q):
    """Prevent N+1 in list pages."""
    return q.options(joinedload(Invoice.supplier), joinedload(Invoice.items))


# ---------------------------------------------------------------------
# Lists & print
# ---------------------------------------------------------------------
@invoices_bp.route("/")
@login_required
def list_invoices():
    invoices = (
        _with_list_eagerloads(scoped(Invoice.query, Invoice))
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .all()
    )
    rows = [(inv, inv.totals) for inv in invoices]
    return render_template(
        "invoices/list.html",
        rows=rows,
        page_totals=combine_totals(t for _, t in rows),
    )


@invoices_bp.route("/print")
@login_required
def print_invoices():
    """Printable bundle; unknown ids are skipped, order follows the ids given."""
    ids = parse_id_list(request.args.get("ids"))
    found = {}
    if ids:
        found = {
            inv.id: inv
            for inv in _with_list_eagerloads(Invoice.query.filter(Invoice.id.in_(ids))).all()
        }
    invoices = [found[i] for i in ids if i in found]

    return render_template(
        "invoices/print_many.html",
        invoices=invoices,
        grand_totals=combine_totals(inv.totals for inv in invoices),
    )


# ---------------------------------------------------------------------
# Detail & items
# ---------------------------------------------------------------------
@invoices_bp.route("/<int:invoice_id>")
@login_required
def invoice_detail(invoice_id: int):
    invoice = Invoice.query.get_or_404(invoice_id)

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = InvoiceItem.query.filter_by(id=edit_id, invoice_id=invoice.id).first()

    return render_template(
        "invoices/detail.html",
        invoice=invoice,
        totals=invoice.totals,
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
    )


@invoices_bp.route("/<int:invoice_id>/print")
@login_required
def print_invoice(invoice_id: int):
    invoice = Invoice.query.get_or_404(invoice_id)
    return render_template("invoices/print.html", invoice=invoice, totals=invoice.totals)


def _item_form():
    """
    Parse the item form. Every field is required; returns None (after flashing)
    when a field is missing or not a number.
    """
    item_name = form_text("item_name")
    values = {name: parse_decimal(request.form.get(name)) for name in ITEM_NUMBER_FIELDS}
    if not item_name or any(v is None for v in values.values()):
        flash("برجاء إدخال جميع بيانات الصنف بشكل صحيح.", "danger")
        return None
    values["item_name"] = item_name
    return values


@invoices_bp.route("/<int:invoice_id>/items/new", methods=["POST"])
@login_required
def add_item(invoice_id: int):
    invoice = Invoice.query.get_or_404(invoice_id)

    values = _item_form()
    if values is None:
        return redirect(url_for("invoices.invoice_detail", invoice_id=invoice.id, new=1))

    item = InvoiceItem(invoice_id=invoice.id, added_by=current_user.name, **values)
    try:
        db.session.add(item)
        db.session.flush()
        log_action(item, ACTION_CREATE, after=serialize_model(item))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Adding item to invoice %s failed", invoice.id)
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("invoices.invoice_detail", invoice_id=invoice.id))

    flash("تم إضافة الصنف بنجاح.", "success")
    return redirect(url_for("invoices.invoice_detail", invoice_id=invoice.id))


@invoices_bp.route("/<int:invoice_id>/items/<int:item_id>/edit", methods=["POST"])
@login_required
def edit_item(invoice_id: int, item_id: int):
    item = InvoiceItem.query.filter_by(id=item_id, invoice_id=invoice_id).first_or_404()

    values = _item_form()
    if values is None:
        return redirect(url_for("invoices.invoice_detail", invoice_id=invoice_id, edit=item.id))

    before = serialize_model(item)
    try:
        for key, value in values.items():
            setattr(item, key, value)
        db.session.flush()
        log_action(item, ACTION_UPDATE, before=before, after=serialize_model(item))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating invoice item %s failed", item_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("invoices.invoice_detail", invoice_id=invoice_id))

    flash("تم تعديل الصنف بنجاح.", "success")
    return redirect(url_for("invoices.invoice_detail", invoice_id=invoice_id))


@invoices_bp.route("/<int:invoice_id>/items/<int:item_id>/delete", methods=["POST"])
@login_required
def delete_item(invoice_id: int, item_id: int):
    item = InvoiceItem.query.filter_by(id=item_id, invoice_id=invoice_id).first_or_404()
    before = serialize_model(item)

    try:
        db.session.delete(item)
        db.session.flush()
        log_action(item, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting invoice item %s failed", item_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("invoices.invoice_detail", invoice_id=invoice_id))

    flash("تم حذف الصنف بنجاح.", "success")
    return redirect(url_for("invoices.invoice_detail", invoice_id=invoice_id))
