"""
Supplier routes

- Suppliers of the selected month, with invoice count / purchase / profit
- Supplier CRUD
- A supplier's invoices (with totals) and invoice header CRUD

Every mutation: validate -> write -> flush -> audit -> commit, then redirect
back to the list. Failures roll back and are reported with flash().
"""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ...audit import ACTION_CREATE, ACTION_DELETE, ACTION_UPDATE, log_action, serialize_model
from ...calculations import combine_totals
from ...extensions import db
from ...models import Invoice, Supplier
from ...months import scoped, selected_month
from ...utils import form_text, parse_date, parse_optional_int

logger = logging.getLogger(__name__)

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/suppliers")


def _no_month_redirect(endpoint: str, **values):
    flash("لا يوجد شهر محدد. ابدأ شهراً جديداً أولاً.", "warning")
    return redirect(url_for(endpoint, **values))


# ---------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------
@suppliers_bp.route("/")
@login_required
def list_suppliers():
    suppliers = (
        scoped(Supplier.query, Supplier)
        .options(joinedload(Supplier.invoices).joinedload(Invoice.items))
        .order_by(Supplier.created_at.desc(), Supplier.id.desc())
        .all()
    )

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = db.session.get(Supplier, edit_id)

    return render_template(
        "suppliers/list.html",
        suppliers=suppliers,
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
    )


@suppliers_bp.route("/new", methods=["POST"])
@login_required
def create_supplier():
    month = selected_month()
    if month is None:
        return _no_month_redirect("suppliers.list_suppliers")

    name = form_text("name")
    if not name:
        flash("اسم المورد مطلوب.", "danger")
        return redirect(url_for("suppliers.list_suppliers", new=1))

    supplier = Supplier(
        name=name,
        phone=form_text("phone"),
        notes=form_text("notes"),
        month_id=month.id,
    )
    try:
        db.session.add(supplier)
        db.session.flush()
        log_action(supplier, ACTION_CREATE, after=serialize_model(supplier))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating supplier %r failed", name)
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("suppliers.list_suppliers"))

    flash("تم إضافة المورد بنجاح.", "success")
    return redirect(url_for("suppliers.list_suppliers"))


@suppliers_bp.route("/<int:supplier_id>/edit", methods=["POST"])
@login_required
def edit_supplier(supplier_id: int):
    supplier = Supplier.query.get_or_404(supplier_id)

    name = form_text("name")
    if not name:
        flash("اسم المورد مطلوب.", "danger")
        return redirect(url_for("suppliers.list_suppliers", edit=supplier.id))

    before = serialize_model(supplier)
    try:
        supplier.name = name
        supplier.phone = form_text("phone")
        supplier.notes = form_text("notes")
        db.session.flush()
        log_action(supplier, ACTION_UPDATE, before=before, after=serialize_model(supplier))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating supplier %s failed", supplier_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("suppliers.list_suppliers"))

    flash("تم تعديل المورد بنجاح.", "success")
    return redirect(url_for("suppliers.list_suppliers"))


@suppliers_bp.route("/<int:supplier_id>/delete", methods=["POST"])
@login_required
def delete_supplier(supplier_id: int):
    """Delete a supplier together with its invoices and their items."""
    supplier = Supplier.query.get_or_404(supplier_id)
    before = serialize_model(supplier)

    try:
        db.session.delete(supplier)
        db.session.flush()
        log_action(supplier, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting supplier %s failed", supplier_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("suppliers.list_suppliers"))

    flash("تم حذف المورد بنجاح.", "success")
    return redirect(url_for("suppliers.list_suppliers"))


# ---------------------------------------------------------------------
# Supplier invoices
# ---------------------------------------------------------------------
@suppliers_bp.route("/<int:supplier_id>/invoices")
@login_required
def supplier_invoices(supplier_id: int):
    supplier = Supplier.query.get_or_404(supplier_id)

    invoices = (
        Invoice.query.filter_by(supplier_id=supplier.id)
        .options(joinedload(Invoice.items))
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .all()
    )
    rows = [(inv, inv.totals) for inv in invoices]

    editing = None
    edit_id = parse_optional_int(request.args.get("edit"))
    if edit_id is not None:
        editing = Invoice.query.filter_by(id=edit_id, supplier_id=supplier.id).first()

    return render_template(
        "suppliers/invoices.html",
        supplier=supplier,
        rows=rows,
        page_totals=combine_totals(t for _, t in rows),
        editing=editing,
        show_form=bool(editing or request.args.get("new")),
        today=date.today(),
    )


def _invoice_form():
    """(invoice_number, date) or None with a flash when invalid."""
    number = form_text("invoice_number")
    invoice_date = parse_date(request.form.get("date"))
    if not number or invoice_date is None:
        flash("رقم الفاتورة والتاريخ مطلوبان.", "danger")
        return None
    return number, invoice_date


@suppliers_bp.route("/<int:supplier_id>/invoices/new", methods=["POST"])
@login_required
def create_invoice(supplier_id: int):
    supplier = Supplier.query.get_or_404(supplier_id)
    month = selected_month()
    if month is None:
        return _no_month_redirect("suppliers.supplier_invoices", supplier_id=supplier.id)

    parsed = _invoice_form()
    if parsed is None:
        return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier.id, new=1))
    number, invoice_date = parsed

    invoice = Invoice(
        supplier_id=supplier.id,
        invoice_number=number,
        date=invoice_date,
        notes=form_text("notes"),
        created_by=current_user.id,
        month_id=month.id,
    )
    try:
        db.session.add(invoice)
        db.session.flush()
        log_action(invoice, ACTION_CREATE, after=serialize_model(invoice))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Creating invoice %r for supplier %s failed", number, supplier.id)
        flash("حدث خطأ في الإضافة.", "danger")
        return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier.id))

    flash("تم إضافة الفاتورة بنجاح.", "success")
    return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier.id))


@suppliers_bp.route("/<int:supplier_id>/invoices/<int:invoice_id>/edit", methods=["POST"])
@login_required
def edit_invoice(supplier_id: int, invoice_id: int):
    invoice = Invoice.query.filter_by(id=invoice_id, supplier_id=supplier_id).first_or_404()

    parsed = _invoice_form()
    if parsed is None:
        return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier_id, edit=invoice.id))
    number, invoice_date = parsed

    before = serialize_model(invoice)
    try:
        invoice.invoice_number = number
        invoice.date = invoice_date
        invoice.notes = form_text("notes")
        db.session.flush()
        log_action(invoice, ACTION_UPDATE, before=before, after=serialize_model(invoice))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating invoice %s failed", invoice_id)
        flash("حدث خطأ في التعديل.", "danger")
        return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier_id))

    flash("تم تعديل الفاتورة بنجاح.", "success")
    return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier_id))


@suppliers_bp.route("/<int:supplier_id>/invoices/<int:invoice_id>/delete", methods=["POST"])
@login_required
def delete_invoice(supplier_id: int, invoice_id: int):
    """Delete an invoice; its items go with it."""
    invoice = Invoice.query.filter_by(id=invoice_id, supplier_id=supplier_id).first_or_404()
    before = serialize_model(invoice)

    try:
        db.session.delete(invoice)
        db.session.flush()
        log_action(invoice, ACTION_DELETE, before=before)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Deleting invoice %s failed", invoice_id)
        flash("حدث خطأ في الحذف.", "danger")
        return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier_id))

    flash("تم حذف الفاتورة بنجاح.", "success")
    return redirect(url_for("suppliers.supplier_invoices", supplier_id=supplier_id))
