"""
Monthly closing (التقفيل الشهري).

GET shows the input form only. The balance is computed on an explicit POST
and rendered in the same page (or the print layout when print=1 is sent);
nothing from a previous submission is ever shown again.
"""

from __future__ import annotations

import logging

from flask import Blueprint, flash, render_template, request
from flask_login import login_required
from sqlalchemy.orm import joinedload

from ...calculations import (
    ClosingInputs,
    ZERO,
    carried_goods_value,
    combine_totals,
    compute_closing,
    expenses_total,
)
from ...models import CarriedGood, Expense, Invoice
from ...months import scoped
from ...utils import parse_decimal

logger = logging.getLogger(__name__)

closing_bp = Blueprint("closing", __name__, url_prefix="/closing")

OPTIONAL_INPUTS = ("credits_officers", "credits_ncos", "credits_soldiers", "vouchers")


def _invoice_summaries():
    invoices = (
        scoped(Invoice.query, Invoice)
        .options(joinedload(Invoice.supplier), joinedload(Invoice.items))
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .all()
    )
    return [(inv, inv.totals) for inv in invoices]


def _closing_inputs():
    """
    ClosingInputs from the form, or None (after flashing) when cash is missing
    or any field is not a number. Blank optional fields count as zero.
    """
    cash = parse_decimal(request.form.get("cash"), places=None)
    if cash is None:
        flash("برجاء إدخال النقدية.", "danger")
        return None

    values = {}
    for name in OPTIONAL_INPUTS:
        raw = (request.form.get(name) or "").strip()
        if not raw:
            values[name] = ZERO
            continue
        parsed = parse_decimal(raw, places=None)
        if parsed is None:
            flash("برجاء إدخال أرقام صحيحة.", "danger")
            return None
        values[name] = parsed

    return ClosingInputs(cash=cash, **values)


@closing_bp.route("/", methods=["GET", "POST"])
@login_required
def monthly_closing():
    rows = _invoice_summaries()
    invoice_totals = combine_totals(t for _, t in rows)
    carried = carried_goods_value(scoped(CarriedGood.query, CarriedGood).all())
    expenses = expenses_total(scoped(Expense.query, Expense).all())

    result = None
    inputs = None
    if request.method == "POST":
        inputs = _closing_inputs()
        if inputs is not None:
            result = compute_closing(invoice_totals.total_selling, carried, expenses, inputs)
            logger.info("Closing computed: difference=%s status=%s", result.difference, result.status)

    template = "closing/print.html" if result is not None and request.form.get("print") else "closing/index.html"
    return render_template(
        template,
        rows=rows,
        invoice_totals=invoice_totals,
        carried_total=carried,
        expenses_total=expenses,
        inputs=inputs,
        result=result,
        form=request.form,
    )
