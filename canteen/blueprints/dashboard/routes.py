"""
Dashboard: summary cards over every month.

The selected month scopes the record pages and the closing; the dashboard
totals all periods.
"""

from __future__ import annotations

from flask import Blueprint, render_template
from flask_login import login_required

from ...calculations import compute_dashboard
from ...models import CarriedGood, CashSale, Expense, InvoiceItem

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/")
@login_required
def index():
    stats = compute_dashboard(
        items=InvoiceItem.query.all(),
        cash_sales=CashSale.query.all(),
        carried=CarriedGood.query.all(),
        expenses=Expense.query.all(),
    )
    return render_template("dashboard/index.html", stats=stats)
