"""
canteen/calculations.py

Pure accounting arithmetic shared by every page:

- Invoice line totals (cartons -> pieces -> selling value -> profit)
- Cash sale totals
- Carried goods / expenses sums
- Monthly closing balance (goods delivered vs. what was handed in)

IMPORTANT:
- Totals are always derived from stored inputs, never stored themselves.
- No rounding or clamping here. Zero and negative values are valid inputs;
  a negative profit is a legitimate result. Formatting is a template concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

ZERO = Decimal("0")

# Decimal places stored for money and quantity columns.
AMOUNT_PLACES = 6

STATUS_BALANCED = "balanced"
STATUS_SHORTFALL = "shortfall"
STATUS_SURPLUS = "surplus"


def to_decimal(value) -> Decimal:
    """Convert Numeric/float/int/str/None to Decimal (None -> 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ---------------------------------------------------------------------
# Invoice lines
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ItemTotals:
    total_quantity: Decimal
    total_purchase: Decimal
    total_selling: Decimal
    profit: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    items_count: int
    total_purchase: Decimal
    total_selling: Decimal
    profit: Decimal


def calculate_item_totals(
    quantity_per_carton,
    cartons_count,
    total_purchase_price,
    selling_price_per_piece,
) -> ItemTotals:
    """
    Derive the totals of one invoice line.

        total_quantity = quantity_per_carton * cartons_count
        total_selling  = selling_price_per_piece * total_quantity
        profit         = total_selling - total_purchase_price
    """
    total_quantity = to_decimal(quantity_per_carton) * to_decimal(cartons_count)
    total_purchase = to_decimal(total_purchase_price)
    total_selling = to_decimal(selling_price_per_piece) * total_quantity
    return ItemTotals(
        total_quantity=total_quantity,
        total_purchase=total_purchase,
        total_selling=total_selling,
        profit=total_selling - total_purchase,
    )


def summarize_items(items: Iterable) -> InvoiceTotals:
    """
    Aggregate invoice lines (anything exposing the four input attributes).
    """
    count = 0
    purchase = ZERO
    selling = ZERO
    for item in items:
        totals = calculate_item_totals(
            item.quantity_per_carton,
            item.cartons_count,
            item.total_purchase_price,
            item.selling_price_per_piece,
        )
        count += 1
        purchase += totals.total_purchase
        selling += totals.total_selling

    return InvoiceTotals(
        items_count=count,
        total_purchase=purchase,
        total_selling=selling,
        profit=selling - purchase,
    )


def combine_totals(totals: Iterable[InvoiceTotals]) -> InvoiceTotals:
    """Sum several InvoiceTotals (e.g. all invoices of a supplier)."""
    count = 0
    purchase = ZERO
    selling = ZERO
    for t in totals:
        count += t.items_count
        purchase += t.total_purchase
        selling += t.total_selling
    return InvoiceTotals(count, purchase, selling, selling - purchase)


# ---------------------------------------------------------------------
# Cash sales, carried goods, expenses
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class CashSaleTotals:
    total_selling: Decimal
    profit: Decimal


def calculate_cash_sale_totals(quantity, purchase_price, selling_price_per_piece) -> CashSaleTotals:
    """purchase_price is the line total, selling price is per piece."""
    total_selling = to_decimal(selling_price_per_piece) * to_decimal(quantity)
    return CashSaleTotals(
        total_selling=total_selling,
        profit=total_selling - to_decimal(purchase_price),
    )


def carried_goods_value(rows: Iterable) -> Decimal:
    """Σ quantity * selling_price."""
    return sum(
        (to_decimal(r.quantity) * to_decimal(r.selling_price) for r in rows),
        ZERO,
    )


def expenses_total(rows: Iterable) -> Decimal:
    return sum((to_decimal(r.amount) for r in rows), ZERO)


# ---------------------------------------------------------------------
# Monthly closing
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ClosingInputs:
    """Amounts entered by the user at closing time (blank = 0)."""

    cash: Decimal = ZERO
    credits_officers: Decimal = ZERO
    credits_ncos: Decimal = ZERO
    credits_soldiers: Decimal = ZERO
    vouchers: Decimal = ZERO

    @property
    def total_credits(self) -> Decimal:
        return (
            to_decimal(self.credits_officers)
            + to_decimal(self.credits_ncos)
            + to_decimal(self.credits_soldiers)
        )


@dataclass(frozen=True)
class ClosingResult:
    goods_delivered: Decimal
    cash: Decimal
    vouchers: Decimal
    total_credits: Decimal
    carried_goods: Decimal
    expenses: Decimal
    right_side: Decimal
    difference: Decimal

    @property
    def status(self) -> str:
        if self.difference == 0:
            return STATUS_BALANCED
        if self.difference > 0:
            return STATUS_SHORTFALL
        return STATUS_SURPLUS

    @property
    def display_difference(self) -> Decimal:
        """Shortfall and surplus are both shown as a positive amount."""
        return abs(self.difference)


def compute_closing(goods_delivered, carried_goods, expenses, inputs: ClosingInputs) -> ClosingResult:
    """
    Two-sided balance:

        right_side = cash + credits + carried_goods + expenses + vouchers
        difference = goods_delivered - right_side

    difference > 0 is a shortfall, < 0 a surplus, 0 balanced.
    """
    goods = to_decimal(goods_delivered)
    carried = to_decimal(carried_goods)
    exp = to_decimal(expenses)
    cash = to_decimal(inputs.cash)
    vouchers = to_decimal(inputs.vouchers)
    credits = inputs.total_credits

    right_side = cash + credits + carried + exp + vouchers

    return ClosingResult(
        goods_delivered=goods,
        cash=cash,
        vouchers=vouchers,
        total_credits=credits,
        carried_goods=carried,
        expenses=exp,
        right_side=right_side,
        difference=goods - right_side,
    )


# ---------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DashboardStats:
    total_due_to_suppliers: Decimal
    total_profit: Decimal
    cash_sales_profit: Decimal
    carried_goods_deduction: Decimal
    expenses_deduction: Decimal

    @property
    def net_profit(self) -> Decimal:
        return (
            self.total_profit
            + self.cash_sales_profit
            - self.carried_goods_deduction
            - self.expenses_deduction
        )


def compute_dashboard(items: Iterable, cash_sales: Iterable, carried: Iterable, expenses: Iterable) -> DashboardStats:
    invoice_totals = summarize_items(items)

    cash_profit = ZERO
    for cs in cash_sales:
        cash_profit += calculate_cash_sale_totals(
            cs.quantity, cs.purchase_price, cs.selling_price_per_piece
        ).profit

    return DashboardStats(
        total_due_to_suppliers=invoice_totals.total_purchase,
        total_profit=invoice_totals.profit,
        cash_sales_profit=cash_profit,
        carried_goods_deduction=carried_goods_value(carried),
        expenses_deduction=expenses_total(expenses),
    )
