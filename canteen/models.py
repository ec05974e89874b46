"""
Canteen Accounting – Domain Models

Entities:
- Month (accounting period; exactly one may be current)
- User (login, role admin / accountant)
- Supplier -> Invoice -> InvoiceItem
- CashSale, CarriedGood, Expense (month-scoped flat records)
- AuditLog

IMPORTANT:
- Line totals (quantity, selling, profit) are derived properties, never columns.
  See canteen/calculations.py.
- Deleting an Invoice removes its items; deleting a Supplier removes its invoices.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from .calculations import (
    AMOUNT_PLACES,
    calculate_cash_sale_totals,
    calculate_item_totals,
    summarize_items,
    to_decimal,
)
from .extensions import db

ROLE_ADMIN = "admin"
ROLE_ACCOUNTANT = "accountant"
ROLES = (ROLE_ADMIN, ROLE_ACCOUNTANT)


# ---------------------------------------------------------------------
# Accounting period
# ---------------------------------------------------------------------
class Month(db.Model):
    """Accounting period every transactional row is filed under."""

    __tablename__ = "months"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    is_current = db.Column(db.Boolean, default=False, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # At most one current month.
    __table_args__ = (
        db.Index(
            "uq_months_single_current",
            "is_current",
            unique=True,
            sqlite_where=db.text("is_current = 1"),
            postgresql_where=db.text("is_current"),
        ),
    )

    def __repr__(self):
        return f"<Month {self.name}{' *' if self.is_current else ''}>"


# ---------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_ACCOUNTANT, index=True)

    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"


# ---------------------------------------------------------------------
# Suppliers & invoices
# ---------------------------------------------------------------------
class Supplier(db.Model):
    __tablename__ = "suppliers"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50))
    notes = db.Column(db.Text)

    month_id = db.Column(
        db.Integer,
        db.ForeignKey("months.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    month = db.relationship("Month")

    invoices = db.relationship(
        "Invoice",
        back_populates="supplier",
        cascade="all, delete-orphan",
    )

    @property
    def totals(self):
        """InvoiceTotals over every item of every invoice of this supplier."""
        return summarize_items(item for inv in self.invoices for item in inv.items)

    def __repr__(self):
        return f"<Supplier {self.name}>"


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.Integer, primary_key=True)

    supplier_id = db.Column(
        db.Integer,
        db.ForeignKey("suppliers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    invoice_number = db.Column(db.String(100), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, default=date.today, index=True)
    notes = db.Column(db.Text)

    created_by = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    month_id = db.Column(
        db.Integer,
        db.ForeignKey("months.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    supplier = db.relationship("Supplier", back_populates="invoices")
    creator = db.relationship("User", foreign_keys=[created_by])
    month = db.relationship("Month")

    items = db.relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )

    @property
    def supplier_name(self) -> str:
        """Blank when the supplier row is gone."""
        return self.supplier.name if self.supplier else ""

    @property
    def totals(self):
        return summarize_items(self.items)

    def __repr__(self):
        return f"<Invoice {self.invoice_number}>"


class InvoiceItem(db.Model):
    __tablename__ = "invoice_items"

    id = db.Column(db.Integer, primary_key=True)

    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    item_name = db.Column(db.String(255), nullable=False)

    quantity_per_carton = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)
    cartons_count = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)
    total_purchase_price = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)
    selling_price_per_piece = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)

    # Display name of the user who added the line
    added_by = db.Column(db.String(150))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    invoice = db.relationship("Invoice", back_populates="items")

    @property
    def totals(self):
        return calculate_item_totals(
            self.quantity_per_carton,
            self.cartons_count,
            self.total_purchase_price,
            self.selling_price_per_piece,
        )


# ---------------------------------------------------------------------
# Month-scoped flat records
# ---------------------------------------------------------------------
class CashSale(db.Model):
    __tablename__ = "cash_sales"

    id = db.Column(db.Integer, primary_key=True)

    item_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)
    # Line total paid for the goods
    purchase_price = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)
    selling_price_per_piece = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)

    date = db.Column(db.Date, nullable=False, default=date.today, index=True)
    notes = db.Column(db.Text)
    added_by = db.Column(db.String(150))

    month_id = db.Column(
        db.Integer,
        db.ForeignKey("months.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    @property
    def totals(self):
        return calculate_cash_sale_totals(self.quantity, self.purchase_price, self.selling_price_per_piece)


class CarriedGood(db.Model):
    """Inventory carried over, valued at quantity * selling price."""

    __tablename__ = "carried_goods"

    id = db.Column(db.Integer, primary_key=True)

    item_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    selling_price = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)

    date = db.Column(db.Date, nullable=False, default=date.today, index=True)
    notes = db.Column(db.Text)

    month_id = db.Column(
        db.Integer,
        db.ForeignKey("months.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    @property
    def total_value(self) -> Decimal:
        return to_decimal(self.quantity) * to_decimal(self.selling_price)


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)

    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(18, AMOUNT_PLACES), nullable=False, default=0)

    date = db.Column(db.Date, nullable=False, default=date.today, index=True)
    notes = db.Column(db.Text)

    month_id = db.Column(
        db.Integer,
        db.ForeignKey("months.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)


# ---------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------
class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    email_snapshot = db.Column(db.String(255), nullable=True)

    entity_type = db.Column(db.String(50), nullable=False, index=True)
    entity_id = db.Column(db.Integer, nullable=False, index=True)

    action = db.Column(db.String(20), nullable=False, index=True)

    before_data = db.Column(db.Text, nullable=True)
    after_data = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship("User", backref=db.backref("audit_entries", lazy=True))
