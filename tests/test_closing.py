from __future__ import annotations

from datetime import date

import pytest

from canteen.extensions import db
from canteen.models import CarriedGood, Expense, Invoice, InvoiceItem, Supplier


@pytest.fixture()
def month_data(app, month):
    """Goods delivered 1000, carried goods 100, expenses 50."""
    with app.app_context():
        supplier = Supplier(name="مورد المشروبات", month_id=month)
        db.session.add(supplier)
        db.session.flush()
        invoice = Invoice(supplier_id=supplier.id, invoice_number="C-1", date=date(2026, 3, 1), month_id=month)
        db.session.add(invoice)
        db.session.flush()
        db.session.add(InvoiceItem(
            invoice_id=invoice.id,
            item_name="مياه",
            quantity_per_carton=10,
            cartons_count=10,
            total_purchase_price=800,
            selling_price_per_piece=10,
        ))
        db.session.add(CarriedGood(item_name="مياه", quantity=10, selling_price=10, date=date(2026, 3, 31), month_id=month))
        db.session.add(Expense(description="نقل", amount=50, date=date(2026, 3, 15), month_id=month))
        db.session.commit()


CREDITS = {"credits_officers": "100", "credits_ncos": "50", "credits_soldiers": "50", "vouchers": "50"}


def test_get_shows_form_only(accountant_client, month_data):
    body = accountant_client.get("/closing/").get_data(as_text=True)
    assert 'name="cash"' in body
    assert "الميزان" not in body


def test_balanced(accountant_client, month_data):
    body = accountant_client.post("/closing/", data={"cash": "600", **CREDITS}).get_data(as_text=True)
    assert "الميزان متوازن" in body
    assert "مورد المشروبات" in body
    assert "1,000.00" in body


def test_shortfall(accountant_client, month_data):
    body = accountant_client.post("/closing/", data={"cash": "500", **CREDITS}).get_data(as_text=True)
    assert "عجز" in body
    assert "100.00" in body


def test_surplus_shown_as_positive_amount(accountant_client, month_data):
    body = accountant_client.post("/closing/", data={"cash": "700", **CREDITS}).get_data(as_text=True)
    assert "زيادة" in body
    assert "-100.00" not in body


def test_blank_optional_fields_count_as_zero(accountant_client, month_data):
    # 1000 = 850 + 100 carried + 50 expenses
    body = accountant_client.post("/closing/", data={"cash": "850"}).get_data(as_text=True)
    assert "الميزان متوازن" in body


def test_cash_is_required(accountant_client, month_data):
    body = accountant_client.post("/closing/", data=CREDITS).get_data(as_text=True)
    assert "برجاء إدخال النقدية" in body
    assert "الميزان متوازن" not in body


def test_invalid_number_is_rejected(accountant_client, month_data):
    body = accountant_client.post("/closing/", data={"cash": "600", "vouchers": "x"}).get_data(as_text=True)
    assert "برجاء إدخال أرقام صحيحة" in body


def test_print_layout(accountant_client, month_data):
    body = accountant_client.post("/closing/", data={"cash": "600", "print": "1", **CREDITS}).get_data(as_text=True)
    assert "window.print()" in body
    assert "الميزان متوازن" in body


def test_invoice_without_supplier_has_blank_name():
    assert Invoice(invoice_number="X").supplier_name == ""
