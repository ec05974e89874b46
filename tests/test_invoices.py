from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from canteen.extensions import db
from canteen.models import Invoice, InvoiceItem, Supplier

ITEM = {
    "item_name": "عصير مانجو",
    "quantity_per_carton": "12",
    "cartons_count": "5",
    "total_purchase_price": "300",
    "selling_price_per_piece": "6",
}


@pytest.fixture()
def invoice_id(app, month, users):
    with app.app_context():
        supplier = Supplier(name="مورد العصائر", month_id=month)
        db.session.add(supplier)
        db.session.flush()
        invoice = Invoice(
            supplier_id=supplier.id,
            invoice_number="INV-100",
            date=date(2026, 3, 10),
            created_by=users["admin"],
            month_id=month,
        )
        db.session.add(invoice)
        db.session.commit()
        return invoice.id


def test_add_item_shows_derived_totals(app, accountant_client, invoice_id):
    resp = accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM, follow_redirects=True)
    body = resp.get_data(as_text=True)
    assert "تم إضافة الصنف بنجاح" in body
    assert "عصير مانجو" in body
    assert "360.00" in body  # selling
    assert "60.00" in body  # profit

    with app.app_context():
        item = InvoiceItem.query.one()
        assert item.added_by == "المحاسب"
        assert item.totals.total_quantity == 60


def test_add_item_rejects_missing_or_bad_numbers(app, accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data={**ITEM, "cartons_count": ""})
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data={**ITEM, "total_purchase_price": "abc"})
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data={**ITEM, "item_name": " "})
    with app.app_context():
        assert InvoiceItem.query.count() == 0


def test_sub_cent_selling_price_is_stored_exactly(app, accountant_client, invoice_id):
    data = {
        **ITEM,
        "quantity_per_carton": "8",
        "cartons_count": "100",
        "total_purchase_price": "90",
        "selling_price_per_piece": "0.125",
    }
    resp = accountant_client.post(f"/invoices/{invoice_id}/items/new", data=data, follow_redirects=True)
    body = resp.get_data(as_text=True)
    assert "100.00" in body
    assert "10.00" in body
    assert "0.125" in body

    with app.app_context():
        item = InvoiceItem.query.one()
        assert item.selling_price_per_piece == Decimal("0.125")
        assert item.totals.total_selling == 100
        assert item.totals.profit == 10


def test_add_item_rejects_more_places_than_stored(app, accountant_client, invoice_id):
    resp = accountant_client.post(
        f"/invoices/{invoice_id}/items/new",
        data={**ITEM, "selling_price_per_piece": "0.1234567"},
        follow_redirects=True,
    )
    assert "برجاء إدخال جميع بيانات الصنف بشكل صحيح" in resp.get_data(as_text=True)
    with app.app_context():
        assert InvoiceItem.query.count() == 0


def test_edit_item_updates_submitted_fields(app, accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    with app.app_context():
        item_id = InvoiceItem.query.one().id

    accountant_client.post(
        f"/invoices/{invoice_id}/items/{item_id}/edit",
        data={**ITEM, "item_name": "عصير جوافة", "selling_price_per_piece": "7"},
    )
    with app.app_context():
        item = db.session.get(InvoiceItem, item_id)
        assert item.item_name == "عصير جوافة"
        assert item.selling_price_per_piece == 7
        assert item.quantity_per_carton == 12
        assert item.totals.profit == 120


def test_delete_item(app, accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    with app.app_context():
        item_id = InvoiceItem.query.one().id

    resp = accountant_client.post(f"/invoices/{invoice_id}/items/{item_id}/delete", follow_redirects=True)
    assert "عصير مانجو" not in resp.get_data(as_text=True)
    with app.app_context():
        assert InvoiceItem.query.count() == 0


def test_item_of_another_invoice_is_404(app, accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    with app.app_context():
        item_id = InvoiceItem.query.one().id
    assert accountant_client.post(f"/invoices/999/items/{item_id}/delete").status_code == 404


def test_deleting_invoice_deletes_its_items(app, accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    with app.app_context():
        supplier_id = db.session.get(Invoice, invoice_id).supplier_id

    accountant_client.post(f"/suppliers/{supplier_id}/invoices/{invoice_id}/delete")
    with app.app_context():
        assert db.session.get(Invoice, invoice_id) is None
        assert InvoiceItem.query.count() == 0


def test_invoice_list_has_supplier_and_totals(accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    body = accountant_client.get("/invoices/").get_data(as_text=True)
    assert "INV-100" in body
    assert "مورد العصائر" in body
    assert "360.00" in body


def test_invoice_list_is_month_scoped(app, accountant_client, invoice_id):
    with app.app_context():
        db.session.get(Invoice, invoice_id).month_id = None
        db.session.commit()
    assert "INV-100" not in accountant_client.get("/invoices/").get_data(as_text=True)


def test_print_single_invoice(accountant_client, invoice_id):
    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    resp = accountant_client.get(f"/invoices/{invoice_id}/print")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "INV-100" in body
    assert "window.print()" in body


def test_print_selected_invoices(app, accountant_client, invoice_id, month):
    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        second = Invoice(
            supplier_id=invoice.supplier_id,
            invoice_number="INV-200",
            date=date(2026, 3, 11),
            month_id=month,
        )
        db.session.add(second)
        db.session.commit()
        second_id = second.id

    accountant_client.post(f"/invoices/{invoice_id}/items/new", data=ITEM)
    accountant_client.post(f"/invoices/{second_id}/items/new", data={**ITEM, "total_purchase_price": "200"})

    body = accountant_client.get(f"/invoices/print?ids={second_id},{invoice_id},bogus").get_data(as_text=True)
    assert body.index("INV-200") < body.index("INV-100")
    assert "720.00" in body  # grand selling
    assert "500.00" in body  # grand purchase


def test_print_without_selection(accountant_client):
    resp = accountant_client.get("/invoices/print")
    assert resp.status_code == 200
    assert "لم يتم اختيار فواتير" in resp.get_data(as_text=True)
