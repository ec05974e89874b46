"""Cash sales, carried goods and expenses: the month-scoped flat record pages."""

from __future__ import annotations

from datetime import date

from canteen.extensions import db
from canteen.models import CarriedGood, CashSale, Expense, Month


# --------------------------- cash sales ---------------------------

CASH_SALE = {
    "item_name": "شاي",
    "quantity": "20",
    "purchase_price": "80",
    "selling_price_per_piece": "5",
    "date": "2026-03-12",
}


def test_cash_sale_crud(app, accountant_client, month):
    resp = accountant_client.post("/cash-sales/new", data=CASH_SALE, follow_redirects=True)
    body = resp.get_data(as_text=True)
    assert "شاي" in body
    assert "100.00" in body  # selling
    assert "20.00" in body  # profit

    with app.app_context():
        sale = CashSale.query.one()
        sale_id = sale.id
        assert sale.month_id == month
        assert sale.added_by == "المحاسب"

    accountant_client.post(f"/cash-sales/{sale_id}/edit", data={**CASH_SALE, "quantity": "30", "notes": "مراجعة"})
    with app.app_context():
        sale = db.session.get(CashSale, sale_id)
        assert sale.quantity == 30
        assert sale.notes == "مراجعة"
        assert sale.item_name == "شاي"
        assert sale.totals.profit == 70

    resp = accountant_client.post(f"/cash-sales/{sale_id}/delete", follow_redirects=True)
    assert "شاي" not in resp.get_data(as_text=True)
    with app.app_context():
        assert CashSale.query.count() == 0


def test_cash_sale_requires_all_fields(app, accountant_client):
    resp = accountant_client.post("/cash-sales/new", data={**CASH_SALE, "date": ""})
    assert "new=1" in resp.headers["Location"]
    with app.app_context():
        assert CashSale.query.count() == 0


def test_cash_sales_page_totals(accountant_client):
    accountant_client.post("/cash-sales/new", data=CASH_SALE)
    accountant_client.post("/cash-sales/new", data={**CASH_SALE, "item_name": "قهوة", "purchase_price": "150"})
    body = accountant_client.get("/cash-sales/").get_data(as_text=True)
    assert "230.00" in body  # purchase 80 + 150
    assert "200.00" in body  # selling 100 + 100
    assert "-30.00" in body  # profit


# --------------------------- carried goods ---------------------------

def test_carried_good_crud(app, accountant_client, month):
    resp = accountant_client.post(
        "/carried-goods/new",
        data={"item_name": "بسكويت", "quantity": "4", "selling_price": "2.5", "date": "2026-03-31"},
        follow_redirects=True,
    )
    body = resp.get_data(as_text=True)
    assert "بسكويت" in body
    assert "10.00" in body

    with app.app_context():
        good = CarriedGood.query.one()
        good_id = good.id
        assert good.month_id == month

    accountant_client.post(
        f"/carried-goods/{good_id}/edit",
        data={"item_name": "بسكويت", "quantity": "6", "selling_price": "2.5", "date": "2026-03-31"},
    )
    with app.app_context():
        assert db.session.get(CarriedGood, good_id).total_value == 15

    accountant_client.post(f"/carried-goods/{good_id}/delete")
    with app.app_context():
        assert CarriedGood.query.count() == 0


def test_carried_good_quantity_must_be_whole(app, accountant_client):
    accountant_client.post(
        "/carried-goods/new",
        data={"item_name": "بسكويت", "quantity": "1.5", "selling_price": "2", "date": "2026-03-31"},
    )
    with app.app_context():
        assert CarriedGood.query.count() == 0


# --------------------------- expenses ---------------------------

def test_expense_crud(app, accountant_client, month):
    accountant_client.post("/expenses/new", data={"description": "كهرباء", "amount": "120.5", "date": "2026-03-02"})
    accountant_client.post("/expenses/new", data={"description": "نظافة", "amount": "30", "date": "2026-03-03"})

    body = accountant_client.get("/expenses/").get_data(as_text=True)
    assert "150.50" in body
    assert body.index("نظافة") < body.index("كهرباء")  # date desc

    with app.app_context():
        expense_id = Expense.query.filter_by(description="كهرباء").one().id

    accountant_client.post(
        f"/expenses/{expense_id}/edit",
        data={"description": "كهرباء مارس", "amount": "120.5", "date": "2026-03-02"},
    )
    with app.app_context():
        expense = db.session.get(Expense, expense_id)
        assert expense.description == "كهرباء مارس"
        assert expense.month_id == month

    resp = accountant_client.post(f"/expenses/{expense_id}/delete", follow_redirects=True)
    assert "كهرباء مارس" not in resp.get_data(as_text=True)


def test_records_of_other_months_are_hidden(app, accountant_client):
    with app.app_context():
        other = Month(name="فبراير 2026")
        db.session.add(other)
        db.session.flush()
        db.session.add(CashSale(item_name="صنف قديم", quantity=1, purchase_price=1,
                                selling_price_per_piece=1, date=date(2026, 2, 1), month_id=other.id))
        db.session.add(CarriedGood(item_name="مرحل قديم", quantity=1, selling_price=1,
                                   date=date(2026, 2, 1), month_id=other.id))
        db.session.commit()

    assert "صنف قديم" not in accountant_client.get("/cash-sales/").get_data(as_text=True)
    assert "مرحل قديم" not in accountant_client.get("/carried-goods/").get_data(as_text=True)


def test_unknown_record_is_404(accountant_client):
    assert accountant_client.post("/expenses/999/delete").status_code == 404
    assert accountant_client.post("/cash-sales/999/edit", data=CASH_SALE).status_code == 404
    assert accountant_client.post("/carried-goods/999/delete").status_code == 404
