from datetime import date

from conftest import API


async def test_partial_then_full_payment(client, owner, invoice):
    headers = owner["headers"]
    url = f"{API}/invoices/{invoice['id']}/payments"

    first = await client.post(url, json={"amount": 1500, "payment_method": "bkash", "reference": "TX-1"}, headers=headers)
    assert first.status_code == 201, first.text
    receipt = first.json()
    assert receipt["paid_amount"] == 1500
    assert receipt["due_amount"] == 3000
    assert receipt["status"] == "partial"
    assert receipt["payment"]["payment_method"] == "bkash"

    second = await client.post(url, json={"amount": 3000}, headers=headers)
    assert second.json()["status"] == "paid"
    assert second.json()["due_amount"] == 0

    refreshed = (await client.get(f"{API}/invoices/{invoice['id']}", headers=headers)).json()
    assert refreshed["status"] == "paid"
    assert refreshed["paid_amount"] == 4500

    payments = await client.get(url, headers=headers)
    assert sorted(p["amount"] for p in payments.json()) == [1500, 3000]


async def test_overpayment_is_rejected(client, owner, invoice):
    response = await client.post(
        f"{API}/invoices/{invoice['id']}/payments", json={"amount": 4500.01}, headers=owner["headers"]
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Payment amount cannot exceed remaining due amount"


async def test_non_positive_amount_fails_validation(client, owner, invoice):
    response = await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 0}, headers=owner["headers"])
    assert response.status_code == 422


async def test_deleting_a_payment_restores_the_due_amount(client, owner, invoice):
    headers = owner["headers"]
    paid = await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 4500}, headers=headers)
    payment_id = paid.json()["payment"]["id"]

    deleted = await client.delete(f"{API}/payments/{payment_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["amount"] == 4500

    refreshed = (await client.get(f"{API}/invoices/{invoice['id']}", headers=headers)).json()
    assert refreshed["paid_amount"] == 0
    assert refreshed["status"] == "unpaid"


async def test_payment_list_and_stats(client, owner, org, customer, invoice):
    headers = owner["headers"]
    await client.post(
        f"{API}/invoices/{invoice['id']}/payments",
        json={"amount": 500, "payment_date": date.today().isoformat()},
        headers=headers,
    )

    listed = await client.get(f"{API}/payments/", params={"organization_id": org["id"]}, headers=headers)
    assert listed.status_code == 200
    entry = listed.json()[0]
    assert entry["invoice_number"] == invoice["invoice_number"]
    assert entry["customer_name"] == customer["name"]

    stats = await client.get(f"{API}/payments/stats", params={"organization_id": org["id"]}, headers=headers)
    assert stats.json() == {
        "total_received_this_month": 500,
        "today_collections": 500,
        "pending_due": 4000,
        "overdue_amount": 0,
    }


async def test_accounts_can_record_but_sales_staff_cannot(client, invoice, add_member):
    accounts = await add_member("accounts")
    sales = await add_member("sales_staff")
    url = f"{API}/invoices/{invoice['id']}/payments"

    assert (await client.post(url, json={"amount": 100}, headers=accounts)).status_code == 201
    denied = await client.post(url, json={"amount": 100}, headers=sales)
    assert denied.status_code == 403
    assert (await client.get(url, headers=sales)).status_code == 200
