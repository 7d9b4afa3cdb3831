import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.crud import crud_quotation
from invoicedesk.models.organization import Organization

from conftest import API

ITEMS = [
    {"description": "Brochures", "quantity": 200, "unit_price": 12},
    {"description": "Design", "quantity": 1, "unit_price": 1500},
]


async def create_quotation(client, headers, org, customer=None, **extra):
    payload = {"organization_id": org["id"], "items": ITEMS, **extra}
    if customer:
        payload["customer_id"] = customer["id"]
    response = await client.post(f"{API}/quotations/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_quotation_numbering_and_totals(client, owner, org, customer):
    first = await create_quotation(client, owner["headers"], org, customer, discount=100)
    second = await create_quotation(client, owner["headers"], org, customer)
    assert first["quotation_number"] == "QT-0001"
    assert second["quotation_number"] == "QT-0002"
    assert first["subtotal"] == 3900
    assert first["total"] == 3800
    assert first["status"] == "pending"


async def test_status_update_and_list_filter(client, owner, org, customer):
    headers = owner["headers"]
    quotation = await create_quotation(client, headers, org, customer)
    await create_quotation(client, headers, org, customer)

    response = await client.put(f"{API}/quotations/{quotation['id']}/status", json={"status": "rejected"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"

    rejected = await client.get(
        f"{API}/quotations/", params={"organization_id": org["id"], "status": "rejected"}, headers=headers
    )
    assert [q["id"] for q in rejected.json()] == [quotation["id"]]


async def test_convert_quotation_to_invoice(client, owner, org, customer):
    headers = owner["headers"]
    quotation = await create_quotation(client, headers, org, customer)

    response = await client.post(f"{API}/quotations/{quotation['id']}/convert", headers=headers)
    assert response.status_code == 201, response.text
    invoice = response.json()
    assert invoice["invoice_number"] == "INV-0001"
    assert invoice["total"] == quotation["total"]
    assert [i["description"] for i in invoice["items"]] == ["Brochures", "Design"]

    refreshed = (await client.get(f"{API}/quotations/{quotation['id']}", headers=headers)).json()
    assert refreshed["status"] == "accepted"
    assert refreshed["invoice_id"] == invoice["id"]

    again = await client.post(f"{API}/quotations/{quotation['id']}/convert", headers=headers)
    assert again.status_code == 400
    assert "already been converted" in again.json()["detail"]


async def test_rejected_or_customerless_quotations_cannot_convert(client, owner, org, customer):
    headers = owner["headers"]
    no_customer = await create_quotation(client, headers, org)
    response = await client.post(f"{API}/quotations/{no_customer['id']}/convert", headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Assign a customer before converting the quotation."

    rejected = await create_quotation(client, headers, org, customer)
    await client.put(f"{API}/quotations/{rejected['id']}/status", json={"status": "rejected"}, headers=headers)
    response = await client.post(f"{API}/quotations/{rejected['id']}/convert", headers=headers)
    assert response.status_code == 400


async def test_designer_can_view_but_not_convert(client, owner, org, customer, add_member):
    quotation = await create_quotation(client, owner["headers"], org, customer)
    designer = await add_member("designer")

    assert (await client.get(f"{API}/quotations/{quotation['id']}", headers=designer)).status_code == 200
    assert (await client.post(f"{API}/quotations/{quotation['id']}/convert", headers=designer)).status_code == 403


async def test_price_calculation_pricing_and_conversion(client, owner, org, customer):
    headers = owner["headers"]
    response = await client.post(
        f"{API}/price-calculations/",
        json={
            "organization_id": org["id"],
            "customer_id": customer["id"],
            "job_description": "Flyers A5",
            "quantity": 100,
            "margin_percent": 25,
            "plate_qty": 1,
            "plate_price": 400,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    calculation = response.json()
    assert calculation["costing_total"] == 400
    assert calculation["margin_amount"] == 100
    assert calculation["final_price"] == 500
    assert calculation["price_per_piece"] == 5

    converted = await client.post(
        f"{API}/price-calculations/{calculation['id']}/convert", json={"target": "quotation"}, headers=headers
    )
    assert converted.status_code == 201, converted.text
    assert converted.json()["document_number"] == "QT-0001"

    quotation = (await client.get(f"{API}/quotations/{converted.json()['document_id']}", headers=headers)).json()
    assert quotation["total"] == 500
    assert quotation["items"][0]["description"] == "Flyers A5"

    converted = await client.post(
        f"{API}/price-calculations/{calculation['id']}/convert", json={"target": "invoice"}, headers=headers
    )
    assert converted.json()["document_number"] == "INV-0001"


async def test_price_calculation_without_customer_cannot_become_invoice(client, owner, org):
    headers = owner["headers"]
    calculation = await client.post(
        f"{API}/price-calculations/",
        json={"organization_id": org["id"], "job_description": "Stickers", "print_qty": 1, "print_price": 100},
        headers=headers,
    )
    response = await client.post(
        f"{API}/price-calculations/{calculation.json()['id']}/convert", json={"target": "invoice"}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Assign a customer before creating an invoice."


async def test_converted_documents_bill_the_exact_final_price(client, owner, org, customer):
    headers = owner["headers"]
    calculation = (await client.post(
        f"{API}/price-calculations/",
        json={
            "organization_id": org["id"],
            "customer_id": customer["id"],
            "job_description": "Wedding cards",
            "quantity": 3,
            "margin_percent": 0,
            "plate_qty": 1,
            "plate_price": 100,
        },
        headers=headers,
    )).json()
    assert calculation["final_price"] == 100
    assert calculation["price_per_piece"] == 33.33

    converted = await client.post(
        f"{API}/price-calculations/{calculation['id']}/convert", json={"target": "invoice"}, headers=headers
    )
    assert converted.status_code == 201, converted.text
    invoice = (await client.get(f"{API}/invoices/{converted.json()['document_id']}", headers=headers)).json()
    assert invoice["items"][0]["unit_price"] == 33.33
    assert invoice["items"][0]["total"] == 100
    assert invoice["subtotal"] == 100
    assert invoice["total"] == 100

    converted = await client.post(
        f"{API}/price-calculations/{calculation['id']}/convert", json={"target": "quotation"}, headers=headers
    )
    quotation = (await client.get(f"{API}/quotations/{converted.json()['document_id']}", headers=headers)).json()
    assert quotation["total"] == 100

    # The quoted amount carries over when the quotation becomes an invoice
    response = await client.post(f"{API}/quotations/{quotation['id']}/convert", headers=headers)
    assert response.status_code == 201, response.text
    assert response.json()["total"] == 100
    assert response.json()["items"][0]["total"] == 100


async def test_failed_conversion_leaves_no_invoice_behind(client, db, owner, org, customer, monkeypatch):
    headers = owner["headers"]
    quotation = await create_quotation(client, headers, org, customer)

    async def failing_commit(self):
        raise RuntimeError("connection lost")

    db_quotation = await crud_quotation.get_quotation(db, uuid.UUID(quotation["id"]))
    organization = await db.get(Organization, uuid.UUID(org["id"]))
    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        await crud_quotation.convert_to_invoice(db, db_obj=db_quotation, organization=organization, user_id=None)
    monkeypatch.undo()
    await db.rollback()

    invoices = await client.get(f"{API}/invoices/", params={"organization_id": org["id"]}, headers=headers)
    assert invoices.json() == []
    refreshed = (await client.get(f"{API}/quotations/{quotation['id']}", headers=headers)).json()
    assert refreshed["status"] == "pending"
    assert refreshed["invoice_id"] is None

    # A retry goes through and reuses the number the failed attempt drew
    response = await client.post(f"{API}/quotations/{quotation['id']}/convert", headers=headers)
    assert response.status_code == 201, response.text
    assert response.json()["invoice_number"] == "INV-0001"
