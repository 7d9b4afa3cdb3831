from datetime import date, timedelta

from conftest import API, auth_headers, create_customer, create_invoice, create_org, register_user


async def test_invoice_numbers_follow_the_organization_sequence(client, owner, org, customer):
    headers = owner["headers"]
    preview = await client.get(f"{API}/invoices/next-number", params={"organization_id": org["id"]}, headers=headers)
    assert preview.status_code == 200
    assert preview.json()["next_invoice_number"] == "INV-0001"

    # Previewing does not consume the number
    preview = await client.get(f"{API}/invoices/next-number", params={"organization_id": org["id"]}, headers=headers)
    assert preview.json()["next_invoice_number"] == "INV-0001"

    first = await create_invoice(client, headers, org["id"], customer["id"])
    second = await create_invoice(client, headers, org["id"], customer["id"])
    assert first["invoice_number"] == "INV-0001"
    assert second["invoice_number"] == "INV-0002"


async def test_sequence_skips_manually_used_numbers(client, owner, org, customer):
    headers = owner["headers"]
    manual = await create_invoice(client, headers, org["id"], customer["id"], invoice_number="INV-0001")
    assert manual["invoice_number"] == "INV-0001"

    issued = await create_invoice(client, headers, org["id"], customer["id"])
    assert issued["invoice_number"] == "INV-0002"


async def test_duplicate_invoice_number_is_rejected(client, owner, org, customer, invoice):
    response = await client.post(
        f"{API}/invoices/",
        json={
            "organization_id": org["id"],
            "customer_id": customer["id"],
            "invoice_number": invoice["invoice_number"],
            "items": [{"description": "Flyers", "quantity": 100, "unit_price": 3}],
        },
        headers=owner["headers"],
    )
    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


async def test_custom_prefix_and_starting_number(client, owner, customer):
    org = await create_org(client, owner["headers"], name="Second Shop", invoice_prefix="SS/", invoice_starting_number=100)
    other_customer = await create_customer(client, owner["headers"], org["id"])
    created = await create_invoice(client, owner["headers"], org["id"], other_customer["id"])
    assert created["invoice_number"] == "SS/0100"


async def test_invoice_totals_and_status(client, owner, org, customer):
    created = await create_invoice(
        client, owner["headers"], org["id"], customer["id"],
        items=[
            {"description": "Business cards", "quantity": 1000, "unit_price": 2.5},
            {"description": "Letterheads", "quantity": 500, "unit_price": 4, "discount": 100},
        ],
        discount=400, tax=150,
    )
    assert created["subtotal"] == 4400
    assert created["total"] == 4150
    assert created["status"] == "unpaid"
    assert created["display_status"] == "unpaid"
    assert created["due_amount"] == 4150
    assert [i["total"] for i in created["items"]] == [2500, 1900]


async def test_invoice_requires_items_with_description(client, owner, org, customer):
    response = await client.post(
        f"{API}/invoices/",
        json={"organization_id": org["id"], "customer_id": customer["id"], "items": [{"description": "  ", "unit_price": 5}]},
        headers=owner["headers"],
    )
    assert response.status_code == 422

    response = await client.post(
        f"{API}/invoices/",
        json={"organization_id": org["id"], "customer_id": customer["id"], "items": []},
        headers=owner["headers"],
    )
    assert response.status_code == 422


async def test_update_recomputes_totals_and_keeps_costing_of_kept_items(client, owner, invoice):
    headers = owner["headers"]
    first_item, second_item = invoice["items"]
    saved = await client.put(
        f"{API}/invoices/{invoice['id']}/costing",
        json={"items": [
            {"invoice_item_id": second_item["id"], "item_type": "paper", "quantity": 5, "price": 100},
            {"invoice_item_id": first_item["id"], "item_type": "plate", "quantity": 4, "price": 50},
        ]},
        headers=headers,
    )
    assert saved.status_code == 200, saved.text

    # Drop the first item, keep the second (now at position 1) and add a new one
    response = await client.put(
        f"{API}/invoices/{invoice['id']}",
        json={"items": [
            {"id": second_item["id"], "description": "Letterheads", "quantity": 500, "unit_price": 5},
            {"description": "Envelopes", "quantity": 200, "unit_price": 3},
        ]},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["subtotal"] == 3100
    assert updated["items"][0]["id"] == second_item["id"]

    costing = (await client.get(f"{API}/invoices/{invoice['id']}/costing", headers=headers)).json()
    assert len(costing["rows"]) == 1
    assert costing["rows"][0]["invoice_item_id"] == second_item["id"]
    assert costing["rows"][0]["item_no"] == 1


async def test_total_cannot_drop_below_paid_amount(client, owner, invoice):
    headers = owner["headers"]
    paid = await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 3000}, headers=headers)
    assert paid.status_code == 201, paid.text

    response = await client.put(
        f"{API}/invoices/{invoice['id']}",
        json={"items": [{"description": "Business cards", "quantity": 100, "unit_price": 2.5}]},
        headers=headers,
    )
    assert response.status_code == 400
    assert "cannot be less than the amount already paid" in response.json()["detail"]


async def test_list_invoices_with_filters(client, owner, org, customer):
    headers = owner["headers"]
    overdue = await create_invoice(
        client, headers, org["id"], customer["id"], due_date=(date.today() - timedelta(days=3)).isoformat()
    )
    current = await create_invoice(client, headers, org["id"], customer["id"])

    everything = await client.get(f"{API}/invoices/", params={"organization_id": org["id"]}, headers=headers)
    assert everything.status_code == 200
    assert {i["id"] for i in everything.json()} == {overdue["id"], current["id"]}
    assert everything.json()[0]["customer_name"] == customer["name"]

    only_overdue = await client.get(
        f"{API}/invoices/", params={"organization_id": org["id"], "status": "overdue"}, headers=headers
    )
    assert [i["id"] for i in only_overdue.json()] == [overdue["id"]]
    assert only_overdue.json()[0]["display_status"] == "overdue"

    searched = await client.get(
        f"{API}/invoices/", params={"organization_id": org["id"], "search": current["invoice_number"]}, headers=headers
    )
    assert [i["id"] for i in searched.json()] == [current["id"]]


async def test_delete_invoice_with_payments_needs_force(client, owner, invoice):
    headers = owner["headers"]
    await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 100}, headers=headers)

    blocked = await client.delete(f"{API}/invoices/{invoice['id']}", headers=headers)
    assert blocked.status_code == 400

    forced = await client.delete(f"{API}/invoices/{invoice['id']}", params={"force": True}, headers=headers)
    assert forced.status_code == 200
    assert forced.json()["invoice_number"] == invoice["invoice_number"]

    missing = await client.get(f"{API}/invoices/{invoice['id']}", headers=headers)
    assert missing.status_code == 404


async def test_manager_cannot_force_delete(client, invoice, add_member, owner):
    manager = await add_member("manager")
    await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 100}, headers=owner["headers"])
    response = await client.delete(f"{API}/invoices/{invoice['id']}", params={"force": True}, headers=manager)
    assert response.status_code == 403


async def test_print_view_has_no_costing_data(client, owner, invoice):
    headers = owner["headers"]
    await client.put(
        f"{API}/invoices/{invoice['id']}/costing",
        json={"items": [{"item_type": "secret-plate-cost", "quantity": 1, "price": 777}]},
        headers=headers,
    )
    response = await client.get(f"{API}/invoices/{invoice['id']}/print", headers=headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert invoice["invoice_number"] in response.text
    assert "Business cards" in response.text
    assert "secret-plate-cost" not in response.text


async def test_other_tenants_invoices_look_missing(client, invoice, org):
    outsider = await register_user(client, full_name="Outsider")
    headers = await auth_headers(client, outsider["email"])
    await create_org(client, headers, name="Outsider Org")

    assert (await client.get(f"{API}/invoices/{invoice['id']}", headers=headers)).status_code == 404
    assert (await client.get(f"{API}/invoices/{invoice['id']}/costing", headers=headers)).status_code == 404
    listed = await client.get(f"{API}/invoices/", params={"organization_id": org["id"]}, headers=headers)
    assert listed.status_code == 404


async def test_designer_cannot_view_invoices(client, org, invoice, add_member):
    designer = await add_member("designer")
    response = await client.get(f"{API}/invoices/", params={"organization_id": org["id"]}, headers=designer)
    assert response.status_code == 403
    assert "Designer role cannot view invoices" in response.json()["detail"]
