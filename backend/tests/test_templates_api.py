from conftest import API

TEMPLATE_ITEMS = [
    {"item_type": "plate", "quantity": 4, "price": 350},
    {"item_type": "paper", "description": "Art card 300gsm", "quantity": 10, "price": 120},
]


async def test_costing_template_crud(client, owner, org):
    headers = owner["headers"]
    response = await client.post(
        f"{API}/costing-templates/",
        json={"organization_id": org["id"], "name": "Visiting card", "items": TEMPLATE_ITEMS},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    template = response.json()
    assert template["item_count"] == 2
    assert template["total"] == 2600
    assert [i["line_total"] for i in template["items"]] == [1400, 1200]

    duplicate = await client.post(
        f"{API}/costing-templates/",
        json={"organization_id": org["id"], "name": "visiting card", "items": TEMPLATE_ITEMS},
        headers=headers,
    )
    assert duplicate.status_code == 400

    renamed = await client.put(f"{API}/costing-templates/{template['id']}", json={"name": "Visiting card 2"}, headers=headers)
    assert renamed.json()["name"] == "Visiting card 2"
    assert renamed.json()["item_count"] == 2

    searched = await client.get(
        f"{API}/costing-templates/", params={"organization_id": org["id"], "search": "card"}, headers=headers
    )
    assert [t["id"] for t in searched.json()] == [template["id"]]

    deleted = await client.delete(f"{API}/costing-templates/{template['id']}", headers=headers)
    assert deleted.status_code == 200
    missing = await client.get(f"{API}/costing-templates/{template['id']}", headers=headers)
    assert missing.status_code == 404


async def test_template_needs_a_priced_row(client, owner, org):
    response = await client.post(
        f"{API}/costing-templates/",
        json={"organization_id": org["id"], "name": "Empty", "items": [{"item_type": "plate", "quantity": 1, "price": 0}]},
        headers=owner["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "At least one costing item is required to save"


async def test_template_from_invoice_costing(client, owner, invoice):
    headers = owner["headers"]
    first, second = invoice["items"]
    await client.put(
        f"{API}/invoices/{invoice['id']}/costing",
        json={"items": [
            {"invoice_item_id": first["id"], "item_type": "plate", "quantity": 4, "price": 50},
            {"invoice_item_id": second["id"], "item_type": "paper", "quantity": 5, "price": 100},
        ]},
        headers=headers,
    )

    whole = await client.post(
        f"{API}/costing-templates/from-invoice",
        json={"invoice_id": invoice["id"], "name": "Stationery set"},
        headers=headers,
    )
    assert whole.status_code == 201, whole.text
    assert whole.json()["total"] == 700

    one_item = await client.post(
        f"{API}/costing-templates/from-invoice",
        json={"invoice_id": invoice["id"], "invoice_item_id": second["id"], "name": "Letterhead paper"},
        headers=headers,
    )
    assert one_item.status_code == 201, one_item.text
    assert [i["item_type"] for i in one_item.json()["items"]] == ["paper"]


async def test_accounts_can_view_templates_but_not_edit(client, owner, org, add_member):
    await client.post(
        f"{API}/costing-templates/",
        json={"organization_id": org["id"], "name": "Visiting card", "items": TEMPLATE_ITEMS},
        headers=owner["headers"],
    )
    accounts = await add_member("accounts")

    listed = await client.get(f"{API}/costing-templates/", params={"organization_id": org["id"]}, headers=accounts)
    assert listed.status_code == 200
    assert len(listed.json()) == 1

    denied = await client.post(
        f"{API}/costing-templates/",
        json={"organization_id": org["id"], "name": "Another", "items": TEMPLATE_ITEMS},
        headers=accounts,
    )
    assert denied.status_code == 403


async def test_templates_are_hidden_from_employees(client, org, add_member):
    employee = await add_member("employee")
    response = await client.get(f"{API}/costing-templates/", params={"organization_id": org["id"]}, headers=employee)
    assert response.status_code == 403


async def test_item_template_crud_and_lookup(client, owner, org):
    headers = owner["headers"]
    response = await client.post(
        f"{API}/costing-item-templates/",
        json={
            "organization_id": org["id"],
            "item_name": "Print",
            "rows": [
                {"sub_item_name": "Offset run", "default_qty": 1000, "default_price": 0.5},
                {"sub_item_name": "Make ready", "default_qty": 1, "default_price": 300},
            ],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    template = response.json()
    assert [r["sort_order"] for r in template["rows"]] == [0, 1]

    duplicate = await client.post(
        f"{API}/costing-item-templates/",
        json={"organization_id": org["id"], "item_name": " print "},
        headers=headers,
    )
    assert duplicate.status_code == 400

    found = await client.get(
        f"{API}/costing-item-templates/lookup", params={"organization_id": org["id"], "item_name": "PRINT"}, headers=headers
    )
    assert found.json()["id"] == template["id"]

    deactivated = await client.put(
        f"{API}/costing-item-templates/{template['id']}", json={"is_active": False}, headers=headers
    )
    assert deactivated.status_code == 200
    assert len(deactivated.json()["rows"]) == 2

    # Inactive templates are not offered
    found = await client.get(
        f"{API}/costing-item-templates/lookup", params={"organization_id": org["id"], "item_name": "Print"}, headers=headers
    )
    assert found.status_code == 200
    assert found.json() is None

    active_only = await client.get(
        f"{API}/costing-item-templates/", params={"organization_id": org["id"], "include_inactive": False}, headers=headers
    )
    assert active_only.json() == []


async def test_item_template_rows_are_replaced_on_update(client, owner, org):
    headers = owner["headers"]
    created = await client.post(
        f"{API}/costing-item-templates/",
        json={"organization_id": org["id"], "item_name": "Lamination",
              "rows": [{"sub_item_name": "Matte", "default_qty": 1, "default_price": 2}]},
        headers=headers,
    )
    updated = await client.put(
        f"{API}/costing-item-templates/{created.json()['id']}",
        json={"rows": [{"sub_item_name": "Gloss", "default_qty": 2, "default_price": 3}]},
        headers=headers,
    )
    assert updated.status_code == 200, updated.text
    assert [r["sub_item_name"] for r in updated.json()["rows"]] == ["Gloss"]
