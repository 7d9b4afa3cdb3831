from conftest import API, create_invoice


def costing_url(invoice):
    return f"{API}/invoices/{invoice['id']}/costing"


async def save_costing(client, headers, invoice, rows):
    response = await client.put(costing_url(invoice), json={"items": rows}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def seed_costing(client, headers, invoice):
    first, second = invoice["items"]
    return await save_costing(client, headers, invoice, [
        {"invoice_item_id": first["id"], "item_type": "plate", "quantity": 4, "price": 50},
        {"invoice_item_id": second["id"], "item_type": "paper", "quantity": 5, "price": 100},
        {"item_type": "transport", "description": "Delivery van", "quantity": 1, "price": 300},
    ])


async def test_empty_invoice_costing(client, owner, invoice):
    response = await client.get(costing_url(invoice), headers=owner["headers"])
    assert response.status_code == 200
    costing = response.json()
    assert costing["invoice_total"] == 4500
    assert costing["rows"] == []
    assert costing["costing_total"] == 0
    assert costing["profit"] is None
    assert [g["status"] for g in costing["groups"]] == ["not_costed", "not_costed"]
    assert costing["permissions"]["can_edit"]


async def test_save_groups_rows_and_computes_profit(client, owner, invoice):
    costing = await seed_costing(client, owner["headers"], invoice)

    assert costing["costing_total"] == 1000
    assert [g["subtotal"] for g in costing["groups"]] == [200, 500]
    assert [g["status"] for g in costing["groups"]] == ["costed", "costed"]
    assert costing["groups"][1]["rows"][0]["item_no"] == 2
    assert [r["item_type"] for r in costing["unassigned_rows"]] == ["transport"]
    assert costing["profit"] == {
        "costing_total": 1000,
        "profit": 3500,
        "margin_percent": 350,
        "is_positive": True,
    }

    # Persisted state matches what the save answered with
    reloaded = (await client.get(costing_url(invoice), headers=owner["headers"])).json()
    assert reloaded["costing_total"] == 1000
    assert len(reloaded["rows"]) == 3


async def test_line_totals_are_recomputed_server_side(client, owner, invoice):
    costing = await save_costing(client, owner["headers"], invoice, [
        {"item_type": "ink", "quantity": 3, "price": 12.25, "line_total": 1},
    ])
    assert costing["rows"][0]["line_total"] == 36.75


async def test_rows_without_type_are_dropped(client, owner, invoice):
    costing = await save_costing(client, owner["headers"], invoice, [
        {"item_type": "plate", "quantity": 1, "price": 100},
        {"item_type": "", "quantity": 9, "price": 9},
    ])
    assert [r["item_type"] for r in costing["rows"]] == ["plate"]


async def test_saving_nothing_is_rejected(client, owner, invoice):
    response = await client.put(
        costing_url(invoice), json={"items": [{"item_type": "  ", "quantity": 1, "price": 10}]}, headers=owner["headers"]
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Add at least one costing item"


async def test_rows_must_link_to_the_invoices_own_items(client, owner, org, customer, invoice):
    other = await create_invoice(client, owner["headers"], org["id"], customer["id"])
    response = await client.put(
        costing_url(invoice),
        json={"items": [{"invoice_item_id": other["items"][0]["id"], "item_type": "plate", "quantity": 1, "price": 5}]},
        headers=owner["headers"],
    )
    assert response.status_code == 400


async def test_accounts_sees_costing_read_only(client, owner, invoice, add_member):
    await seed_costing(client, owner["headers"], invoice)
    accounts = await add_member("accounts")

    response = await client.get(costing_url(invoice), headers=accounts)
    assert response.status_code == 200
    costing = response.json()
    assert costing["permissions"]["is_read_only"]
    assert not costing["permissions"]["can_save"]
    assert costing["profit"]["profit"] == 3500

    denied = await client.put(
        costing_url(invoice), json={"items": [{"item_type": "plate", "quantity": 1, "price": 1}]}, headers=accounts
    )
    assert denied.status_code == 403
    assert (await client.delete(costing_url(invoice), headers=accounts)).status_code == 403


async def test_costing_is_hidden_from_sales_staff(client, owner, org, invoice, add_member):
    await seed_costing(client, owner["headers"], invoice)
    sales = await add_member("sales_staff")

    assert (await client.get(costing_url(invoice), headers=sales)).status_code == 403
    summary = await client.get(f"{API}/costing/summary", params={"organization_id": org["id"]}, headers=sales)
    assert summary.status_code == 403


async def test_reset_one_item_then_everything(client, owner, invoice):
    headers = owner["headers"]
    await seed_costing(client, headers, invoice)
    first, second = invoice["items"]

    response = await client.delete(costing_url(invoice), params={"invoice_item_id": first["id"]}, headers=headers)
    assert response.status_code == 200, response.text
    costing = response.json()
    assert costing["groups"][0]["rows"] == []
    assert costing["groups"][0]["status"] == "not_costed"
    assert costing["costing_total"] == 800

    response = await client.delete(costing_url(invoice), headers=headers)
    assert response.status_code == 200
    assert response.json()["rows"] == []
    assert response.json()["profit"] is None

    reloaded = (await client.get(costing_url(invoice), headers=headers)).json()
    assert reloaded["rows"] == []


async def create_template(client, headers, org, name="Standard card job"):
    response = await client.post(
        f"{API}/costing-templates/",
        json={
            "organization_id": org["id"],
            "name": name,
            "items": [
                {"item_type": "design", "quantity": 1, "price": 500},
                {"item_type": "lamination", "quantity": 2, "price": 75},
            ],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_apply_template_to_one_item_in_replace_mode(client, owner, org, invoice):
    headers = owner["headers"]
    await seed_costing(client, headers, invoice)
    template = await create_template(client, headers, org)
    first, second = invoice["items"]

    response = await client.post(
        f"{costing_url(invoice)}/apply-template",
        json={"template_id": template["id"], "mode": "replace", "invoice_item_id": first["id"]},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    costing = response.json()
    assert [r["item_type"] for r in costing["groups"][0]["rows"]] == ["design", "lamination"]
    assert all(r["item_no"] == 1 for r in costing["groups"][0]["rows"])
    assert [r["item_type"] for r in costing["groups"][1]["rows"]] == ["paper"]
    assert len(costing["unassigned_rows"]) == 1
    assert costing["costing_total"] == 650 + 500 + 300


async def test_apply_template_to_one_item_in_append_mode(client, owner, org, invoice):
    headers = owner["headers"]
    await seed_costing(client, headers, invoice)
    template = await create_template(client, headers, org)
    first = invoice["items"][0]

    response = await client.post(
        f"{costing_url(invoice)}/apply-template",
        json={"template_id": template["id"], "mode": "append", "invoice_item_id": first["id"]},
        headers=headers,
    )
    costing = response.json()
    assert [r["item_type"] for r in costing["groups"][0]["rows"]] == ["plate", "design", "lamination"]
    assert costing["groups"][0]["subtotal"] == 850


async def test_apply_template_to_whole_invoice_in_replace_mode(client, owner, org, invoice):
    headers = owner["headers"]
    await seed_costing(client, headers, invoice)
    template = await create_template(client, headers, org)

    response = await client.post(
        f"{costing_url(invoice)}/apply-template", json={"template_id": template["id"]}, headers=headers
    )
    costing = response.json()
    assert [r["item_type"] for r in costing["rows"]] == ["design", "lamination"]
    assert all(r["invoice_item_id"] is None for r in costing["rows"])
    assert costing["costing_total"] == 650


async def test_apply_unknown_template_is_not_found(client, owner, invoice):
    response = await client.post(
        f"{costing_url(invoice)}/apply-template",
        json={"template_id": "00000000-0000-0000-0000-000000000000"},
        headers=owner["headers"],
    )
    assert response.status_code == 404


async def test_apply_item_template(client, owner, org, invoice):
    headers = owner["headers"]
    created = await client.post(
        f"{API}/costing-item-templates/",
        json={
            "organization_id": org["id"],
            "item_name": "Plate",
            "rows": [
                {"sub_item_name": "CTP plate", "description": "4 colour", "default_qty": 4, "default_price": 350},
                {"sub_item_name": "Plate making", "default_qty": 1, "default_price": 200},
            ],
        },
        headers=headers,
    )
    assert created.status_code == 201, created.text
    first = invoice["items"][0]

    response = await client.post(
        f"{costing_url(invoice)}/apply-item-template",
        json={"invoice_item_id": first["id"], "item_name": "plate"},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    rows = response.json()["groups"][0]["rows"]
    assert [r["description"] for r in rows] == ["CTP plate - 4 colour", "Plate making"]
    assert [r["line_total"] for r in rows] == [1400, 200]

    missing = await client.post(
        f"{costing_url(invoice)}/apply-item-template",
        json={"invoice_item_id": first["id"], "item_name": "Foil"},
        headers=headers,
    )
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No item template found for 'Foil'"


async def test_import_price_calculation(client, owner, org, invoice):
    headers = owner["headers"]
    calculation = await client.post(
        f"{API}/price-calculations/",
        json={
            "organization_id": org["id"],
            "job_description": "1000 business cards",
            "quantity": 1000,
            "plate_qty": 2,
            "plate_price": 300,
            "paper1_qty": 10,
            "paper1_price": 0,
        },
        headers=headers,
    )
    assert calculation.status_code == 201, calculation.text
    second = invoice["items"][1]

    response = await client.post(
        f"{costing_url(invoice)}/import-price-calculation",
        json={"price_calculation_id": calculation.json()["id"], "invoice_item_id": second["id"]},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    rows = response.json()["groups"][1]["rows"]
    assert [(r["item_type"], r["line_total"]) for r in rows] == [("plate", 600)]


async def test_import_empty_price_calculation_is_rejected(client, owner, org, invoice):
    calculation = await client.post(
        f"{API}/price-calculations/",
        json={"organization_id": org["id"], "job_description": "Blank job"},
        headers=owner["headers"],
    )
    response = await client.post(
        f"{costing_url(invoice)}/import-price-calculation",
        json={"price_calculation_id": calculation.json()["id"]},
        headers=owner["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Price calculation has no cost lines to import"


async def test_costing_summary(client, owner, org, invoice):
    await seed_costing(client, owner["headers"], invoice)
    response = await client.get(f"{API}/costing/summary", params={"organization_id": org["id"]}, headers=owner["headers"])
    assert response.status_code == 200
    summary = response.json()
    assert [e["invoice_number"] for e in summary["invoices"]] == [invoice["invoice_number"]]
    assert summary["total_revenue"] == 4500
    assert summary["total_costing"] == 1000
    assert summary["total_profit"] == 3500
    assert summary["overall_margin_percent"] == 350


async def test_costing_changes_are_audited(client, owner, org, invoice):
    await seed_costing(client, owner["headers"], invoice)
    response = await client.get(
        f"{API}/audit-logs/",
        params={"organization_id": org["id"], "entity_type": "invoice_costing"},
        headers=owner["headers"],
    )
    assert response.status_code == 200
    assert [log["action"] for log in response.json()] == ["costing.saved"]
