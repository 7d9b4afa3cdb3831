from conftest import API, create_invoice


async def test_dashboard_stats_with_profit(client, owner, org, customer, invoice):
    headers = owner["headers"]
    await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 1000}, headers=headers)
    await client.put(
        f"{API}/invoices/{invoice['id']}/costing",
        json={"items": [{"item_type": "paper", "quantity": 10, "price": 150}]},
        headers=headers,
    )
    await create_invoice(client, headers, org["id"], customer["id"], items=[{"description": "Banner", "unit_price": 500}])

    response = await client.get(f"{API}/dashboard/stats", params={"organization_id": org["id"]}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {
        "total_invoiced": 5000,
        "total_collected": 1000,
        "total_outstanding": 4000,
        "invoice_count": 2,
        "overdue_count": 0,
        "customer_count": 1,
        "pending_quotations": 0,
        "currency": "BDT",
        "costing_total": 1500,
        "gross_profit": 3000,
    }


async def test_dashboard_hides_profit_from_sales_staff(client, owner, org, invoice, add_member):
    await client.put(
        f"{API}/invoices/{invoice['id']}/costing",
        json={"items": [{"item_type": "paper", "quantity": 1, "price": 100}]},
        headers=owner["headers"],
    )
    sales = await add_member("sales_staff")
    stats = (await client.get(f"{API}/dashboard/stats", params={"organization_id": org["id"]}, headers=sales)).json()
    assert stats["total_invoiced"] == 4500
    assert stats["costing_total"] is None
    assert stats["gross_profit"] is None


async def test_audit_log_records_invoice_and_payment_actions(client, owner, org, invoice):
    headers = owner["headers"]
    await client.post(f"{API}/invoices/{invoice['id']}/payments", json={"amount": 200}, headers=headers)

    response = await client.get(f"{API}/audit-logs/", params={"organization_id": org["id"]}, headers=headers)
    assert response.status_code == 200
    actions = {log["action"] for log in response.json()}
    assert {"invoice.created", "payment.recorded"} <= actions

    payments_only = await client.get(
        f"{API}/audit-logs/", params={"organization_id": org["id"], "entity_type": "payment"}, headers=headers
    )
    assert [log["action"] for log in payments_only.json()] == ["payment.recorded"]


async def test_audit_log_is_limited_to_owner_and_manager(client, org, add_member):
    accounts = await add_member("accounts")
    response = await client.get(f"{API}/audit-logs/", params={"organization_id": org["id"]}, headers=accounts)
    assert response.status_code == 403


async def test_new_organization_starts_on_trial(client, owner, org):
    response = await client.get(f"{API}/organizations/{org['id']}/subscription", headers=owner["headers"])
    assert response.status_code == 200
    overview = response.json()
    assert overview["subscription"]["plan"] == "free"
    assert overview["subscription"]["status"] == "trial"
    assert overview["is_active"]
    assert overview["days_remaining"] in (6, 7)
    assert overview["warnings"] == []


async def test_member_limit_of_free_plan(client, owner, org, add_member):
    await add_member("manager")
    await add_member("accounts")

    overview = (await client.get(f"{API}/organizations/{org['id']}/subscription", headers=owner["headers"])).json()
    assert [(w["type"], w["level"]) for w in overview["warnings"]] == [("users", "hard")]

    blocked = await client.post(
        f"{API}/organizations/{org['id']}/members",
        json={"email": owner["user"]["email"], "role": "employee"},
        headers=owner["headers"],
    )
    assert blocked.status_code == 402


async def test_inactive_subscription_blocks_new_invoices(client, owner, org, customer):
    headers = owner["headers"]
    response = await client.put(
        f"{API}/organizations/{org['id']}/subscription", json={"status": "suspended"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "suspended"

    blocked = await client.post(
        f"{API}/invoices/",
        json={"organization_id": org["id"], "customer_id": customer["id"],
              "items": [{"description": "Flyers", "quantity": 100, "unit_price": 3}]},
        headers=headers,
    )
    assert blocked.status_code == 402
    assert blocked.json()["detail"] == "Your subscription is not active. Please renew to continue."


async def test_only_owner_changes_subscription(client, org, add_member):
    manager = await add_member("manager")
    response = await client.put(
        f"{API}/organizations/{org['id']}/subscription", json={"plan": "pro"}, headers=manager
    )
    assert response.status_code == 403
