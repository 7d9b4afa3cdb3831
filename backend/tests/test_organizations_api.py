from conftest import API, PASSWORD, auth_headers, create_customer, create_org, register_user


async def test_register_login_and_me(client):
    user = await register_user(client, email="rahim@example.com", full_name="Rahim")
    assert "hashed_password" not in user

    duplicate = await client.post(
        f"{API}/users/", json={"email": "rahim@example.com", "password": PASSWORD, "full_name": "Again"}
    )
    assert duplicate.status_code == 400

    bad = await client.post(f"{API}/login/access-token", data={"username": "rahim@example.com", "password": "nope-nope"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Incorrect email or password"

    headers = await auth_headers(client, "rahim@example.com")
    me = await client.get(f"{API}/users/me", headers=headers)
    assert me.json()["full_name"] == "Rahim"

    updated = await client.put(f"{API}/users/me", json={"full_name": "Rahim Uddin"}, headers=headers)
    assert updated.json()["full_name"] == "Rahim Uddin"


async def test_invalid_token_is_rejected(client):
    response = await client.get(f"{API}/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_organization_slug_and_listing(client, owner, org):
    assert org["slug"] == "acme-printers"
    assert org["owner_id"] == owner["user"]["id"]

    second = await create_org(client, owner["headers"])
    assert second["slug"] == "acme-printers-2"

    listed = await client.get(f"{API}/organizations/", headers=owner["headers"])
    assert {(o["slug"], o["role"]) for o in listed.json()} == {("acme-printers", "owner"), ("acme-printers-2", "owner")}

    me = (await client.get(f"{API}/users/me", headers=owner["headers"])).json()
    assert sorted(o["slug"] for o in me["organizations"]) == ["acme-printers", "acme-printers-2"]


async def test_member_management(client, owner, org):
    headers = owner["headers"]
    user = await register_user(client, full_name="Nasrin")

    as_owner = await client.post(
        f"{API}/organizations/{org['id']}/members", json={"email": user["email"], "role": "owner"}, headers=headers
    )
    assert as_owner.status_code == 400

    added = await client.post(
        f"{API}/organizations/{org['id']}/members", json={"email": user["email"], "role": "sales_staff"}, headers=headers
    )
    assert added.status_code == 201
    member = added.json()
    assert member["user"]["email"] == user["email"]

    again = await client.post(
        f"{API}/organizations/{org['id']}/members", json={"email": user["email"], "role": "designer"}, headers=headers
    )
    assert again.status_code == 400

    unknown = await client.post(
        f"{API}/organizations/{org['id']}/members", json={"email": "ghost@example.com"}, headers=headers
    )
    assert unknown.status_code == 404

    promoted = await client.put(
        f"{API}/organizations/{org['id']}/members/{member['id']}", json={"role": "manager"}, headers=headers
    )
    assert promoted.json()["role"] == "manager"

    members = (await client.get(f"{API}/organizations/{org['id']}/members", headers=headers)).json()
    owner_member = next(m for m in members if m["role"] == "owner")
    demote = await client.put(
        f"{API}/organizations/{org['id']}/members/{owner_member['id']}", json={"role": "manager"}, headers=headers
    )
    assert demote.status_code == 400
    assert demote.json()["detail"] == "The last owner of an organization cannot be demoted."

    removed = await client.delete(f"{API}/organizations/{org['id']}/members/{member['id']}", headers=headers)
    assert removed.status_code == 200


async def test_settings_are_owner_or_manager_only(client, org, add_member):
    sales = await add_member("sales_staff")
    response = await client.put(f"{API}/organizations/{org['id']}", json={"name": "Renamed"}, headers=sales)
    assert response.status_code == 403


async def test_customer_crud(client, owner, org):
    headers = owner["headers"]
    customer = await create_customer(client, headers, org["id"])

    duplicate = await client.post(
        f"{API}/customers/", json={"organization_id": org["id"], "name": customer["name"]}, headers=headers
    )
    assert duplicate.status_code == 400

    await create_customer(client, headers, org["id"], name="Dhaka Stationers")
    searched = await client.get(
        f"{API}/customers/", params={"organization_id": org["id"], "search": "rahim"}, headers=headers
    )
    assert [c["id"] for c in searched.json()] == [customer["id"]]

    updated = await client.put(f"{API}/customers/{customer['id']}", json={"address": "Motijheel"}, headers=headers)
    assert updated.json()["address"] == "Motijheel"


async def test_customer_with_invoices_cannot_be_deleted(client, owner, org, customer, invoice):
    response = await client.delete(f"{API}/customers/{customer['id']}", headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete a customer that has invoices."


async def test_invoice_for_another_tenants_customer_is_rejected(client, owner, org):
    other_org = await create_org(client, owner["headers"], name="Other Shop")
    foreign_customer = await create_customer(client, owner["headers"], other_org["id"])
    response = await client.post(
        f"{API}/invoices/",
        json={"organization_id": org["id"], "customer_id": foreign_customer["id"],
              "items": [{"description": "Flyers", "quantity": 100, "unit_price": 3}]},
        headers=owner["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Customer not found in this organization."
