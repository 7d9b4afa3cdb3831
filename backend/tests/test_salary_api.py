from conftest import API


async def create_employee(client, headers, org, **extra):
    payload = {"organization_id": org["id"], "full_name": "Karim Uddin", "designation": "Press operator",
               "basic_salary": 18000, **extra}
    response = await client.post(f"{API}/employees/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_employee_crud_and_search(client, owner, org):
    headers = owner["headers"]
    employee = await create_employee(client, headers, org)
    await create_employee(client, headers, org, full_name="Salma Akter", designation="Designer")

    found = await client.get(f"{API}/employees/", params={"organization_id": org["id"], "search": "press"}, headers=headers)
    assert [e["id"] for e in found.json()] == [employee["id"]]

    updated = await client.put(f"{API}/employees/{employee['id']}", json={"status": "inactive"}, headers=headers)
    assert updated.json()["status"] == "inactive"

    inactive = await client.get(
        f"{API}/employees/", params={"organization_id": org["id"], "status": "inactive"}, headers=headers
    )
    assert [e["id"] for e in inactive.json()] == [employee["id"]]


async def test_salary_record_defaults_to_basic_salary_and_computes_net(client, owner, org):
    headers = owner["headers"]
    employee = await create_employee(client, headers, org)

    response = await client.post(
        f"{API}/salary-records/",
        json={"employee_id": employee["id"], "month": 3, "year": 2026,
              "overtime_amount": 1500, "bonus": 1000, "deductions": 500, "advance": 2000},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    record = response.json()
    assert record["basic_salary"] == 18000
    assert record["net_payable"] == 18000
    assert record["status"] == "pending"

    duplicate = await client.post(
        f"{API}/salary-records/", json={"employee_id": employee["id"], "month": 3, "year": 2026}, headers=headers
    )
    assert duplicate.status_code == 400
    assert "already exists" in duplicate.json()["detail"]


async def test_pay_salary_and_summary(client, owner, org):
    headers = owner["headers"]
    karim = await create_employee(client, headers, org)
    salma = await create_employee(client, headers, org, full_name="Salma Akter", basic_salary=15000)

    records = []
    for employee in (karim, salma):
        response = await client.post(
            f"{API}/salary-records/", json={"employee_id": employee["id"], "month": 4, "year": 2026}, headers=headers
        )
        records.append(response.json())

    paid = await client.post(f"{API}/salary-records/{records[0]['id']}/pay", json={"paid_date": "2026-05-01"}, headers=headers)
    assert paid.status_code == 200, paid.text
    assert paid.json()["status"] == "paid"
    assert paid.json()["paid_date"] == "2026-05-01"

    again = await client.post(f"{API}/salary-records/{records[0]['id']}/pay", headers=headers)
    assert again.status_code == 400

    locked = await client.put(f"{API}/salary-records/{records[0]['id']}", json={"bonus": 500}, headers=headers)
    assert locked.status_code == 400

    summary = await client.get(
        f"{API}/salary-records/summary", params={"organization_id": org["id"], "month": 4, "year": 2026}, headers=headers
    )
    assert summary.json() == {
        "month": 4,
        "year": 2026,
        "employee_count": 2,
        "total_payable": 33000,
        "total_paid": 18000,
        "total_pending": 15000,
    }


async def test_accounts_can_view_but_not_create_salary(client, owner, org, add_member):
    employee = await create_employee(client, owner["headers"], org)
    accounts = await add_member("accounts")

    denied = await client.post(
        f"{API}/salary-records/", json={"employee_id": employee["id"], "month": 1, "year": 2026}, headers=accounts
    )
    assert denied.status_code == 403

    listed = await client.get(f"{API}/salary-records/", params={"organization_id": org["id"]}, headers=accounts)
    assert listed.status_code == 200


async def test_manager_has_no_salary_access(client, org, add_member):
    manager = await add_member("manager")
    response = await client.get(f"{API}/salary-records/", params={"organization_id": org["id"]}, headers=manager)
    assert response.status_code == 403
