"""
Reports, dashboard and expense endpoint tests.
"""
from datetime import date


async def _invoice(client, client_id, currency, rate, status="sent"):
    r = await client.post("/api/invoices", json={
        "client_id": client_id,
        "currency": currency,
        "status": status,
        "items": [{"description": "Work", "quantity": 1, "rate": rate}],
    })
    assert r.status_code == 201, r.text
    return r.json()["invoice"]


async def _expense(client, amount, currency="USD", **extra):
    body = {"amount": amount, "currency": currency, "category": "Software"}
    body.update(extra)
    r = await client.post("/api/expenses", json=body)
    assert r.status_code == 201, r.text
    return r.json()["expense"]


# ===================== HEALTH / ROOT =====================


async def test_root(client):
    r = await client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


async def test_openapi_documents_response_schemas(client):
    r = await client.get("/openapi.json")
    assert r.status_code == 200
    body = r.json()
    schemas = body["components"]["schemas"]
    for name in ("JobResponse", "QuoteResponse", "InvoiceDetailResponse", "PaymentResponse",
                 "ExpenseResponse", "OutsourcingResponse", "PurchaseOrderResponse"):
        assert name in schemas

    job_get = body["paths"]["/api/jobs/{job_id}"]["get"]["responses"]["200"]
    assert job_get["content"]["application/json"]["schema"]["$ref"].endswith("/JobOut")


async def test_responses_hide_owner_columns(client, seed_data, make_job):
    job_id = await make_job(seed_data["usd_client"])
    job = (await client.get(f"/api/jobs/{job_id}")).json()["job"]
    assert "owner_id" not in job
    assert "updated_at" not in job
    assert job["client_name"] == "Acme Localization"


# ===================== EXPENSES =====================


async def test_create_expense_defaults(client, seed_data):
    expense = await _expense(client, 19.99, notes="Editor licence")
    assert expense["amount"] == 19.99
    assert expense["date"] == date.today().isoformat()
    assert expense["category"] == "Software"


async def test_expense_supplier_name_filled_from_supplier(client, seed_data):
    expense = await _expense(client, 10, supplier_id=seed_data["supplier"])
    assert expense["supplier_name"] == "Freelance Translator"


async def test_expense_rejects_foreign_supplier(client, seed_data):
    r = await client.post("/api/expenses", json={
        "amount": 10, "category": "Software", "supplier_id": seed_data["foreign_supplier"],
    })
    assert r.status_code == 404


async def test_expense_rejects_unknown_category(client, seed_data):
    r = await client.post("/api/expenses", json={"amount": 10, "category": "Snacks"})
    assert r.status_code == 400
    assert r.json() == {"error": "Unknown expense category: Snacks"}


async def test_list_expenses_filters_and_pages(client, seed_data):
    await _expense(client, 10, date="2026-01-05", category="Travel")
    await _expense(client, 20, date="2026-02-05", notes="Conference badge")
    await _expense(client, 30, date="2026-03-05")

    r = await client.get("/api/expenses", params={"from": "2026-02-01", "to": "2026-03-31"})
    assert [e["amount"] for e in r.json()["data"]] == [30.0, 20.0]

    r = await client.get("/api/expenses", params={"category": "Travel"})
    assert r.json()["metadata"]["total"] == 1

    r = await client.get("/api/expenses", params={"search": "badge"})
    assert [e["amount"] for e in r.json()["data"]] == [20.0]

    r = await client.get("/api/expenses", params={"limit": 2, "page": 2})
    assert r.json()["metadata"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}


async def test_replace_and_delete_expense(client, seed_data):
    expense = await _expense(client, 10)
    r = await client.put(f"/api/expenses/{expense['id']}", json={
        "amount": 12.5, "currency": "EUR", "category": "Hardware", "date": "2026-04-01",
    })
    assert r.json()["expense"]["amount"] == 12.5
    assert r.json()["expense"]["currency"] == "EUR"

    assert (await client.delete(f"/api/expenses/{expense['id']}")).json() == {"success": True}
    assert (await client.get(f"/api/expenses/{expense['id']}")).status_code == 404


# ===================== REPORTS =====================


async def test_reports_group_by_currency(client, seed_data, make_job):
    await _invoice(client, seed_data["usd_client"], "USD", 100)
    paid = await _invoice(client, seed_data["usd_client"], "USD", 50)
    await client.patch(f"/api/invoices/{paid['id']}", json={"status": "paid"})
    await _invoice(client, seed_data["eur_client"], "EUR", 70)
    await _invoice(client, seed_data["usd_client"], "USD", 999, status="draft")

    await _expense(client, 25)
    await _expense(client, 5, currency="GBP")

    job_id = await make_job(seed_data["usd_client"])
    await client.post("/api/outsourcing", json={
        "job_id": job_id, "supplier_id": seed_data["supplier"],
        "supplier_total": 40, "supplier_currency": "CAD",
    })

    r = await client.get("/api/reports")
    body = r.json()
    assert body["revenue"] == {"USD": 150.0, "EUR": 70.0}
    assert body["supplier_costs"] == {"CAD": 40.0}
    assert body["expenses"] == {"USD": 25.0, "GBP": 5.0}
    month = date.today().strftime("%Y-%m")
    assert body["monthly_revenue"] == {month: {"USD": 150.0, "EUR": 70.0}}


async def test_reports_year_filter(client, seed_data):
    await _invoice(client, seed_data["usd_client"], "USD", 100)
    await _expense(client, 25, date="2019-06-01")

    r = await client.get("/api/reports", params={"year": 2019})
    body = r.json()
    assert body["revenue"] == {}
    assert body["expenses"] == {"USD": 25.0}


async def test_reports_ignore_other_owners(client, seed_data, make_job):
    job_id = await make_job(seed_data["foreign_client"], owner_id=seed_data["other_owner"])
    r = await client.post("/api/invoices/generate", json={
        "job_ids": [job_id], "client_id": seed_data["foreign_client"],
    })
    assert r.status_code == 400

    assert (await client.get("/api/reports")).json()["revenue"] == {}


# ===================== DASHBOARD =====================


async def test_dashboard(client, seed_data, make_job):
    await _invoice(client, seed_data["usd_client"], "USD", 100)
    overdue = await _invoice(client, seed_data["eur_client"], "EUR", 60)
    await client.patch(f"/api/invoices/{overdue['id']}", json={"status": "overdue"})
    await _expense(client, 12)

    job_id = await make_job(seed_data["usd_client"], status="in_progress")
    await make_job(seed_data["usd_client"], status="finished")
    await client.post("/api/outsourcing", json={
        "job_id": job_id, "supplier_id": seed_data["supplier"], "supplier_total": 30,
    })
    await client.post("/api/quotes", json={
        "client_id": seed_data["usd_client"], "quote_number": "Q-1",
        "items": [{"description": "Estimate", "quantity": 1, "rate": 10}],
    })

    body = (await client.get("/api/dashboard")).json()
    assert body["revenue"] == {"USD": 100.0}
    assert body["outstanding_invoices"] == {"USD": 100.0, "EUR": 60.0}
    assert body["expenses"] == {"USD": 12.0}
    assert body["outsourcing_costs"] == {"USD": 30.0}
    assert body["pending_payouts"] == {"USD": 30.0}
    assert body["counts"] == {"active_jobs": 1, "open_quotes": 1}
