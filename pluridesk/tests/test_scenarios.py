"""
End-to-end flows: quote -> job -> invoice -> payments.
"""
from sqlalchemy import func, select

from pluridesk.models.invoice import Invoice


async def test_quote_to_paid_invoice(client, seed_data):
    r = await client.post("/api/quotes", json={
        "client_id": seed_data["usd_client"],
        "quote_number": "Q-2026-001",
        "currency": "USD",
        "items": [
            {"description": "Translation", "quantity": 10, "rate": 5},
            {"description": "Review", "quantity": 2, "rate": 25},
        ],
    })
    assert r.status_code == 201, r.text
    quote = r.json()["quote"]
    assert quote["total"] == 100.0

    r = await client.post(f"/api/quotes/{quote['id']}/convert")
    job = r.json()["job"]
    assert job["total_amount"] == 100.0

    r = await client.post("/api/invoices/generate", json={
        "job_ids": [job["id"]], "client_id": seed_data["usd_client"],
    })
    invoice = r.json()["invoice"]
    assert invoice["total"] == 100.0
    assert invoice["currency"] == "USD"

    await client.patch(f"/api/invoices/{invoice['id']}", json={"status": "sent"})

    payment = {"invoice_id": invoice["id"], "date": "2026-03-01", "method": "Wire"}
    await client.post("/api/payments", json={**payment, "amount": 40})
    body = (await client.get(f"/api/invoices/{invoice['id']}")).json()["invoice"]
    assert body["outstanding"] == 60.0

    await client.post("/api/payments", json={**payment, "amount": 60})
    body = (await client.get(f"/api/invoices/{invoice['id']}")).json()["invoice"]
    assert body["outstanding"] == 0.0

    r = await client.patch(f"/api/invoices/{invoice['id']}", json={"status": "paid"})
    assert r.status_code == 200

    quote = (await client.get(f"/api/quotes/{quote['id']}")).json()["quote"]
    assert quote["status"] == "accepted"


async def test_mixed_currency_jobs_leave_no_invoice(client, seed_data, make_job, db_session):
    usd = await make_job(seed_data["usd_client"], total=100, currency="USD")
    eur = await make_job(seed_data["usd_client"], total=100, currency="EUR")

    r = await client.post("/api/invoices/generate", json={
        "job_ids": [usd, eur], "client_id": seed_data["usd_client"],
    })
    assert r.status_code == 400
    assert r.json() == {"error": "All jobs must have the same currency"}

    count = await db_session.scalar(select(func.count(Invoice.id)))
    assert count == 0
    for job_id in (usd, eur):
        job = (await client.get(f"/api/jobs/{job_id}")).json()["job"]
        assert job["status"] == "finished"
        assert job["invoice_id"] is None
