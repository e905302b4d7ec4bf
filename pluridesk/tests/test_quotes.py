"""
Quote endpoint tests, including conversion into a job.
"""
from pluridesk.models.quote import Quote


ITEMS = [
    {"description": "Translation EN>FR", "quantity": 10, "rate": 5},
    {"description": "Proofreading", "quantity": 2, "rate": 25},
]


async def _create_quote(client, client_id, **overrides):
    body = {
        "client_id": client_id,
        "quote_number": "Q-001",
        "currency": "EUR",
        "notes": "Rush delivery",
        "items": ITEMS,
    }
    body.update(overrides)
    r = await client.post("/api/quotes", json=body)
    assert r.status_code == 201, r.text
    return r.json()["quote"]


# ===================== CRUD =====================


async def test_create_quote_computes_total(client, seed_data):
    quote = await _create_quote(client, seed_data["eur_client"])
    assert quote["total"] == 100.0
    assert quote["status"] == "draft"
    assert quote["client_name"] == "Maison Dupont"


async def test_get_quote_returns_items_in_order(client, seed_data):
    quote = await _create_quote(client, seed_data["eur_client"])
    r = await client.get(f"/api/quotes/{quote['id']}")
    assert r.status_code == 200
    items = r.json()["items"]
    assert [i["description"] for i in items] == ["Translation EN>FR", "Proofreading"]
    assert [i["amount"] for i in items] == [50.0, 50.0]


async def test_client_supplied_amount_is_ignored(client, seed_data):
    quote = await _create_quote(
        client,
        seed_data["usd_client"],
        items=[{"description": "DTP", "quantity": 3, "rate": 10, "amount": 1}],
    )
    assert quote["total"] == 30.0


async def test_create_quote_rejects_zero_rate(client, seed_data):
    r = await client.post("/api/quotes", json={
        "client_id": seed_data["usd_client"],
        "quote_number": "Q-002",
        "items": [{"description": "Free work", "quantity": 1, "rate": 0}],
    })
    assert r.status_code == 400
    assert "rate" in r.json()["error"]


async def test_create_quote_requires_items(client, seed_data):
    r = await client.post("/api/quotes", json={
        "client_id": seed_data["usd_client"],
        "quote_number": "Q-003",
        "items": [],
    })
    assert r.status_code == 400


async def test_create_quote_for_foreign_client(client, seed_data):
    r = await client.post("/api/quotes", json={
        "client_id": seed_data["foreign_client"],
        "quote_number": "Q-004",
        "items": ITEMS,
    })
    assert r.status_code == 404
    assert r.json() == {"error": "Client not found"}


async def test_list_quotes_filters_status(client, seed_data):
    await _create_quote(client, seed_data["usd_client"], quote_number="Q-10")
    await _create_quote(client, seed_data["usd_client"], quote_number="Q-11", status="sent")

    r = await client.get("/api/quotes", params={"status": "sent"})
    body = r.json()
    assert r.status_code == 200
    assert [q["quote_number"] for q in body["data"]] == ["Q-11"]
    assert body["metadata"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}


async def test_update_quote_replaces_items(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"])
    r = await client.patch(f"/api/quotes/{quote['id']}", json={
        "items": [{"description": "Transcreation", "quantity": 1, "rate": 400}],
    })
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = await client.get(f"/api/quotes/{quote['id']}")
    assert r.json()["quote"]["total"] == 400.0
    assert len(r.json()["items"]) == 1


async def test_update_quote_status_follows_lifecycle(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"])

    r = await client.patch(f"/api/quotes/{quote['id']}", json={"status": "rejected"})
    assert r.status_code == 200

    r = await client.patch(f"/api/quotes/{quote['id']}", json={"status": "accepted"})
    assert r.status_code == 409
    assert r.json()["error"] == "Cannot change quote status from rejected to accepted"


async def test_update_quote_rejects_unknown_status(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"])
    r = await client.patch(f"/api/quotes/{quote['id']}", json={"status": "paid"})
    assert r.status_code == 400


async def test_delete_quote(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"])
    r = await client.delete(f"/api/quotes/{quote['id']}")
    assert r.json() == {"success": True}

    r = await client.get(f"/api/quotes/{quote['id']}")
    assert r.status_code == 404
    assert r.json() == {"error": "Quote not found"}


async def test_foreign_quote_is_not_visible(client, db_session, seed_data):
    quote = Quote(owner_id=seed_data["other_owner"], client_id=seed_data["foreign_client"], quote_number="X-1", total=5)
    db_session.add(quote)
    await db_session.commit()
    quote_id = quote.id

    r = await client.get(f"/api/quotes/{quote_id}")
    assert r.status_code == 404


# ===================== CONVERSION =====================


async def test_convert_quote_creates_flat_fee_job(client, seed_data):
    quote = await _create_quote(client, seed_data["eur_client"])

    r = await client.post(f"/api/quotes/{quote['id']}/convert")
    assert r.status_code == 200
    job = r.json()["job"]
    assert job["currency"] == "EUR"
    assert job["total_amount"] == 100.0
    assert job["rate"] == 100.0
    assert job["quantity"] == 1
    assert job["pricing_type"] == "flat_fee"
    assert job["service_type"] == "translation"
    assert job["status"] == "created"
    assert job["title"] == "Job from Quote Q-001"
    assert job["notes"] == "Converted from Quote Q-001\n\nRush delivery"
    assert job["job_code"].startswith("JOB-")
    assert job["client_id"] == seed_data["eur_client"]

    r = await client.get(f"/api/quotes/{quote['id']}")
    assert r.json()["quote"]["status"] == "accepted"


async def test_convert_sent_quote(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"], status="sent")
    r = await client.post(f"/api/quotes/{quote['id']}/convert")
    assert r.status_code == 200


async def test_convert_accepted_quote(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"])
    r = await client.patch(f"/api/quotes/{quote['id']}", json={"status": "accepted"})
    assert r.status_code == 200

    r = await client.post(f"/api/quotes/{quote['id']}/convert")
    assert r.status_code == 200
    assert r.json()["job"]["total_amount"] == 100.0

    r = await client.get(f"/api/quotes/{quote['id']}")
    assert r.json()["quote"]["status"] == "accepted"


async def test_convert_rejected_quote_is_refused(client, seed_data):
    quote = await _create_quote(client, seed_data["usd_client"], status="rejected")

    r = await client.post(f"/api/quotes/{quote['id']}/convert")
    assert r.status_code == 409
    assert r.json()["error"] == "Cannot change quote status from rejected to accepted"

    r = await client.get("/api/jobs")
    assert r.json()["metadata"]["total"] == 0


async def test_convert_missing_quote(client, seed_data):
    r = await client.post("/api/quotes/9999/convert")
    assert r.status_code == 404
    assert r.json() == {"error": "Quote not found"}
