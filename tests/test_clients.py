"""Client API tests.

Tests client CRUD, duplicate detection, search, the activity log,
documents and client checklists, and cascading deletes.
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from src.crm.clients.models import Interaction
from src.crm.requirements.models import Requirement


# ── Create & Duplicate Detection ─────────────────────────────────────────────


async def test_create_client_logs_created_interaction(client):
    response = await client.post(
        "/api/v1/clients",
        json={"name": "Maria Lopez", "email": "maria@example.com", "phone": "555-0101"},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["name"] == "Maria Lopez"
    assert data["status"] == "Active"
    assert data["pinned"] is False
    assert [i["type"] for i in data["interactions"]] == ["Created"]


async def test_create_client_with_initial_requirement(client):
    response = await client.post(
        "/api/v1/clients",
        json={
            "name": "Daniel Chen",
            "requirements": {
                "type": "RENTAL",
                "budget_min": 1500,
                "budget_max": 2500,
                "preferred_locations": ["Downtown"],
            },
        },
    )
    assert response.status_code == 201, response.text
    (requirement,) = response.json()["requirements"]
    assert requirement["name"] == "Initial Requirement"
    assert requirement["type"] == "RENTAL"
    assert requirement["rental_preferences"]["max_rental_budget"] == 2500
    assert requirement["purchase_preferences"] is None


async def test_create_duplicate_client_conflicts(client, make_client):
    await make_client(name="Maria Lopez", email="maria@example.com")

    response = await client.post(
        "/api/v1/clients",
        json={"name": "Someone Else", "email": "MARIA@example.com"},
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Client already exists"}

    forced = await client.post(
        "/api/v1/clients",
        json={"name": "Someone Else", "email": "maria@example.com", "force_create": True},
    )
    assert forced.status_code == 201


async def test_validate_reports_matches(client, make_client):
    existing = await make_client(name="Maria Lopez", email="maria@example.com", phone="555-0101")

    response = await client.post("/api/v1/clients/validate", json={"phone": "555-0101"})
    assert response.status_code == 409
    body = response.json()
    assert body["exists"] is True
    assert [m["id"] for m in body["matches"]] == [existing["id"]]

    response = await client.post("/api/v1/clients/validate", json={"name": "Nobody Here"})
    assert response.status_code == 200
    assert response.json()["exists"] is False


# ── Read, Update, Delete ─────────────────────────────────────────────────────


async def test_list_clients_pinned_first_with_latest_interaction(client, make_client):
    first = await make_client(name="Ann Able", email="ann@example.com")
    second = await make_client(name="Bob Baker", email="bob@example.com")

    await client.patch(f"/api/v1/clients/{first['id']}", json={"pinned": True})
    await client.post(
        f"/api/v1/clients/{second['id']}/interactions",
        json={"type": "Call", "description": "Discussed budget"},
    )

    response = await client.get("/api/v1/clients")
    assert response.status_code == 200
    rows = response.json()
    assert [r["id"] for r in rows] == [first["id"], second["id"]]
    assert rows[1]["latest_interaction"]["description"] == "Discussed budget"


async def test_get_client_detail(client, make_client):
    created = await make_client()
    response = await client.get(f"/api/v1/clients/{created['id']}")
    assert response.status_code == 200
    data = response.json()
    for key in ("requirements", "interactions", "shared_properties", "documents", "checklist"):
        assert key in data


async def test_status_change_is_logged(client, make_client):
    created = await make_client()
    response = await client.patch(f"/api/v1/clients/{created['id']}", json={"status": "Inactive"})
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "Inactive"
    descriptions = [i["description"] for i in data["interactions"]]
    assert "Status updated to Inactive" in descriptions


async def test_update_without_status_change_is_not_logged(client, make_client):
    created = await make_client()
    response = await client.patch(f"/api/v1/clients/{created['id']}", json={"notes": "Prefers email"})
    assert response.status_code == 200
    assert [i["type"] for i in response.json()["interactions"]] == ["Created"]


@pytest.mark.parametrize("field", ["name", "status", "pinned"])
async def test_null_for_required_field_is_a_bad_request(client, make_client, field):
    created = await make_client()
    url = f"/api/v1/clients/{created['id']}"
    response = await client.patch(url, json={field: None})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"
    assert [d["loc"][-1] for d in response.json()["details"]] == [field]

    unchanged = (await client.get(url)).json()
    assert unchanged[field] == created[field]


async def test_null_email_clears_it(client, make_client):
    created = await make_client()
    response = await client.patch(f"/api/v1/clients/{created['id']}", json={"email": None})
    assert response.status_code == 200, response.text
    assert response.json()["email"] is None


async def test_update_missing_client(client):
    response = await client.patch(f"/api/v1/clients/{uuid.uuid4()}", json={"notes": "x"})
    assert response.status_code == 404


async def test_delete_client_cascades(client, make_client, db_session):
    created = await make_client(
        requirements={"type": "PURCHASE", "budget_max": 500000},
    )
    client_id = uuid.UUID(created["id"])

    response = await client.delete(f"/api/v1/clients/{client_id}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    assert (await client.get(f"/api/v1/clients/{client_id}")).status_code == 404
    interactions = await db_session.scalar(
        select(func.count(Interaction.id)).where(Interaction.client_id == client_id)
    )
    requirements = await db_session.scalar(
        select(func.count(Requirement.id)).where(Requirement.client_id == client_id)
    )
    assert interactions == 0
    assert requirements == 0


async def test_delete_missing_client(client):
    response = await client.delete(f"/api/v1/clients/{uuid.uuid4()}")
    assert response.status_code == 404


# ── Search ───────────────────────────────────────────────────────────────────


async def test_search_by_name_or_email(client, make_client):
    await make_client(name="Maria Lopez", email="maria@example.com")
    await make_client(name="Mark Twain", email="samuel@example.com")
    await make_client(name="Zed Zero", email="zed@example.com")

    response = await client.get("/api/v1/clients/search", params={"q": "MAR"})
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Maria Lopez", "Mark Twain"]

    response = await client.get("/api/v1/clients/search", params={"q": "samuel"})
    assert [c["name"] for c in response.json()] == ["Mark Twain"]


async def test_search_limited_to_five(client, make_client):
    for n in range(7):
        await make_client(name=f"Client {n}", email=f"client{n}@example.com")
    response = await client.get("/api/v1/clients/search", params={"q": "client"})
    assert len(response.json()) == 5


async def test_search_requires_query(client):
    response = await client.get("/api/v1/clients/search")
    assert response.status_code == 400


# ── Interactions ─────────────────────────────────────────────────────────────


async def test_log_interaction_updates_last_contact(client, make_client):
    created = await make_client()
    response = await client.post(
        f"/api/v1/clients/{created['id']}/interactions",
        json={"type": "Meeting", "description": "Toured two homes", "notes": "Liked the colonial"},
    )
    assert response.status_code == 201, response.text
    assert response.json()["notes"] == "Liked the colonial"

    detail = (await client.get(f"/api/v1/clients/{created['id']}")).json()
    assert detail["last_contact"] >= created["last_contact"]

    listing = (await client.get(f"/api/v1/clients/{created['id']}/interactions")).json()
    assert listing[0]["description"] == "Toured two homes"


async def test_interactions_for_missing_client(client):
    response = await client.get(f"/api/v1/clients/{uuid.uuid4()}/interactions")
    assert response.status_code == 404


# ── Documents ────────────────────────────────────────────────────────────────


async def test_add_and_delete_documents(client, make_client):
    created = await make_client()
    response = await client.post(
        f"/api/v1/clients/{created['id']}/documents",
        json={
            "documents": [
                {"name": "ID.pdf", "url": "https://files.example.com/id.pdf", "type": "application/pdf"},
                {"name": "Payslip.pdf", "url": "https://files.example.com/payslip.pdf"},
            ]
        },
    )
    assert response.status_code == 201, response.text
    documents = response.json()
    assert len(documents) == 2

    interactions = (await client.get(f"/api/v1/clients/{created['id']}/interactions")).json()
    assert interactions[0]["description"] == "Uploaded 2 document(s)"

    doc_id = documents[0]["id"]
    response = await client.delete(f"/api/v1/clients/{created['id']}/documents/{doc_id}")
    assert response.status_code == 200
    remaining = (await client.get(f"/api/v1/clients/{created['id']}/documents")).json()
    assert [d["id"] for d in remaining] == [documents[1]["id"]]

    response = await client.delete(f"/api/v1/clients/{created['id']}/documents/{doc_id}")
    assert response.status_code == 404


async def test_documents_require_at_least_one(client, make_client):
    created = await make_client()
    response = await client.post(f"/api/v1/clients/{created['id']}/documents", json={"documents": []})
    assert response.status_code == 400


# ── Checklist ────────────────────────────────────────────────────────────────


async def test_client_checklist_lifecycle(client, make_client):
    created = await make_client()
    base = f"/api/v1/clients/{created['id']}/checklist"

    response = await client.post(base, json={"text": "Collect proof of funds"})
    assert response.status_code == 201, response.text
    item = response.json()
    assert item["completed"] is False
    assert item["client_id"] == created["id"]

    response = await client.patch(f"{base}/{item['id']}", json={"completed": True})
    assert response.status_code == 200
    assert response.json()["completed"] is True

    assert [i["id"] for i in (await client.get(base)).json()] == [item["id"]]

    response = await client.delete(f"{base}/{item['id']}")
    assert response.status_code == 200
    assert (await client.get(base)).json() == []


async def test_checklist_item_scoped_to_client(client, make_client):
    owner = await make_client(name="Owner", email="owner@example.com")
    other = await make_client(name="Other", email="other@example.com")
    item = (
        await client.post(f"/api/v1/clients/{owner['id']}/checklist", json={"text": "Sign NDA"})
    ).json()

    response = await client.patch(
        f"/api/v1/clients/{other['id']}/checklist/{item['id']}", json={"completed": True}
    )
    assert response.status_code == 404
