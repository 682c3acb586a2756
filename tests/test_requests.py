"""Client request tests.

A request is seeded with the default processes for its type; processes
added afterwards fan out their automated tasks.
"""

from __future__ import annotations

import uuid

import pytest_asyncio


@pytest_asyncio.fixture
async def buyer(make_client):
    return await make_client(name="Maria Lopez", email="maria@example.com")


async def _create_request(client, client_id: str, request_type: str = "PURCHASE") -> dict:
    response = await client.post(f"/api/v1/clients/{client_id}/requests", json={"type": request_type})
    assert response.status_code == 201, response.text
    return response.json()


# ── Requests ─────────────────────────────────────────────────────────────────


async def test_create_request_seeds_default_processes(client, buyer):
    request = await _create_request(client, buyer["id"])
    assert request["type"] == "PURCHASE"
    assert request["status"] == "ACTIVE"
    assert sorted(p["title"] for p in request["processes"]) == [
        "Mortgage Pre-Approval",
        "Offer Submission",
        "Property Viewings",
    ]
    tasks = [t for p in request["processes"] for t in p["tasks"]]
    assert tasks and all(t["status"] == "PENDING" for t in tasks)

    # Seeded processes do not fan out
    assert (await client.get("/api/v1/notifications/emails")).json() == []
    meetings = (await client.get("/api/v1/notifications/meetings", params={"client_id": buyer["id"]})).json()
    assert meetings == []

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "REQUEST_CREATED"
    assert interactions[0]["request_id"] == request["id"]


async def test_rental_and_sale_defaults(client, buyer):
    rental = await _create_request(client, buyer["id"], "RENTAL")
    sale = await _create_request(client, buyer["id"], "SALE")
    assert "Lease Signing" in {p["title"] for p in rental["processes"]}
    assert "Open House" in {p["title"] for p in sale["processes"]}


async def test_unknown_request_type_rejected(client, buyer):
    response = await client.post(f"/api/v1/clients/{buyer['id']}/requests", json={"type": "LOAN"})
    assert response.status_code == 400


async def test_update_and_delete_request(client, buyer):
    request = await _create_request(client, buyer["id"])
    url = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}"

    response = await client.patch(url, json={"status": "ON_HOLD"})
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "ON_HOLD"

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "REQUEST_STATUS_CHANGED"

    assert (await client.delete(url)).status_code == 200
    assert (await client.get(f"/api/v1/clients/{buyer['id']}/requests")).json() == []
    assert (await client.delete(url)).status_code == 404

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "REQUEST_DELETED"


async def test_request_scoped_to_its_client(client, buyer, make_client):
    other = await make_client(name="Other", email="other@example.com")
    request = await _create_request(client, buyer["id"])
    response = await client.patch(
        f"/api/v1/clients/{other['id']}/requests/{request['id']}", json={"status": "CLOSED"}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Request not found"}


# ── Processes & Tasks ────────────────────────────────────────────────────────


async def test_added_process_fans_out(client, buyer):
    request = await _create_request(client, buyer["id"], "RENTAL")
    base = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/processes"

    response = await client.post(
        base,
        json={
            "title": "Reference Check",
            "type": "DOCUMENT",
            "automated_tasks": [{"type": "DOCUMENT_REQUEST"}, {"type": "EMAIL"}],
        },
    )
    assert response.status_code == 201, response.text
    process = response.json()
    assert process["request_id"] == request["id"]
    assert len(process["tasks"]) == 2

    emails = (await client.get("/api/v1/notifications/emails")).json()
    assert [e["subject"] for e in emails] == ["New Process: Reference Check"]
    doc_requests = (
        await client.get("/api/v1/notifications/document-requests", params={"client_id": buyer["id"]})
    ).json()
    assert [d["title"] for d in doc_requests] == ["Reference Check"]

    listing = (await client.get(base)).json()
    assert len(listing) == 4


async def test_update_process_status(client, buyer):
    request = await _create_request(client, buyer["id"])
    process = request["processes"][0]
    url = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/processes/{process['id']}"

    response = await client.patch(url, json={"status": "COMPLETED", "notes": "Letter received"})
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["status"] == "COMPLETED"
    assert updated["completed_at"] is not None
    assert updated["notes"] == "Letter received"

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "PROCESS_STATUS_CHANGED"

    response = await client.patch(url, json={"title": "Pre-Approval Letter"})
    assert response.json()["title"] == "Pre-Approval Letter"
    assert response.json()["status"] == "COMPLETED"


async def test_delete_process(client, buyer):
    request = await _create_request(client, buyer["id"])
    process = request["processes"][0]
    url = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/processes/{process['id']}"

    assert (await client.delete(url)).status_code == 200
    assert (await client.delete(url)).status_code == 404


async def test_task_lifecycle(client, buyer):
    request = await _create_request(client, buyer["id"])
    process = request["processes"][0]
    base = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/processes/{process['id']}/tasks"

    response = await client.post(base, json={"type": "EMAIL"})
    assert response.status_code == 201, response.text
    task = response.json()
    assert task["status"] == "PENDING"

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "TASK_CREATED"

    response = await client.patch(f"{base}/{task['id']}", json={"status": "COMPLETED", "notes": "Sent"})
    assert response.status_code == 200
    assert response.json()["completed_at"] is not None
    assert response.json()["notes"] == "Sent"

    tasks = (await client.get(base)).json()
    assert task["id"] in {t["id"] for t in tasks}

    assert (await client.delete(f"{base}/{task['id']}")).status_code == 200
    assert (await client.delete(f"{base}/{task['id']}")).status_code == 404
    response = await client.patch(f"{base}/{uuid.uuid4()}", json={"status": "COMPLETED"})
    assert response.status_code == 404


# ── Checklist & Requirements ─────────────────────────────────────────────────


async def test_request_checklist(client, buyer):
    request = await _create_request(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/checklist"

    item = (await client.post(base, json={"text": "Confirm closing date"})).json()
    assert item["request_id"] == request["id"]

    response = await client.patch(f"{base}/{item['id']}", json={"completed": True})
    assert response.json()["completed"] is True

    detail = (await client.get(f"/api/v1/clients/{buyer['id']}/requests")).json()
    assert [c["id"] for c in detail[0]["checklist"]] == [item["id"]]

    assert (await client.delete(f"{base}/{item['id']}")).status_code == 200
    assert (await client.get(base)).json() == []


async def test_request_requirements(client, buyer):
    request = await _create_request(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/requirements"

    response = await client.post(base, json={"name": "Family home", "bedrooms": 4, "budget_max": 650000})
    assert response.status_code == 201, response.text
    requirement = response.json()
    assert requirement["request_id"] == request["id"]
    assert requirement["purchase_preferences"] is not None

    assert [r["id"] for r in (await client.get(base)).json()] == [requirement["id"]]

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["type"] == "REQUIREMENT_CREATED"
    assert interactions[0]["description"] == "New requirement created: Family home"


async def test_request_requirement_update_and_delete_are_logged(client, buyer):
    request = await _create_request(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/requests/{request['id']}/requirements"
    requirement = (await client.post(base, json={"name": "Family home"})).json()

    url = f"/api/v1/requirements/{requirement['id']}"
    response = await client.patch(url, json={"bedrooms": 5})
    assert response.status_code == 200, response.text
    assert (await client.delete(url)).status_code == 200

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    types = {i["type"] for i in interactions}
    assert {"REQUIREMENT_CREATED", "REQUIREMENT_UPDATED", "REQUIREMENT_DELETED"} <= types
    assert "Requirement Updated" not in types
