"""Client stage tests.

Stages are ordered per client; their processes fan out automated tasks
and task completion emails the client.
"""

from __future__ import annotations

import uuid

import pytest_asyncio


@pytest_asyncio.fixture
async def buyer(make_client):
    return await make_client(name="Maria Lopez", email="maria@example.com")


async def _create_stage(client, client_id: str, **payload) -> dict:
    body = {"title": "House Hunting", **payload}
    response = await client.post(f"/api/v1/clients/{client_id}/stages", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def test_stage_templates(client):
    response = await client.get("/api/v1/clients/stages/templates")
    assert response.status_code == 200
    templates = response.json()
    assert templates
    assert all(t["title"] and t["processes"] for t in templates)


async def test_stages_are_appended_in_order(client, buyer):
    first = await _create_stage(client, buyer["id"], title="Pre-Approval")
    second = await _create_stage(client, buyer["id"], title="House Hunting")
    assert (first["order"], second["order"]) == (0, 1)
    assert first["status"] == "ACTIVE"

    listing = (await client.get(f"/api/v1/clients/{buyer['id']}/stages")).json()
    assert [s["title"] for s in listing] == ["Pre-Approval", "House Hunting"]

    interactions = (await client.get(f"/api/v1/clients/{buyer['id']}/interactions")).json()
    assert interactions[0]["description"] == 'Stage "House Hunting" created'
    assert interactions[0]["stage_id"] == second["id"]


async def test_stage_with_processes_fans_out(client, buyer):
    stage = await _create_stage(
        client,
        buyer["id"],
        processes=[
            {
                "title": "Schedule Viewings",
                "type": "MEETING",
                "automated_tasks": [{"type": "CALENDAR_INVITE"}, {"type": "EMAIL"}],
            },
            {"title": "Shortlist Homes", "type": "TASK"},
        ],
    )
    assert sorted(p["title"] for p in stage["processes"]) == ["Schedule Viewings", "Shortlist Homes"]
    viewing = next(p for p in stage["processes"] if p["title"] == "Schedule Viewings")
    assert sorted(t["type"] for t in viewing["tasks"]) == ["CALENDAR_INVITE", "EMAIL"]

    emails = (await client.get("/api/v1/notifications/emails")).json()
    assert [e["subject"] for e in emails] == ["New Process: Schedule Viewings"]
    meetings = (await client.get("/api/v1/notifications/meetings", params={"client_id": buyer["id"]})).json()
    assert [m["title"] for m in meetings] == ["Schedule Viewings"]


async def test_complete_stage_sets_end_date(client, buyer):
    stage = await _create_stage(client, buyer["id"])
    url = f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}"

    response = await client.patch(url, json={"status": "COMPLETED"})
    assert response.status_code == 200, response.text
    assert response.json()["end_date"] is not None

    response = await client.patch(url, json={"status": "ACTIVE"})
    assert response.json()["end_date"] is None

    response = await client.patch(url, json={"title": "Closing"})
    assert response.json()["title"] == "Closing"


async def test_stage_scoped_to_its_client(client, buyer, make_client):
    other = await make_client(name="Other", email="other@example.com")
    stage = await _create_stage(client, buyer["id"])

    response = await client.patch(
        f"/api/v1/clients/{other['id']}/stages/{stage['id']}", json={"title": "Hijacked"}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Stage not found"}


async def test_delete_stage(client, buyer):
    stage = await _create_stage(client, buyer["id"], processes=[{"title": "Viewings"}])
    url = f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}"

    response = await client.delete(url)
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/clients/{buyer['id']}/stages")).json() == []
    assert (await client.delete(url)).status_code == 404


# ── Processes ────────────────────────────────────────────────────────────────


async def test_process_lifecycle(client, buyer):
    stage = await _create_stage(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}/processes"

    response = await client.post(
        base,
        json={"title": "Mortgage Documents", "type": "DOCUMENT", "automated_tasks": [{"type": "DOCUMENT_REQUEST"}]},
    )
    assert response.status_code == 201, response.text
    process = response.json()
    (task,) = process["tasks"]

    doc_requests = (
        await client.get("/api/v1/notifications/document-requests", params={"client_id": buyer["id"]})
    ).json()
    assert [d["title"] for d in doc_requests] == ["Mortgage Documents"]

    response = await client.patch(
        f"{base}/{process['id']}/tasks/{task['id']}",
        json={"status": "COMPLETED", "notes": "Received"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["completed_at"] is not None

    emails = (await client.get("/api/v1/notifications/emails")).json()
    assert [e["subject"] for e in emails] == ["Mortgage Documents Completed"]

    response = await client.patch(f"{base}/{process['id']}/status", json={"status": "COMPLETED"})
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["completed_at"] is not None

    response = await client.delete(f"{base}/{process['id']}")
    assert response.status_code == 200
    stages = (await client.get(f"/api/v1/clients/{buyer['id']}/stages")).json()
    assert stages[0]["processes"] == []


async def test_unknown_task(client, buyer):
    stage = await _create_stage(client, buyer["id"], processes=[{"title": "Viewings"}])
    process = stage["processes"][0]
    response = await client.patch(
        f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}/processes/{process['id']}/tasks/{uuid.uuid4()}",
        json={"status": "COMPLETED"},
    )
    assert response.status_code == 404


# ── Checklist & Requirements ─────────────────────────────────────────────────


async def test_stage_checklist(client, buyer):
    stage = await _create_stage(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}/checklist"

    item = (await client.post(base, json={"text": "Book inspector"})).json()
    assert item["stage_id"] == stage["id"]
    assert item["client_id"] is None

    response = await client.patch(f"{base}/{item['id']}", json={"text": "Book home inspector"})
    assert response.json()["text"] == "Book home inspector"

    assert (await client.delete(f"{base}/{item['id']}")).status_code == 200
    assert (await client.get(base)).json() == []


async def test_stage_requirements(client, buyer):
    stage = await _create_stage(client, buyer["id"])
    base = f"/api/v1/clients/{buyer['id']}/stages/{stage['id']}/requirements"

    response = await client.post(base, json={"name": "Starter home", "budget_max": 400000})
    assert response.status_code == 201, response.text
    requirement = response.json()
    assert requirement["stage_id"] == stage["id"]
    assert requirement["client_id"] == buyer["id"]

    listing = (await client.get(base)).json()
    assert [r["id"] for r in listing] == [requirement["id"]]

    stages = (await client.get(f"/api/v1/clients/{buyer['id']}/stages")).json()
    assert [r["name"] for r in stages[0]["requirements"]] == ["Starter home"]
