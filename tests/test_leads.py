"""Lead tests.

Covers lead CRUD, the communication log, queued lead emails and
conversion into a client.
"""

from __future__ import annotations

import json
import uuid

import pytest_asyncio

from src.crm.config import get_settings


@pytest_asyncio.fixture
async def lead(client):
    response = await client.post(
        "/api/v1/leads",
        json={
            "first_name": "Sam",
            "last_name": "Rivera",
            "email": "sam@example.com",
            "phone": "555-0199",
            "source": "Open House",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


# ── CRUD ─────────────────────────────────────────────────────────────────────


async def test_create_lead(lead):
    assert lead["status"] == "NEW"
    assert lead["emails_sent"] == 0
    assert lead["converted_client_id"] is None


async def test_create_lead_validates_email(client):
    response = await client.post("/api/v1/leads", json={"first_name": "Bad", "email": "nope"})
    assert response.status_code == 400


async def test_update_lead(client, lead):
    url = f"/api/v1/leads/{lead['id']}"
    response = await client.patch(url, json={"status": "QUALIFIED", "notes": "Pre-approved", "first_name": None})
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "QUALIFIED"
    assert data["notes"] == "Pre-approved"
    assert data["first_name"] == "Sam"

    response = await client.patch(url, json={"status": "MAYBE"})
    assert response.status_code == 400


async def test_list_and_delete_lead(client, lead):
    assert [item["id"] for item in (await client.get("/api/v1/leads")).json()] == [lead["id"]]

    url = f"/api/v1/leads/{lead['id']}"
    assert (await client.delete(url)).status_code == 200
    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url)).status_code == 404


# ── Communication ────────────────────────────────────────────────────────────


async def test_record_communication(client, lead):
    response = await client.post(
        f"/api/v1/leads/{lead['id']}/communicate",
        json={"type": "CALL", "content": "Interested in 3BR homes"},
    )
    assert response.status_code == 201, response.text
    interaction = response.json()
    assert interaction["lead_id"] == lead["id"]

    refreshed = (await client.get(f"/api/v1/leads/{lead['id']}")).json()
    assert refreshed["last_contact"] is not None

    log = (await client.get(f"/api/v1/leads/{lead['id']}/interactions")).json()
    assert [i["content"] for i in log] == ["Interested in 3BR homes"]


async def test_email_lead_queues_and_logs(client, lead):
    response = await client.post(
        f"/api/v1/leads/{lead['id']}/email",
        json={"subject": "Open house follow-up", "content": "Thanks for stopping by!"},
    )
    assert response.status_code == 201, response.text
    result = response.json()
    assert result["success"] is True

    record = json.loads(result["interaction"]["content"])
    assert result["interaction"]["type"] == "EMAIL"
    assert record["status"] == "QUEUED"
    assert record["recipient"] == "sam@example.com"
    assert record["sender"] == get_settings().EMAIL_FROM_ADDRESS
    assert record["subject"] == "Open house follow-up"

    (email,) = (await client.get("/api/v1/notifications/emails")).json()
    assert email["id"] == result["email_id"]
    assert email["lead_id"] == lead["id"]
    assert email["content"] == "Thanks for stopping by!"

    refreshed = (await client.get(f"/api/v1/leads/{lead['id']}")).json()
    assert refreshed["emails_sent"] == 1
    assert refreshed["last_contact"] is not None


async def test_email_lead_without_address(client):
    lead = (await client.post("/api/v1/leads", json={"first_name": "Walk", "last_name": "In"})).json()
    response = await client.post(
        f"/api/v1/leads/{lead['id']}/email",
        json={"subject": "Hello", "content": "Hi there"},
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Lead not found or has no email"}


async def test_email_unknown_lead(client):
    response = await client.post(
        f"/api/v1/leads/{uuid.uuid4()}/email",
        json={"subject": "Hello", "content": "Hi there"},
    )
    assert response.status_code == 404


# ── Conversion ───────────────────────────────────────────────────────────────


async def test_convert_lead(client, lead):
    response = await client.post(f"/api/v1/leads/{lead['id']}/convert")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["client"]["name"] == "Sam Rivera"
    assert body["client"]["email"] == "sam@example.com"
    assert body["client"]["status"] == "ACTIVE"
    assert body["lead"]["status"] == "CONVERTED"
    assert body["lead"]["converted_client_id"] == body["client"]["id"]
    assert body["lead"]["converted_at"] is not None

    detail = (await client.get(f"/api/v1/clients/{body['client']['id']}")).json()
    (created,) = detail["interactions"]
    assert created["description"] == "Client profile created"
    assert created["notes"] == "Converted from lead (Open House)"


async def test_convert_twice_is_rejected(client, lead):
    assert (await client.post(f"/api/v1/leads/{lead['id']}/convert")).status_code == 200
    response = await client.post(f"/api/v1/leads/{lead['id']}/convert")
    assert response.status_code == 400
    assert response.json() == {"error": "Lead already converted"}


async def test_convert_unknown_lead(client):
    response = await client.post(f"/api/v1/leads/{uuid.uuid4()}/convert")
    assert response.status_code == 404
    assert response.json() == {"error": "Lead not found"}
