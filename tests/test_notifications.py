"""Notification tests.

Covers the outbound email queue and the status of document requests and
meetings produced by workflow fan-out.
"""

from __future__ import annotations

import uuid

import pytest_asyncio
from prometheus_client import REGISTRY

from src.crm.notifications.repository import queue_email

BASE = "/api/v1/notifications"


@pytest_asyncio.fixture
async def fanned_out(client, make_client):
    """A client whose onboarding produced one email, document request and meeting."""
    buyer = await make_client(name="Maria Lopez", email="maria@example.com")
    response = await client.post(
        f"/api/v1/clients/{buyer['id']}/onboarding",
        json={
            "actions": [
                {
                    "title": "Collect Identification",
                    "type": "DOCUMENT",
                    "automated_tasks": [{"type": "DOCUMENT_REQUEST"}, {"type": "EMAIL"}],
                },
                {"title": "Initial Consultation", "type": "MEETING", "automated_tasks": [{"type": "CALENDAR_INVITE"}]},
            ]
        },
    )
    assert response.status_code == 201, response.text
    return buyer


# ── Email Queue ──────────────────────────────────────────────────────────────


async def test_mark_email_sent(client, fanned_out):
    (email,) = (await client.get(f"{BASE}/emails")).json()
    assert email["status"] == "PENDING"
    assert email["sent_at"] is None

    response = await client.patch(f"{BASE}/emails/{email['id']}", json={"status": "SENT"})
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "SENT"
    assert response.json()["sent_at"] is not None

    assert (await client.get(f"{BASE}/emails", params={"status": "PENDING"})).json() == []
    sent = (await client.get(f"{BASE}/emails", params={"status": "SENT"})).json()
    assert [e["id"] for e in sent] == [email["id"]]


async def test_mark_email_failed_leaves_sent_at_empty(client, fanned_out):
    (email,) = (await client.get(f"{BASE}/emails")).json()
    response = await client.patch(f"{BASE}/emails/{email['id']}", json={"status": "FAILED"})
    assert response.json()["status"] == "FAILED"
    assert response.json()["sent_at"] is None


async def test_email_status_is_validated(client, fanned_out):
    (email,) = (await client.get(f"{BASE}/emails")).json()
    response = await client.patch(f"{BASE}/emails/{email['id']}", json={"status": "BOUNCED"})
    assert response.status_code == 400


async def test_email_list_limit(client, make_client):
    buyer = await make_client()
    for n in range(3):
        await client.post(
            f"/api/v1/clients/{buyer['id']}/onboarding/actions",
            json={"title": f"Step {n}", "automated_tasks": [{"type": "EMAIL"}]},
        )
    assert len((await client.get(f"{BASE}/emails", params={"limit": 2})).json()) == 2
    assert (await client.get(f"{BASE}/emails", params={"limit": 0})).status_code == 400
    assert (await client.get(f"{BASE}/emails", params={"limit": 501})).status_code == 400


async def test_unknown_email(client):
    response = await client.patch(f"{BASE}/emails/{uuid.uuid4()}", json={"status": "SENT"})
    assert response.status_code == 404
    assert response.json() == {"error": "Email not found"}


async def test_queue_metric_counts_committed_emails_only(db_session):
    labels = {"source": "metric-check"}
    before = REGISTRY.get_sample_value("crm_email_queue_total", labels) or 0

    queue_email(db_session, to="a@example.com", subject="Dropped", content="x", source="metric-check")
    await db_session.rollback()
    assert (REGISTRY.get_sample_value("crm_email_queue_total", labels) or 0) == before

    queue_email(db_session, to="a@example.com", subject="Kept", content="x", source="metric-check")
    queue_email(db_session, to="b@example.com", subject="Kept", content="x", source="metric-check")
    await db_session.commit()
    assert REGISTRY.get_sample_value("crm_email_queue_total", labels) == before + 2


# ── Document Requests & Meetings ─────────────────────────────────────────────


async def test_document_request_status(client, fanned_out):
    (doc_request,) = (await client.get(f"{BASE}/document-requests", params={"client_id": fanned_out["id"]})).json()
    assert doc_request["status"] == "PENDING"

    response = await client.patch(f"{BASE}/document-requests/{doc_request['id']}", json={"status": "RECEIVED"})
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "RECEIVED"


async def test_meeting_status(client, fanned_out):
    (meeting,) = (await client.get(f"{BASE}/meetings", params={"client_id": fanned_out["id"]})).json()
    assert meeting["suggested_date"] > meeting["created_at"]

    response = await client.patch(f"{BASE}/meetings/{meeting['id']}", json={"status": "SCHEDULED"})
    assert response.status_code == 200
    assert response.json()["status"] == "SCHEDULED"


async def test_filter_by_client(client, fanned_out, make_client):
    other = await make_client(name="Other", email="other@example.com")
    assert (await client.get(f"{BASE}/meetings", params={"client_id": other["id"]})).json() == []
    assert len((await client.get(f"{BASE}/document-requests")).json()) == 1


async def test_unknown_document_request_and_meeting(client):
    response = await client.patch(f"{BASE}/document-requests/{uuid.uuid4()}", json={"status": "RECEIVED"})
    assert response.status_code == 404
    response = await client.patch(f"{BASE}/meetings/{uuid.uuid4()}", json={"status": "SCHEDULED"})
    assert response.status_code == 404
