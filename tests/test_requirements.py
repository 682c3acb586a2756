"""Requirement tests.

Covers requirement CRUD, typed preferences, checklist logging, property
gathering and the candidate email.
"""

from __future__ import annotations

import uuid

import pytest_asyncio


@pytest_asyncio.fixture
async def buyer(make_client):
    return await make_client(name="Maria Lopez", email="maria@example.com")


@pytest_asyncio.fixture
async def requirement(client, buyer):
    response = await client.post(
        f"/api/v1/clients/{buyer['id']}/requirements",
        json={
            "name": "Family home",
            "type": "PURCHASE",
            "budget_min": 300000,
            "budget_max": 500000,
            "bedrooms": 3,
            "preferred_locations": ["Springfield"],
            "purchase_preferences": {"garage": True, "parking": 2},
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _interactions(client, client_id: str) -> list[dict]:
    return (await client.get(f"/api/v1/clients/{client_id}/interactions")).json()


# ── CRUD ─────────────────────────────────────────────────────────────────────


async def test_create_requirement(client, buyer, requirement):
    assert requirement["client_id"] == buyer["id"]
    assert requirement["status"] == "Active"
    assert requirement["purchase_preferences"]["garage"] is True
    assert requirement["purchase_preferences"]["parking"] == 2
    assert requirement["rental_preferences"] is None

    listing = (await client.get(f"/api/v1/clients/{buyer['id']}/requirements")).json()
    assert [r["id"] for r in listing] == [requirement["id"]]

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "Requirement Added"
    assert interactions[0]["description"] == "Added new purchase requirement: Family home"


async def test_rental_requirement_defaults_max_budget(client, buyer):
    response = await client.post(
        f"/api/v1/clients/{buyer['id']}/requirements",
        json={"name": "City flat", "type": "RENTAL", "budget_max": 2200},
    )
    assert response.status_code == 201, response.text
    prefs = response.json()["rental_preferences"]
    assert prefs["max_rental_budget"] == 2200
    assert prefs["lease_term"] == "Long-term"


async def test_get_missing_requirement(client):
    response = await client.get(f"/api/v1/requirements/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Requirement not found"}


async def test_partial_update_keeps_other_fields(client, buyer, requirement):
    response = await client.patch(
        f"/api/v1/requirements/{requirement['id']}",
        json={"budget_max": 550000, "name": None},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["budget_max"] == 550000
    assert data["name"] == "Family home"
    assert data["bedrooms"] == 3
    assert data["purchase_preferences"]["garage"] is True

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "Requirement Updated"


async def test_type_change_swaps_preferences(client, requirement):
    response = await client.patch(
        f"/api/v1/requirements/{requirement['id']}",
        json={"type": "RENTAL", "rental_preferences": {"furnished": True, "max_rental_budget": 1800}},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["type"] == "RENTAL"
    assert data["purchase_preferences"] is None
    assert data["rental_preferences"]["furnished"] is True
    assert data["rental_preferences"]["max_rental_budget"] == 1800

    response = await client.patch(f"/api/v1/requirements/{requirement['id']}", json={"type": "PURCHASE"})
    data = response.json()
    assert data["rental_preferences"] is None
    assert data["purchase_preferences"]["garage"] is False


async def test_put_preferences(client, requirement):
    url = f"/api/v1/requirements/{requirement['id']}"

    response = await client.put(f"{url}/rental-preferences", json={"pets_allowed": True, "lease_term": "Short-term"})
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["type"] == "RENTAL"
    assert data["rental_preferences"]["pets_allowed"] is True
    assert data["rental_preferences"]["lease_term"] == "Short-term"
    assert data["purchase_preferences"] is None

    response = await client.put(f"{url}/rental-preferences", json={"furnished": True})
    assert response.json()["rental_preferences"]["furnished"] is True
    assert response.json()["rental_preferences"]["pets_allowed"] is False

    response = await client.put(f"{url}/purchase-preferences", json={"basement": True, "preferred_style": "Colonial"})
    data = response.json()
    assert data["type"] == "PURCHASE"
    assert data["purchase_preferences"]["basement"] is True
    assert data["rental_preferences"] is None


async def test_delete_requirement(client, buyer, requirement):
    url = f"/api/v1/requirements/{requirement['id']}"
    response = await client.delete(url)
    assert response.status_code == 200
    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url)).status_code == 404

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["description"] == "Deleted purchase requirement: Family home"


# ── Checklist ────────────────────────────────────────────────────────────────


async def test_requirement_checklist_is_logged(client, buyer, requirement):
    base = f"/api/v1/requirements/{requirement['id']}/checklist"
    response = await client.post(base, json={"text": "Check school district"})
    assert response.status_code == 201, response.text
    item = response.json()
    assert item["requirement_id"] == requirement["id"]

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "CHECKLIST_ITEM_ADDED"
    assert interactions[0]["description"] == "Checklist item added: Check school district"

    response = await client.patch(f"{base}/{item['id']}", json={"completed": True})
    assert response.json()["completed"] is True
    assert (await client.delete(f"{base}/{item['id']}")).status_code == 200
    assert (await client.delete(f"{base}/{item['id']}")).status_code == 404


# ── Gathering ────────────────────────────────────────────────────────────────


async def test_gather_catalogue_properties(client, buyer, requirement, make_property):
    colonial = await make_property()
    ranch = await make_property(title="Quiet Ranch", address="4 Oak Lane", price=380000)

    response = await client.post(
        f"/api/v1/requirements/{requirement['id']}/gather",
        json={"property_ids": [colonial["id"], ranch["id"]], "notes": {ranch["id"]: "Big yard"}},
    )
    assert response.status_code == 201, response.text
    gathered = {g["title"]: g for g in response.json()}
    assert set(gathered) == {"Sunny 3BR Colonial", "Quiet Ranch"}
    assert gathered["Quiet Ranch"]["notes"] == "Big yard"
    assert gathered["Quiet Ranch"]["price"] == 380000
    assert gathered["Quiet Ranch"]["property"]["id"] == ranch["id"]
    assert all(g["status"] == "Pending" for g in gathered.values())

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "Properties Gathered"
    assert interactions[0]["description"] == "Gathered 2 properties for purchase requirement: Family home"


async def test_gather_unknown_property_writes_nothing(client, requirement, make_property):
    known = await make_property()
    response = await client.post(
        f"/api/v1/requirements/{requirement['id']}/gather",
        json={"property_ids": [known["id"], str(uuid.uuid4())]},
    )
    assert response.status_code == 404
    assert (await client.get(f"/api/v1/requirements/{requirement['id']}/properties")).json() == []


async def test_update_and_remove_gathered(client, buyer, requirement, make_property):
    prop = await make_property()
    (gathered,) = (
        await client.post(
            f"/api/v1/requirements/{requirement['id']}/gather", json={"property_ids": [prop["id"]]}
        )
    ).json()
    url = f"/api/v1/requirements/{requirement['id']}/gather/{gathered['id']}"

    response = await client.patch(url, json={"status": "Interested", "notes": "Second viewing"})
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "Interested"
    assert response.json()["notes"] == "Second viewing"

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["description"] == "Updated status to Interested for property: Sunny 3BR Colonial"

    assert (await client.delete(url)).status_code == 200
    assert (await client.delete(url)).status_code == 404
    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "Property Removed"


async def test_manual_property(client, buyer, requirement):
    base = f"/api/v1/requirements/{requirement['id']}/properties"
    response = await client.post(
        base,
        json={"title": "Off-market cottage", "address": "9 Birch Road", "price": 410000},
    )
    assert response.status_code == 201, response.text
    manual = response.json()
    assert manual["property_id"] is None
    assert manual["property"] is None

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "PROPERTY_GATHERED"

    assert [g["id"] for g in (await client.get(base)).json()] == [manual["id"]]
    assert (await client.delete(f"{base}/{manual['id']}")).status_code == 200
    assert (await client.get(base)).json() == []


# ── Email ────────────────────────────────────────────────────────────────────


async def test_email_lists_candidates(client, buyer, requirement):
    base = f"/api/v1/requirements/{requirement['id']}"
    cottage = (
        await client.post(
            f"{base}/properties",
            json={
                "title": "Off-market cottage",
                "address": "9 Birch Road",
                "price": 410000,
                "link": "https://listings.example.com/9-birch",
            },
        )
    ).json()
    await client.post(f"{base}/properties", json={"title": "Skipped loft"})

    response = await client.post(
        f"{base}/email",
        json={"subject": "Homes for you", "content": "Here are a few options.", "gathered_ids": [cottage["id"]]},
    )
    assert response.status_code == 201, response.text
    email = response.json()
    assert email["to"] == "maria@example.com"
    assert email["status"] == "PENDING"
    assert email["content"].startswith("Dear Maria Lopez,\n\nHere are a few options.")
    assert "* Off-market cottage, 9 Birch Road - $410,000 (https://listings.example.com/9-birch)" in email["content"]
    assert "Skipped loft" not in email["content"]

    interactions = await _interactions(client, buyer["id"])
    assert interactions[0]["type"] == "EMAIL_SENT"
    assert interactions[0]["description"] == "Email sent: Homes for you"


async def test_email_requires_client_address(client, make_client):
    no_email = await make_client(name="Priya Nair", email=None)
    requirement = (
        await client.post(f"/api/v1/clients/{no_email['id']}/requirements", json={"name": "Condo"})
    ).json()
    response = await client.post(
        f"/api/v1/requirements/{requirement['id']}/email",
        json={"subject": "Hello", "content": "Options inside"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Client has no email address"}
