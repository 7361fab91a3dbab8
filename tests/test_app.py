import pytest
import pytest_asyncio
import httpx

from tracker import app, config, lifespan
from tracker.errors import ConfigurationError

pytestmark = pytest.mark.usefixtures("app_db")

CLEANUP_HEADERS = {"Authorization": "Bearer test-cleanup-secret"}


@pytest_asyncio.fixture
async def async_client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def _create_event(client, name="Hike2024", **extra):
    response = await client.post("/api/events", json={"name": name, **extra})
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_tracking_flow(async_client):
    event = await _create_event(async_client, organization_name="Trail Club")
    assert len(event["keycode"]) == 8

    public = await async_client.get("/api/events/by-name/Hike2024")
    assert public.status_code == 200
    assert public.json()["keycode"] == ""
    assert public.json()["organization_name"] == "Trail Club"

    team = await async_client.post("/api/teams", json={"event_id": event["id"], "name": "Red"})
    assert team.status_code == 200
    assert team.json()["color"] == "#3B82F6"

    submitted = await async_client.post(
        "/api/updates", json={"team": "Red", "event": "Hike2024", "lat": 45.5, "lon": -122.6}
    )
    assert submitted.status_code == 200

    updates = await async_client.get("/api/updates", params={"team": "Red", "limit": 10})
    assert updates.status_code == 200
    rows = updates.json()
    assert len(rows) == 1
    assert rows[0]["lat"] == 45.5
    assert rows[0]["lon"] == -122.6
    assert rows[0]["id"] == submitted.json()["id"]

    login = await async_client.post("/api/login", json={"event_name": "Hike2024", "keycode": event["keycode"]})
    assert login.status_code == 200
    assert login.json()["success"] is True
    assert [t["name"] for t in login.json()["teams"]] == ["Red"]

    teams = await async_client.get(f"/api/events/{event['id']}/teams")
    assert [t["name"] for t in teams.json()] == ["Red"]

    nested = await async_client.get(f"/api/teams/{team.json()['id']}/updates")
    assert len(nested.json()) == 1


@pytest.mark.asyncio
async def test_error_responses(async_client):
    await _create_event(async_client)

    duplicate = await async_client.post("/api/events", json={"name": "Hike2024"})
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    login = await async_client.post("/api/login", json={"event_name": "Hike2024", "keycode": "WRONG999"})
    assert login.status_code == 401
    assert login.json() == {"success": False, "error": "Invalid event name or keycode"}

    missing = await async_client.get("/api/events/999")
    assert missing.status_code == 404

    unknown_team = await async_client.post(
        "/api/updates", json={"team": "Ghost", "event": "Hike2024", "lat": 45.5, "lon": -122.6}
    )
    assert unknown_team.status_code == 409


@pytest.mark.asyncio
async def test_out_of_range_ids_are_validation_errors(async_client):
    event = await _create_event(async_client)
    too_big = "99999999999999999999"

    assert (await async_client.get(f"/api/events/{too_big}")).status_code == 422
    assert (await async_client.get(f"/api/teams/{too_big}/updates")).status_code == 422
    renamed = await async_client.put(
        f"/api/events/{too_big}/organization",
        json={"keycode": event["keycode"], "organization_name": "Nope"},
    )
    assert renamed.status_code == 422
    team = await async_client.post("/api/teams", json={"event_id": int(too_big), "name": "Red"})
    assert team.status_code == 422
    assert (await async_client.get("/api/events/0")).status_code == 422


@pytest.mark.asyncio
async def test_create_team_with_null_color_uses_default(async_client):
    event = await _create_event(async_client)
    team = await async_client.post("/api/teams", json={"event_id": event["id"], "name": "Red", "color": None})
    assert team.status_code == 200
    assert team.json()["color"] == "#3B82F6"


@pytest.mark.asyncio
async def test_keycode_gated_updates(async_client):
    event = await _create_event(async_client)
    team = (await async_client.post("/api/teams", json={"event_id": event["id"], "name": "Red"})).json()

    bad_color = await async_client.put(
        f"/api/teams/{team['id']}/color",
        json={"event_id": event["id"], "keycode": event["keycode"], "color": "red"},
    )
    assert bad_color.status_code == 422

    recolored = await async_client.put(
        f"/api/teams/{team['id']}/color",
        json={"event_id": event["id"], "keycode": event["keycode"], "color": "#10B981"},
    )
    assert recolored.status_code == 200
    assert recolored.json()["color"] == "#10B981"

    rejected = await async_client.put(
        f"/api/events/{event['id']}/organization",
        json={"keycode": "WRONG999", "organization_name": "Nope"},
    )
    assert rejected.status_code == 401

    renamed = await async_client.put(
        f"/api/events/{event['id']}/organization",
        json={"keycode": event["keycode"], "organization_name": "Summit Society"},
    )
    assert renamed.json()["organization_name"] == "Summit Society"

    logo = await async_client.put(
        f"/api/events/{event['id']}/logo",
        json={"keycode": event["keycode"], "logo_data": "bG9nbw==", "logo_mime_type": "image/png"},
    )
    assert logo.json()["logo_mime_type"] == "image/png"

    image = await async_client.put(
        f"/api/events/{event['id']}/image",
        json={"keycode": event["keycode"], "image_data": "aW1n", "image_mime_type": "image/jpeg"},
    )
    assert image.json()["image_data"] == "aW1n"


@pytest.mark.asyncio
async def test_export_with_date_range(async_client):
    event = await _create_event(async_client)
    await async_client.post("/api/teams", json={"event_id": event["id"], "name": "Red"})
    for stamp in ("2024-06-01T08:00:00", "2024-06-01T09:00:00", "2024-06-01T10:00:00"):
        await async_client.post(
            "/api/updates",
            json={"team": "Red", "event": "Hike2024", "lat": 45.5, "lon": -122.6, "timestamp": stamp},
        )

    export = await async_client.post(
        f"/api/events/{event['id']}/export",
        json={"keycode": event["keycode"], "startDate": "2024-06-01T09:00:00"},
    )
    assert export.status_code == 200
    body = export.json()
    assert body["teams"][0]["locationCount"] == 2
    assert [loc["timestamp"] for loc in body["teams"][0]["locations"]] == [
        "2024-06-01T09:00:00",
        "2024-06-01T10:00:00",
    ]

    denied = await async_client.post(f"/api/events/{event['id']}/export", json={"keycode": "WRONG999"})
    assert denied.status_code == 401


@pytest.mark.asyncio
async def test_scheduled_cleanup_requires_bearer_secret(async_client):
    await _create_event(async_client, expiration_date="2000-01-01")

    assert (await async_client.get("/api/cleanup")).status_code == 401
    wrong = await async_client.get("/api/cleanup", headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401

    ran = await async_client.get("/api/cleanup", headers=CLEANUP_HEADERS)
    assert ran.status_code == 200
    assert ran.json()["success"] is True
    assert ran.json()["deletedEvents"] == 1

    again = await async_client.post("/api/cleanup", headers=CLEANUP_HEADERS)
    assert again.json()["deletedEvents"] == 0
    assert again.json()["deletedTeams"] == 0


@pytest.mark.asyncio
async def test_cleanup_mutation(async_client):
    rejected = await async_client.post("/api/cleanup/run", json={"secret": "nope"})
    assert rejected.status_code == 401

    ran = await async_client.post("/api/cleanup/run", json={"secret": "test-cleanup-secret"})
    assert ran.status_code == 200
    assert ran.json()["message"].startswith("Cleanup completed")


@pytest.mark.asyncio
async def test_startup_requires_cleanup_secret(monkeypatch):
    monkeypatch.setattr(config, "CLEANUP_SECRET", None)
    with pytest.raises(ConfigurationError):
        async with lifespan(app):
            pass
