"""
HTTP surface, driven through TestClient against a SQLite-backed app.
"""
import pytest
from fastapi.testclient import TestClient

from ninja_missions.config import Settings
from ninja_missions.main import build_app
from ninja_missions.ranks import MissionRank


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def settings():
    return Settings(jwt_secret="api-test-secret", max_page_size=50)


@pytest.fixture
def client(settings, sql_store):
    app = build_app(settings, store=sql_store)
    with TestClient(app) as c:
        yield c


def register(client, username, rank="Genin"):
    res = client.post("/auth/register", json={"username": username, "password": "pw-" + username, "rank": rank})
    assert res.status_code == 201, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def naruto(client):
    return register(client, "naruto", "Genin")


@pytest.fixture
def missions(sql_store):
    return {
        "d": sql_store.add_mission("Rescue Tora", "the cat again", MissionRank.D, 55),
        "c": sql_store.add_mission("Escort Tazuna", "bridge builder", MissionRank.C, 250),
        "s": sql_store.add_mission("Defend the village", "", MissionRank.S, 10000),
    }


# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------

def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/health/store").json() == {"status": "ok"}


def test_register_and_login(client):
    res = client.post("/auth/register", json={"username": "sasuke", "password": "uchihapower", "rank": "Genin"})
    assert res.status_code == 201
    body = res.json()
    assert body["ninja"]["rank"] == "Genin"
    assert body["ninja"]["experiencePoints"] == 0
    assert "passwordHash" not in body["ninja"]

    res = client.post("/auth/login", json={"username": "sasuke", "password": "uchihapower"})
    assert res.status_code == 200
    assert res.json()["ninja"]["username"] == "sasuke"


def test_register_validation(client):
    res = client.post("/auth/register", json={"username": "lee"})
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"

    register(client, "lee")
    res = client.post("/auth/register", json={"username": "lee", "password": "x"})
    assert res.status_code == 400


def test_login_wrong_password(client):
    register(client, "hinata")
    res = client.post("/auth/login", json={"username": "hinata", "password": "nope"})
    assert res.status_code == 401


def test_missing_and_bad_tokens(client):
    res = client.get("/missions")
    assert res.status_code == 401
    assert res.json()["code"] == "AUTH_REQUIRED"

    res = client.get("/missions", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 403
    assert res.json()["code"] == "AUTH_INVALID"


# -----------------------------------------------------------------------------
# Missions
# -----------------------------------------------------------------------------

def test_list_missions_paged(client, naruto, missions):
    res = client.get("/missions", headers=naruto)
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert [m["id"] for m in body["data"]] == [missions["s"].id, missions["c"].id, missions["d"].id]
    first = body["data"][0]
    assert set(first) >= {
        "id", "title", "description", "rankRequirement", "reward", "status",
        "createdAt", "updatedAt", "acceptedByNinjaName", "acceptedByNinjaAvatar",
    }

    res = client.get("/missions", params={"page": 2, "limit": 1}, headers=naruto)
    assert [m["id"] for m in res.json()["data"]] == [missions["c"].id]

    res = client.get("/missions", params={"rank": "C"}, headers=naruto)
    assert [m["rankRequirement"] for m in res.json()["data"]] == ["C"]


def test_list_rejects_bad_filters(client, naruto):
    assert client.get("/missions", params={"rank": "Z"}, headers=naruto).status_code == 422
    assert client.get("/missions", params={"page": 0}, headers=naruto).status_code == 422


def test_limit_is_capped(client, naruto, missions):
    res = client.get("/missions", params={"limit": 500}, headers=naruto)
    assert res.json()["limit"] == 50


def test_full_lifecycle(client, naruto, missions):
    mid = missions["d"].id

    res = client.patch(f"/missions/{mid}/accept", headers=naruto)
    assert res.status_code == 200
    assert res.json()["message"] == "Mission accepted"
    assert res.json()["mission"]["status"] == "InProgress"

    listed = client.get("/missions", params={"status": "InProgress"}, headers=naruto).json()["data"]
    assert [(m["id"], m["acceptedByNinjaName"]) for m in listed] == [(mid, "naruto")]

    res = client.post(
        f"/missions/{mid}/report",
        json={"reportText": "Tora has been rescued.", "evidenceImageUrl": "https://img.test/tora.png"},
        headers=naruto,
    )
    assert res.status_code == 200
    assert res.json() == {"message": "Report submitted", "experienceGained": 5}

    res = client.post(f"/missions/{mid}/report", json={"reportText": "again"}, headers=naruto)
    assert res.status_code == 409

    stats = client.get("/ninjas/me/stats", headers=naruto).json()
    assert stats["profile"]["username"] == "naruto"
    assert stats["profile"]["experiencePoints"] == 5
    assert stats["stats"] == {"totalAssignments": 1, "completedMissions": 1}


def test_accept_failures(client, naruto, missions):
    sasuke = register(client, "sasuke", "Genin")

    assert client.patch("/missions/9999/accept", headers=naruto).status_code == 404

    res = client.patch(f"/missions/{missions['s'].id}/accept", headers=naruto)
    assert res.status_code == 403
    assert res.json()["message"] == "rank insufficient"

    assert client.patch(f"/missions/{missions['c'].id}/accept", headers=naruto).status_code == 200
    res = client.patch(f"/missions/{missions['c'].id}/accept", headers=sasuke)
    assert res.status_code == 409
    assert res.json()["message"] == "mission unavailable"


def test_abandon(client, naruto, missions):
    mid = missions["c"].id
    assert client.delete(f"/missions/{mid}/abandon", headers=naruto).status_code == 404

    client.patch(f"/missions/{mid}/accept", headers=naruto)
    res = client.delete(f"/missions/{mid}/abandon", headers=naruto)
    assert res.status_code == 200
    assert res.json()["message"] == "Mission abandoned"
    assert res.json()["mission"]["status"] == "Open"

    assert client.delete(f"/missions/{mid}/abandon", headers=naruto).status_code == 404


def test_report_requires_text(client, naruto, missions):
    mid = missions["d"].id
    client.patch(f"/missions/{mid}/accept", headers=naruto)

    assert client.post(f"/missions/{mid}/report", json={}, headers=naruto).status_code == 422
    assert client.post(f"/missions/{mid}/report", json={"reportText": "   "}, headers=naruto).status_code == 422


def test_report_when_not_assigned(client, naruto, missions):
    res = client.post(f"/missions/{missions['d'].id}/report", json={"reportText": "done"}, headers=naruto)
    assert res.status_code == 404
    assert res.json()["message"] == "not assigned"
