"""Mini README: Tests for the FastAPI service.

Exercises the admin gate, roster endpoints, the wizard flow over HTTP and
the mapping of store failures to 503 responses.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from finesledger.configuration import FinesLedgerSettings
from finesledger.interface import create_application
from finesledger.store import InMemoryLedgerStore

ADMIN = {"X-Admin-Password": "secret"}


@pytest.fixture
def settings(tmp_path) -> FinesLedgerSettings:
    return FinesLedgerSettings(
        store_backend="memory", data_directory=tmp_path, admin_password="secret"
    )


@pytest.fixture
def client(settings: FinesLedgerSettings) -> TestClient:
    return TestClient(create_application(store=InMemoryLedgerStore(), settings=settings))


def test_admin_routes_require_password(client: TestClient) -> None:
    """Admin routes answer 401 unless the shared password header matches."""

    assert client.post("/admin/login").status_code == 401
    assert client.post("/admin/login", headers={"X-Admin-Password": "wrong"}).status_code == 401
    assert client.post("/admin/login", headers=ADMIN).json() == {"authenticated": True}


def test_roster_crud_and_leaderboard(client: TestClient) -> None:
    """Roster edits show on the leaderboard and bad input maps to 400/404."""

    created = client.post("/admin/players", data={"name": "Amy"}, headers=ADMIN).json()
    client.post("/admin/players", data={"name": "Ben"}, headers=ADMIN)
    response = client.post(
        f"/admin/players/{created['id']}/balance", data={"total_owed": "12.5"}, headers=ADMIN
    )
    assert response.json()["total_owed"] == pytest.approx(12.5)

    board = client.get("/leaderboard").json()
    assert [entry["name"] for entry in board["players"]] == ["Amy", "Ben"]
    assert board["players"][0]["high_debt"] is True

    bad = client.post(
        f"/admin/players/{created['id']}/balance", data={"total_owed": "abc"}, headers=ADMIN
    )
    assert bad.status_code == 400
    assert client.post("/admin/players", data={"name": "  "}, headers=ADMIN).status_code == 400
    assert client.delete("/admin/players/missing", headers=ADMIN).status_code == 404

    client.post(f"/admin/players/{created['id']}/pay-off", headers=ADMIN)
    assert client.get("/leaderboard").json()["total_debt"] == 0


def test_session_flow_over_http(client: TestClient) -> None:
    """The wizard can be driven end to end over HTTP, then the record deleted."""

    amy = client.post("/admin/players", data={"name": "Amy"}, headers=ADMIN).json()["id"]
    ben = client.post("/admin/players", data={"name": "Ben"}, headers=ADMIN).json()["id"]

    client.post("/admin/session/start", headers=ADMIN)
    assert client.post("/admin/session/start", headers=ADMIN).status_code == 409
    client.post("/admin/session/opponent", data={"opponent": "Riverside"}, headers=ADMIN)
    client.post(f"/admin/session/select/{amy}", headers=ADMIN)
    client.post(f"/admin/session/select/{ben}", headers=ADMIN)
    voting = client.post("/admin/session/voting", headers=ADMIN).json()
    assert voting["step"] == "voting"

    client.post("/admin/session/nominee", data={"category": "motm", "player_id": amy}, headers=ADMIN)
    client.post(
        "/admin/session/vote", data={"category": "MOTM", "player_id": amy, "delta": 1}, headers=ADMIN
    )
    finalized = client.post("/admin/session/finalize", headers=ADMIN).json()
    assert finalized["winners"]["MOTM"] == [amy]

    fined = client.post(f"/admin/session/fine/{amy}", data={"kind": "standard"}, headers=ADMIN)
    assert fined.status_code == 200
    assert client.post(f"/admin/session/fine/{amy}", data={"kind": "blue"}, headers=ADMIN).status_code == 400
    state = client.post(f"/admin/session/paid/{ben}", headers=ADMIN).json()
    ben_state = next(entry for entry in state["players"] if entry["player_id"] == ben)
    assert ben_state["projected_total"] == 0

    finished = client.post("/admin/session/finish", headers=ADMIN).json()
    assert finished["record"]["opponent"] == "Riverside"
    assert finished["record"]["total_fines"] == pytest.approx(3.5 + 1.0)

    history = client.get("/history").json()["records"]
    assert len(history) == 1
    assert client.get("/admin/session", headers=ADMIN).status_code == 409

    deleted = client.delete(f"/admin/history/{history[0]['id']}", headers=ADMIN).json()
    assert sorted(deleted["reversed_players"]) == sorted([amy, ben])
    assert client.get("/history").json()["records"] == []


def test_store_failure_returns_503(settings: FinesLedgerSettings, failing_store) -> None:
    """Store failures become 503 responses and leave the roster empty."""

    client = TestClient(create_application(store=failing_store, settings=settings))
    failing_store.arm(1)

    response = client.post("/admin/players", data={"name": "Amy"}, headers=ADMIN)

    assert response.status_code == 503
    assert "retry" in response.json()["detail"]
    assert client.get("/leaderboard").json()["players"] == []


def test_back_endpoint_reopens_voting(client: TestClient) -> None:
    """POST /admin/session/back returns an active session to the voting step."""

    amy = client.post("/admin/players", data={"name": "Amy"}, headers=ADMIN).json()["id"]
    client.post("/admin/session/start", headers=ADMIN)
    client.post("/admin/session/opponent", data={"opponent": "Town"}, headers=ADMIN)
    client.post(f"/admin/session/select/{amy}", headers=ADMIN)
    assert client.post("/admin/session/back", headers=ADMIN).status_code == 409
    client.post("/admin/session/voting", headers=ADMIN)
    client.post("/admin/session/nominee", data={"category": "MOTM", "player_id": amy}, headers=ADMIN)
    client.post("/admin/session/finalize", headers=ADMIN)

    reopened = client.post("/admin/session/back", headers=ADMIN).json()
    assert reopened["step"] == "voting"
    assert reopened["votes"]["MOTM"] == [[amy, 1]]

    again = client.post("/admin/session/finalize", headers=ADMIN).json()
    amy_state = next(entry for entry in again["players"] if entry["player_id"] == amy)
    assert amy_state["tags"] == ["MOTM"]
    assert amy_state["added_amount"] == pytest.approx(2.0)


def test_shutdown_unsubscribes_controller(settings: FinesLedgerSettings) -> None:
    """Leaving the app's lifespan detaches the controller from the store."""

    store = InMemoryLedgerStore()
    app = create_application(store=store, settings=settings)
    controller = app.state.controller

    with TestClient(app) as client:
        client.post("/admin/players", data={"name": "Amy"}, headers=ADMIN)
        assert len(controller.players) == 1

    store.add("players", {"name": "Ben", "totalOwed": 0.0})
    assert [player.name for player in controller.players] == ["Amy"]
