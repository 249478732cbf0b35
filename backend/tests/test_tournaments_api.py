from fastapi.testclient import TestClient

PLAYERS_8 = ["Mesut", "Mumtaz", "Berk", "Erdem", "Hulusi", "Emre", "Ahmet", "Batuhan"]


def _create(client: TestClient, tournament_id="friday", players=PLAYERS_8, **extra):
    response = client.post(
        "/api/tournaments",
        json={"id": tournament_id, "players": list(players), "player_pool": [], **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_tournament(client: TestClient):
    """Creating a tournament registers the roster with zeroed standings"""
    data = _create(client, name="Friday Padel", court_count=3, settings={"language": "tr"})

    assert data["name"] == "Friday Padel"
    assert data["players"] == PLAYERS_8
    assert data["totals"] == {p: 0 for p in PLAYERS_8}
    assert data["byeCounts"] == {p: 0 for p in PLAYERS_8}
    assert data["courtCount"] == 3
    assert data["settings"] == {"language": "tr"}
    assert data["tournamentStarted"] is False
    assert data["currentRound"] == 0
    assert data["revision"] == 1


def test_create_duplicate_id_conflicts(client: TestClient):
    _create(client)
    response = client.post("/api/tournaments", json={"id": "friday"})
    assert response.status_code == 409


def test_create_rejects_duplicate_names(client: TestClient):
    response = client.post("/api/tournaments", json={"id": "x", "players": ["Mesut", "MESUT"]})
    assert response.status_code == 422


def test_get_unknown_tournament(client: TestClient):
    response = client.get("/api/tournaments/nope")
    assert response.status_code == 404
    assert response.json()["detail"].startswith("TOURNAMENT_NOT_FOUND")


def test_list_tournaments(client: TestClient):
    _create(client, "a")
    _create(client, "b", players=PLAYERS_8[:2])

    response = client.get("/api/tournaments")
    assert response.status_code == 200
    by_id = {t["id"]: t for t in response.json()}
    assert set(by_id) == {"a", "b"}
    assert by_id["b"]["player_count"] == 2
    assert by_id["a"]["tournament_started"] is False


def test_delete_tournament(client: TestClient):
    _create(client)
    assert client.delete("/api/tournaments/friday").status_code == 204
    assert client.get("/api/tournaments/friday").status_code == 404
    assert client.delete("/api/tournaments/friday").status_code == 404


def test_add_rename_remove_player(client: TestClient):
    _create(client)

    response = client.post("/api/tournaments/friday/players", json={"name": "Sercan"})
    assert response.status_code == 201
    assert response.json()["players"][-1] == "Sercan"

    response = client.post("/api/tournaments/friday/players", json={"name": "sercan"})
    assert response.status_code == 422
    assert response.json()["detail"].startswith("DUPLICATE_PLAYER")

    response = client.patch("/api/tournaments/friday/players/Sercan", json={"name": "Sercan K"})
    assert response.status_code == 200
    assert "Sercan K" in response.json()["players"]

    response = client.delete("/api/tournaments/friday/players/Sercan K")
    assert response.status_code == 200
    assert response.json()["players"] == PLAYERS_8

    response = client.delete("/api/tournaments/friday/players/Nobody")
    assert response.status_code == 404


def test_start_requires_eight_players(client: TestClient):
    _create(client, players=PLAYERS_8[:7])
    response = client.post("/api/tournaments/friday/start")
    assert response.status_code == 422
    assert response.json()["detail"].startswith("INSUFFICIENT_PLAYERS")


def test_start_and_reset(client: TestClient):
    _create(client)

    response = client.post("/api/tournaments/friday/start")
    assert response.status_code == 200
    data = response.json()
    assert data["tournamentStarted"] is True
    assert data["currentRound"] == 1
    assert len(data["rounds"][0]["matches"]) == 2
    assert data["rounds"][0]["byes"] == []

    assert client.post("/api/tournaments/friday/start").status_code == 422

    response = client.post("/api/tournaments/friday/reset")
    assert response.status_code == 200
    assert response.json()["rounds"] == []
    assert response.json()["players"] == PLAYERS_8


def test_put_replaces_state_with_revision_check(client: TestClient):
    created = _create(client)
    payload = dict(created, name="Renamed")

    response = client.put("/api/tournaments/friday", json=payload)
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["revision"] == 2

    # same revision again is stale now
    response = client.put("/api/tournaments/friday", json=payload)
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "CONCURRENT_MODIFICATION"
    assert detail["state"]["name"] == "Renamed"


def test_put_rejects_inconsistent_rounds(client: TestClient):
    created = _create(client)
    match = {"teamA": ["Mesut", "Mumtaz"], "teamB": ["Mesut", "Erdem"]}
    payload = dict(created, rounds=[{"number": 1, "matches": [match]}])
    response = client.put("/api/tournaments/friday", json=payload)
    assert response.status_code == 422


def test_health_check(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
