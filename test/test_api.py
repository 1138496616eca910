"""
API round trips through the FastAPI app with TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from conquest.api import main as api


@pytest.fixture
def client():
    api.reset_session()
    with TestClient(api.app) as c:
        yield c
    api.reset_session()


def new_game(client, **body):
    body.setdefault("map_id", "grid_20")
    body.setdefault("seed", 4)
    response = client.post("/game", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def event_types(data):
    return [e["type"] for e in data["events"]]


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["in_progress"] is False


def test_list_maps(client):
    data = client.get("/maps").json()
    ids = {m["id"] for m in data["maps"]}
    assert {"grid_20", "islands"} <= ids


def test_no_game_yet(client):
    assert client.get("/game").status_code == 404
    assert client.post("/game/roll").status_code == 404


def test_unknown_map(client):
    response = client.post("/game", json={"map_id": "nowhere"})
    assert response.status_code == 404


def test_new_game(client):
    data = new_game(client)
    state = data["state"]
    assert state["phase"] == "awaiting_roll"
    assert state["current_player"] == 1
    assert sorted(state["player_scores"].values()) == [1, 1, 1, 1]
    assert len(state["player_start_regions"]) == 4
    assert "game_started" in event_types(data)
    assert data["viewport"]["content_bounds"]["width"] == 500
    assert data["summary"]["regions_total"] == 20


def test_same_seed_same_start(client):
    first = new_game(client, seed=99)["state"]["player_start_regions"]
    second = new_game(client, seed=99)["state"]["player_start_regions"]
    assert first == second


def test_svg_map_game(client):
    data = new_game(client, map_id="islands")
    assert len(data["state"]["regions"]) == 6
    assert data["state"]["regions"]["east"]["adjacent"] == ["bay", "north", "south"]


def test_turn_cycle(client):
    new_game(client)
    data = client.post("/game/roll", json={"value": 3}).json()
    assert data["state"]["phase"] == "awaiting_end_turn"
    assert data["state"]["dice_result"] == 3

    data = client.post("/game/end-turn").json()
    assert data["state"]["current_player"] == 2
    assert data["state"]["dice_result"] == 0
    assert "turn_changed" in event_types(data)


def test_roll_without_body(client):
    new_game(client, debug=True)
    data = client.post("/game/roll").json()
    rolled = next(e for e in data["events"] if e["type"] == "dice_rolled")
    assert rolled["payload"]["value"] == 6
    assert data["state"]["phase"] == "capture"


def test_capture_flow(client):
    new_game(client)
    client.post("/game/roll", json={"value": 6})
    highlights = client.get("/game/highlights").json()
    target = highlights["available"][0]

    data = client.post(f"/game/regions/{target}/click").json()
    assert data["state"]["regions"][target]["owner"] == 1
    assert data["state"]["player_scores"]["1"] == 2
    assert data["state"]["phase"] == "awaiting_end_turn"
    assert client.get("/game/highlights").json()["available"] == []


def test_rejections_are_events_not_errors(client):
    new_game(client)
    response = client.post("/game/end-turn")
    assert response.status_code == 200
    data = response.json()
    rejected = next(e for e in data["events"] if e["type"] == "action_rejected")
    assert rejected["payload"]["reason"] == "not your turn phase"
    assert data["state"]["current_player"] == 1

    response = client.post("/game/roll", json={"value": 9})
    assert response.status_code == 200
    assert "action_rejected" in event_types(response.json())


def test_click_outside_capture_is_info(client):
    new_game(client)
    data = client.post("/game/regions/aldmark/click").json()
    assert data["events"][0]["type"] == "message"
    assert "aldmark" in data["events"][0]["payload"]["text"]


def test_viewport_endpoints(client):
    new_game(client)
    data = client.post("/game/viewport/zoom", json={"x": 400, "y": 300, "direction": 1}).json()
    assert data["viewport"]["transform"]["scale"] == pytest.approx(1.1)

    data = client.post("/game/viewport/pan", json={"dx": -50, "dy": 0}).json()
    assert data["events"][0]["type"] == "transform_changed"

    data = client.post("/game/viewport/resize", json={"width": 1024, "height": 768}).json()
    assert data["viewport"]["width"] == 1024

    data = client.post("/game/viewport/focus", json={"region_id": "marrow"}).json()
    assert data["events"][0]["payload"]["animate"] is True
    assert data["viewport"]["transform"]["scale"] == pytest.approx(3.0)


def test_viewport_validation(client):
    new_game(client)
    assert client.post("/game/viewport/zoom", json={"x": 1, "y": 1, "direction": 5}).status_code == 422
    assert client.post("/game/viewport/resize", json={"width": 0, "height": 10}).status_code == 422
    assert client.post("/game/viewport/focus", json={"region_id": "atlantis"}).status_code == 404


def test_score_entry_focus(client):
    new_game(client)
    data = client.post("/game/scores/2/focus").json()
    assert data["events"][0]["type"] == "transform_changed"
    assert client.post("/game/scores/7/focus").status_code == 404
