import threading
import time

import pytest

import main
from main import app

TREE = {
    "nodes": [
        {"id": "R"},
        {"id": "A"},
        {"id": "B"},
        {"id": "A1", "value": 3},
        {"id": "A2", "value": 5},
        {"id": "B1", "value": 2},
        {"id": "B2", "value": 9},
    ],
    "edges": [
        {"from": "R", "to": "A"},
        {"from": "R", "to": "B"},
        {"from": "A", "to": "A1"},
        {"from": "A", "to": "A2"},
        {"from": "B", "to": "B1"},
        {"from": "B", "to": "B2"},
    ],
}


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def step_until_done(client, limit=200):
    for _ in range(limit):
        data = client.post("/api/step").get_json()
        if data["state"] == "complete":
            return data
    raise AssertionError("run did not complete")


def test_algorithm_listing(client):
    algos = client.get("/api/algorithms").get_json()["algorithms"]
    assert len(algos) == 14
    assert {"dfs", "bfs", "minimax", "alphabeta", "quick"} <= {a["key"] for a in algos}

    sorts = client.get("/api/algorithms?kind=sort").get_json()["algorithms"]
    assert len(sorts) == 10


def test_default_session_is_bfs_on_the_diamond(client):
    state = client.get("/api/state").get_json()
    assert state["state"] == "idle"
    assert state["algorithm"] == "bfs"
    assert state["snapshot"] is None

    final = step_until_done(client)
    assert final["snapshot"]["current_path"] == ["A", "B", "C", "D"]
    assert final["outcome"] == "success"
    assert final["metrics"]["step_count"] == 4


def test_index_summarises_service(client):
    data = client.get("/").get_json()
    assert "bfs" in data["algorithms"]
    assert data["speeds"]["medium"] == 500


def test_run_sort_with_given_array(client):
    resp = client.post("/api/run", json={"algorithm": "bubble", "array": [5, 3, 1, 4, 2]})
    assert resp.status_code == 200
    first = client.post("/api/step").get_json()
    assert first["snapshot"]["comparing"] == [0, 1]
    assert first["result"] == "continue"

    final = step_until_done(client)
    assert final["snapshot"]["array"] == [1, 2, 3, 4, 5]


def test_run_game_tree(client):
    client.post("/api/run", json={"algorithm": "alphabeta", "graph": TREE, "start": "R"})
    final = step_until_done(client)
    assert final["snapshot"]["node_values"]["R"] == 3
    assert final["snapshot"]["pruned_nodes"] == ["B2"]


def test_unknown_algorithm_is_a_400(client):
    resp = client.post("/api/run", json={"algorithm": "bogo"})
    assert resp.status_code == 400
    assert "bogo" in resp.get_json()["error"]


def test_bad_start_is_a_400_and_blocks_playback(client):
    resp = client.post("/api/run", json={"algorithm": "dfs", "start": "Z"})
    assert resp.status_code == 400

    resp = client.post("/api/start")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_malformed_graph_is_a_400(client):
    resp = client.post("/api/run", json={"graph": {"nodes": [{"x": 1}]}})
    assert resp.status_code == 400


def test_auto_play_through_tick(client):
    client.post("/api/run", json={"algorithm": "bfs", "speed": 1})
    assert client.post("/api/start").get_json()["state"] == "running"

    for _ in range(50):
        time.sleep(0.005)
        state = client.post("/api/tick").get_json()
        if state["state"] == "complete":
            break
    assert state["state"] == "complete"
    assert state["metrics"]["is_complete"]


def test_pause_and_reset(client):
    client.post("/api/start")
    assert client.post("/api/pause").get_json()["state"] == "paused"
    client.post("/api/step")
    state = client.post("/api/reset").get_json()
    assert state["state"] == "idle"
    assert state["metrics"]["step_count"] == 0


def test_speed_presets_and_values(client):
    assert client.post("/api/speed", json={"speed": "fast"}).get_json()["speed_ms"] == 150
    assert client.post("/api/speed", json={"speed": 75}).get_json()["speed_ms"] == 75
    assert client.post("/api/speed", json={"speed": "warp"}).status_code == 400


def test_generate_graph_is_seeded(client):
    a = client.post("/api/graph/generate", json={"nodes": 6, "seed": 4}).get_json()
    b = client.post("/api/graph/generate", json={"nodes": 6, "seed": 4}).get_json()
    assert a["graph"] == b["graph"]
    assert a["node_ids"] == ["0", "1", "2", "3", "4", "5"]
    assert a["state"]["state"] == "idle"


def test_import_graph(client):
    resp = client.post("/api/graph/import", json={"text": "S: T U\nT: V"})
    data = resp.get_json()
    assert data["node_ids"] == ["S", "T", "U", "V"]

    final = step_until_done(client)
    assert final["outcome"] == "success"
    assert final["snapshot"]["current_node"] == "V"


def test_import_rejects_garbage(client):
    assert client.post("/api/graph/import", json={"text": "no separator"}).status_code == 400
    assert client.post("/api/graph/import", json={"text": ""}).status_code == 400


def test_generate_array_switches_to_sorting(client):
    data = client.post("/api/array/generate", json={"size": 6, "seed": 2}).get_json()
    assert len(data["array"]) == 6
    assert data["state"]["algorithm"] == "bubble"
    assert data["state"]["mode"] == "sort"


def test_exports(client):
    client.post("/api/step")

    resp = client.get("/api/export/json")
    assert resp.mimetype == "application/json"
    assert "attachment" in resp.headers["Content-Disposition"]
    assert resp.get_json()["metrics"]["step_count"] == 1

    resp = client.get("/api/export/csv")
    assert resp.mimetype == "text/csv"
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0] == "Metric,Value"
    assert "Step Count,1" in lines


# ---------------------------------------------------------------------------
# Wrong-typed input
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("payload", [
    {"algorithm": "bubble", "array": 5},
    {"algorithm": "bubble", "array": "53142"},
    {"algorithm": "bfs", "graph": [1, 2]},
    {"algorithm": "bfs", "graph": {"nodes": "AB"}},
    {"algorithm": ["bfs"]},
    {"algorithm": "bfs", "start": ["A"]},
    {"algorithm": "minimax", "seed": "x"},
])
def test_wrong_typed_run_input_is_a_400(client, payload):
    resp = client.post("/api/run", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_non_object_body_is_treated_as_empty(client):
    resp = client.post("/api/run", json=[1, 2, 3])
    assert resp.status_code == 200
    assert resp.get_json()["algorithm"] == "bfs"


def test_import_rejects_non_text(client):
    assert client.post("/api/graph/import", json={"text": 5}).status_code == 400


def test_array_generate_rejects_bad_seed(client):
    assert client.post("/api/array/generate", json={"seed": [1]}).status_code == 400


# ---------------------------------------------------------------------------
# Run table
# ---------------------------------------------------------------------------
def run_of(client) -> "main.Run":
    with client.session_transaction() as sess:
        return main.RUNS[sess["run_id"]]


def test_concurrent_requests_on_one_run_are_serialised():
    client = app.test_client()
    client.get("/api/state")
    controller = run_of(client).controller

    inside = {"now": 0, "max": 0}
    guard = threading.Lock()
    original = controller.stepper.step

    def slow_step():
        with guard:
            inside["now"] += 1
            inside["max"] = max(inside["max"], inside["now"])
        time.sleep(0.1)
        with guard:
            inside["now"] -= 1
        return original()

    controller.stepper.step = slow_step
    threads = [threading.Thread(target=client.post, args=("/api/step",)) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert inside["max"] == 1
    assert controller.metrics.step_count == 2


def test_run_table_is_bounded(monkeypatch):
    monkeypatch.setattr(main, "MAX_RUNS", 5)
    for _ in range(20):
        app.test_client().get("/api/state")
    assert len(main.RUNS) <= 5


def test_recently_used_run_survives_eviction(monkeypatch):
    monkeypatch.setattr(main, "MAX_RUNS", 3)
    client = app.test_client()
    client.post("/api/step")
    for _ in range(2):
        app.test_client().get("/api/state")
        client.get("/api/state")

    assert client.get("/api/state").get_json()["metrics"]["step_count"] == 1


def test_idle_runs_are_dropped(monkeypatch):
    stale = app.test_client()
    stale.post("/api/step")
    with stale.session_transaction() as sess:
        stale_id = sess["run_id"]

    monkeypatch.setattr(main, "RUN_IDLE_SECONDS", 0.0)
    time.sleep(0.01)
    app.test_client().get("/api/state")
    assert stale_id not in main.RUNS

    # the stale client transparently gets a fresh run
    assert stale.get("/api/state").get_json()["metrics"]["step_count"] == 0
