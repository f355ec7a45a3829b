"""
main.py — Algorithm Stepper Flask API
======================================
The web server that drives the visualizer.  A browser front end renders
whatever /api/state returns and calls /api/tick on its own timer while a
run is playing.

Routes:
  GET  /                       – service summary
  GET  /api/algorithms         – registry metadata (?kind=graph|game|sort)
  POST /api/run                – configure a run {algorithm, graph?|array?, start?, target?, speed?, seed?}
  POST /api/start              – start / resume auto-play
  POST /api/pause              – pause auto-play
  POST /api/step               – advance one step by hand
  POST /api/reset              – rebuild the current run
  POST /api/tick               – fire due auto-play timers
  POST /api/speed              – {speed: ms | "slow" | "medium" | "fast" | "turbo"}
  GET  /api/state              – playback state, snapshot & metrics
  POST /api/graph/generate     – seeded random graph
  POST /api/graph/import       – adjacency-list text
  POST /api/array/generate     – seeded random array
  GET  /api/export/json        – metrics as a JSON download
  GET  /api/export/csv         – metrics as a CSV download

State management:
  The Flask session only carries a run id.  Controllers live in the
  in-process RUNS dict (one per client, never persisted), each with its own
  PollingScheduler and lock.  The dev server is threaded, so every route
  that touches a controller holds that run's lock for its whole body.
  RUNS is kept in least-recently-used order; runs idle longer than
  RUN_IDLE_SECONDS, or beyond MAX_RUNS, are dropped.

Configuration (environment):
  VISUALIZER_HOST / VISUALIZER_PORT / VISUALIZER_DEBUG   – server bind
  VISUALIZER_LOG_LEVEL                                   – logging level
  VISUALIZER_SECRET_KEY                                  – session signing key
  VISUALIZER_MAX_RUNS / VISUALIZER_RUN_IDLE_SECONDS      – live run table bounds
"""

import logging
import os
import secrets
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from functools import wraps

from flask import Flask, Response, jsonify, request, session

from graph import Graph
from algorithms import ConfigurationError, algorithms_by_kind, list_algorithms, require_algorithm
from algorithms.sorting import random_array
from engine import SPEED_PRESETS, PlaybackController, PollingScheduler, RunConfig
from engine.export import new_session_id, to_csv, to_json

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("VISUALIZER_SECRET_KEY") or secrets.token_hex(32)

MAX_RUNS         = max(1, int(os.environ.get("VISUALIZER_MAX_RUNS", "256")))
RUN_IDLE_SECONDS = float(os.environ.get("VISUALIZER_RUN_IDLE_SECONDS", "1800"))


# ---------------------------------------------------------------------------
# Session State Helpers
# ---------------------------------------------------------------------------
@dataclass
class Run:
    """One client's controller plus the lock every request on it holds."""

    controller: PlaybackController
    lock:       threading.Lock = field(default_factory=threading.Lock)
    last_used:  float          = field(default_factory=time.monotonic)


# least recently used first
RUNS: "OrderedDict[str, Run]" = OrderedDict()
RUNS_LOCK = threading.Lock()


def default_config() -> RunConfig:
    return RunConfig(algorithm="bfs", graph=Graph.sample(), array=random_array(), start="A", target="D")


def evict_runs(now: float) -> None:
    """Drop idle runs and trim to MAX_RUNS.  Caller holds RUNS_LOCK."""
    while RUNS:
        run_id, run = next(iter(RUNS.items()))
        if len(RUNS) <= MAX_RUNS and run.last_used >= now - RUN_IDLE_SECONDS:
            break
        del RUNS[run_id]
        logger.info(f"Evicted run {run_id}")


def get_run() -> Run:
    """The caller's run, created on first use."""
    now = time.monotonic()
    with RUNS_LOCK:
        run_id = session.get("run_id")
        run = RUNS.get(run_id) if run_id is not None else None
        if run is None:
            run_id = uuid.uuid4().hex
            session["run_id"] = run_id
            run = RUNS[run_id] = Run(PlaybackController(default_config(), scheduler=PollingScheduler()))
            logger.info(f"New run {run_id}")
        run.last_used = now
        RUNS.move_to_end(run_id)
        evict_runs(now)
    return run


def with_run(view):
    """Pass the caller's controller to `view`, holding its run lock throughout."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        run = get_run()
        with run.lock:
            return view(run.controller, *args, **kwargs)
    return wrapper


def current_config(ctl: PlaybackController) -> RunConfig:
    return ctl.config or default_config()


def request_data() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def reconfigure(ctl: PlaybackController, **changes) -> RunConfig:
    """Copy the current config, apply changes, configure + reset."""
    base = current_config(ctl)
    config = RunConfig(
        algorithm=changes.get("algorithm", base.algorithm),
        graph=changes.get("graph", base.graph),
        array=changes.get("array", base.array),
        start=changes.get("start", base.start),
        target=changes.get("target", base.target),
        speed_ms=changes.get("speed_ms", ctl.speed_ms),
        seed=changes.get("seed", base.seed),
    )
    ctl.configure(config)
    return config


def endpoints(graph: Graph) -> dict:
    """First and last node as start / target, like a fresh graph selection."""
    ids = graph.node_ids()
    if not ids:
        return {"start": None, "target": None}
    return {"start": ids[0], "target": ids[-1] if len(ids) >= 2 else None}


@app.errorhandler(ConfigurationError)
def handle_configuration_error(exc: ConfigurationError):
    return jsonify({"error": str(exc)}), 400


# ---------------------------------------------------------------------------
# Index & Registry
# ---------------------------------------------------------------------------
@app.route("/")
@with_run
def index(ctl):
    return jsonify({
        "name":       "Algorithm Stepper",
        "algorithms": [a.key for a in list_algorithms()],
        "speeds":     SPEED_PRESETS,
        "state":      ctl.state_dict(),
    })


@app.route("/api/algorithms")
def api_algorithms():
    kind = request.args.get("kind")
    algos = algorithms_by_kind(kind) if kind else list_algorithms()
    return jsonify({"algorithms": [a.to_dict() for a in algos]})


# ---------------------------------------------------------------------------
# API: Run Configuration
# ---------------------------------------------------------------------------
@app.route("/api/run", methods=["POST"])
@with_run
def api_run(ctl):
    data    = request_data()
    changes = {}

    if "algorithm" in data:
        changes["algorithm"] = data["algorithm"]
    if "graph" in data:
        try:
            changes["graph"] = Graph.from_dict(data["graph"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            return jsonify({"error": f"Invalid graph: {e}"}), 400
        changes.update(endpoints(changes["graph"]))
    if "array" in data:
        changes["array"] = data["array"]
    for key in ("start", "target", "seed"):
        if key in data:
            changes[key] = data[key]
    seed = changes.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        return jsonify({"error": "seed must be an integer"}), 400
    if "speed" in data:
        try:
            changes["speed_ms"] = max(1, int(data["speed"]))
        except (TypeError, ValueError):
            return jsonify({"error": "speed must be an integer (ms)"}), 400

    algorithm = changes.get("algorithm", current_config(ctl).algorithm)
    if require_algorithm(algorithm).kind == "sort" and changes.get("array", current_config(ctl).array) is None:
        changes["array"] = random_array(seed=changes.get("seed"))

    reconfigure(ctl, **changes)
    return jsonify(ctl.state_dict())


@app.route("/api/speed", methods=["POST"])
@with_run
def api_speed(ctl):
    speed = request_data().get("speed", "medium")
    if isinstance(speed, str) and speed in SPEED_PRESETS:
        ctl.set_speed_preset(speed)
    else:
        try:
            ctl.set_speed(int(speed))
        except (TypeError, ValueError):
            return jsonify({"error": f"Unknown speed {speed!r}"}), 400
    return jsonify({"speed_ms": ctl.speed_ms})


# ---------------------------------------------------------------------------
# API: Playback
# ---------------------------------------------------------------------------
@app.route("/api/start", methods=["POST"])
@with_run
def api_start(ctl):
    ctl.start()
    return jsonify(ctl.state_dict())


@app.route("/api/pause", methods=["POST"])
@with_run
def api_pause(ctl):
    ctl.pause()
    return jsonify(ctl.state_dict())


@app.route("/api/step", methods=["POST"])
@with_run
def api_step(ctl):
    result = ctl.step()
    state = ctl.state_dict()
    state["result"] = result.value if result is not None else None
    return jsonify(state)


@app.route("/api/reset", methods=["POST"])
@with_run
def api_reset(ctl):
    ctl.reset()
    return jsonify(ctl.state_dict())


@app.route("/api/tick", methods=["POST"])
@with_run
def api_tick(ctl):
    fired = ctl.scheduler.poll()
    state = ctl.state_dict()
    state["fired"] = fired
    return jsonify(state)


@app.route("/api/state")
@with_run
def api_state(ctl):
    return jsonify(ctl.state_dict())


# ---------------------------------------------------------------------------
# API: Inputs
# ---------------------------------------------------------------------------
@app.route("/api/graph/generate", methods=["POST"])
@with_run
def api_graph_generate(ctl):
    data = request_data()
    try:
        g = Graph.generate_random(
            num_nodes=int(data.get("nodes", 8)),
            edge_probability=float(data.get("prob", 0.3)),
            seed=data.get("seed"),
        )
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    changes = {"graph": g, **endpoints(g)}
    if require_algorithm(current_config(ctl).algorithm).kind == "sort":
        changes["algorithm"] = "bfs"
    reconfigure(ctl, **changes)
    return jsonify({"graph": g.to_dict(), "node_ids": g.node_ids(), "state": ctl.state_dict()})


@app.route("/api/graph/import", methods=["POST"])
@with_run
def api_graph_import(ctl):
    text = request_data().get("text", "")
    if not isinstance(text, str):
        return jsonify({"error": "text must be a string"}), 400

    try:
        g = Graph.from_adjacency_list(text)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if g.node_count() == 0:
        return jsonify({"error": "Adjacency list is empty"}), 400

    changes = {"graph": g, **endpoints(g)}
    if require_algorithm(current_config(ctl).algorithm).kind == "sort":
        changes["algorithm"] = "bfs"
    reconfigure(ctl, **changes)
    return jsonify({"graph": g.to_dict(), "node_ids": g.node_ids(), "state": ctl.state_dict()})


@app.route("/api/array/generate", methods=["POST"])
@with_run
def api_array_generate(ctl):
    data = request_data()
    try:
        size = int(data.get("size", 20))
    except (TypeError, ValueError):
        return jsonify({"error": "size must be an integer"}), 400
    if size < 0:
        return jsonify({"error": "size must not be negative"}), 400

    try:
        values = random_array(size, seed=data.get("seed"))
    except TypeError as e:
        return jsonify({"error": str(e)}), 400
    changes = {"array": values}
    if require_algorithm(current_config(ctl).algorithm).kind != "sort":
        changes["algorithm"] = "bubble"
    reconfigure(ctl, **changes)
    return jsonify({"array": values, "state": ctl.state_dict()})


# ---------------------------------------------------------------------------
# API: Export
# ---------------------------------------------------------------------------
@app.route("/api/export/json")
@with_run
def api_export_json(ctl):
    session_id = new_session_id()
    body = to_json(ctl.metrics, algorithm=ctl.config.algorithm if ctl.config else None, session_id=session_id)
    return Response(
        body,
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename=dsa_session_{session_id}.json"},
    )


@app.route("/api/export/csv")
@with_run
def api_export_csv(ctl):
    return Response(
        to_csv(ctl.metrics),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=dsa_metrics.csv"},
    )


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("VISUALIZER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host  = os.environ.get("VISUALIZER_HOST", "0.0.0.0")
    port  = int(os.environ.get("VISUALIZER_PORT", "5000"))
    debug = os.environ.get("VISUALIZER_DEBUG", "1").lower() not in ("0", "false", "no")

    print("=" * 60)
    print("  Algorithm Stepper")
    print("  Starting Flask server...")
    print(f"  Open http://localhost:{port}")
    print("=" * 60)
    app.run(debug=debug, host=host, port=port)
