from collections import deque

import pytest

from graph import Graph
from algorithms.errors import ConfigurationError
from algorithms.step import Outcome, StepResult
from algorithms.traversal import TraversalStepper


def run(stepper, limit=1000):
    snapshots = []
    for _ in range(limit):
        result = stepper.step()
        snapshots.append(stepper.snapshot)
        if result is StepResult.HALT:
            return snapshots
    raise AssertionError("stepper did not halt")


def diamond_with_island() -> Graph:
    g = Graph.sample()
    g.create_node("E")
    return g


def grid_graph() -> Graph:
    g = Graph()
    for r in range(3):
        for c in range(3):
            g.create_node(f"{r}{c}")
    for r in range(3):
        for c in range(3):
            if c < 2:
                g.create_edge(f"{r}{c}", f"{r}{c + 1}")
            if r < 2:
                g.create_edge(f"{r}{c}", f"{r + 1}{c}")
    return g


def bfs_distances(graph: Graph, start: str) -> dict:
    adj = graph.adjacency()
    dist = {start: 0}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for nbr, _ in adj[node]:
            if nbr not in dist:
                dist[nbr] = dist[node] + 1
                queue.append(nbr)
    return dist


# ---------------------------------------------------------------------------
# Concrete walkthroughs
# ---------------------------------------------------------------------------
def test_bfs_on_diamond_reaches_target_on_fourth_pop():
    stepper = TraversalStepper(Graph.sample(), "A", "D", mode="bfs")
    snapshots = run(stepper)

    assert len(snapshots) == 4
    assert stepper.outcome is Outcome.SUCCESS
    final = snapshots[-1]
    assert final.is_final
    assert final.current_path == ("A", "B", "C", "D")
    assert final.explored_nodes == {"A", "B", "C", "D"}
    assert final.explored_edges == {"A-B", "A-C", "B-D"}


def test_start_equal_to_target_succeeds_on_first_pop():
    stepper = TraversalStepper(Graph.sample(), "A", "A", mode="dfs")
    assert stepper.step() is StepResult.HALT
    assert stepper.outcome is Outcome.SUCCESS
    assert stepper.snapshot.explored_nodes == {"A"}
    assert stepper.snapshot.current_path == ("A",)


def test_no_snapshot_before_first_step():
    stepper = TraversalStepper(Graph.sample(), "A", "D")
    assert stepper.snapshot is None
    assert stepper.progress() == (0, 4)


# ---------------------------------------------------------------------------
# Frontier discipline
# ---------------------------------------------------------------------------
def test_bfs_visits_in_distance_order():
    g = grid_graph()
    stepper = TraversalStepper(g, "00", "22", mode="bfs")
    order = run(stepper)[-1].current_path
    dist = bfs_distances(g, "00")
    assert [dist[n] for n in order] == sorted(dist[n] for n in order)


def test_dfs_goes_deep_along_first_listed_neighbour():
    g = Graph()
    for nid in "ABCD":
        g.create_node(nid)
    g.create_node("Z")
    g.create_edge("A", "B")
    g.create_edge("A", "C")
    g.create_edge("B", "D")

    stepper = TraversalStepper(g, "A", "Z", mode="dfs")
    snapshots = run(stepper)
    assert snapshots[-1].current_path == ("A", "B", "D", "C")
    # after visiting A the stack top (last) is B
    assert snapshots[0].frontier == ("C", "B")


def test_duplicate_pops_are_skipped_steps():
    stepper = TraversalStepper(diamond_with_island(), "A", "E", mode="bfs")
    snapshots = run(stepper)

    # A, B, C, D, duplicate D, then the empty queue
    assert len(snapshots) == 6
    assert "already visited" in snapshots[4].explanation
    assert snapshots[4].current_path == snapshots[3].current_path


def test_unreachable_target_fails_with_component_explored():
    stepper = TraversalStepper(diamond_with_island(), "A", "E", mode="dfs")
    final = run(stepper)[-1]
    assert stepper.outcome is Outcome.FAILURE
    assert final.is_final
    assert final.current_node is None
    assert final.explored_nodes == {"A", "B", "C", "D"}
    assert stepper.progress() == (4, 5)


def test_explored_nodes_are_reachable_from_start():
    g = Graph.generate_random(num_nodes=12, edge_probability=0.2, seed=5)
    g.create_node("island")
    reachable = set(bfs_distances(g, "0"))
    for mode in ("dfs", "bfs"):
        final = run(TraversalStepper(g, "0", "island", mode=mode))[-1]
        assert final.explored_nodes == reachable
        assert len(final.current_path) == len(set(final.current_path))


def test_dangling_edge_does_not_break_traversal():
    g = Graph.sample()
    g.create_edge("A", "ghost")
    final = run(TraversalStepper(g, "A", "D", mode="bfs"))[-1]
    assert "ghost" not in final.explored_nodes
    assert final.current_node == "D"


def test_step_after_halt_keeps_final_snapshot():
    stepper = TraversalStepper(Graph.sample(), "A", "B", mode="bfs")
    final = run(stepper)[-1]
    assert stepper.step() is StepResult.HALT
    assert stepper.snapshot is final


def test_identical_inputs_give_identical_sequences():
    g = Graph.generate_random(num_nodes=9, seed=1)
    for mode in ("dfs", "bfs"):
        first = run(TraversalStepper(g, "0", "8", mode=mode))
        second = run(TraversalStepper(g, "0", "8", mode=mode))
        assert first == second


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("start, target", [("Z", "D"), ("A", "Z"), (None, "D")])
def test_unknown_endpoints_are_rejected(start, target):
    with pytest.raises(ConfigurationError):
        TraversalStepper(Graph.sample(), start, target)


def test_unknown_mode_is_rejected():
    with pytest.raises(ConfigurationError):
        TraversalStepper(Graph.sample(), "A", "D", mode="ids")


@pytest.mark.parametrize("seed", range(25))
def test_dfs_frontier_behaves_as_a_stack(seed):
    g = Graph.generate_random(num_nodes=10, edge_probability=0.3, seed=seed)
    g.create_node("island")
    adj = g.adjacency()

    before, explored = ("0",), frozenset()
    for snap in run(TraversalStepper(g, "0", "island", mode="dfs")):
        if not before:
            assert snap.is_final
            break
        below, top = before[:-1], before[-1]
        # entries beneath the popped top are untouched; pushes land above them
        assert snap.frontier[:len(below)] == below
        pushed = snap.frontier[len(below):]
        if snap.explored_nodes == explored:
            assert pushed == ()
        else:
            assert snap.current_node == top
            fresh = [nbr for nbr, _ in adj[top] if nbr not in snap.explored_nodes]
            assert list(pushed) == fresh[::-1]
        before, explored = snap.frontier, snap.explored_nodes
