import itertools

import networkx as nx
import pytest

from schoolpath.graph import JunctionGraph
from schoolpath.search import (
    BacktrackingSearch,
    PriorityQueue,
    a_star_search,
    backtracking_search,
    breadth_first_search,
    path_distance,
    reconstruct_path,
)

from conftest import WEIGHTED_JUNCTIONS


def _is_walkable_path(graph, path):
    return all(graph.graph.has_edge(a, b) for a, b in zip(path, path[1:]))


def _shortest_by_brute_force(graph, start, goal):
    lengths = [
        sum(graph.segment_length(a, b) for a, b in zip(p, p[1:]))
        for p in nx.all_simple_paths(graph.graph, start, goal)
    ]
    return min(lengths) if lengths else None


def test_priority_queue_order():
    queue = PriorityQueue()
    assert queue.is_empty()
    assert queue.pop() is None
    queue.push("c", 3.0)
    queue.push("a", 1.0)
    queue.push("b", 2.0)
    assert len(queue) == 3
    assert [queue.pop(), queue.pop(), queue.pop()] == ["a", "b", "c"]
    assert queue.is_empty()


def test_priority_queue_ties_in_insertion_order():
    queue = PriorityQueue()
    for item in ["first", "second", "third"]:
        queue.push(item, 1.0)
    queue.push("zeroth", 0.5)
    assert [queue.pop() for _ in range(4)] == ["zeroth", "first", "second", "third"]


def test_reconstruct_path_includes_start():
    came_from = {2: 1, 3: 2, 4: 3}
    assert reconstruct_path(came_from, 4) == [1, 2, 3, 4]
    assert reconstruct_path(came_from, 1) == [1]
    assert reconstruct_path({}, 7) == [7]


def test_reconstruct_path_is_idempotent():
    came_from = {20653: 20889, 20652: 20653}
    first = reconstruct_path(came_from, 20652)
    assert reconstruct_path(came_from, 20652) == first
    assert came_from == {20653: 20889, 20652: 20653}


def test_reconstruct_path_truncates_cycles(log_records):
    logger, records = log_records
    came_from = {3: 2, 2: 1, 1: 3}
    path = reconstruct_path(came_from, 3, logger=logger)
    assert path == [1, 2, 3]
    assert records[0][0] == "Circular reference detected, using partial path"


def test_reconstruct_path_length_limit(log_records):
    logger, records = log_records
    came_from = {i: i - 1 for i in range(1, 10)}
    path = reconstruct_path(came_from, 9, limit=4, logger=logger)
    assert path == [6, 7, 8, 9]
    assert records[0][0] == "Path reconstruction hit length limit, using partial path"


def test_bfs_finds_fewest_junctions(graph):
    path, trace = breadth_first_search(graph, 20889, 20638)
    assert path == [20889, 20653, 20652, 20638]
    assert trace.found
    assert trace.method == "bfs"
    assert trace.path_length == 4
    assert trace.nodes_explored > 0


def test_bfs_edge_cases(graph, log_records):
    logger, records = log_records
    assert breadth_first_search(graph, 20889, 20889)[0] == [20889]
    path, trace = breadth_first_search(graph, 20889, 99999, logger=logger)
    assert path == []
    assert not trace.found
    assert records[0] == ("Invalid ending junction", {"cnn": 99999})


def test_bfs_visited_cap(grid_graph):
    path, trace = breadth_first_search(grid_graph, 1000, 1033, max_visited=3)
    assert path == []
    assert trace.junctions_visited <= 4


def test_bfs_unreachable():
    graph = JunctionGraph.from_dict({
        "1": {"ll": [7700, 4400], "streets": ["A ST"], "adj": [2]},
        "2": {"ll": [7710, 4400], "streets": ["A ST"], "adj": []},
    })
    assert breadth_first_search(graph, 1, 2)[0] == [1, 2]
    assert breadth_first_search(graph, 2, 1)[0] == []


def test_a_star_matches_bfs_hop_count_on_grid(grid_graph):
    keys = list(grid_graph.junctions)
    for start, goal in itertools.product(keys[:4], keys):
        bfs_path, _ = breadth_first_search(grid_graph, start, goal)
        astar_path, _ = a_star_search(grid_graph, start, goal)
        assert len(astar_path) == len(bfs_path)


def test_a_star_is_optimal(weighted_graph):
    for start, goal in itertools.permutations(weighted_graph.junctions, 2):
        path, trace = a_star_search(weighted_graph, start, goal)
        expected = _shortest_by_brute_force(weighted_graph, start, goal)
        assert expected is not None
        assert path[0] == start and path[-1] == goal
        assert _is_walkable_path(weighted_graph, path)
        assert path_distance(weighted_graph, path) == pytest.approx(expected)
        assert trace.distance == pytest.approx(expected)


def test_a_star_respects_one_way_segments(weighted_graph):
    # 5 -> 8 is one-way, so the way back from 8 goes through 7
    assert a_star_search(weighted_graph, 8, 5)[0] == [8, 7, 5]


def test_a_star_node_cap(grid_graph, log_records):
    logger, records = log_records
    path, trace = a_star_search(grid_graph, 1000, 1033, max_nodes=2, logger=logger)
    assert path == []
    assert trace.nodes_explored == 2
    assert records[-1][0] == "A* failed to find path"


def test_a_star_same_start_and_goal(graph):
    path, trace = a_star_search(graph, 20652, 20652)
    assert path == [20652]
    assert trace.found


def test_no_search_repeats_a_junction(weighted_graph):
    searches = [breadth_first_search, a_star_search, backtracking_search]
    for search in searches:
        for start, goal in itertools.permutations(weighted_graph.junctions, 2):
            path, _ = search(weighted_graph, start, goal)
            assert path, (search.__name__, start, goal)
            assert len(path) == len(set(path))
            assert _is_walkable_path(weighted_graph, path)


def test_backtracking_finds_route(graph):
    path, trace = backtracking_search(graph, 20889, 20652)
    assert path == [20889, 20653, 20652]
    assert trace.method == "backtrack"
    assert trace.attempts == 1
    assert trace.max_factor == 1.25
    assert trace.paths_found >= 1


def test_backtracking_never_beats_a_star(weighted_graph):
    for start, goal in itertools.permutations(weighted_graph.junctions, 2):
        path, _ = backtracking_search(weighted_graph, start, goal)
        best, _ = a_star_search(weighted_graph, start, goal)
        assert path_distance(weighted_graph, path) >= path_distance(weighted_graph, best) - 1e-12


def test_backtracking_prefers_shorter_later_success():
    # Junction 2 is nearer the goal so it is tried first, but the straight
    # route through 3 is shorter and fits in the same distance budget
    graph = JunctionGraph.from_dict({
        "1": {"ll": [7700, 4400], "streets": ["A ST", "B ST"], "adj": [2, 3]},
        "2": {"ll": [7790, 4430], "streets": ["B ST", "C ST"], "adj": [4]},
        "3": {"ll": [7750, 4400], "streets": ["A ST", "D ST"], "adj": [4]},
        "4": {"ll": [7800, 4400], "streets": ["A ST", "C ST"], "adj": []},
    })
    search = BacktrackingSearch(graph, 1, 4)
    assert search._ordered_neighbors(1) == [2, 3]

    path, trace = search.run()
    assert path == [1, 3, 4]
    assert trace.attempts == 1
    assert trace.paths_found == 2
    assert trace.distance == pytest.approx(path_distance(graph, [1, 3, 4]))
    assert path_distance(graph, [1, 3, 4]) < path_distance(graph, [1, 2, 4])


def test_backtracking_escalates_distance_budget(graph):
    # Reaching Bacon St takes about 0.113 miles before the last junction is expanded
    search = BacktrackingSearch(graph, 20889, 20638, beeline=0.03)
    path, trace = search.run()
    assert path == [20889, 20653, 20652, 20638]
    assert trace.attempts == 12
    assert trace.max_factor == 4.0


def test_backtracking_gives_up_at_budget_ceiling(graph, log_records):
    logger, records = log_records
    path, trace = backtracking_search(graph, 20889, 20638, beeline=0.01, logger=logger)
    assert path == []
    assert trace.attempts == 20
    assert trace.max_factor == 6
    assert records[-1][0] == "Backtracking search gave up"


def test_backtracking_junction_cap(grid_graph):
    path, trace = backtracking_search(grid_graph, 1000, 1033, max_junctions=2)
    assert path == []
    assert trace.attempts == 20


def test_backtracking_same_start_and_goal(graph):
    assert backtracking_search(graph, 20653, 20653)[0] == [20653]


def test_backtracking_missing_junction(graph):
    assert backtracking_search(graph, 20653, 99999)[0] == []


def test_backtracking_prefers_staying_on_highway():
    graph = JunctionGraph.from_dict({
        "1": {"ll": [7700, 4400], "streets": ["US101 NORTHBOUND", "A ST"], "adj": [2, 3]},
        "2": {"ll": [7710, 4400], "streets": ["A ST"], "adj": [1, 4]},
        "3": {"ll": [7690, 4400], "streets": ["US101 NORTHBOUND"], "adj": [1, 4]},
        "4": {"ll": [7720, 4400], "streets": ["A ST"], "adj": [2, 3]},
    })
    search = BacktrackingSearch(graph, 1, 4)
    # 2 is nearer the goal, but 3 is on the highway
    assert search._ordered_neighbors(1) == [3, 2]
    assert search._ordered_neighbors(4) == [2, 3]


def test_backtracking_session_is_reusable(graph):
    search = BacktrackingSearch(graph, 20889, 20652)
    assert search.run()[0] == search.run()[0] == [20889, 20653, 20652]


def test_searches_are_deterministic(weighted_graph):
    for search in [breadth_first_search, a_star_search, backtracking_search]:
        assert search(weighted_graph, 1, 8)[0] == search(weighted_graph, 1, 8)[0]
