"""Path search over the junction graph.

Three searches are available:

- breadth-first search, which finds the path with the fewest junctions;
- A* search, which finds the shortest path by street distance;
- a depth-first backtracking search that tries neighbors closest to the
  destination first, explores every path within a distance budget and keeps
  the shortest one, growing the budget until something is found.

Every search returns ``(path, trace)``. An empty path means the destination
could not be reached, which is a normal outcome and not an error.
"""

import heapq
import itertools
import math
import time
from collections import deque
from typing import Iterator, Optional

from .config import CONFIG
from .geo import how_far
from .graph import JunctionGraph
from .logger import Logger
from .models import Coord, SearchTrace


class PriorityQueue:
    """Binary min-heap of items; equal priorities come out in insertion order"""

    def __init__(self):
        self._heap: list[tuple[float, int, object]] = []
        self._counter = itertools.count()

    def push(self, item, priority: float):
        heapq.heappush(self._heap, (priority, next(self._counter), item))

    def pop(self):
        """Remove and return the item with the lowest priority, or None if empty"""
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)


def reconstruct_path(came_from: dict, goal, limit: Optional[int] = None,
                     logger: Optional[Logger] = None) -> list:
    """Follow predecessor links back from the goal to the start.

    The start is the first node without a predecessor. A predecessor map that
    loops back on itself is truncated where the loop begins, and the path is
    never longer than ``limit`` nodes.
    """
    path = []
    seen = set()
    current = goal
    while current is not None:
        if limit is not None and len(path) >= limit:
            if logger:
                logger.error("Path reconstruction hit length limit, using partial path",
                             {"limit": limit})
            break
        if current in seen:
            if logger:
                logger.warn("Circular reference detected, using partial path",
                            {"junction": current, "length": len(path)})
            break
        seen.add(current)
        path.append(current)
        current = came_from.get(current)
    path.reverse()
    return path


def path_distance(graph: JunctionGraph, path: list[int]) -> float:
    """Sum of the straight-line distances between consecutive junctions"""
    total = 0.0
    for i in range(1, len(path)):
        total += graph.junction_distance(path[i - 1], path[i])
    return total


def _endpoints_exist(graph: JunctionGraph, start, goal, logger: Optional[Logger]) -> bool:
    ok = True
    if start not in graph:
        ok = False
        if logger:
            logger.warn("Invalid starting junction", {"cnn": start})
    if goal not in graph:
        ok = False
        if logger:
            logger.warn("Invalid ending junction", {"cnn": goal})
    return ok


def _finish(graph: JunctionGraph, trace: SearchTrace, path: list[int], began: float):
    trace.found = bool(path)
    trace.path_length = len(path)
    trace.distance = path_distance(graph, path) if path else None
    trace.elapsed = time.perf_counter() - began
    return path, trace


def breadth_first_search(graph: JunctionGraph, start: int, goal: int,
                         max_visited: Optional[int] = None,
                         logger: Optional[Logger] = None) -> tuple[list[int], SearchTrace]:
    """Find the path with the fewest junctions.

    ``max_visited`` caps how many junctions may be discovered, guarding
    against runaway traversal; None means no cap.
    """
    if max_visited is None:
        max_visited = CONFIG["bfs_max_visited"]
    trace = SearchTrace(method="bfs", start=start, goal=goal)
    began = time.perf_counter()

    if not _endpoints_exist(graph, start, goal, logger):
        return _finish(graph, trace, [], began)
    if start == goal:
        trace.nodes_explored = trace.junctions_visited = 1
        return _finish(graph, trace, [start], began)

    queue = deque([start])
    visited = {start}
    came_from: dict[int, int] = {}

    while queue and (max_visited is None or len(visited) < max_visited):
        here = queue.popleft()
        trace.nodes_explored += 1

        if here == goal:
            trace.junctions_visited = len(visited)
            path = reconstruct_path(came_from, here, limit=len(graph), logger=logger)
            return _finish(graph, trace, path, began)

        for neighbor in graph.neighbors(here):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            came_from[neighbor] = here
            queue.append(neighbor)

    trace.junctions_visited = len(visited)
    if logger:
        logger.warn("Path is not connected", trace.to_dict())
    return _finish(graph, trace, [], began)


def a_star_search(graph: JunctionGraph, start: int, goal: int,
                  max_nodes: Optional[int] = None,
                  logger: Optional[Logger] = None) -> tuple[list[int], SearchTrace]:
    """Find the shortest path by street distance.

    The heuristic is the straight-line distance to the goal, which never
    exceeds the distance along the streets.
    """
    if max_nodes is None:
        max_nodes = CONFIG["astar_max_nodes"]
    trace = SearchTrace(method="astar", start=start, goal=goal)
    began = time.perf_counter()

    if not _endpoints_exist(graph, start, goal, logger):
        return _finish(graph, trace, [], began)
    if start == goal:
        trace.nodes_explored = trace.junctions_visited = 1
        return _finish(graph, trace, [start], began)

    open_set = PriorityQueue()
    closed_set: set[int] = set()
    came_from: dict[int, int] = {}
    g_score: dict[int, float] = {start: 0.0}
    f_score: dict[int, float] = {start: graph.junction_distance(start, goal)}
    open_set.push(start, f_score[start])

    while not open_set.is_empty() and trace.nodes_explored < max_nodes:
        here = open_set.pop()
        if here in closed_set:
            continue  # stale entry, already finalized at a lower score
        trace.nodes_explored += 1

        if here == goal:
            trace.junctions_visited = len(closed_set) + 1
            path = reconstruct_path(came_from, here, limit=len(graph), logger=logger)
            return _finish(graph, trace, path, began)

        closed_set.add(here)

        for neighbor in graph.neighbors(here):
            if neighbor in closed_set:
                continue
            edge = graph.segment_length(here, neighbor)
            if math.isinf(edge):
                continue
            tentative = g_score[here] + edge
            if neighbor not in g_score or tentative < g_score[neighbor]:
                came_from[neighbor] = here
                g_score[neighbor] = tentative
                f_score[neighbor] = tentative + graph.junction_distance(neighbor, goal)
                open_set.push(neighbor, f_score[neighbor])

    trace.junctions_visited = len(closed_set)
    if logger:
        logger.warn("A* failed to find path", trace.to_dict())
    return _finish(graph, trace, [], began)


class BacktrackingSearch:
    """Depth-first search for a path, bounded by a multiple of the beeline distance.

    At each junction the neighbors closest to the destination are tried first
    (and, on a highway, other highway junctions before anything else). A
    junction never appears twice in one candidate path. Exploration does not
    stop at the first success: every candidate within the budget is tried and
    the shortest is kept. When nothing is found, the budget grows and the
    whole search starts over, until the budget reaches its ceiling.

    One session serves one query; it holds no state shared with other searches.
    """

    def __init__(self, graph: JunctionGraph, start: int, goal: int,
                 beeline: Optional[float] = None,
                 goal_coords: Optional[Coord] = None,
                 start_distance: float = 0.0,
                 max_junctions: Optional[int] = None,
                 initial_factor: Optional[float] = None,
                 factor_increment: Optional[float] = None,
                 max_factor: Optional[float] = None,
                 logger: Optional[Logger] = None):
        self.graph = graph
        self.start = start
        self.goal = goal
        self.goal_coords = goal_coords if goal_coords is not None else graph.junction_coords(goal)
        self.beeline = beeline if beeline is not None else graph.junction_distance(start, goal)
        # Distance already covered before the first junction, e.g. from the start address
        self.start_distance = start_distance if math.isfinite(start_distance) else 0.0
        self.max_junctions = max_junctions or CONFIG["backtrack_max_junctions"]
        self.initial_factor = initial_factor or CONFIG["backtrack_initial_factor"]
        self.factor_increment = factor_increment or CONFIG["backtrack_factor_increment"]
        self.max_factor = max_factor or CONFIG["backtrack_max_factor"]
        self.logger = logger
        self._to_goal: dict[int, float] = {}

        # Per-attempt state
        self._count = 0
        self._exhausted = False
        self._best_path: list[int] = []
        self._best_distance = math.inf
        self._found = 0

    def run(self) -> tuple[list[int], SearchTrace]:
        trace = SearchTrace(method="backtrack", start=self.start, goal=self.goal)
        began = time.perf_counter()

        if not _endpoints_exist(self.graph, self.start, self.goal, self.logger):
            return _finish(self.graph, trace, [], began)

        factor = self.initial_factor
        while True:
            trace.attempts += 1
            trace.max_factor = factor
            self._attempt(factor)
            trace.junctions_visited += self._count
            trace.nodes_explored += self._count
            if self.logger:
                self.logger.debug("Backtracking attempt", {
                    "factor": factor,
                    "junctions": self._count,
                    "abandoned": self._exhausted,
                    "found": bool(self._best_path),
                })
            if self._best_path:
                break
            # Maybe try again, allowing for a longer path
            if factor >= self.max_factor:
                break
            factor += self.factor_increment

        trace.paths_found = self._found
        if not self._best_path and self.logger:
            self.logger.warn("Backtracking search gave up", trace.to_dict())
        return _finish(self.graph, trace, list(self._best_path), began)

    def _attempt(self, factor: float):
        budget = self.beeline * factor if self.beeline > 0 else math.inf
        self._count = 0
        self._exhausted = False
        self._best_path = []
        self._best_distance = math.inf
        self._found = 0

        path: list[int] = []
        on_path: set[int] = set()
        stack: list[Iterator[tuple[int, float]]] = []

        children = self._enter(self.start, self.start_distance, path, on_path, budget)
        if children is not None:
            stack.append(children)

        while stack and not self._exhausted:
            try:
                node, distance = next(stack[-1])
            except StopIteration:
                stack.pop()
                on_path.discard(path.pop())
                continue
            children = self._enter(node, distance, path, on_path, budget)
            if children is not None:
                stack.append(children)

    def _enter(self, here: int, distance: float, path: list[int], on_path: set[int],
               budget: float) -> Optional[Iterator[tuple[int, float]]]:
        """Visit a junction; return its onward moves, or None if this branch ends here"""
        if here not in self.graph or here in on_path:
            return None

        if here == self.goal:
            self._found += 1
            if distance < self._best_distance:
                self._best_distance = distance
                self._best_path = path + [here]
            return None

        # Limit the total number of junctions to visit, period
        self._count += 1
        if self._count >= self.max_junctions:
            self._exhausted = True
            return None

        # Limit this path to a multiple of the distance as the crow flies
        if distance >= budget:
            return None

        path.append(here)
        on_path.add(here)
        return ((n, distance + self.graph.segment_length(here, n))
                for n in self._ordered_neighbors(here))

    def _ordered_neighbors(self, here: int) -> list[int]:
        neighbors = sorted(self.graph.neighbors(here), key=self._distance_to_goal)
        if self.graph.is_on_highway(here):
            # Stay on the highway; sorting is stable so distance order holds within groups
            neighbors.sort(key=lambda n: not self.graph.is_on_highway(n))
        return neighbors

    def _distance_to_goal(self, key: int) -> float:
        if key not in self._to_goal:
            self._to_goal[key] = how_far(self.graph.junction_coords(key), self.goal_coords)
        return self._to_goal[key]


def backtracking_search(graph: JunctionGraph, start: int, goal: int,
                        **kwargs) -> tuple[list[int], SearchTrace]:
    """Run a BacktrackingSearch; keyword arguments are passed to its constructor"""
    return BacktrackingSearch(graph, start, goal, **kwargs).run()
