"""Route planning between street addresses."""

import math
from typing import Iterable, Optional, Union

from .address import AddressBook, normalize_address, split_street_address
from .config import CONFIG
from .geo import how_far
from .graph import JunctionGraph, build_street_index
from .logger import Logger
from .models import Coord, School, SearchTrace
from .route_log import SearchLog
from .search import a_star_search, backtracking_search, breadth_first_search

SEARCH_METHODS = ("backtrack", "astar", "bfs")


class RoutePlanner:
    """Finds paths between street addresses over the junction graph.

    Addresses are resolved to their nearest junction, then one of the searches
    in ``search.py`` connects the two junctions. A failed lookup or search
    gives an empty path; callers fall back to the straight-line distance.
    """

    def __init__(self, addresses: AddressBook, graph: JunctionGraph,
                 street_index: Optional[dict[str, list[int]]] = None,
                 logger: Optional[Logger] = None,
                 search_log: Optional[SearchLog] = None):
        self.addresses = addresses
        self.graph = graph
        self._street_index = street_index
        self.logger = logger
        self.search_log = search_log
        self.last_trace: Optional[SearchTrace] = None

    @property
    def street_index(self) -> dict[str, list[int]]:
        if self._street_index is None:
            self._street_index = self.graph.street_index
        return self._street_index

    def resolve(self, address: Optional[str]) -> tuple[str, Optional[Coord], Optional[int]]:
        """Normalize an address and find its coordinates and nearest junction"""
        if not isinstance(address, str):
            return ("", None, None)
        normalized = normalize_address(address)
        coords = self.addresses.coords(normalized)
        if coords is None:
            return (normalized, None, None)
        _, street = split_street_address(normalized)
        junction = self.graph.find_nearest_junction(coords, street, self.street_index)
        return (normalized, coords, junction)

    def find_path(self, start: str, end: str, method: Optional[str] = None) -> list[int]:
        """Find a path of junctions from the start address to the end address"""
        method = method or CONFIG["default_search_method"]
        if method not in SEARCH_METHODS:
            raise ValueError(f"Unknown search method: {method}")

        start, start_coords, here = self.resolve(start)
        end, end_coords, there = self.resolve(end)
        if here is None or there is None:
            self.last_trace = None
            return []

        if method == "bfs":
            path, trace = breadth_first_search(self.graph, here, there, logger=self.logger)
        elif method == "astar":
            path, trace = a_star_search(self.graph, here, there, logger=self.logger)
        else:
            path, trace = backtracking_search(
                self.graph, here, there,
                beeline=how_far(start_coords, end_coords),
                goal_coords=end_coords,
                start_distance=how_far(start_coords, self.graph.junction_coords(here)),
                logger=self.logger,
            )
        self.last_trace = trace

        if self.logger:
            self.logger.log("Path search finished", {
                **trace.to_dict(), "start_address": start, "end_address": end,
            })
        if self.search_log is not None:
            self.search_log.log_search(
                trace, start, end,
                route_distance=self.route_distance(path, start, end),
                beeline=how_far(start_coords, end_coords),
            )
        return path

    def find_best_path(self, start: str, end: str, method: Optional[str] = None) -> list[int]:
        """Search in both directions and keep the shorter route.

        A one-way street can make a route findable from only one end, so the
        path from end to start is tried too (and reversed).
        """
        to = self.find_path(start, end, method)
        to_trace = self.last_trace
        fro = self.find_path(end, start, method)
        if not to:
            return list(reversed(fro))
        if not fro:
            self.last_trace = to_trace
            return to
        to_distance = self.route_distance(to, start, end)
        fro_distance = self.route_distance(fro, end, start)
        if to_distance < fro_distance:
            self.last_trace = to_trace
            return to
        return list(reversed(fro))

    def route_distance(self, path: list[int], start: Optional[str] = None,
                       end: Optional[str] = None) -> float:
        return route_distance(self.addresses, self.graph, path, start, end)

    def find_school_distances(self, start: str, schools: Iterable[Union[School, dict]],
                              method: Optional[str] = "astar") -> dict[str, float]:
        """Distance in miles along the streets to every school, keyed by school address"""
        distances = {}
        for school in schools:
            if isinstance(school, dict):
                school = School.from_dict(school)
            end = normalize_address(school.address)
            path = self.find_best_path(start, end, method)
            distances[end] = self.route_distance(path, start, end)
            if not path and self.logger:
                self.logger.warn("No path to school, using straight-line distance",
                                 {"school": school.description, "address": end})
        return distances


def street_index(graph: JunctionGraph) -> dict[str, list[int]]:
    """Look up junctions by street name; build once and reuse for many searches"""
    return build_street_index(graph)


def find_path(addresses: AddressBook, graph: JunctionGraph,
              street_index: Optional[dict[str, list[int]]],
              start: str, end: str, method: Optional[str] = None,
              logger: Optional[Logger] = None) -> list[int]:
    """Find a path of junctions between two street addresses"""
    planner = RoutePlanner(addresses, graph, street_index, logger=logger)
    return planner.find_path(start, end, method)


def route_distance(addresses: AddressBook, graph: JunctionGraph, path: list[int],
                   start: Optional[str] = None, end: Optional[str] = None) -> float:
    """Add up the distance in miles between two addresses, along a path.

    Includes the distance from the start address to the first junction and
    from the last junction to the end address, when those are given. With no
    path this is the distance as the crow flies, or 0 if either address is
    unknown.
    """
    if not path:
        if not start or not end:
            return 0.0
        beeline = how_far(addresses.coords(start), addresses.coords(end))
        return beeline if math.isfinite(beeline) else 0.0

    distance = 0.0
    if start:
        stub = how_far(addresses.coords(start), graph.junction_coords(path[0]))
        if math.isfinite(stub):
            distance += stub
    for i in range(1, len(path)):
        leg = graph.junction_distance(path[i - 1], path[i])
        if math.isfinite(leg):
            distance += leg
    if end:
        stub = how_far(graph.junction_coords(path[-1]), addresses.coords(end))
        if math.isfinite(stub):
            distance += stub
    return distance
