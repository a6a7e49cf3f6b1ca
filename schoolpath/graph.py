"""Street intersection graph representation."""

import math
from typing import Optional

import networkx as nx

from .address import AddressBook, prettify_address
from .config import CONFIG
from .geo import expand_coords, how_far
from .logger import Logger
from .models import Coord, Junction


class JunctionGraph:
    """Graph of street intersections (nodes) and street segments (edges).

    Edges are directed: a junction's adjacency list names the junctions that
    can be reached from it, so a segment listed on only one side is one-way.
    The graph is loaded once and never mutated during a search.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.graph = nx.DiGraph()
        self.junctions: dict[int, Junction] = {}
        self.logger = logger
        self._street_index: Optional[dict[str, list[int]]] = None

    @classmethod
    def from_dict(cls, raw: dict, logger: Optional[Logger] = None) -> "JunctionGraph":
        """Build from the packed dataset form {cnn: {"ll": [..], "streets": [..], "adj": [..]}}"""
        jg = cls(logger=logger)
        jg.build(raw)
        return jg

    def build(self, raw: dict):
        """Build the graph from raw junction records"""
        # First pass: collect all junctions
        for key, record in raw.items():
            coords = expand_coords(record.get("ll"))
            if coords is None:
                if self.logger:
                    self.logger.warn("Junction has invalid coordinates", {"cnn": key})
                continue
            cnn = int(key)
            self.junctions[cnn] = Junction(
                key=cnn,
                lat=coords[0],
                lon=coords[1],
                streets=list(record.get("streets", [])),
                adj=[int(n) for n in record.get("adj", [])],
            )
            self.graph.add_node(cnn)

        # Second pass: edges, in adjacency order
        dangling = 0
        for cnn, junction in self.junctions.items():
            for neighbor in junction.adj:
                if neighbor not in self.junctions:
                    dangling += 1
                    continue
                self.graph.add_edge(cnn, neighbor, length=self.junction_distance(cnn, neighbor))

        self._street_index = None
        if self.logger:
            self.logger.log("Built junction graph", {
                "junctions": len(self.junctions),
                "segments": self.graph.number_of_edges(),
                "dangling_references": dangling,
            })

    def __len__(self) -> int:
        return len(self.junctions)

    def __contains__(self, key) -> bool:
        return key in self.junctions

    def junction_coords(self, key: Optional[int]) -> Optional[Coord]:
        """Get lat/lon of a junction, or None if it does not exist"""
        junction = self.junctions.get(key)
        if junction is None:
            if self.logger:
                self.logger.warn("Junction not found", {"cnn": key})
            return None
        return junction.coords

    def get_streets(self, key: int) -> list[str]:
        junction = self.junctions.get(key)
        return junction.streets if junction else []

    def neighbors(self, key: int) -> list[int]:
        """Junctions reachable from this one, in adjacency order"""
        if key not in self.graph:
            return []
        return list(self.graph.successors(key))

    def junction_distance(self, a: int, b: int) -> float:
        """Distance in miles between two junctions, infinity if either is missing"""
        ja = self.junctions.get(a)
        jb = self.junctions.get(b)
        if ja is None or jb is None:
            return math.inf
        return how_far(ja.coords, jb.coords)

    def segment_length(self, a: int, b: int) -> float:
        """Length in miles of the segment from a to b, infinity if there is none"""
        if not self.graph.has_edge(a, b):
            return math.inf
        return self.graph.edges[a, b]["length"]

    def is_on_highway(self, key: int) -> bool:
        """Whether any street at this junction is a limited-access road ("...BOUND")"""
        suffix = CONFIG["highway_suffix"]
        return any(st.endswith(suffix) for st in self.get_streets(key))

    def one_way_edges(self) -> list[tuple[int, int]]:
        """Segments that can only be travelled in one direction"""
        return [(u, v) for u, v in self.graph.edges if not self.graph.has_edge(v, u)]

    def is_connected(self, start: int, goal: int) -> bool:
        if start not in self.graph or goal not in self.graph:
            return False
        return nx.has_path(self.graph, start, goal)

    def name_junction(self, key: int) -> Optional[str]:
        """Name an intersection, e.g. "Burrows St & Goettingen St" """
        if key not in self.junctions:
            return None
        return prettify_address(" & ".join(sorted(self.get_streets(key))))

    @property
    def street_index(self) -> dict[str, list[int]]:
        """Junctions on each street (built once; the graph doesn't change)"""
        if self._street_index is None:
            self._street_index = build_street_index(self)
        return self._street_index

    def find_nearest_junction(self, coords: Optional[Coord], street: Optional[str] = None,
                              street_index: Optional[dict[str, list[int]]] = None) -> Optional[int]:
        """Find the junction nearest to a location.

        Only junctions on the given street are considered when the street is
        known; otherwise every junction in the graph is scanned.
        """
        if coords is None or not self.junctions:
            return None
        if street_index is None:
            street_index = self.street_index

        if street and street_index.get(street):
            nearest = self._nearest_of(coords, street_index[street])
            if nearest is not None:
                return nearest

        # Fallback: search all junctions (slower)
        if self.logger and street:
            self.logger.log("Street not found in junction data, searching all junctions",
                            {"street": street})
        return self._nearest_of(coords, self.junctions.keys())

    def _nearest_of(self, coords: Coord, keys) -> Optional[int]:
        min_dist = math.inf
        nearest = None
        for key in keys:
            junction = self.junctions.get(int(key))
            if junction is None:
                continue
            dist = how_far(coords, junction.coords)
            if dist < min_dist:
                min_dist = dist
                nearest = junction.key
        return nearest


def build_street_index(graph: JunctionGraph) -> dict[str, list[int]]:
    """Look up junctions by street name, in graph order"""
    index: dict[str, list[int]] = {}
    for key, junction in graph.junctions.items():
        for street in junction.streets:
            index.setdefault(street, []).append(key)
    return index


def address_coords(addresses: AddressBook, address: Optional[str]) -> Optional[Coord]:
    """Get (lat, lon) of a street address, or None"""
    return addresses.coords(address)
