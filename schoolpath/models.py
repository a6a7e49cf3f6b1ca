"""Data classes for schoolpath."""

from dataclasses import dataclass, asdict, field
from typing import Optional

# (latitude, longitude) in decimal degrees
Coord = tuple[float, float]


@dataclass
class Junction:
    """A street intersection, keyed by its CNN (centerline network number)"""
    key: int
    lat: float
    lon: float
    streets: list[str]
    adj: list[int]  # asymmetric lists encode one-way streets

    @property
    def coords(self) -> Coord:
        return (self.lat, self.lon)


@dataclass
class School:
    name: str
    types: list[str]
    address: str

    @property
    def description(self) -> str:
        """e.g. "King Middle" """
        return f"{self.name} {self.types[0]}" if self.types else self.name

    @classmethod
    def from_dict(cls, d: dict) -> "School":
        return cls(name=d["name"], types=list(d.get("types", [])), address=d["address"])


@dataclass
class Turn:
    """A change of street along a route"""
    junction: Optional[int]  # None for a direct step with no junctions
    street: str
    azimuth: Optional[float]  # degrees, 0=North
    distance: float = 0.0  # miles to the next turn (or to the destination)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SearchTrace:
    """Step counts and timing for one search invocation"""
    method: str
    start: Optional[int]
    goal: Optional[int]
    found: bool = False
    nodes_explored: int = 0
    junctions_visited: int = 0
    attempts: int = 0
    max_factor: Optional[float] = None
    paths_found: int = 0
    path_length: int = 0
    distance: Optional[float] = None
    elapsed: float = 0.0  # seconds

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RouteDescription:
    """Turn-by-turn directions for a path between two addresses"""
    start: str
    end: str
    path: list[int]  # may begin with one junction prepended to describe the first turn
    turns: list[Turn] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    total: float = 0.0  # sum of the per-turn distances
    summed: float = 0.0  # independently accumulated route distance
    consistent: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    def summary(self) -> str:
        """The total distance, or both totals when they disagree"""
        from .geo import format_distance
        if self.consistent:
            return f"Total: {format_distance(self.total, show_label=True)}"
        return f"Total: {self.total} mi.\nSum: {self.summed} mi."
