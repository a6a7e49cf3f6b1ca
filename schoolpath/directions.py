"""Turn-by-turn directions along a path of junctions."""

import math
from typing import Optional

from .address import AddressBook, format_street, normalize_address, split_street_address
from .config import CONFIG
from .geo import azimuth_to_direction, find_azimuth, format_distance, how_far
from .graph import JunctionGraph
from .models import RouteDescription, Turn
from .planner import route_distance


def _common_street(graph: JunctionGraph, a: int, b: int) -> Optional[str]:
    """First street of junction a that junction b is also on"""
    b_streets = graph.get_streets(b)
    for street in graph.get_streets(a):
        if street in b_streets:
            return street
    return None


def _add_turn(graph: JunctionGraph, turns: dict[int, Turn], here: int, street: str, toward: int):
    turns[here] = Turn(
        junction=here,
        street=street,
        azimuth=find_azimuth(graph.junction_coords(here), graph.junction_coords(toward)),
    )


def _find_adjacent_junction(addresses: AddressBook, graph: JunctionGraph, here: int,
                            address: Optional[str]) -> Optional[int]:
    """Find a neighbor of here on the address's street, nearest the address first"""
    if not address or here not in graph:
        return None
    coords = addresses.coords(address)
    if coords is None:
        return None
    _, street = split_street_address(address)
    nearby = sorted(graph.neighbors(here),
                    key=lambda n: how_far(graph.junction_coords(n), coords))
    for key in nearby:
        if street in graph.get_streets(key):
            return key
    return None


def _address_to_junction(addresses: AddressBook, graph: JunctionGraph,
                         address: Optional[str], key: int) -> float:
    if not address:
        return 0.0
    distance = how_far(addresses.coords(address), graph.junction_coords(key))
    return distance if math.isfinite(distance) else 0.0


def find_turns(addresses: AddressBook, graph: JunctionGraph, path: list[int],
               start: str, end: str) -> tuple[list[int], dict[int, Turn]]:
    """Identify where the turns are along a path.

    Returns the path to describe and the turns keyed by junction. If the route
    leaves the starting street at the very first junction, the junction before
    it on the starting street is put at the front of the returned path so that
    first leg can be described. The given path is not changed.
    """
    new_path = list(path)
    turns: dict[int, Turn] = {}
    if len(path) < 2:
        return new_path, turns

    here, nxt = path[0], path[1]
    _, start_street = split_street_address(start)
    last_street = start_street
    street = _common_street(graph, here, nxt) or last_street
    if last_street != street:
        prev = _find_adjacent_junction(addresses, graph, here, start)
        if prev is not None and prev not in path:
            new_path.insert(0, prev)
            _add_turn(graph, turns, prev, last_street, here)
    _add_turn(graph, turns, here, street, nxt)

    for i in range(1, len(new_path) - 1):
        prev, here, nxt = new_path[i - 1], new_path[i], new_path[i + 1]
        if _common_street(graph, prev, nxt):
            # The junctions either side share a street: no turn here
            continue
        last_street = street
        street = _common_street(graph, here, nxt) or last_street
        if last_street != street:
            _add_turn(graph, turns, here, street, nxt)

    # Turn onto the destination's street at the last junction
    here = new_path[-1]
    _, end_street = split_street_address(end)
    if street and end_street and street != end_street:
        toward = _find_adjacent_junction(addresses, graph, here, end)
        target = graph.junction_coords(toward) if toward is not None else addresses.coords(end)
        turns[here] = Turn(
            junction=here,
            street=end_street,
            azimuth=find_azimuth(graph.junction_coords(here), target),
        )

    return new_path, turns


def sum_distances_between_turns(addresses: AddressBook, graph: JunctionGraph,
                                turns: dict[int, Turn], path: list[int], new_path: list[int],
                                start: str, end: str):
    """Set each turn's distance to the distance until the next turn.

    The first turn also covers the way from the start address, and the last
    one the way to the end address.
    """
    if not turns or not path:
        return
    # find_turns() may have put a junction in front of the path
    index = 0 if len(new_path) == len(path) else 1

    distance = _address_to_junction(addresses, graph, start, path[0])
    if index:
        turns[new_path[0]].distance = distance
        distance = 0.0

    prev_turn = None
    for i in range(index, len(new_path) - 1):
        here, nxt = new_path[i], new_path[i + 1]
        if here in turns:
            if prev_turn is not None:
                turns[prev_turn].distance = distance
                distance = 0.0
            prev_turn = here
        leg = graph.junction_distance(here, nxt)
        if math.isfinite(leg):
            distance += leg

    if prev_turn is not None:
        turns[prev_turn].distance = distance

    # This is the last junction. How far is the destination?
    here = new_path[-1]
    last = here if here in turns else prev_turn
    if last is not None:
        turns[last].distance += _address_to_junction(addresses, graph, end, here)


def _describe_turn(turn: Turn) -> str:
    direction = azimuth_to_direction(turn.azimuth)
    step = f"Go {direction} on" if direction else "Go on"
    return f"{step} {format_street(turn.street)} {format_distance(turn.distance)}"


def describe_route(addresses: AddressBook, graph: JunctionGraph, path: list[int],
                   start: str, end: str) -> RouteDescription:
    """Describe a path between two street addresses, one step per turn.

    The per-turn distances are checked against the route distance summed
    independently; when they disagree the description is marked inconsistent
    and its summary shows both.
    """
    start = normalize_address(start)
    end = normalize_address(end)
    new_path, turns = find_turns(addresses, graph, path, start, end)
    summed = route_distance(addresses, graph, path, start, end)

    if turns:
        sum_distances_between_turns(addresses, graph, turns, path, new_path, start, end)
        ordered = [turns[key] for key in new_path if key in turns]
    else:
        # Zero or one junction: go straight there
        _, street = split_street_address(start)
        ordered = [Turn(
            junction=path[0] if path else None,
            street=street,
            azimuth=find_azimuth(addresses.coords(start), addresses.coords(end)),
            distance=summed,
        )]

    steps = [_describe_turn(turn) for turn in ordered]
    steps.append(f"Arrive at {format_street(end)}")
    total = sum(turn.distance for turn in ordered)

    return RouteDescription(
        start=start,
        end=end,
        path=new_path,
        turns=ordered,
        steps=steps,
        total=total,
        summed=summed,
        consistent=abs(total - summed) < CONFIG["turn_epsilon"],
    )
