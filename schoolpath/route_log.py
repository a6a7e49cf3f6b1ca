"""Search logging and route evaluation."""

import json
import math
from datetime import datetime, timezone
from typing import Optional

from .config import CONFIG
from .models import SearchTrace


class SearchLog:
    """Records the trace of every search a planner runs, for analysis."""

    def __init__(self, graph_stats: Optional[dict] = None):
        self.data = {
            "version": 1,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "config": dict(CONFIG),
            "graph_stats": graph_stats or {},
            "searches": [],
        }

    @property
    def searches(self) -> list[dict]:
        return self.data["searches"]

    def __len__(self) -> int:
        return len(self.data["searches"])

    def log_search(self, trace: SearchTrace, start_address: Optional[str] = None,
                   end_address: Optional[str] = None, route_distance: Optional[float] = None,
                   beeline: Optional[float] = None):
        """Record one search, with the addresses it was run for."""
        entry = trace.to_dict()
        entry["elapsed"] = round(trace.elapsed, 6)
        if trace.distance is not None:
            entry["distance"] = round(trace.distance, 4)
        entry["start_address"] = start_address
        entry["end_address"] = end_address
        if route_distance is not None and beeline is not None:
            entry["evaluation"] = evaluate_route(route_distance, beeline)
        self.data["searches"].append(entry)

    def save(self, path: str):
        """Write search log to JSON file."""
        with open(path, "w") as f:
            json.dump(self.data, f, indent=2)


def evaluate_route(distance: float, beeline: float) -> dict:
    """Compare a route with the distance as the crow flies.

    Returns a dict with:
      - distance_mi, beeline_mi: both rounded to hundredths
      - detour_pct: how much longer the route is, in percent, or None when
        the beeline distance is zero or unknown
    """
    detour = None
    if beeline and math.isfinite(beeline) and math.isfinite(distance):
        detour = round((distance - beeline) / beeline * 100)
    return {
        "distance_mi": round(distance, 2) if math.isfinite(distance) else None,
        "beeline_mi": round(beeline, 2) if math.isfinite(beeline) else None,
        "detour_pct": detour,
    }
