"""Configuration settings for schoolpath."""

CONFIG = {
    # Packed coordinates store only the fractional degrees for the city
    "city_lat_degrees": 37,  # degrees north
    "city_lon_degrees": 122,  # degrees west - expanded longitudes are negative
    "miles_per_degree_lat": 69,
    "feet_per_mile": 5280,
    "short_distance_feet": 1000,  # distances up to this are shown in feet
    "walkable_miles": 1.0,  # ~20 minutes at 3 MPH
    "bikeable_miles": 2.25,  # ~15 minutes at 9 MPH
    # Search caps (iteration counts, never wall-clock)
    "astar_max_nodes": 15000,  # frontier pops before giving up
    "bfs_max_visited": None,  # None = unbounded
    "backtrack_max_junctions": 1000,  # junctions entered per attempt
    # Backtracking distance budget, as a multiple of the beeline distance
    "backtrack_initial_factor": 1.25,
    "backtrack_factor_increment": 0.25,
    "backtrack_max_factor": 6,
    "highway_suffix": "BOUND",  # e.g. "US101 NORTHBOUND"
    "turn_epsilon": 1e-4,  # miles - turn total vs summed route distance
    "default_search_method": "backtrack",
    "log_level": "INFO",  # DEBUG, INFO, WARNING or ERROR
    # Dataset loading
    "dataset_cache_dir": "data_cache",
    "dataset_cache_max_age": 7 * 24 * 3600,  # 7 days
    "dataset_fetch_timeout": 30,  # seconds
}
