#!/usr/bin/env python3
"""
schoolpath - Walking directions between San Francisco addresses and schools

Usage:
    python -m schoolpath START END --junctions FILE --addresses FILE [options]
    python -m schoolpath START --schools FILE --junctions FILE --addresses FILE

Options:
    --junctions SRC   Junction table (JSON file or URL)
    --addresses SRC   Address table (JSON file or URL)
    --method NAME     backtrack (default), astar or bfs
    --one-way         Only search from START to END, not also from END to START
    --schools SRC     List the distance from START to every school instead
    --kml FILE        Export the route to a KML file
    --html FILE       Write an interactive map of the route to an HTML file
    --trace FILE      Write search traces to a JSON file
    --log FILE        Append log lines to a file
    --quiet           Don't echo log lines to the terminal

Routes are illustrative. DO NOT follow these directions.
"""

import argparse
import sys

from .address import normalize_address
from .data import DatasetError, load_addresses, load_graph, load_schools
from .directions import describe_route
from .export import save_route_kml
from .geo import format_distance
from .logger import Logger
from .planner import SEARCH_METHODS, RoutePlanner
from .route_log import SearchLog
from .route_viewer import save_route_map


def _print_school_distances(planner: RoutePlanner, start: str, schools, method):
    distances = planner.find_school_distances(start, schools, method=method or "astar")
    rows = []
    for school in schools:
        miles = distances.get(normalize_address(school.address))
        if miles is not None:
            rows.append((miles, school.description))
    for miles, name in sorted(rows, key=lambda row: row[0]):
        print(f"{format_distance(miles, show_label=True):>20}  {name}")


def _print_route(planner: RoutePlanner, args):
    if args.one_way:
        path = planner.find_path(args.start, args.end, args.method)
    else:
        path = planner.find_best_path(args.start, args.end, args.method)
    if not path:
        print("No route found; showing the distance as the crow flies.")

    description = describe_route(planner.addresses, planner.graph, path, args.start, args.end)
    for i, step in enumerate(description.steps, 1):
        print(f"{i}. {step}")
    print(description.summary())

    if args.kml:
        save_route_kml(planner.graph, path, args.kml,
                       name=f"{description.start} to {description.end}",
                       addresses=planner.addresses, start=args.start, end=args.end)
        print(f"Route saved to: {args.kml}")
    if args.html:
        save_route_map(planner.graph, path, planner.addresses, args.start, args.end,
                       args.html, description=description)
        print(f"Map saved to: {args.html}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="schoolpath - Walking directions between San Francisco addresses and schools"
    )
    parser.add_argument("start", help="Starting street address, e.g. \"423 Burrows St\"")
    parser.add_argument("end", nargs="?", help="Ending street address")
    parser.add_argument("--junctions", metavar="SRC", required=True,
                        help="Junction table, a JSON file or URL")
    parser.add_argument("--addresses", metavar="SRC", required=True,
                        help="Address table, a JSON file or URL")
    parser.add_argument("--method", choices=SEARCH_METHODS,
                        help="Search method (default: backtrack; astar for --schools)")
    parser.add_argument("--one-way", action="store_true",
                        help="Only search from START to END")
    parser.add_argument("--schools", metavar="SRC",
                        help="List the distance to every school in this JSON file or URL")
    parser.add_argument("--kml", metavar="FILE",
                        help="Export the route to a KML file")
    parser.add_argument("--html", metavar="FILE",
                        help="Write an interactive route map to an HTML file")
    parser.add_argument("--trace", metavar="FILE",
                        help="Write search traces to a JSON file")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path")
    parser.add_argument("--quiet", action="store_true",
                        help="Don't echo log lines")

    args = parser.parse_args(argv)

    if not args.schools and not args.end:
        parser.error("END is required unless --schools is given")

    logger = Logger(log_path=args.log, echo=not args.quiet)
    try:
        graph = load_graph(args.junctions, logger)
        addresses = load_addresses(args.addresses, logger)
        schools = load_schools(args.schools, logger) if args.schools else None
    except DatasetError as e:
        print(f"Error: {e}")
        logger.close()
        return 1

    search_log = None
    if args.trace:
        search_log = SearchLog(graph_stats={
            "junctions": len(graph),
            "segments": graph.graph.number_of_edges(),
            "one_way_segments": len(graph.one_way_edges()),
        })
    planner = RoutePlanner(addresses, graph, logger=logger, search_log=search_log)

    try:
        if schools is not None:
            _print_school_distances(planner, args.start, schools, args.method)
        else:
            _print_route(planner, args)
    finally:
        if search_log is not None:
            search_log.save(args.trace)
            print(f"Search traces saved to: {args.trace}")
        logger.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
