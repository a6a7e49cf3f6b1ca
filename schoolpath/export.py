"""KML (Keyhole Markup Language) export of routes, for mapping apps."""

from html import escape
from typing import Optional

from .address import AddressBook, normalize_address, prettify_address
from .graph import JunctionGraph

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"


def route_waypoints(graph: JunctionGraph, path: list[int],
                    addresses: Optional[AddressBook] = None,
                    start: Optional[str] = None, end: Optional[str] = None) -> list[dict]:
    """Waypoints along a route: the start address, each junction, then the end address"""
    waypoints = []

    def add(ll, description, sym):
        waypoints.append({"ll": ll, "name": len(waypoints) + 1,
                          "description": description, "sym": sym})

    if addresses is not None and start:
        ll = addresses.coords(start)
        if ll:
            add(ll, prettify_address(normalize_address(start)), "Start")
    for key in path:
        ll = graph.junction_coords(key)
        if ll:
            add(ll, graph.name_junction(key), "Intersection")
    if addresses is not None and end:
        ll = addresses.coords(end)
        if ll:
            add(ll, prettify_address(normalize_address(end)), "End")
    return waypoints


def _coordinates(wpt: dict) -> str:
    lat, lon = wpt["ll"]
    return f"{lon},{lat},{wpt.get('ele', 0)}"


def kml_waypoint(wpt: dict) -> str:
    xml = "\t<Placemark>\n"
    for key, value in wpt.items():
        if key in ("ll", "ele"):
            continue
        xml += f"\t\t<{key}>{escape(str(value))}</{key}>\n"
    xml += f"\t\t<Point><coordinates>{_coordinates(wpt)}</coordinates></Point>\n"
    xml += "\t</Placemark>\n"
    return xml


def kml_line_string(waypoints: list[dict], name: str = "") -> str:
    xml = "\t<Placemark>\n"
    if name:
        xml += f"\t\t<name>{escape(name)}</name>\n"
    xml += "\t\t<LineString>\n"
    xml += "\t\t\t<altitudeMode>clampToGround</altitudeMode>\n"
    xml += "\t\t\t<extrude>1</extrude>\n"
    xml += "\t\t\t<tessellate>1</tessellate>\n"
    xml += "\t\t\t<coordinates>\n"
    for wpt in waypoints:
        xml += f"\t\t\t\t{_coordinates(wpt)}\n"
    xml += "\t\t\t</coordinates>\n"
    xml += "\t\t</LineString>\n"
    xml += "\t</Placemark>\n"
    return xml


def route_kml(graph: JunctionGraph, path: list[int], name: str = "",
              addresses: Optional[AddressBook] = None,
              start: Optional[str] = None, end: Optional[str] = None) -> str:
    """KML document with a placemark per waypoint and the route as a line"""
    waypoints = route_waypoints(graph, path, addresses, start, end)
    xml = '<?xml version="1.0" encoding="UTF-8"?>\n'
    xml += f'<kml xmlns="{KML_NAMESPACE}">\n'
    xml += "<Document>\n"
    if name:
        xml += f"\t<name>{escape(name)}</name>\n"
    xml += "\t<open>0</open>\n"
    for wpt in waypoints:
        xml += kml_waypoint(wpt)
    xml += kml_line_string(waypoints, name)
    xml += "</Document>\n"
    xml += "</kml>"
    return xml


def save_route_kml(graph: JunctionGraph, path: list[int], output: str, name: str = "",
                   addresses: Optional[AddressBook] = None,
                   start: Optional[str] = None, end: Optional[str] = None) -> str:
    """Write a route as a KML file and return its path"""
    with open(output, "w") as f:
        f.write(route_kml(graph, path, name, addresses, start, end))
    return output
