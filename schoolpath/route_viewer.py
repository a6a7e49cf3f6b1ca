"""Interactive HTML map of a route between two addresses."""

import html
from typing import Optional

import folium
from folium import plugins

from .address import AddressBook, normalize_address, prettify_address
from .graph import JunctionGraph
from .models import RouteDescription


def _steps_html(description: RouteDescription) -> str:
    items = "".join(f"<li>{html.escape(step)}</li>" for step in description.steps)
    summary = html.escape(description.summary()).replace("\n", "<br>")
    return f"<ol style=\"margin: 5px 0; padding-left: 18px;\">{items}</ol>{summary}"


def create_route_map(graph: JunctionGraph, path: list[int], addresses: AddressBook,
                     start: str, end: str,
                     description: Optional[RouteDescription] = None) -> folium.Map:
    """Create an interactive map of a path, with turn markers if a description is given."""
    start_coords = addresses.coords(start)
    end_coords = addresses.coords(end)
    junction_coords = [(key, graph.junction_coords(key)) for key in path]
    junction_coords = [(key, ll) for key, ll in junction_coords if ll is not None]

    points = [ll for _, ll in junction_coords]
    if start_coords:
        points.insert(0, start_coords)
    if end_coords:
        points.append(end_coords)
    if not points:
        raise ValueError("Nothing to show: no known locations on the route")

    center_lat = sum(p[0] for p in points) / len(points)
    center_lon = sum(p[1] for p in points) / len(points)
    m = folium.Map(
        location=[center_lat, center_lon],
        zoom_start=16,
        tiles="CartoDB positron"
    )
    folium.TileLayer("OpenStreetMap", name="OpenStreetMap").add_to(m)

    route_layer = folium.FeatureGroup(name="Route", show=True)
    junction_layer = folium.FeatureGroup(name="Junctions", show=False)
    turn_layer = folium.FeatureGroup(name="Turns", show=True)

    if len(points) > 1:
        folium.PolyLine(
            [[p[0], p[1]] for p in points],
            weight=5,
            color="#3388ff",
            opacity=0.8,
        ).add_to(route_layer)

    for key, ll in junction_coords:
        folium.CircleMarker(
            [ll[0], ll[1]],
            radius=4,
            color="#555555",
            fill=True,
            popup=folium.Popup(f"<b>{html.escape(graph.name_junction(key) or '')}</b><br>CNN {key}",
                               max_width=200),
        ).add_to(junction_layer)

    if description:
        for turn, step in zip(description.turns, description.steps):
            ll = graph.junction_coords(turn.junction) if turn.junction is not None else None
            if ll is None:
                continue
            folium.Marker(
                [ll[0], ll[1]],
                popup=folium.Popup(html.escape(step), max_width=200),
                icon=folium.Icon(color="orange", icon="share-alt"),
            ).add_to(turn_layer)

    route_layer.add_to(m)
    junction_layer.add_to(m)
    turn_layer.add_to(m)

    if start_coords:
        folium.Marker(
            [start_coords[0], start_coords[1]],
            popup=prettify_address(normalize_address(start)),
            icon=folium.Icon(color="green", icon="home")
        ).add_to(m)
    if end_coords:
        folium.Marker(
            [end_coords[0], end_coords[1]],
            popup=prettify_address(normalize_address(end)),
            icon=folium.Icon(color="red", icon="flag")
        ).add_to(m)

    folium.LayerControl().add_to(m)

    if description:
        legend_html = f"""
        <div style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            z-index: 1000;
            max-width: 320px;
            background-color: white;
            padding: 10px;
            border-radius: 5px;
            border: 2px solid grey;
            font-family: Arial;
            font-size: 12px;
        ">
            <b>Directions</b><br>
            <hr style="margin: 5px 0">
            {_steps_html(description)}
            <hr style="margin: 5px 0">
            <i>Routes are illustrative. DO NOT follow these directions.</i>
        </div>
        """
        m.get_root().html.add_child(folium.Element(legend_html))

    plugins.Fullscreen().add_to(m)
    if len(points) > 1:
        m.fit_bounds([[min(p[0] for p in points), min(p[1] for p in points)],
                      [max(p[0] for p in points), max(p[1] for p in points)]])
    return m


def save_route_map(graph: JunctionGraph, path: list[int], addresses: AddressBook,
                   start: str, end: str, output: str,
                   description: Optional[RouteDescription] = None) -> str:
    """Write the route map to an HTML file and return its path"""
    m = create_route_map(graph, path, addresses, start, end, description)
    m.save(output)
    return output
