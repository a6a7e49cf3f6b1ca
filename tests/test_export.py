from schoolpath.export import route_kml, route_waypoints, save_route_kml

from conftest import END, START

PATH = [20889, 20653, 20652, 20638]


def test_route_waypoints(graph, addresses):
    waypoints = route_waypoints(graph, PATH, addresses, START, END)
    assert [wpt["description"] for wpt in waypoints] == [
        "423 Burrows St",
        "Burrows St & Goettingen St",
        "Brussels St & Burrows St",
        "Burrows St & Girard St",
        "Bacon St & Girard St",
        "350 Girard St",
    ]
    assert [wpt["name"] for wpt in waypoints] == [1, 2, 3, 4, 5, 6]
    assert [wpt["sym"] for wpt in waypoints] == ["Start"] + ["Intersection"] * 4 + ["End"]


def test_route_kml(graph):
    kml = route_kml(graph, PATH, name="423 Burrows St to King Middle")
    assert kml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<kml xmlns=')
    assert kml.count("<Placemark>") == len(PATH) + 1
    assert "<description>Burrows St &amp; Goettingen St</description>" in kml
    assert "<Point><coordinates>-122.40706,37.72806,0</coordinates></Point>" in kml
    assert "\t\t<name>423 Burrows St to King Middle</name>\n\t\t<LineString>" in kml
    assert kml.endswith("</Document>\n</kml>")


def test_save_route_kml(graph, addresses, tmp_path):
    out = tmp_path / "route.kml"
    save_route_kml(graph, PATH, str(out), addresses=addresses, start=START, end=END)
    text = out.read_text()
    assert text.count("<Placemark>") == len(PATH) + 3
    assert "-122.4073,37.7278,0" in text
