import pytest

from schoolpath import AddressBook, JunctionGraph, Logger, RoutePlanner

# Four junctions in Bayview: Burrows St runs east to Girard St, which runs south to Bacon St
JUNCTIONS = {
    "20638": {"ll": [72737, 40459], "streets": ["BACON ST", "GIRARD ST"], "adj": [20652]},
    "20652": {"ll": [72857, 40509], "streets": ["BURROWS ST", "GIRARD ST"], "adj": [20638, 20653]},
    "20653": {"ll": [72832, 40608], "streets": ["BRUSSELS ST", "BURROWS ST"], "adj": [20652, 20889]},
    "20889": {"ll": [72806, 40706], "streets": ["BURROWS ST", "GOETTINGEN ST"], "adj": [20653]},
}

ADDRESSES = {
    "BURROWS ST": {"423": [7278, 4073]},
    "GIRARD ST": {"350": [7278, 4055]},
}

START = "423 Burrows St"
END = "350 Girard St"


def grid_junctions(size: int = 4) -> dict:
    """Square grid of two-way streets, rows and columns evenly spaced"""
    junctions = {}
    for r in range(size):
        for c in range(size):
            adj = []
            for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
                nr, nc = r + dr, c + dc
                if 0 <= nr < size and 0 <= nc < size:
                    adj.append(1000 + nr * 10 + nc)
            junctions[str(1000 + r * 10 + c)] = {
                "ll": [7700 + r * 10, 4400 + c * 10],
                "streets": [f"ROW{r} ST", f"COL{c} AVE"],
                "adj": adj,
            }
    return junctions


# Irregular graph with varied segment lengths and a one-way segment (5 -> 8)
WEIGHTED_JUNCTIONS = {
    "1": {"ll": [7700, 4400], "streets": ["A ST", "B ST"], "adj": [2, 3, 4]},
    "2": {"ll": [7710, 4420], "streets": ["A ST", "C ST"], "adj": [1, 5, 6]},
    "3": {"ll": [7695, 4430], "streets": ["B ST", "D ST"], "adj": [1, 6]},
    "4": {"ll": [7720, 4405], "streets": ["A ST", "E ST"], "adj": [1, 5]},
    "5": {"ll": [7730, 4425], "streets": ["C ST", "E ST"], "adj": [2, 4, 7, 8]},
    "6": {"ll": [7705, 4450], "streets": ["C ST", "D ST"], "adj": [2, 3, 7]},
    "7": {"ll": [7725, 4445], "streets": ["D ST", "F ST"], "adj": [5, 6, 8]},
    "8": {"ll": [7740, 4460], "streets": ["F ST", "G ST"], "adj": [7]},
}


@pytest.fixture
def log_records():
    """A silent logger and the (message, data) pairs it received"""
    records = []
    logger = Logger(echo=False, callback=lambda message, data: records.append((message, data)))
    return logger, records


@pytest.fixture
def graph():
    return JunctionGraph.from_dict(JUNCTIONS)


@pytest.fixture
def addresses():
    return AddressBook.from_dict(ADDRESSES)


@pytest.fixture
def planner(addresses, graph):
    return RoutePlanner(addresses, graph)


@pytest.fixture
def grid_graph():
    return JunctionGraph.from_dict(grid_junctions())


@pytest.fixture
def weighted_graph():
    return JunctionGraph.from_dict(WEIGHTED_JUNCTIONS)
