"""Shared fixtures: a small map document and its gene alias table.

The toy network:

    R1: A + atp_c --> B + adp_c      (g1)
    R2: B + 2 h_c --> C              (g2 and g3)
    R3: X <-> Y                      (g4)
    R4: A --> D                      (no genes)
    R5: D --> C                      (g5)
    R6: C --> E                      (g9, unresolved)
    R7: B --> F                      (no genes)
"""

import json

import pytest

from metapathpy.metamodel import MetaModel


def make_reaction(bigg_id, metabolites, rule="", reversible=False, genes=()):
    return {
        "name": f"reaction {bigg_id}",
        "bigg_id": bigg_id,
        "reversibility": reversible,
        "label_x": 100.0,
        "label_y": 200.0,
        "gene_reaction_rule": rule,
        "genes": [{"bigg_id": g, "name": n} for g, n in genes],
        "metabolites": [{"bigg_id": m, "coefficient": c} for m, c in metabolites],
        "segments": {"1": {"from_node_id": "10", "to_node_id": "12"}},
    }


def make_node(bigg_id, x, y, primary=True, name=None):
    return {
        "node_type": "metabolite",
        "x": x,
        "y": y,
        "bigg_id": bigg_id,
        "name": name or f"compound {bigg_id}",
        "node_is_primary": primary,
    }


@pytest.fixture
def map_document():
    reactions = {
        "1": make_reaction(
            "R1",
            [("A", -1), ("atp_c", -1), ("B", 1), ("adp_c", 1)],
            rule="g1",
            genes=[("g1", "geneA")],
        ),
        "2": make_reaction(
            "R2",
            [("B", -1), ("h_c", -2), ("C", 1)],
            rule="g2 and g3",
            genes=[("g2", "geneB"), ("g3", "geneC")],
        ),
        "3": make_reaction("R3", [("X", -1), ("Y", 1)], rule="g4", reversible=True),
        "4": make_reaction("R4", [("A", -1), ("D", 1)]),
        "5": make_reaction("R5", [("D", -1), ("C", 1)], rule="g5"),
        "6": make_reaction("R6", [("C", -1), ("E", 1)], rule="g9"),
        "7": make_reaction("R7", [("B", -1), ("F", 1)]),
    }
    nodes = {
        "10": make_node("A", 10.0, 20.0, name="alpha"),
        "11": make_node("A", 50.0, 20.0, primary=False, name="alpha"),
        "12": make_node("B", 30.0, 40.0, name="beta"),
        "13": {"node_type": "midmarker", "x": 20.0, "y": 30.0},
    }
    return [{"map_name": "toy_map"}, {"reactions": reactions, "nodes": nodes}]


@pytest.fixture
def alias_map():
    return {
        "g1": {"fig|1.peg.1"},
        "geneA": {"fig|1.peg.1"},
        "g2": {"fig|1.peg.2"},
        "g4": {"fig|1.peg.4"},
        "g5": {"fig|1.peg.5"},
    }


@pytest.fixture
def model(map_document, alias_map):
    return MetaModel.from_json(map_document, alias_map)


@pytest.fixture
def map_file(tmp_path, map_document):
    path = tmp_path / "toy_map.json"
    path.write_text(json.dumps(map_document))
    return str(path)


@pytest.fixture
def alias_file(tmp_path, alias_map):
    path = tmp_path / "aliases.tsv"
    lines = ["alias\tfid"]
    for alias, fids in sorted(alias_map.items()):
        for fid in sorted(fids):
            lines.append(f"{alias}\t{fid}")
    path.write_text("\n".join(lines) + "\n")
    return str(path)


@pytest.fixture
def chain_model(alias_map):
    """Two reversible steps in a row: P <-> Q <-> S."""
    reactions = {
        "1": make_reaction("Q1", [("P", -1), ("Q", 1)], reversible=True),
        "2": make_reaction("Q2", [("Q", -1), ("S", 1)], reversible=True),
    }
    return MetaModel.from_json([{"map_name": "chain"}, {"reactions": reactions, "nodes": {}}], alias_map)
