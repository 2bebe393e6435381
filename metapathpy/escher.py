# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Map Document Parsing for MetaPathPy.

A map document is a two-element JSON array in the Escher layout: element 0
holds metadata (including an optional ``map_name``), element 1 holds the
``reactions`` and ``nodes`` objects, each keyed by a stringified integer ID.

The raw JSON is validated once here and turned into typed records. Defaults
for missing optional fields live in ``REACTION_DEFAULTS`` and
``NODE_DEFAULTS`` and nowhere else.

Functions:
    - parse_map: Validate a decoded map document and build a MapDocument.
    - read_map: Load a map document from a JSON file.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from metapathpy.errors import ModelFormatError

REACTION_DEFAULTS = {
    "name": "<unknown>",
    "bigg_id": "",
    "reversibility": False,
    "label_x": 0.0,
    "label_y": 0.0,
    "gene_reaction_rule": "",
}

STOICH_DEFAULTS = {
    "bigg_id": "",
    "coefficient": 1,
}

NODE_DEFAULTS = {
    "node_type": "metabolite",
    "x": 0.0,
    "y": 0.0,
    "bigg_id": "",
    "name": "",
    "node_is_primary": False,
}


@dataclass
class ReactionRecord:
    """One reaction entry of a map document."""

    reaction_id: int
    name: str
    bigg_id: str
    reversibility: bool
    label_x: float
    label_y: float
    gene_reaction_rule: str
    genes: List[Tuple[str, str]] = field(default_factory=list)
    metabolites: List[Tuple[str, float]] = field(default_factory=list)
    segments: List[Tuple[int, int]] = field(default_factory=list)


@dataclass
class NodeRecord:
    """One node entry of a map document."""

    node_id: int
    node_type: str
    x: float
    y: float
    bigg_id: str
    name: str
    primary: bool


@dataclass
class MapDocument:
    """A fully parsed map document."""

    map_name: Optional[str]
    reactions: Dict[int, ReactionRecord]
    nodes: Dict[int, NodeRecord]


def _object_id(key, what):
    try:
        return int(key)
    except (TypeError, ValueError) as e:
        raise ModelFormatError(f"Invalid {what} ID: {key!r}") from e


def _number(value, what):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ModelFormatError(f"Expected a number for {what}, found {value!r}")
    # Integral coefficients are kept as ints so formulas print cleanly
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _require_dict(value, what):
    if not isinstance(value, dict):
        raise ModelFormatError(f"Expected an object for {what}")
    return value


def _parse_reaction(reaction_id, data):
    _require_dict(data, f"reaction {reaction_id}")
    values = {key: data.get(key, default) for key, default in REACTION_DEFAULTS.items()}
    if values["name"] is None:
        values["name"] = REACTION_DEFAULTS["name"]
    if values["gene_reaction_rule"] is None:
        values["gene_reaction_rule"] = ""

    genes = []
    for gene in data.get("genes") or []:
        _require_dict(gene, f"gene in reaction {reaction_id}")
        genes.append((gene.get("bigg_id") or "", gene.get("name") or ""))

    metabolites = []
    for meta in data.get("metabolites") or []:
        _require_dict(meta, f"metabolite in reaction {reaction_id}")
        bigg_id = meta.get("bigg_id", STOICH_DEFAULTS["bigg_id"])
        if not bigg_id:
            raise ModelFormatError(f"Metabolite without a BiGG ID in reaction {reaction_id}")
        coefficient = _number(
            meta.get("coefficient", STOICH_DEFAULTS["coefficient"]),
            f"coefficient of {bigg_id} in reaction {reaction_id}",
        )
        metabolites.append((bigg_id, coefficient))

    segments = []
    for segment in _require_dict(data.get("segments") or {}, "segments").values():
        _require_dict(segment, f"segment in reaction {reaction_id}")
        segments.append(
            (
                _object_id(segment.get("from_node_id", 0), "node"),
                _object_id(segment.get("to_node_id", 0), "node"),
            )
        )

    return ReactionRecord(
        reaction_id=reaction_id,
        name=str(values["name"]),
        bigg_id=str(values["bigg_id"]),
        reversibility=bool(values["reversibility"]),
        label_x=float(_number(values["label_x"], "label_x")),
        label_y=float(_number(values["label_y"], "label_y")),
        gene_reaction_rule=str(values["gene_reaction_rule"]),
        genes=genes,
        metabolites=metabolites,
        segments=segments,
    )


def _parse_node(node_id, data):
    _require_dict(data, f"node {node_id}")
    values = {key: data.get(key, default) for key, default in NODE_DEFAULTS.items()}
    return NodeRecord(
        node_id=node_id,
        node_type=str(values["node_type"]),
        x=float(_number(values["x"], "x")),
        y=float(_number(values["y"], "y")),
        bigg_id=str(values["bigg_id"] or ""),
        name=str(values["name"] or ""),
        primary=bool(values["node_is_primary"]),
    )


def parse_map(document):
    """
    Validate a decoded map document.

    Args:
        document (list): The decoded two-element JSON array.

    Returns:
        MapDocument: Typed reaction and node records plus the map name.

    Raises:
        ModelFormatError: If the document does not have the expected shape.
    """
    if not isinstance(document, list) or len(document) < 2:
        raise ModelFormatError("Map document must be a two-element array")
    meta = _require_dict(document[0], "map metadata")
    body = _require_dict(document[1], "map body")

    map_name = meta.get("map_name")

    reactions = {}
    for key, data in _require_dict(body.get("reactions", {}), "reactions").items():
        reaction_id = _object_id(key, "reaction")
        reactions[reaction_id] = _parse_reaction(reaction_id, data)

    nodes = {}
    for key, data in _require_dict(body.get("nodes", {}), "nodes").items():
        node_id = _object_id(key, "node")
        nodes[node_id] = _parse_node(node_id, data)

    return MapDocument(map_name=map_name, reactions=reactions, nodes=nodes)


def read_map(map_file):
    """
    Read a map document from a JSON file.

    Args:
        map_file (str): Path to the map JSON file.

    Returns:
        MapDocument: The parsed document.

    Raises:
        ModelFormatError: If the file is unreadable, is not JSON, or is malformed.
    """
    try:
        with open(map_file, "r") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ModelFormatError(f"Error loading map file {map_file}: {e}") from e
    return parse_map(document)
