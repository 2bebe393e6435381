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
Map Nodes for MetaPathPy.

Display nodes are pure bookkeeping: they remember where a metabolite (or a
reaction marker) is drawn on the map and never take part in routing.

Classes:
    - Coordinate: A position on the map, ordered top-to-bottom, left-to-right.
    - ModelNode: Base class for all nodes.
    - MetaboliteNode: A drawn instance of a metabolite.
    - MarkerNode: Any other node (multimarkers, midmarkers).

Functions:
    - create_node: Build the proper node object from a parsed node record.
"""

from dataclasses import dataclass
from functools import total_ordering


@total_ordering
@dataclass(frozen=True)
class Coordinate:
    """A point on the map. Sorting is by y, then by x."""

    x: float = 0.0
    y: float = 0.0

    def __lt__(self, other):
        if not isinstance(other, Coordinate):
            return NotImplemented
        return (self.y, self.x) < (other.y, other.x)


class ModelNode:
    """
    A node on the metabolic map.

    Attributes:
        id (int): Node ID, unique within the model.
        loc (Coordinate): Display location.
    """

    def __init__(self, node_id, loc):
        self.id = node_id
        self.loc = loc

    def __repr__(self):
        return f"{type(self).__name__}({self.id})"

    def __eq__(self, other):
        if not isinstance(other, ModelNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


class MetaboliteNode(ModelNode):
    """
    A node representing one drawn instance of a metabolite.

    Attributes:
        bigg_id (str): BiGG ID of the metabolite.
        name (str): Display name of the metabolite.
        primary (bool): TRUE if this is the primary drawing of the metabolite.
    """

    def __init__(self, node_id, loc, bigg_id, name="", primary=False):
        super().__init__(node_id, loc)
        self.bigg_id = bigg_id
        self.name = name
        self.primary = primary

    def __repr__(self):
        return f"MetaboliteNode({self.id}, {self.bigg_id})"


class MarkerNode(ModelNode):
    """A non-metabolite node, such as a reaction multimarker."""

    def __init__(self, node_id, loc, node_type):
        super().__init__(node_id, loc)
        self.node_type = node_type


def create_node(node_id, record):
    """
    Create a model node from a parsed node record.

    Args:
        node_id (int): ID of the new node.
        record (escher.NodeRecord): Parsed node data.

    Returns:
        ModelNode: A MetaboliteNode for metabolite records, else a MarkerNode.
    """
    loc = Coordinate(record.x, record.y)
    if record.node_type == "metabolite":
        return MetaboliteNode(
            node_id, loc, record.bigg_id, name=record.name, primary=record.primary
        )
    return MarkerNode(node_id, loc, record.node_type)
