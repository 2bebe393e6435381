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
Metabolic Model for MetaPathPy.

This module holds the MetaModel, the in-memory reaction network built from an
Escher-style map and a gene alias table, together with the pathway search
that runs over it.

The network is a directed bipartite graph. Every reaction is stored once in
the reaction registry; the successor map (metabolite -> reactions that can
consume it), the producer map (metabolite -> reactions that can yield it) and
the feature map (feature ID -> triggered reactions) hold reaction IDs that are
resolved through the registry. Reversible reactions are registered as both
successor and producer for every participant, and lookups then honor each
reaction's active-direction overlay.

Classes:
    - MetaModel: The reaction network and its query engine.

Functions:
    - queue_key: Priority of a partial pathway in the search queue.
"""

import heapq
import itertools
import logging
import math
import os
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

import cobra

from metapathpy.config import SearchConfig
from metapathpy.escher import read_map, parse_map
from metapathpy.nodes import MetaboliteNode, create_node
from metapathpy.pathway import Pathway
from metapathpy.reaction import Reaction, Stoich

# Ubiquitous cofactors and byproducts that are always treated as common
COMMONS = frozenset(
    [
        "h_c", "h_p", "h2o_c", "atp_c", "co2_c", "o2_c", "pi_c", "adp_c",
        "glu__D_c", "nadh_p", "nadh_c", "nad_c", "nadph_c", "o2_p", "na1_p",
        "na1_c", "h2o2_c", "h2_c",
    ]
)

# Painting directions
PRODUCERS = "producers"
SUCCESSORS = "successors"

UNREACHABLE = math.inf

# Progress is logged after this many queue pops
PROGRESS_INTERVAL = 100000


def queue_key(path, paintings):
    """
    Compute the search priority of a partial pathway.

    Pathways are ordered by estimated total length (distance still to go
    according to the goal's painting plus length so far), then by length,
    then by the IDs of their reactions. A terminus missing from the painting
    sorts last.

    Args:
        path (Pathway): The candidate pathway.
        paintings (dict): Goal compound -> painting (compound -> distance).

    Returns:
        tuple: The sort key.
    """
    painting = paintings[path.goal]
    estimate = painting.get(path.last.output, UNREACHABLE) + len(path)
    return (estimate, len(path), tuple(e.reaction.id for e in path))


class MetaModel:
    """
    A metabolic model built from a map document and a gene alias table.

    Attributes:
        map_name (str): Name of the map.
        config (SearchConfig): Default tuning values for queries.
        alias_map (dict): Gene alias -> set of feature IDs.
        logger (logging.Logger): Logger for model events.
    """

    def __init__(self, document, alias_map, config: Optional[SearchConfig] = None):
        """
        Build the model.

        Args:
            document (escher.MapDocument): Parsed map document.
            alias_map (dict): Gene alias -> iterable of feature IDs.
            config (SearchConfig, optional): Tuning values for queries.
        """
        self.logger = logging.getLogger("MetaModel")
        self.config = (config or SearchConfig()).validate()
        self.alias_map = {alias: set(fids) for alias, fids in alias_map.items()}
        self.map_name = document.map_name or "Metabolic map"

        # Reaction registry and the indices that point into it
        self._reactions: Dict[int, Reaction] = {}
        self._bigg_reactions: Dict[str, int] = {}
        self._fid_reactions: Dict[str, Set[int]] = defaultdict(set)
        self._orphans: Set[int] = set()
        self._successors: Dict[str, Set[int]] = defaultdict(set)
        self._producers: Dict[str, Set[int]] = defaultdict(set)

        # Display nodes
        self._nodes = {}
        self._metabolite_nodes: Dict[str, List[MetaboliteNode]] = defaultdict(list)

        self._last_id = 0

        self.logger.info(f"{len(document.reactions)} reactions found in map {self.map_name}.")
        for reaction_id, record in document.reactions.items():
            self._check_id(reaction_id)
            self._register_reaction(Reaction.from_record(record))

        for node_id, record in document.nodes.items():
            self._check_id(node_id)
            node = create_node(node_id, record)
            self._nodes[node_id] = node
            if isinstance(node, MetaboliteNode):
                self._metabolite_nodes[node.bigg_id].append(node)

    @classmethod
    def load(cls, map_file, alias_map, config=None):
        """
        Load a model from a map JSON file.

        Raises:
            ModelFormatError: If the file cannot be read or parsed.
        """
        return cls(read_map(map_file), alias_map, config=config)

    @classmethod
    def from_json(cls, document, alias_map, config=None):
        """Build a model from an already-decoded map document."""
        return cls(parse_map(document), alias_map, config=config)

    # Construction

    def _check_id(self, object_id):
        if object_id > self._last_id:
            self._last_id = object_id

    def _next_id(self):
        self._last_id += 1
        return self._last_id

    def _register_reaction(self, reaction):
        self._reactions[reaction.id] = reaction
        self._bigg_reactions[reaction.bigg_id] = reaction.id
        self._connect_reaction(reaction)
        self._create_reaction_network(reaction)

    def _connect_reaction(self, reaction):
        """Link a reaction to the features that trigger it."""
        found = False
        for gene in sorted(reaction.gene_tokens):
            fids = self.alias_map.get(gene)
            if not fids:
                self.logger.debug(f'No features found for gene alias "{gene}" in {reaction!r}.')
                continue
            for fid in fids:
                self._fid_reactions[fid].add(reaction.id)
                found = True
        if not found:
            self._orphans.add(reaction.id)

    def _create_reaction_network(self, reaction):
        """Add a reaction to the successor and producer maps."""
        for stoich in reaction.metabolites:
            compound = stoich.metabolite
            if reaction.reversible or not stoich.is_product:
                self._successors[compound].add(reaction.id)
            if reaction.reversible or stoich.is_product:
                self._producers[compound].add(reaction.id)

    def _resolve(self, reaction_ids: Iterable[int]) -> List[Reaction]:
        return sorted(self._reactions[i] for i in reaction_ids)

    # Reaction lookups

    def get_reaction(self, bigg_id) -> Optional[Reaction]:
        """Return the reaction with the given BiGG ID, or None."""
        reaction_id = self._bigg_reactions.get(bigg_id)
        return None if reaction_id is None else self._reactions[reaction_id]

    def get_reaction_by_id(self, reaction_id) -> Optional[Reaction]:
        return self._reactions.get(reaction_id)

    def get_reactions(self, fid) -> List[Reaction]:
        """Return the reactions triggered by a feature."""
        return self._resolve(self._fid_reactions.get(fid, ()))

    def get_triggered_reactions(self, gene) -> List[Reaction]:
        """
        Return the reactions triggered by a protein.

        Args:
            gene (str): A feature ID or any gene alias of the feature.
        """
        if gene in self._fid_reactions:
            return self.get_reactions(gene)
        reaction_ids = set()
        for fid in self.alias_map.get(gene, ()):
            reaction_ids |= self._fid_reactions.get(fid, set())
        return self._resolve(reaction_ids)

    def reaction_map(self) -> Dict[str, List[Reaction]]:
        return {fid: self._resolve(ids) for fid, ids in self._fid_reactions.items()}

    def all_reactions(self) -> List[Reaction]:
        return self._resolve(self._reactions)

    def orphan_reactions(self) -> List[Reaction]:
        return self._resolve(self._orphans)

    def features_covered(self):
        return len(self._fid_reactions)

    # Node lookups

    def get_node(self, node_id):
        """
        Return the node with the given ID.

        Raises:
            KeyError: If there is no such node.
        """
        if node_id not in self._nodes:
            raise KeyError(f"Node {node_id} not found in model.")
        return self._nodes[node_id]

    def get_metabolites(self, bigg_id) -> List[MetaboliteNode]:
        """Return the nodes drawn for a metabolite (possibly none)."""
        return list(self._metabolite_nodes.get(bigg_id, []))

    def get_primary(self, bigg_id) -> Optional[MetaboliteNode]:
        """
        Return the primary node for a metabolite, or None if it has none.

        Raises:
            KeyError: If the metabolite has no nodes at all.
        """
        if bigg_id not in self._metabolite_nodes:
            raise KeyError(f"Metabolite {bigg_id} not found in model.")
        for node in self._metabolite_nodes[bigg_id]:
            if node.primary:
                return node
        return None

    def metabolite_map(self) -> Dict[str, List[MetaboliteNode]]:
        return {bigg_id: list(nodes) for bigg_id, nodes in self._metabolite_nodes.items()}

    def compound_map(self) -> Dict[str, List[str]]:
        """
        Map compound display names to BiGG IDs. Compounds without a drawn
        node (such as those imported from SBML) are listed under their ID.
        """
        names = defaultdict(set)
        for bigg_id, nodes in self._metabolite_nodes.items():
            for node in nodes:
                names[node.name or bigg_id].add(bigg_id)
        drawn = set(self._metabolite_nodes)
        for compound in set(self._successors) | set(self._producers):
            if compound not in drawn:
                names[compound].add(compound)
        return {name: sorted(ids) for name, ids in names.items()}

    def metabolite_count(self):
        return len(self._metabolite_nodes)

    def node_count(self):
        return len(self._nodes)

    def has_compound(self, compound):
        return (
            compound in self._successors
            or compound in self._producers
            or compound in self._metabolite_nodes
        )

    # Network

    def get_successors(self, compound) -> List[Reaction]:
        """Return the reactions that can currently consume a compound."""
        candidates = self._resolve(self._successors.get(compound, ()))
        return [r for r in candidates if r.consumes(compound)]

    def get_producers(self, compound) -> List[Reaction]:
        """Return the reactions that can currently yield a compound."""
        candidates = self._resolve(self._producers.get(compound, ()))
        return [r for r in candidates if r.produces(compound)]

    def input_compounds(self) -> List[str]:
        """Return the compounds that have at least one successor reaction."""
        return sorted(c for c in self._successors if self.get_successors(c))

    def product_count(self):
        return sum(1 for c in self._producers if self.get_producers(c))

    def get_commons(self, config: Optional[SearchConfig] = None) -> Set[str]:
        """
        Compute the common compounds for the current reaction set.

        This is the fixed set of known cofactors plus every compound with more
        successor reactions than the configured threshold.
        """
        config = config or self.config
        result = set(COMMONS)
        for compound in self._successors:
            if len(self.get_successors(compound)) > config.max_successors:
                result.add(compound)
        return result

    def paint_producers(self, target, commons, config=None) -> Dict[str, int]:
        """Compute the minimum reaction distance from each compound to a target."""
        return self.calculate_connections(target, commons, PRODUCERS, config=config)

    def paint_consumers(self, source, commons, config=None) -> Dict[str, int]:
        """Compute the minimum reaction distance to each compound from a source."""
        return self.calculate_connections(source, commons, SUCCESSORS, config=config)

    def calculate_connections(self, target, commons, direction=PRODUCERS, config=None):
        """
        Paint the model with reaction-hop distances relative to a compound.

        Walking the producer map gives distances *to* the target; walking the
        successor map gives distances *from* it. Common compounds are never
        entered, and expansion stops at the maximum pathway length.

        Args:
            target (str): BiGG ID of the compound to paint from.
            commons (set): Compounds to skip.
            direction (str): PRODUCERS or SUCCESSORS.
            config (SearchConfig, optional): Override for the model's settings.

        Returns:
            dict: Compound -> minimum number of reactions.
        """
        config = config or self.config
        if direction == PRODUCERS:
            lookup, step = self.get_producers, Reaction.get_inputs
        elif direction == SUCCESSORS:
            lookup, step = self.get_successors, Reaction.get_outputs
        else:
            raise ValueError(f"Invalid painting direction: {direction}")

        result = {target: 0}
        queue = [(0, target)]
        while queue:
            current, compound = heapq.heappop(queue)
            distance = current + 1
            if distance >= config.max_path_len:
                continue
            for reaction in lookup(compound):
                for node in step(reaction, compound):
                    other = node.metabolite
                    if other not in commons and other not in result:
                        result[other] = distance
                        heapq.heappush(queue, (distance, other))
        return result

    # Pathway search

    def get_pathway(self, bigg1, bigg2, *filters, config=None) -> Optional[Pathway]:
        """
        Find the shortest pathway between two metabolites.

        Args:
            bigg1 (str): BiGG ID of the start metabolite.
            bigg2 (str): BiGG ID of the end metabolite.
            *filters (PathwayFilter): Filters the pathway must satisfy.
            config (SearchConfig, optional): Override for the model's settings.

        Returns:
            Pathway: The pathway found, or None if there is none.
        """
        starters = self.get_successors(bigg1)
        if not starters:
            self.logger.warning(f'No reactions use metabolite "{bigg1}".')
            return None
        initial = []
        for starter in starters:
            for node in starter.get_outputs(bigg1):
                initial.append(Pathway(starter, node, goal=bigg2, start=bigg1))
        return self.find_pathway(initial, *filters, config=config)

    def extend_pathway(self, path, bigg2, *filters, config=None) -> Optional[Pathway]:
        """
        Find the shortest extension of a pathway to a new end metabolite.

        The returned pathway begins with every element of ``path``; the
        input pathway itself is not modified.

        Raises:
            ValueError: If the pathway is empty.
        """
        if not len(path):
            raise ValueError("Cannot extend an empty pathway.")
        start = path.clone()
        start.goal = bigg2
        return self.find_pathway([start], *filters, config=config)

    def loop_pathway(self, path, origin, *filters, config=None) -> Optional[Pathway]:
        """
        Extend a pathway back to a compound, normally its own start.

        For an irreversible pathway this is ``extend_pathway`` with the origin
        as goal. For a reversible pathway the reversed pathway (from the old
        terminus back to the origin) is queued as a second starting point, and
        whichever candidate completes first under the shared ordering wins.
        The reversed pathway is only tried when the origin is consumed by the
        first step, since otherwise it could not end at the origin.

        Raises:
            ValueError: If the pathway is empty.
        """
        if not len(path):
            raise ValueError("Cannot loop an empty pathway.")
        starters = []
        if path.is_reversible() and origin in path.first.inputs:
            reverse = path.reverse(origin)
            reverse.goal = origin
            starters.append(reverse)
        forward = path.clone()
        forward.goal = origin
        starters.append(forward)
        return self.find_pathway(starters, *filters, config=config)

    def find_pathway(self, initial, *filters, config=None) -> Optional[Pathway]:
        """
        Best-first search for a pathway from a set of starting pathways.

        Args:
            initial (iterable): Starting pathways, each with its goal set.
            *filters (PathwayFilter): Filters the pathway must satisfy.
            config (SearchConfig, optional): Override for the model's settings.

        Returns:
            Pathway: The first complete pathway passing every filter, or None.
        """
        config = config or self.config
        max_len = config.max_path_len
        commons = self.get_commons(config)

        # Paint each distinct goal once and seed the queue with feasible paths
        paintings = {}
        counter = itertools.count()
        queue = []
        for path in initial:
            goal = path.goal
            if not self.get_producers(goal):
                self.logger.warning(f'No reactions produce metabolite "{goal}".')
                continue
            if goal not in paintings:
                paintings[goal] = self.paint_producers(goal, commons, config=config)
            if all(f.is_possible(path) for f in filters):
                heapq.heappush(queue, (queue_key(path, paintings), next(counter), path))

        proc_count = 0
        kept_count = 0
        while queue:
            _, _, path = heapq.heappop(queue)
            if path.is_complete():
                # A complete path that fails a filter dies here.
                if all(f.is_good(path) for f in filters):
                    self.logger.info(f"Pathway of length {len(path)} found to {path.goal}.")
                    return path
            else:
                terminus = path.last.output
                painting = paintings[path.goal]
                for successor in self.get_successors(terminus):
                    if path.contains(successor):
                        continue
                    for output in successor.get_outputs(terminus):
                        distance = painting.get(output.metabolite, max_len)
                        if distance + len(path) < max_len:
                            new_path = path.clone().add(successor, output)
                            if all(f.is_possible(new_path) for f in filters):
                                heapq.heappush(
                                    queue,
                                    (queue_key(new_path, paintings), next(counter), new_path),
                                )
                    kept_count += 1
            proc_count += 1
            if proc_count % PROGRESS_INTERVAL == 0:
                self.logger.info(
                    f"{proc_count} partial paths processed, {kept_count} kept.  Queue size = {len(queue)}."
                )

        self.logger.warning("No pathway found.")
        return None

    # Import

    def import_sbml(self, source):
        """
        Add the reactions of an SBML model to this model.

        Only reactions whose BiGG ID (the SBML ID without its ``R_`` prefix)
        is not already present are added. No display nodes are created.

        Args:
            source (cobra.Model or str): A cobra model or the path of an SBML file.

        Returns:
            int: The number of reactions added.
        """
        if isinstance(source, (str, os.PathLike)):
            self.logger.info(f"Reading SBML model from {source}.")
            source = cobra.io.read_sbml_model(str(source))

        new_count = 0
        for sbml_reaction in source.reactions:
            bigg_id = sbml_reaction.id
            if bigg_id.startswith("R_"):
                bigg_id = bigg_id[2:]
            if bigg_id in self._bigg_reactions:
                continue
            aliases = set()
            for gene in sbml_reaction.genes:
                aliases.add(gene.id[2:] if gene.id.startswith("G_") else gene.id)
                aliases.add(gene.name)
            metabolites = [
                Stoich(_clean_coefficient(coefficient), metabolite.id)
                for metabolite, coefficient in sbml_reaction.metabolites.items()
            ]
            reaction = Reaction(
                self._next_id(),
                bigg_id,
                name=sbml_reaction.name or bigg_id,
                reversible=sbml_reaction.reversibility,
                rule=sbml_reaction.gene_reaction_rule,
                aliases=aliases,
                metabolites=metabolites,
            )
            self._register_reaction(reaction)
            new_count += 1
        self.logger.info(f"{new_count} new reactions found.")
        return new_count


def _clean_coefficient(value):
    value = float(value)
    return int(value) if value.is_integer() else value
