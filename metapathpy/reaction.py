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
Reactions for MetaPathPy.

A reaction records its stoichiometry, its reversibility, the rule of genes
that trigger it and a few display details. After construction the only thing
that changes is the active-direction overlay set by flow modifiers.

Classes:
    - ActiveDirections: Directions in which a reaction may currently be traversed.
    - Stoich: One metabolite of a reaction with its signed coefficient.
    - Reaction: A metabolic reaction.

Functions:
    - parse_rule_genes: Extract the gene identifiers from a gene-reaction rule.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from cobra.core.gene import GPR

from metapathpy.errors import ModelFormatError
from metapathpy.nodes import Coordinate


class ActiveDirections(Enum):
    """Allowed traversal directions for a reaction."""

    FORWARD = "forward"
    REVERSE = "reverse"
    BOTH = "both"
    NEITHER = "neither"


@dataclass(frozen=True, order=True)
class Stoich:
    """
    A metabolite in a reaction. Negative coefficients are reactants, positive
    coefficients are products, so sorting puts reactants first.
    """

    coefficient: float
    metabolite: str

    @property
    def coeff(self):
        """The absolute value of the coefficient."""
        return abs(self.coefficient)

    @property
    def is_product(self):
        return self.coefficient > 0

    def __str__(self):
        if self.coeff == 1:
            return self.metabolite
        return f"{self.coeff}*{self.metabolite}"


def parse_rule_genes(rule: str) -> FrozenSet[str]:
    """
    Parse a gene-reaction rule and return the genes it mentions.

    Args:
        rule (str): Boolean rule such as ``"b0241 or (b0929 and b1377)"``.

    Returns:
        frozenset: The gene identifiers in the rule.

    Raises:
        ModelFormatError: If the rule cannot be parsed.
    """
    if not rule or not rule.strip():
        return frozenset()
    try:
        gpr = GPR.from_string(rule)
    except (SyntaxError, TypeError, ValueError) as e:
        raise ModelFormatError(f"Invalid gene-reaction rule: {rule!r}") from e
    return frozenset(gpr.genes)


class Reaction:
    """
    A reaction in a metabolic model.

    Two reactions are equal if they have the same internal ID, and reactions
    sort by internal ID.

    Attributes:
        id (int): Internal ID assigned by the model.
        bigg_id (str): BiGG identifier of the reaction.
        name (str): Descriptive name.
        reversible (bool): TRUE if the reaction is chemically reversible.
        rule (str): Gene-reaction rule.
        aliases (frozenset): Gene aliases from the reaction's gene list.
        triggers (frozenset): Gene identifiers named in the rule.
        metabolites (list): Stoich entries sorted reactants first.
        label_loc (Coordinate): Display location of the reaction label.
        segments (list): (from_node_id, to_node_id) display connections.
        active (ActiveDirections): Current traversal overlay.
    """

    def __init__(
        self,
        reaction_id: int,
        bigg_id: str,
        name: str = "<unknown>",
        reversible: bool = False,
        rule: str = "",
        aliases: Iterable[str] = (),
        metabolites: Iterable[Stoich] = (),
        label_loc: Optional[Coordinate] = None,
        segments: Iterable[Tuple[int, int]] = (),
    ):
        self.id = reaction_id
        self.bigg_id = bigg_id
        self.name = name
        self.reversible = reversible
        self.rule = rule
        self.aliases = frozenset(a for a in aliases if a and a.strip())
        self.triggers = parse_rule_genes(rule)
        self.metabolites: List[Stoich] = sorted(metabolites)
        self.label_loc = label_loc if label_loc is not None else Coordinate()
        self.segments = list(segments)
        self._coefficients = {s.metabolite: s.coefficient for s in self.metabolites}
        self.active = self.default_active()

    @classmethod
    def from_record(cls, record):
        """Build a reaction from an escher.ReactionRecord."""
        aliases = set()
        for bigg_id, name in record.genes:
            aliases.add(bigg_id)
            aliases.add(name)
        return cls(
            record.reaction_id,
            record.bigg_id,
            name=record.name,
            reversible=record.reversibility,
            rule=record.gene_reaction_rule,
            aliases=aliases,
            metabolites=[Stoich(c, m) for m, c in record.metabolites],
            label_loc=Coordinate(record.label_x, record.label_y),
            segments=record.segments,
        )

    # Direction overlay

    def default_active(self):
        return ActiveDirections.BOTH if self.reversible else ActiveDirections.FORWARD

    def set_active(self, direction: ActiveDirections):
        self.active = direction

    def reset_active(self):
        self.active = self.default_active()

    @property
    def forward_allowed(self):
        return self.active in (ActiveDirections.FORWARD, ActiveDirections.BOTH)

    @property
    def reverse_allowed(self):
        return self.reversible and self.active in (
            ActiveDirections.REVERSE,
            ActiveDirections.BOTH,
        )

    # Stoichiometry queries

    @property
    def gene_tokens(self):
        """All gene identifiers that can link this reaction to a feature."""
        return self.aliases | self.triggers

    def reactants(self):
        return [s for s in self.metabolites if not s.is_product]

    def products(self):
        return [s for s in self.metabolites if s.is_product]

    def participates(self, compound):
        return compound in self._coefficients

    def is_product(self, compound):
        return self._coefficients.get(compound, 0) > 0

    def get_outputs(self, compound) -> List[Stoich]:
        """
        Return the metabolites reached by consuming a compound in this reaction.

        A reactant leads to the products when forward traversal is allowed. A
        product leads back to the reactants when reverse traversal is allowed.
        Anything else (including a compound not in the reaction) yields an
        empty list.
        """
        coefficient = self._coefficients.get(compound, 0)
        if coefficient < 0 and self.forward_allowed:
            return self.products()
        if coefficient > 0 and self.reverse_allowed:
            return self.reactants()
        return []

    def get_inputs(self, compound) -> List[Stoich]:
        """
        Return the metabolites consumed when this reaction yields a compound.

        This is the mirror of get_outputs: a product is yielded from the
        reactants going forward, a reactant from the products going backward.
        """
        coefficient = self._coefficients.get(compound, 0)
        if coefficient > 0 and self.forward_allowed:
            return self.reactants()
        if coefficient < 0 and self.reverse_allowed:
            return self.products()
        return []

    def consumes(self, compound):
        return len(self.get_outputs(compound)) > 0

    def produces(self, compound):
        return len(self.get_inputs(compound)) > 0

    def formula(self):
        """Return the reaction formula, e.g. ``"a + 2*b --> c"``."""
        left = " + ".join(str(s) for s in self.reactants())
        right = " + ".join(str(s) for s in self.products())
        arrow = "<->" if self.reversible else "-->"
        return f"{left} {arrow} {right}".strip()

    # Identity

    def __eq__(self, other):
        if not isinstance(other, Reaction):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other):
        if not isinstance(other, Reaction):
            return NotImplemented
        return self.id < other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Reaction {self.id}({self.name})"
