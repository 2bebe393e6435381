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
Flow Modifiers for MetaPathPy.

A flow modifier forces the traversal direction of a reaction, regardless of
its chemistry. Each modifier identifies its reaction by the set of genes in
the reaction's rule, so ``"b0001 b0002"`` and ``"b0002 b0001"`` name the same
reaction.

Modifier files are tab-separated with a header row ``type<TAB>genes``. The
type is ``suppress`` or ``forward`` and the genes are separated by spaces.

Classes:
    - FlowModifier: Base class.
    - ReactionSuppressModifier: Turns a reaction off entirely.
    - ForwardOnlyModifier: Allows only forward traversal.
    - ModifierList: A set of modifiers that can be loaded, saved and applied.
"""

import logging
import os

import pandas as pd

from metapathpy.errors import ModelFormatError, ParseFailureException
from metapathpy.reaction import ActiveDirections


class FlowModifier:
    """
    Base class for flow modifiers.

    Attributes:
        genes (frozenset): Gene tokens identifying the target reaction.
    """

    TYPE = None

    def __init__(self, genes):
        if isinstance(genes, str):
            genes = genes.split()
        self.genes = frozenset(genes)
        if not self.genes:
            raise ParseFailureException(f"No genes specified for {self.TYPE} modifier.")

    def matches(self, reaction):
        return reaction.triggers == self.genes

    def update(self, reaction):
        """Apply this modifier to a matching reaction."""
        raise NotImplementedError

    def to_json(self):
        return {"type": self.TYPE, "genes": " ".join(sorted(self.genes))}

    def __eq__(self, other):
        if not isinstance(other, FlowModifier):
            return NotImplemented
        return self.TYPE == other.TYPE and self.genes == other.genes

    def __hash__(self):
        return hash((self.TYPE, self.genes))

    def __repr__(self):
        return f"{type(self).__name__}({' '.join(sorted(self.genes))!r})"


class ReactionSuppressModifier(FlowModifier):
    """Prevent a reaction from being traversed in either direction."""

    TYPE = "suppress"

    def update(self, reaction):
        reaction.set_active(ActiveDirections.NEITHER)


class ForwardOnlyModifier(FlowModifier):
    """Allow a reaction to be traversed only forward."""

    TYPE = "forward"

    def update(self, reaction):
        # A suppressed reaction stays suppressed
        if reaction.active is not ActiveDirections.NEITHER:
            reaction.set_active(ActiveDirections.FORWARD)


MODIFIER_TYPES = {
    ReactionSuppressModifier.TYPE: ReactionSuppressModifier,
    ForwardOnlyModifier.TYPE: ForwardOnlyModifier,
}


def create_modifier(type_name, genes):
    """
    Create a modifier from its type name and gene list.

    Raises:
        ParseFailureException: If the type is unknown.
    """
    key = str(type_name).strip().lower()
    if key not in MODIFIER_TYPES:
        raise ParseFailureException(f"Invalid flow modifier type: {type_name}")
    return MODIFIER_TYPES[key](genes)


class ModifierList:
    """
    A collection of flow modifiers. Order does not matter for equality.
    """

    def __init__(self, modifiers=()):
        self.logger = logging.getLogger("ModifierList")
        self.modifiers = []
        for modifier in modifiers:
            self.add(modifier)

    def add(self, modifier):
        if modifier not in self.modifiers:
            self.modifiers.append(modifier)

    @classmethod
    def load(cls, modifier_file):
        """
        Read a modifier table.

        Args:
            modifier_file (str): Tab-separated file with ``type`` and
                ``genes`` columns.

        Returns:
            ModifierList: The modifiers in the file.

        Raises:
            ModelFormatError: If the file is unreadable or lacks the columns.
            ParseFailureException: If a modifier type is invalid.
        """
        if not os.path.exists(modifier_file):
            raise ModelFormatError(f"Flow modifier file not found: {modifier_file}")
        try:
            table = pd.read_csv(modifier_file, sep="\t", dtype=str, comment="#")
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ModelFormatError(f"Error reading flow modifier file {modifier_file}: {e}") from e

        missing = {"type", "genes"} - set(table.columns)
        if missing:
            raise ModelFormatError(
                f"Flow modifier file {modifier_file} is missing columns: {sorted(missing)}"
            )

        table = table.dropna(subset=["type", "genes"])
        return cls(create_modifier(row.type, row.genes) for row in table.itertuples())

    def save(self, modifier_file):
        """Write this list as a modifier table."""
        table = pd.DataFrame(self.to_json(), columns=["type", "genes"])
        table.to_csv(modifier_file, sep="\t", index=False)

    def to_json(self):
        return [m.to_json() for m in self.modifiers]

    @classmethod
    def from_json(cls, data):
        return cls(create_modifier(item["type"], item["genes"]) for item in data)

    def apply(self, model):
        """
        Apply the modifiers to the reactions of a model.

        Args:
            model (MetaModel): Model to update.

        Returns:
            int: The number of reactions that were modified.
        """
        count = 0
        for reaction in model.all_reactions():
            hits = [m for m in self.modifiers if m.matches(reaction)]
            for modifier in hits:
                modifier.update(reaction)
            if hits:
                count += 1
        self.logger.info(f"{count} reactions modified by {len(self.modifiers)} flow modifiers.")
        return count

    def __len__(self):
        return len(self.modifiers)

    def __iter__(self):
        return iter(self.modifiers)

    def __eq__(self, other):
        if not isinstance(other, ModifierList):
            return NotImplemented
        return set(self.modifiers) == set(other.modifiers)

    __hash__ = None
