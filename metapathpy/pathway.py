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
Pathways for MetaPathPy.

A pathway is an ordered list of reaction steps. Each step names the reaction,
the direction it is traveled and the metabolite it yields; the yield of one
step is consumed by the next, and no reaction occurs twice.

Classes:
    - PathwayElement: One step of a pathway.
    - Pathway: An ordered sequence of pathway elements with a goal compound.

Functions:
    - save_pathway: Write a pathway to a JSON file.
    - load_pathway: Read a pathway from a JSON file against a model.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional

from metapathpy.errors import ModelFormatError
from metapathpy.reaction import Reaction, Stoich


@dataclass(frozen=True)
class PathwayElement:
    """
    A single reaction step of a pathway.

    Attributes:
        reaction (Reaction): The reaction traversed.
        output (str): BiGG ID of the metabolite this step yields.
        reversed (bool): TRUE if the reaction is traveled backward.
    """

    reaction: Reaction
    output: str
    reversed: bool = False

    @classmethod
    def from_stoich(cls, reaction, node: Stoich):
        # Yielding a reactant means the reaction runs backward
        return cls(reaction, node.metabolite, not node.is_product)

    def reverse(self, output):
        """
        Return this step traveled in the opposite direction.

        Raises:
            ValueError: If the reaction is not reversible.
        """
        if not self.reaction.reversible:
            raise ValueError(
                f"Attempt to reverse irreversible reaction {self.reaction.bigg_id}."
            )
        return PathwayElement(self.reaction, output, not self.reversed)

    @property
    def inputs(self):
        """The set of metabolites consumed by this step."""
        side = self.reaction.products() if self.reversed else self.reaction.reactants()
        return {s.metabolite for s in side}

    def sort_key(self):
        return (self.reaction.bigg_id, self.output, self.reversed)

    def to_json(self):
        return {
            "reaction": self.reaction.bigg_id,
            "output": self.output,
            "reversed": self.reversed,
        }

    def __str__(self):
        return f"-({self.reaction.bigg_id}){self.output}"


class Pathway:
    """
    An ordered route through the reaction network.

    Pathways sort shortest first, with ties broken element by element on
    (reaction BiGG ID, output, reversed).

    Attributes:
        goal (str): The compound the search is trying to reach.
        start (str): The compound the pathway starts from, when known.
    """

    def __init__(self, reaction=None, node=None, goal=None, start=None):
        self._elements: List[PathwayElement] = []
        self.goal = goal
        self.start = start
        if reaction is not None:
            self.add(reaction, node)

    def add(self, reaction, node: Stoich):
        """
        Append a step to this pathway.

        The caller is responsible for only adding reactions that consume the
        current terminus.

        Args:
            reaction (Reaction): Reaction to add.
            node (Stoich): Stoichiometric entry of the desired output.

        Returns:
            Pathway: This pathway, for chaining.
        """
        self._elements.append(PathwayElement.from_stoich(reaction, node))
        return self

    def contains(self, reaction):
        return any(e.reaction == reaction for e in self._elements)

    def clone(self):
        """Return a copy that can be extended without touching this one."""
        result = Pathway(goal=self.goal, start=self.start)
        result._elements = list(self._elements)
        return result

    def is_reversible(self):
        return all(e.reaction.reversible for e in self._elements)

    def reverse(self, output):
        """
        Build the mirror image of this pathway.

        Args:
            output (str): Final output of the reversed pathway, normally the
                compound this pathway started from.

        Returns:
            Pathway: A pathway from this pathway's terminus back to ``output``.

        Raises:
            ValueError: If any reaction in the pathway is not reversible.
        """
        n = len(self._elements)
        # Step i of the reversed path yields the input of step i here
        outputs = [output] + [e.output for e in self._elements[:-1]]
        result = Pathway(start=self.last.output if n else None)
        for i in range(n - 1, -1, -1):
            result._elements.append(self._elements[i].reverse(outputs[i]))
        return result

    @property
    def first(self) -> Optional[PathwayElement]:
        return self._elements[0] if self._elements else None

    @property
    def last(self) -> Optional[PathwayElement]:
        return self._elements[-1] if self._elements else None

    @property
    def elements(self):
        return tuple(self._elements)

    def __iter__(self):
        return iter(self._elements)

    def __len__(self):
        return len(self._elements)

    def __getitem__(self, i):
        return self._elements[i]

    def includes_all(self, includes):
        """Return TRUE if every reaction BiGG ID in ``includes`` is used."""
        found = {e.reaction.bigg_id for e in self._elements}
        return all(r in found for r in includes)

    def is_complete(self):
        return bool(self._elements) and self._elements[-1].output == self.goal

    def get_branches(self, model, commons=None) -> Dict[str, List[Reaction]]:
        """
        Find the side reactions for the intermediate compounds of this pathway.

        Args:
            model (MetaModel): Model supplying the successor reactions.
            commons (set, optional): Compounds to leave out of the report.

        Returns:
            dict: Intermediate compound ID -> sorted list of reactions that
            could consume it but are not part of this pathway.
        """
        used = {e.reaction for e in self._elements}
        result = {}
        for element in self._elements[:-1]:
            compound = element.output
            if commons and compound in commons:
                continue
            branches = [r for r in model.get_successors(compound) if r not in used]
            if branches:
                merged = set(result.get(compound, [])) | set(branches)
                result[compound] = sorted(merged)
        return result

    def sort_key(self):
        return (len(self._elements), tuple(e.sort_key() for e in self._elements))

    def __lt__(self, other):
        if not isinstance(other, Pathway):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __eq__(self, other):
        if not isinstance(other, Pathway):
            return NotImplemented
        return self._elements == other._elements

    __hash__ = None

    def __str__(self):
        return "path[" + "-->".join(str(e) for e in self._elements) + "]"

    __repr__ = __str__

    # Save format

    def to_json(self):
        return {
            "start": self.start,
            "goal": self.goal,
            "elements": [e.to_json() for e in self._elements],
        }

    @classmethod
    def from_json(cls, data, model):
        """
        Rebuild a saved pathway against a model.

        Args:
            data (dict): Document produced by ``to_json``.
            model (MetaModel): Model holding the pathway's reactions.

        Returns:
            Pathway: The reconstructed pathway.

        Raises:
            ValueError: If a reaction is unknown or a step is inconsistent
                with its reaction.
        """
        result = cls(goal=data.get("goal"), start=data.get("start"))
        for item in data.get("elements", []):
            bigg_id = item["reaction"]
            output = item["output"]
            reversed_flag = bool(item.get("reversed", False))
            reaction = model.get_reaction(bigg_id)
            if reaction is None:
                raise ValueError(f"Reaction {bigg_id} not found in model.")
            if not reaction.participates(output):
                raise ValueError(f"Compound {output} is not part of reaction {bigg_id}.")
            if reaction.is_product(output) == reversed_flag:
                raise ValueError(
                    f"Direction of reaction {bigg_id} is inconsistent with output {output}."
                )
            if reversed_flag and not reaction.reversible:
                raise ValueError(f"Reaction {bigg_id} is not reversible.")
            result._elements.append(PathwayElement(reaction, output, reversed_flag))
        return result


def save_pathway(path, pathway_file):
    """Write a pathway to a JSON file."""
    with open(pathway_file, "w") as f:
        json.dump(path.to_json(), f, indent=2)


def load_pathway(pathway_file, model):
    """
    Load a saved pathway.

    Raises:
        ModelFormatError: If the file cannot be read or is not JSON.
        ValueError: If the pathway does not fit the model.
    """
    try:
        with open(pathway_file, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ModelFormatError(f"Error loading pathway file {pathway_file}: {e}") from e
    return Pathway.from_json(data, model)
