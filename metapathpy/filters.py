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
Pathway Filters for MetaPathPy.

The basic search finds a path from compound A to compound B. A filter adds
ancillary criteria. The search asks ``is_possible`` of every partial path it
wants to queue and ``is_good`` of every path that reaches its goal; a path
must satisfy every filter supplied.

Classes:
    - PathwayFilter: Base class.
    - NoFilter: Accepts everything.
    - AvoidPathwayFilter: Rejects paths that pass through given compounds.
    - IncludePathwayFilter: Accepts only paths that use given reactions.
    - FilterParms: Parameter source for building a filter.
    - FilterType: Names of the filter kinds.

Functions:
    - create_filter: Build a filter of the requested type.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from metapathpy.errors import ParseFailureException


class PathwayFilter:
    """Base class for pathway filters."""

    def is_possible(self, path) -> bool:
        """Return FALSE to cut a partial pathway off as soon as it goes wrong."""
        raise NotImplementedError

    def is_good(self, path) -> bool:
        """Return FALSE to reject a pathway that has reached its goal."""
        raise NotImplementedError


class NoFilter(PathwayFilter):
    """A filter that allows everything."""

    def is_possible(self, path):
        return True

    def is_good(self, path):
        return True


NONE = NoFilter()


class AvoidPathwayFilter(PathwayFilter):
    """
    Reject any pathway that yields one of a set of compounds.

    Args:
        *compounds (str): BiGG IDs of the prohibited compounds.
        model (MetaModel, optional): If given, every compound must be known
            to the model.

    Raises:
        ParseFailureException: If a compound is not found in the model.
    """

    def __init__(self, *compounds, model=None):
        self.prohibited = frozenset(compounds)
        if model is not None:
            for compound in sorted(self.prohibited):
                if not model.has_compound(compound):
                    raise ParseFailureException(
                        f'Compound "{compound}" not found in model.'
                    )

    def is_possible(self, path):
        # Seeds may arrive with prohibited steps already inside them.
        return not any(e.output in self.prohibited for e in path)

    def is_good(self, path):
        return True


class IncludePathwayFilter(PathwayFilter):
    """
    Accept a pathway only if it uses every one of a set of reactions.

    Args:
        model (MetaModel): Model used to validate the reaction IDs.
        *reactions (str): BiGG IDs of the required reactions.

    Raises:
        ParseFailureException: If a reaction is not found in the model.
    """

    def __init__(self, model, *reactions):
        self.required = frozenset(reactions)
        for reaction_id in sorted(self.required):
            if model.get_reaction(reaction_id) is None:
                raise ParseFailureException(
                    f'Reaction "{reaction_id}" not found in model.'
                )

    def is_possible(self, path):
        # A required reaction may still be added later.
        return True

    def is_good(self, path):
        return path.includes_all(self.required)


@dataclass
class FilterParms:
    """Parameters from which a filter is built."""

    model: object
    include: List[str] = field(default_factory=list)
    avoid: List[str] = field(default_factory=list)


class FilterType(Enum):
    NONE = "none"
    AVOID = "avoid"
    REACTIONS = "reactions"

    @classmethod
    def parse(cls, name):
        try:
            return cls[name.upper()]
        except KeyError:
            choices = ", ".join(t.name for t in cls)
            raise ParseFailureException(
                f"Invalid filter type: {name}. Choose from {choices}."
            ) from None


def create_filter(filter_type: FilterType, parms: FilterParms) -> PathwayFilter:
    """
    Build the filter of the given type from a parameter source.

    Raises:
        ParseFailureException: If the parameters name unknown reactions or
            compounds, or the filter needs parameters that were not given.
    """
    if filter_type is FilterType.NONE:
        return NONE
    if filter_type is FilterType.AVOID:
        if not parms.avoid:
            raise ParseFailureException("AVOID filter requires at least one compound.")
        return AvoidPathwayFilter(*parms.avoid, model=parms.model)
    if filter_type is FilterType.REACTIONS:
        if not parms.include:
            raise ParseFailureException("REACTIONS filter requires at least one reaction.")
        return IncludePathwayFilter(parms.model, *parms.include)
    raise ParseFailureException(f"Unsupported filter type: {filter_type}")
