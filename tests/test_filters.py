"""Tests for pathway filters and the filter factory."""

import pytest

from metapathpy.errors import ParseFailureException
from metapathpy.filters import (
    NONE,
    AvoidPathwayFilter,
    FilterParms,
    FilterType,
    IncludePathwayFilter,
    create_filter,
)
from metapathpy.pathway import Pathway
from metapathpy.reaction import Stoich


def test_avoid_filter(model):
    path_filter = AvoidPathwayFilter("B", model=model)
    via_b = Pathway(model.get_reaction("R1"), Stoich(1, "B"), goal="C")
    via_d = Pathway(model.get_reaction("R4"), Stoich(1, "D"), goal="C")
    assert not path_filter.is_possible(via_b)
    assert path_filter.is_possible(via_d)
    assert path_filter.is_good(via_b)
    # A prohibited compound earlier in the path still counts
    through_b = via_b.clone().add(model.get_reaction("R2"), Stoich(1, "C"))
    assert not path_filter.is_possible(through_b)


def test_avoid_unknown_compound(model):
    with pytest.raises(ParseFailureException):
        AvoidPathwayFilter("nothing_c", model=model)
    # Without a model there is nothing to check against
    AvoidPathwayFilter("nothing_c")


def test_include_filter(model):
    path_filter = IncludePathwayFilter(model, "R5")
    via_b = Pathway(model.get_reaction("R1"), Stoich(1, "B"), goal="C")
    assert path_filter.is_possible(via_b)
    assert not path_filter.is_good(via_b)
    via_d = Pathway(model.get_reaction("R4"), Stoich(1, "D")).add(
        model.get_reaction("R5"), Stoich(1, "C")
    )
    assert path_filter.is_good(via_d)
    with pytest.raises(ParseFailureException):
        IncludePathwayFilter(model, "R99")


def test_filter_type_parse():
    assert FilterType.parse("avoid") is FilterType.AVOID
    assert FilterType.parse("REACTIONS") is FilterType.REACTIONS
    with pytest.raises(ParseFailureException):
        FilterType.parse("sideways")


def test_create_filter(model):
    assert create_filter(FilterType.NONE, FilterParms(model)) is NONE
    avoid = create_filter(FilterType.AVOID, FilterParms(model, avoid=["B"]))
    assert isinstance(avoid, AvoidPathwayFilter)
    include = create_filter(FilterType.REACTIONS, FilterParms(model, include=["R5"]))
    assert isinstance(include, IncludePathwayFilter)
    with pytest.raises(ParseFailureException):
        create_filter(FilterType.AVOID, FilterParms(model))
    with pytest.raises(ParseFailureException):
        create_filter(FilterType.REACTIONS, FilterParms(model))
