"""Tests for reactions, stoichiometry and the direction overlay."""

import pytest

from metapathpy.nodes import Coordinate
from metapathpy.reaction import ActiveDirections, Reaction, Stoich, parse_rule_genes


def build(reversible=False):
    return Reaction(
        1,
        "TEST",
        name="test reaction",
        reversible=reversible,
        rule="g1 or (g2 and g3)",
        aliases=["g1", "geneOne", ""],
        metabolites=[Stoich(1, "c"), Stoich(-2, "a"), Stoich(-1, "b")],
    )


def test_stoich_ordering_and_display():
    entries = sorted([Stoich(1, "c"), Stoich(-1, "b"), Stoich(-2, "a")])
    assert [s.metabolite for s in entries] == ["a", "b", "c"]
    assert str(Stoich(-2, "a")) == "2*a"
    assert str(Stoich(1, "c")) == "c"
    assert Stoich(-2, "a").coeff == 2
    assert not Stoich(-2, "a").is_product


def test_rule_genes():
    assert parse_rule_genes("g1 or (g2 and g3)") == {"g1", "g2", "g3"}
    assert parse_rule_genes("") == frozenset()
    assert parse_rule_genes("   ") == frozenset()


def test_reaction_basics():
    reaction = build()
    assert reaction.triggers == {"g1", "g2", "g3"}
    assert reaction.aliases == {"g1", "geneOne"}
    assert reaction.gene_tokens == {"g1", "g2", "g3", "geneOne"}
    assert [s.metabolite for s in reaction.reactants()] == ["a", "b"]
    assert [s.metabolite for s in reaction.products()] == ["c"]
    assert reaction.formula() == "2*a + b --> c"
    assert build(reversible=True).formula() == "2*a + b <-> c"
    assert reaction.label_loc == Coordinate()
    assert repr(reaction) == "Reaction 1(test reaction)"


def test_identity_by_id():
    one = build()
    other = Reaction(1, "OTHER")
    assert one == other
    assert hash(one) == hash(other)
    assert Reaction(0, "Z") < one


def test_irreversible_traversal():
    reaction = build()
    assert [s.metabolite for s in reaction.get_outputs("a")] == ["c"]
    assert reaction.get_outputs("c") == []
    assert reaction.get_outputs("zz") == []
    assert [s.metabolite for s in reaction.get_inputs("c")] == ["a", "b"]
    assert reaction.get_inputs("a") == []
    assert reaction.consumes("b")
    assert not reaction.produces("b")
    assert reaction.produces("c")


def test_reversible_traversal():
    reaction = build(reversible=True)
    assert [s.metabolite for s in reaction.get_outputs("c")] == ["a", "b"]
    assert [s.metabolite for s in reaction.get_inputs("a")] == ["c"]
    assert reaction.consumes("c")
    assert reaction.produces("a")


def test_active_overlay():
    reaction = build(reversible=True)
    assert reaction.active is ActiveDirections.BOTH
    reaction.set_active(ActiveDirections.FORWARD)
    assert reaction.get_outputs("c") == []
    assert reaction.consumes("a")
    reaction.set_active(ActiveDirections.REVERSE)
    assert reaction.get_outputs("a") == []
    assert reaction.consumes("c")
    reaction.set_active(ActiveDirections.NEITHER)
    assert not reaction.consumes("a")
    assert not reaction.consumes("c")
    reaction.reset_active()
    assert reaction.active is ActiveDirections.BOTH


def test_irreversible_never_runs_backward():
    reaction = build()
    assert reaction.active is ActiveDirections.FORWARD
    reaction.set_active(ActiveDirections.BOTH)
    assert not reaction.reverse_allowed
    assert reaction.get_outputs("c") == []


def test_from_record(model):
    reaction = model.get_reaction("R1")
    assert reaction.id == 1
    assert reaction.name == "reaction R1"
    assert reaction.aliases == {"g1", "geneA"}
    assert reaction.label_loc == Coordinate(100.0, 200.0)
    assert reaction.segments == [(10, 12)]
    assert model.get_reaction("R2").formula() == "2*h_c + B --> C"
