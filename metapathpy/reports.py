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
Report Tables for MetaPathPy.

Every report is returned as a pandas DataFrame so that callers can filter it,
print it or hand it to ``write_report``.

Functions:
    - pathway_report: One row per pathway step.
    - input_report: Ancillary metabolites a pathway consumes.
    - trigger_report: Genes that trigger the reactions of a pathway.
    - branch_report: Side reactions leaving a pathway's intermediates.
    - distance_report: A distance painting as a sorted table.
    - successor_report: Successor counts for every drawn metabolite.
    - compound_report: Names, connection counts and common flags of compounds.
    - reaction_report: A list of reactions.
    - score_report: Connectivity scores from a path map.
    - write_report: Save a report as a tab-separated file.
"""

import logging
import os
from collections import Counter

import pandas as pd


def pathway_report(path):
    """
    Tabulate the steps of a pathway.

    Args:
        path (Pathway): The pathway to report.

    Returns:
        pd.DataFrame: Columns reaction, reaction_name, rule, output, formula.
    """
    rows = [
        {
            "reaction": e.reaction.bigg_id,
            "reaction_name": e.reaction.name,
            "rule": e.reaction.rule,
            "output": e.output,
            "formula": e.reaction.formula(),
        }
        for e in path
    ]
    return pd.DataFrame(rows, columns=["reaction", "reaction_name", "rule", "output", "formula"])


def input_report(path, start=None):
    """
    Count the ancillary metabolites a pathway consumes.

    The main-line input of each step (the previous step's output, or the
    pathway start for the first step) is left out.

    Args:
        path (Pathway): The pathway to analyze.
        start (str, optional): Starting compound. Defaults to ``path.start``.

    Returns:
        pd.DataFrame: Columns metabolite, needed, sorted by need.
    """
    needed = Counter()
    previous = start if start is not None else path.start
    for element in path:
        reaction = element.reaction
        side = reaction.products() if element.reversed else reaction.reactants()
        for stoich in side:
            if stoich.metabolite != previous:
                needed[stoich.metabolite] += stoich.coeff
        previous = element.output
    rows = sorted(needed.items(), key=lambda x: (-x[1], x[0]))
    return pd.DataFrame(rows, columns=["metabolite", "needed"])


def trigger_report(path, alias_map):
    """
    List the genes that trigger a pathway's reactions with their features.

    Genes that resolve to no feature get one row with a blank fid.
    """
    genes = set()
    for element in path:
        genes |= element.reaction.triggers
    rows = []
    for gene in sorted(genes):
        fids = sorted(alias_map.get(gene, ()))
        if not fids:
            rows.append({"gene": gene, "fid": ""})
        for fid in fids:
            rows.append({"gene": gene, "fid": fid})
    return pd.DataFrame(rows, columns=["gene", "fid"])


def branch_report(path, model, commons=None):
    rows = []
    for compound, reactions in sorted(path.get_branches(model, commons).items()):
        for reaction in reactions:
            rows.append(
                {"compound": compound, "reaction": reaction.bigg_id, "formula": reaction.formula()}
            )
    return pd.DataFrame(rows, columns=["compound", "reaction", "formula"])


def distance_report(painting):
    """Sort a painting by distance, then metabolite ID."""
    rows = sorted(painting.items(), key=lambda x: (x[1], x[0]))
    return pd.DataFrame(rows, columns=["metabolite", "distance"])


def successor_report(model):
    """Successor counts of every drawn metabolite, most connected first."""
    rows = [(c, len(model.get_successors(c))) for c in model.metabolite_map()]
    rows.sort(key=lambda x: (-x[1], x[0]))
    logging.info(f"{len(rows)} metabolites found.")
    return pd.DataFrame(rows, columns=["compound", "successors"])


def compound_report(model, commons=None):
    """
    Describe every compound, alphabetically by name.

    Args:
        model (MetaModel): The model to report on.
        commons (set, optional): Common compounds. Defaults to the model's.

    Returns:
        pd.DataFrame: Columns bigg_id, name, successors, producers, common.
    """
    if commons is None:
        commons = model.get_commons()
    rows = []
    compound_map = model.compound_map()
    for name in sorted(compound_map):
        for compound in compound_map[name]:
            rows.append(
                {
                    "bigg_id": compound,
                    "name": name,
                    "successors": len(model.get_successors(compound)),
                    "producers": len(model.get_producers(compound)),
                    "common": "common" if compound in commons else "",
                }
            )
    return pd.DataFrame(rows, columns=["bigg_id", "name", "successors", "producers", "common"])


def reaction_report(reactions):
    rows = [
        {
            "reaction_id": r.bigg_id,
            "reversible": "Y" if r.reversible else "",
            "reaction_name": r.name,
            "rule": r.rule,
            "formula": r.formula(),
        }
        for r in reactions
    ]
    return pd.DataFrame(
        rows, columns=["reaction_id", "reversible", "reaction_name", "rule", "formula"]
    )


def score_report(path_map, limit=None):
    rows = path_map.get_scores()
    if limit is not None:
        rows = rows[:limit]
    return pd.DataFrame(rows, columns=["compound", "score"])


def write_report(frame, report_file):
    """
    Write a report as a tab-separated file, creating its directory if needed.

    Args:
        frame (pd.DataFrame): The report.
        report_file (str): Output path.
    """
    directory = os.path.dirname(report_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    frame.to_csv(report_file, sep="\t", index=False)
    logging.info(f"{len(frame)} rows written to {report_file}")
