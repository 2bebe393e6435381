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
Command-Line Interface for MetaPathPy.

Every sub-command loads a model from a map JSON file and a gene alias table,
optionally adds SBML reactions and flow modifiers, and then runs one query.

Sub-commands:
    - pathway: Find a pathway through one or more metabolites.
    - distance: Paint the model with distances to a target metabolite.
    - successors: Count the successor reactions of each metabolite.
    - compounds: List compounds with their connection counts.
    - reactions: List reactions by product, consumer, trigger or orphan status.
    - hubs: Rank compounds by connectivity in the all-pairs path map.
"""

import argparse
import logging
import os
import sys

from metapathpy.aliases import load_alias_map
from metapathpy.config import SearchConfig, load_config
from metapathpy.errors import ModelFormatError, ParseFailureException
from metapathpy.filters import FilterParms, FilterType, create_filter
from metapathpy.log import setup_logger
from metapathpy.metamodel import MetaModel
from metapathpy.modifiers import ModifierList
from metapathpy.path_map import ModelPathMap
from metapathpy.pathway import load_pathway, save_pathway
from metapathpy import reports

logger = logging.getLogger("metapath")

REACTION_QUERIES = ["all", "product", "consumer", "trigger", "orphan"]


def load_model(args):
    """
    Build the model described by the common command-line options.

    Raises:
        ModelFormatError: If an input file cannot be read.
        ParseFailureException: If a tuning value or modifier is invalid.
    """
    config = load_config(args.config) if args.config else SearchConfig()
    config = config.update(max_successors=args.common, max_path_len=args.maxLen)

    alias_map = load_alias_map(args.alias_file)
    model = MetaModel.load(args.map_file, alias_map, config=config)
    logger.info(
        f"{len(model.all_reactions())} reactions loaded, {model.features_covered()} features covered."
    )
    if args.sbml:
        model.import_sbml(args.sbml)
    if args.flow:
        ModifierList.load(args.flow).apply(model)
    return model


def emit(frame, output_file):
    """Write a report to a file, or to standard output if no file is given."""
    if output_file:
        reports.write_report(frame, output_file)
    else:
        frame.to_csv(sys.stdout, sep="\t", index=False)


def run_pathway(args, model):
    parms = FilterParms(model, include=args.include or [], avoid=args.avoid or [])
    path_filter = create_filter(FilterType.parse(args.filter), parms)

    outputs = list(args.outputs)
    if args.path:
        path = load_pathway(args.path, model)
        logger.info(f"Pathway of length {len(path)} loaded from {args.path}.")
    else:
        target = outputs.pop(0)
        logger.info(f"Computing pathway from {args.input} to {target}.")
        path = model.get_pathway(args.input, target, path_filter)

    for output in outputs:
        if path is None:
            break
        logger.info(f"Extending pathway to {output}.")
        path = model.extend_pathway(path, output, path_filter)

    if path is not None and args.loop:
        origin = args.origin or path.start
        if origin is None:
            raise ParseFailureException("A --origin is required to loop a pathway with no start.")
        logger.info(f"Looping pathway back to {origin}.")
        path = model.loop_pathway(path, origin, path_filter)

    if path is None:
        logger.error("No path found.")
        return 1

    os.makedirs(args.outdir, exist_ok=True)
    reports.write_report(reports.pathway_report(path), os.path.join(args.outdir, "pathway.tsv"))
    reports.write_report(
        reports.input_report(path, path.start or args.input),
        os.path.join(args.outdir, "inputs.tsv"),
    )
    reports.write_report(
        reports.trigger_report(path, model.alias_map), os.path.join(args.outdir, "triggers.tsv")
    )
    reports.write_report(
        reports.branch_report(path, model, model.get_commons()),
        os.path.join(args.outdir, "branches.tsv"),
    )
    if args.save:
        save_pathway(path, args.save)
        logger.info(f"Pathway saved to {args.save}.")
    return 0


def run_distance(args, model):
    if not model.get_producers(args.target):
        logger.error(f'No reactions produce metabolite "{args.target}".')
        return 1
    painting = model.paint_producers(args.target, model.get_commons())
    logger.info(f"{len(painting)} compounds can reach {args.target}.")
    emit(reports.distance_report(painting), args.output)
    return 0


def run_successors(args, model):
    emit(reports.successor_report(model), args.output)
    return 0


def run_compounds(args, model):
    emit(reports.compound_report(model), args.output)
    return 0


def run_reactions(args, model):
    if args.type in ("product", "consumer") and not args.compound:
        raise ParseFailureException(f"A --compound is required for a {args.type} query.")
    if args.type == "trigger" and not args.gene:
        raise ParseFailureException("A --gene is required for a trigger query.")

    logger.info(f"Searching model using {args.type} query.")
    if args.type == "all":
        reactions = model.all_reactions()
    elif args.type == "product":
        reactions = model.get_producers(args.compound)
    elif args.type == "consumer":
        reactions = model.get_successors(args.compound)
    elif args.type == "trigger":
        reactions = model.get_triggered_reactions(args.gene)
    else:
        reactions = model.orphan_reactions()

    if not reactions:
        logger.error("No results returned from query.")
        return 1
    emit(reports.reaction_report(reactions), args.output)
    return 0


def run_hubs(args, model):
    path_map = ModelPathMap.build(model, checkpoint=args.checkpoint, show_progress=not args.quiet)
    emit(reports.score_report(path_map, args.limit), args.output)
    return 0


COMMANDS = {
    "pathway": run_pathway,
    "distance": run_distance,
    "successors": run_successors,
    "compounds": run_compounds,
    "reactions": run_reactions,
    "hubs": run_hubs,
}


def build_parser():
    """Create the argument parser for all sub-commands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("map_file", help="Path to the map JSON file")
    common.add_argument("alias_file", help="Path to the gene alias table (TSV or JSON)")
    common.add_argument("--sbml", help="SBML model whose reactions are added to the map")
    common.add_argument("--flow", help="Tab-separated flow modifier file")
    common.add_argument("--config", help="YAML file with search settings")
    common.add_argument(
        "--common", type=int, help="Successor count above which a compound is common"
    )
    common.add_argument("--maxLen", type=int, help="Maximum pathway length")
    common.add_argument("-v", "--verbose", action="store_true", help="Show debug messages")
    common.add_argument("--log", help="Write a debug log to this file")

    report = argparse.ArgumentParser(add_help=False)
    report.add_argument("-o", "--output", help="Report file (default: standard output)")

    parser = argparse.ArgumentParser(
        prog="metapath", description="MetaPathPy: Find pathways through metabolic models"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pathway = subparsers.add_parser(
        "pathway", parents=[common], help="Find a pathway between metabolites"
    )
    pathway.add_argument("outdir", help="Directory for the pathway reports")
    pathway.add_argument("input", help="BiGG ID of the starting metabolite")
    pathway.add_argument("outputs", nargs="+", help="BiGG IDs of the metabolites to reach, in order")
    pathway.add_argument(
        "--filter",
        default="none",
        choices=[t.value for t in FilterType],
        help="Type of pathway filter",
    )
    pathway.add_argument(
        "-I", "--include", action="append", help="Reaction the pathway must use (REACTIONS filter)"
    )
    pathway.add_argument(
        "-A", "--avoid", action="append", help="Metabolite the pathway must avoid (AVOID filter)"
    )
    pathway.add_argument("--loop", action="store_true", help="Loop the pathway back to its origin")
    pathway.add_argument("--origin", help="Compound to loop back to (default: the pathway start)")
    pathway.add_argument("--path", help="Saved pathway to extend instead of starting fresh")
    pathway.add_argument("--save", help="Save the resulting pathway as JSON")

    distance = subparsers.add_parser(
        "distance", parents=[common, report], help="Paint distances to a metabolite"
    )
    distance.add_argument("target", help="BiGG ID of the target metabolite")

    subparsers.add_parser(
        "successors", parents=[common, report], help="Count successor reactions"
    )
    subparsers.add_parser("compounds", parents=[common, report], help="List compounds")

    reactions = subparsers.add_parser(
        "reactions", parents=[common, report], help="List reactions matching a query"
    )
    reactions.add_argument("--type", default="all", choices=REACTION_QUERIES, help="Query type")
    reactions.add_argument("--compound", help="Metabolite for product and consumer queries")
    reactions.add_argument("--gene", help="Gene (fid, name or BiGG ID) for trigger queries")

    hubs = subparsers.add_parser(
        "hubs", parents=[common, report], help="Rank compounds by pathway connectivity"
    )
    hubs.add_argument("--checkpoint", help="Pickle file caching the path map")
    hubs.add_argument("--limit", type=int, help="Number of compounds to list")
    hubs.add_argument("-q", "--quiet", action="store_true", help="Hide the progress bar")

    return parser


def main(argv=None):
    """
    Run the command line.

    Returns:
        int: 0 on success, 1 on error or when the query has no answer.
    """
    args = build_parser().parse_args(argv)
    setup_logger(verbose=args.verbose, log_file=args.log)
    try:
        model = load_model(args)
        return COMMANDS[args.command](args, model)
    except (ModelFormatError, ParseFailureException, ValueError, KeyError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
