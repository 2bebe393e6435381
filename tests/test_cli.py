"""Tests for the metapath command line."""

import json
import logging

import pandas as pd
import pytest

from metapathpy.cli import build_parser, main


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def read_tsv(path):
    return pd.read_csv(path, sep="\t", keep_default_na=False)


def test_parser():
    args = build_parser().parse_args(
        ["pathway", "map.json", "aliases.tsv", "out", "A", "C", "E", "-A", "B", "-A", "D"]
    )
    assert args.command == "pathway"
    assert args.outputs == ["C", "E"]
    assert args.avoid == ["B", "D"]
    assert args.filter == "none"


def test_pathway_command(tmp_path, map_file, alias_file):
    outdir = tmp_path / "out"
    saved = tmp_path / "path.json"
    status = main(
        ["pathway", map_file, alias_file, str(outdir), "A", "C", "E", "--save", str(saved)]
    )
    assert status == 0
    steps = read_tsv(outdir / "pathway.tsv")
    assert steps["reaction"].tolist() == ["R1", "R2", "R6"]
    assert read_tsv(outdir / "inputs.tsv")["metabolite"].tolist() == ["h_c", "atp_c"]
    assert read_tsv(outdir / "triggers.tsv")["gene"].tolist() == ["g1", "g2", "g3", "g9"]
    assert (outdir / "branches.tsv").exists()
    assert json.loads(saved.read_text())["goal"] == "E"


def test_pathway_with_filter(tmp_path, map_file, alias_file):
    outdir = tmp_path / "out"
    status = main(
        ["pathway", map_file, alias_file, str(outdir), "A", "C", "--filter", "avoid", "-A", "B"]
    )
    assert status == 0
    assert read_tsv(outdir / "pathway.tsv")["reaction"].tolist() == ["R4", "R5"]


def test_pathway_loop(tmp_path, map_file, alias_file):
    outdir = tmp_path / "out"
    assert main(["pathway", map_file, alias_file, str(outdir), "X", "Y", "--loop"]) == 0
    steps = read_tsv(outdir / "pathway.tsv")
    assert steps["output"].tolist() == ["X"]


def test_pathway_from_saved(tmp_path, map_file, alias_file):
    saved = tmp_path / "path.json"
    assert main(["pathway", map_file, alias_file, str(tmp_path / "one"), "A", "C", "--save", str(saved)]) == 0
    outdir = tmp_path / "two"
    assert main(["pathway", map_file, alias_file, str(outdir), "A", "E", "--path", str(saved)]) == 0
    assert read_tsv(outdir / "pathway.tsv")["reaction"].tolist() == ["R1", "R2", "R6"]


def test_saved_pathway_loops_to_its_own_start(tmp_path, map_file, alias_file):
    saved = tmp_path / "path.json"
    assert main(["pathway", map_file, alias_file, str(tmp_path / "one"), "X", "Y", "--save", str(saved)]) == 0
    outdir = tmp_path / "two"
    # The positional input is ignored when a saved pathway is given
    status = main(["pathway", map_file, alias_file, str(outdir), "A", "Y", "--path", str(saved), "--loop"])
    assert status == 0
    steps = read_tsv(outdir / "pathway.tsv")
    assert steps["reaction"].tolist() == ["R3"]
    assert steps["output"].tolist() == ["X"]


def test_loop_without_origin(tmp_path, map_file, alias_file):
    saved = tmp_path / "path.json"
    saved.write_text(
        json.dumps({"goal": "Y", "elements": [{"reaction": "R3", "output": "Y", "reversed": False}]})
    )
    args = ["pathway", map_file, alias_file, str(tmp_path / "out"), "X", "Y", "--path", str(saved)]
    assert main(args + ["--loop"]) == 1
    assert main(args + ["--loop", "--origin", "X"]) == 0


def test_empty_saved_pathway(tmp_path, map_file, alias_file):
    saved = tmp_path / "path.json"
    saved.write_text(json.dumps({"goal": "C", "start": "A", "elements": []}))
    status = main(["pathway", map_file, alias_file, str(tmp_path / "out"), "A", "C", "--path", str(saved)])
    assert status == 1


def test_no_pathway(tmp_path, map_file, alias_file):
    assert main(["pathway", map_file, alias_file, str(tmp_path / "out"), "C", "A"]) == 1


def test_bad_filter_parameters(tmp_path, map_file, alias_file):
    status = main(
        ["pathway", map_file, alias_file, str(tmp_path / "out"), "A", "C", "--filter", "reactions"]
    )
    assert status == 1


def test_flow_modifiers(tmp_path, map_file, alias_file):
    flow = tmp_path / "flow.tsv"
    flow.write_text("type\tgenes\nsuppress\tg1\n")
    outdir = tmp_path / "out"
    status = main(["pathway", map_file, alias_file, str(outdir), "A", "C", "--flow", str(flow)])
    assert status == 0
    assert read_tsv(outdir / "pathway.tsv")["reaction"].tolist() == ["R4", "R5"]


def test_distance_command(tmp_path, map_file, alias_file):
    target = tmp_path / "distance.tsv"
    assert main(["distance", map_file, alias_file, "C", "-o", str(target)]) == 0
    frame = read_tsv(target)
    assert frame["metabolite"].tolist() == ["C", "B", "D", "A"]
    assert main(["distance", map_file, alias_file, "A"]) == 1


def test_reactions_command(tmp_path, map_file, alias_file):
    target = tmp_path / "orphans.tsv"
    assert main(["reactions", map_file, alias_file, "--type", "orphan", "-o", str(target)]) == 0
    assert read_tsv(target)["reaction_id"].tolist() == ["R4", "R6", "R7"]
    target = tmp_path / "trigger.tsv"
    assert main(
        ["reactions", map_file, alias_file, "--type", "trigger", "--gene", "geneA", "-o", str(target)]
    ) == 0
    assert read_tsv(target)["reaction_id"].tolist() == ["R1"]
    assert main(["reactions", map_file, alias_file, "--type", "product"]) == 1


def test_report_commands(tmp_path, map_file, alias_file):
    successors = tmp_path / "successors.tsv"
    assert main(["successors", map_file, alias_file, "-o", str(successors)]) == 0
    assert read_tsv(successors)["compound"].tolist() == ["A", "B"]
    compounds = tmp_path / "compounds.tsv"
    assert main(["compounds", map_file, alias_file, "-o", str(compounds)]) == 0
    assert "alpha" in read_tsv(compounds)["name"].tolist()


def test_hubs_command(tmp_path, map_file, alias_file):
    checkpoint = tmp_path / "hubs.pkl"
    target = tmp_path / "hubs.tsv"
    args = ["hubs", map_file, alias_file, "-q", "--checkpoint", str(checkpoint), "-o", str(target)]
    assert main(args) == 0
    assert checkpoint.exists()
    first = read_tsv(target)
    assert main(args) == 0
    assert read_tsv(target).equals(first)


def test_missing_input_file(tmp_path, alias_file):
    assert main(["successors", str(tmp_path / "missing.json"), alias_file]) == 1
