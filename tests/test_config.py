"""Tests for search settings and the YAML loader."""

import pytest

from metapathpy.config import DEFAULT_OPTIONS, SearchConfig, load_config
from metapathpy.errors import ModelFormatError, ParseFailureException


def test_defaults():
    config = SearchConfig()
    assert config.max_successors == DEFAULT_OPTIONS["max_successors"] == 20
    assert config.max_path_len == DEFAULT_OPTIONS["max_path_len"] == 100


def test_update():
    config = SearchConfig().update(max_path_len=5)
    assert config.max_path_len == 5
    assert config.max_successors == 20
    assert SearchConfig().update() == SearchConfig()
    with pytest.raises(ParseFailureException):
        SearchConfig().update(max_successors=0)


def test_load_config(tmp_path, caplog):
    config_file = tmp_path / "search.yaml"
    config_file.write_text("max_path_len: 12\ncolour: blue\n")
    config = load_config(str(config_file))
    assert config == SearchConfig(max_successors=20, max_path_len=12)
    assert "colour" in caplog.text


def test_empty_config_keeps_defaults(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert load_config(str(config_file)) == SearchConfig()


def test_config_errors(tmp_path):
    with pytest.raises(ModelFormatError):
        load_config(str(tmp_path / "missing.yaml"))
    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n")
    with pytest.raises(ModelFormatError):
        load_config(str(listing))
    bad_value = tmp_path / "bad.yaml"
    bad_value.write_text("max_successors: many\n")
    with pytest.raises(ParseFailureException):
        load_config(str(bad_value))
    negative = tmp_path / "negative.yaml"
    negative.write_text("max_path_len: -1\n")
    with pytest.raises(ParseFailureException):
        load_config(str(negative))


def test_model_uses_override(model):
    assert model.get_pathway("A", "E", config=SearchConfig(max_path_len=2)) is None
    assert model.get_pathway("A", "E") is not None
