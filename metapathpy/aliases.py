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
Gene Alias Tables.

The genome itself is handled elsewhere; the model only needs a mapping from
each gene alias (BiGG locus tag or gene name) to the feature IDs it denotes.
"""

import json
import logging
import os
from collections import defaultdict

import pandas as pd

from metapathpy.errors import ModelFormatError


def load_alias_map(alias_file):
    """
    Load a gene alias map.

    Two layouts are accepted: a tab-separated table with ``alias`` and ``fid``
    columns (one row per pair), or a JSON object mapping each alias to a list
    of feature IDs.

    Args:
        alias_file (str): Path to the alias file.

    Returns:
        dict: alias -> set of feature IDs.

    Raises:
        ModelFormatError: If the file is missing or malformed.
    """
    if not os.path.exists(alias_file):
        raise ModelFormatError(f"Alias file not found: {alias_file}")

    alias_map = defaultdict(set)
    if alias_file.lower().endswith(".json"):
        try:
            with open(alias_file, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ModelFormatError(f"Error reading alias file {alias_file}: {e}") from e
        if not isinstance(data, dict):
            raise ModelFormatError(f"Alias file {alias_file} must contain an object")
        for alias, fids in data.items():
            if isinstance(fids, str):
                fids = [fids]
            alias_map[alias].update(fids)
    else:
        try:
            table = pd.read_csv(alias_file, sep="\t", dtype=str)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ModelFormatError(f"Error reading alias file {alias_file}: {e}") from e
        if not {"alias", "fid"} <= set(table.columns):
            raise ModelFormatError(f"Alias file {alias_file} needs 'alias' and 'fid' columns")
        for row in table.dropna(subset=["alias", "fid"]).itertuples():
            alias_map[row.alias].add(row.fid)

    logging.info(f"{len(alias_map)} gene aliases loaded from {alias_file}.")
    return dict(alias_map)
