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
Search Configuration for MetaPathPy.

This module holds the two tuning values that bound the cost of a pathway
search and the helpers for reading them from a YAML file.

Functions:
    - load_config: Read a YAML configuration file into a SearchConfig.
"""

import logging
from dataclasses import dataclass, replace

import yaml

from metapathpy.errors import ModelFormatError, ParseFailureException

DEFAULT_OPTIONS = {
    # compounds with more successor reactions than this are common
    "max_successors": 20,
    # maximum number of reactions in a returned pathway
    "max_path_len": 100,
}


@dataclass(frozen=True)
class SearchConfig:
    """
    Tuning values for the pathway search.

    Attributes:
        max_successors (int): Successor-count threshold above which a compound
            is treated as common.
        max_path_len (int): Maximum length of a pathway, also the depth limit
            for distance painting.
    """

    max_successors: int = DEFAULT_OPTIONS["max_successors"]
    max_path_len: int = DEFAULT_OPTIONS["max_path_len"]

    def validate(self) -> "SearchConfig":
        """
        Verify the tuning values.

        Returns:
            SearchConfig: This object, for chaining.

        Raises:
            ParseFailureException: If either limit is not positive.
        """
        if self.max_successors < 1:
            raise ParseFailureException("Successor limit must be positive")
        if self.max_path_len < 1:
            raise ParseFailureException("Pathway limit must be positive")
        return self

    def update(self, max_successors=None, max_path_len=None) -> "SearchConfig":
        """Return a validated copy with the specified values overridden."""
        changes = {}
        if max_successors is not None:
            changes["max_successors"] = int(max_successors)
        if max_path_len is not None:
            changes["max_path_len"] = int(max_path_len)
        return replace(self, **changes).validate()


def load_config(config_file):
    """
    Load search settings from a YAML file.

    Keys missing from the file keep their defaults. Unknown keys are reported
    and ignored.

    Args:
        config_file (str): Path to a YAML file containing a mapping.

    Returns:
        SearchConfig: The validated configuration.

    Raises:
        ModelFormatError: If the file cannot be read or is not a mapping.
        ParseFailureException: If a tuning value is invalid.
    """
    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ModelFormatError(f"Error reading configuration file {config_file}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ModelFormatError(f"Configuration file {config_file} must contain a mapping")

    options = dict(DEFAULT_OPTIONS)
    for key, value in data.items():
        if key in options:
            try:
                options[key] = int(value)
            except (TypeError, ValueError) as e:
                raise ParseFailureException(
                    f"Invalid value for {key}: {value!r}"
                ) from e
        else:
            logging.warning(f"Unknown configuration option ignored: {key}")

    return SearchConfig(**options).validate()
