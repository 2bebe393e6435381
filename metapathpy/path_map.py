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
All-Pairs Path Map for MetaPathPy.

The path map holds the shortest pathway between every ordered pair of
compounds in a model, found by expanding outward from each input compound
until a common compound is reached. While it is built, every compound that
appears in the middle of a recorded pathway has its connectivity score raised
by one, so well-connected hub compounds float to the top of the scores.

Classes:
    - ModelPathMap: Shortest pathways and connectivity scores for a model.
"""

import heapq
import logging
from collections import Counter

from tqdm import tqdm

from metapathpy.checkpoints import load_checkpoint, save_checkpoint
from metapathpy.pathway import Pathway


class ModelPathMap:
    """
    Map of the shortest pathways between compound pairs of a model.

    Attributes:
        paths (dict): source compound -> {terminus compound -> Pathway}.
        scores (Counter): compound -> connectivity score.
    """

    def __init__(self, model, commons=None, show_progress=True):
        """
        Build the path map.

        Args:
            model (MetaModel): The model to analyze.
            commons (set, optional): Compounds at which expansion stops.
                Defaults to the model's current common compounds.
            show_progress (bool): Display a progress bar over the input compounds.
        """
        self.logger = logging.getLogger("ModelPathMap")
        if commons is None:
            commons = model.get_commons()
        self.paths = {}
        self.scores = Counter()

        path_count = 0
        compounds = model.input_compounds()
        for compound in tqdm(compounds, desc="Mapping paths", disable=not show_progress):
            sub_map = {}
            self.paths[compound] = sub_map
            queue = []
            for successor in model.get_successors(compound):
                for node in successor.get_outputs(compound):
                    if node.metabolite not in sub_map:
                        self._record(queue, sub_map, Pathway(successor, node, start=compound))
                        path_count += 1
            while queue:
                path = heapq.heappop(queue)
                terminus = path.last.output
                # Common compounds end the expansion
                if terminus in commons:
                    continue
                for successor in model.get_successors(terminus):
                    if path.contains(successor):
                        continue
                    for node in successor.get_outputs(terminus):
                        if node.metabolite not in sub_map:
                            self._record(queue, sub_map, path.clone().add(successor, node))
                            path_count += 1
            self.logger.debug(
                f"Path analysis completed for compound {compound}: {len(sub_map)} paths found."
            )
        self.logger.info(f"{path_count} paths and {len(self.scores)} scores computed.")

    def _record(self, queue, sub_map, path):
        """Queue a new pathway, store it and count its intermediates."""
        heapq.heappush(queue, path)
        sub_map[path.last.output] = path
        for element in path.elements[:-1]:
            self.scores[element.output] += 1

    @classmethod
    def build(cls, model, checkpoint=None, show_progress=True):
        """
        Build a path map, reusing a pickled copy when one exists.

        Args:
            model (MetaModel): The model to analyze.
            checkpoint (str, optional): Checkpoint file to load from, or to
                save to after a fresh build.
            show_progress (bool): Display a progress bar during a fresh build.

        Returns:
            ModelPathMap: The path map.
        """
        if checkpoint:
            cached = load_checkpoint(checkpoint)
            if cached is not None:
                return cached
        result = cls(model, show_progress=show_progress)
        if checkpoint:
            save_checkpoint(result, checkpoint)
        return result

    def get_path(self, source, target):
        """Return the shortest pathway from source to target, or None."""
        return self.paths.get(source, {}).get(target)

    def get_scores(self):
        """Return (compound, score) pairs, highest score first."""
        return sorted(self.scores.items(), key=lambda x: (-x[1], x[0]))

    def get_score(self, compound):
        return self.scores.get(compound, 0)
