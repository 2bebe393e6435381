"""MetaPathPy: pathway search over metabolic network maps."""

from metapathpy.config import SearchConfig, load_config
from metapathpy.errors import ModelFormatError, ParseFailureException
from metapathpy.filters import (
    AvoidPathwayFilter,
    FilterParms,
    FilterType,
    IncludePathwayFilter,
    NoFilter,
    create_filter,
)
from metapathpy.metamodel import MetaModel
from metapathpy.modifiers import ForwardOnlyModifier, ModifierList, ReactionSuppressModifier
from metapathpy.path_map import ModelPathMap
from metapathpy.pathway import Pathway, PathwayElement, load_pathway, save_pathway
from metapathpy.reaction import ActiveDirections, Reaction, Stoich

__version__ = "1.0.0"
