"""simpson_synth: synthetic linear SCM data engineered to show a multi-stage Simpson's Paradox.

Main entrypoints: `CausalGraph(...)`, `simulate(...)` and `search_paradox(problem, cfg)`.
"""

from .errors import (
    SimpsonSynthError,
    GraphDefinitionError,
    ParameterLengthError,
    UnresolvedDependencyError,
    FitError,
)
from .dag import CausalGraph, parse_edges
from .ci import d_separated, blocks_backdoor
from .codec import edge_keys, decode, encode
from .scm import LinearSCM, SimulationConfig, simulate
from .trajectory import coefficient_trajectory, fit_coefficients
from .scoring import score, sign_mismatches, alternating_target
from .search import AnnealingConfig, ParadoxProblem, SearchResult, search_paradox
from .presets import confounder_fan, default_problem, fan_paradox_weights
from .datasets import Dataset, generate_paradox_dataset
from .utils import nested_covariate_sets

__version__ = "0.1.0"

__all__ = [
    "SimpsonSynthError",
    "GraphDefinitionError",
    "ParameterLengthError",
    "UnresolvedDependencyError",
    "FitError",
    "CausalGraph",
    "parse_edges",
    "d_separated",
    "blocks_backdoor",
    "edge_keys",
    "decode",
    "encode",
    "LinearSCM",
    "SimulationConfig",
    "simulate",
    "coefficient_trajectory",
    "fit_coefficients",
    "sign_mismatches",
    "score",
    "alternating_target",
    "AnnealingConfig",
    "ParadoxProblem",
    "SearchResult",
    "search_paradox",
    "confounder_fan",
    "default_problem",
    "fan_paradox_weights",
    "Dataset",
    "generate_paradox_dataset",
    "nested_covariate_sets",
]
