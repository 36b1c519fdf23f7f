"""Combination engine: weighted, unique, rarity-bounded trait selection."""

from .budget import BUDGET_BASES, BudgetBasis, RarityBudget
from .candidates import (
    CandidateProvider,
    DirectoryCandidateProvider,
    StaticCandidateProvider,
    total_combinations,
)
from .errors import GenerationError, InfeasibleConfigurationError, NoCandidatesError
from .generator import (
    DEFAULT_MAX_ATTEMPTS,
    KEY_SEPARATOR,
    GenerationSession,
    collection_details,
    generate_collection,
    load_json,
    provider_for_spec,
    save_json,
)
from .sampler import normalize_weights, weighted_pick
from .weights import DEFAULT_WEIGHT, parse_weight, parse_weights, trait_label

__all__ = [
    "BUDGET_BASES",
    "BudgetBasis",
    "RarityBudget",
    "CandidateProvider",
    "DirectoryCandidateProvider",
    "StaticCandidateProvider",
    "total_combinations",
    "GenerationError",
    "InfeasibleConfigurationError",
    "NoCandidatesError",
    "DEFAULT_MAX_ATTEMPTS",
    "KEY_SEPARATOR",
    "GenerationSession",
    "collection_details",
    "generate_collection",
    "load_json",
    "provider_for_spec",
    "save_json",
    "normalize_weights",
    "weighted_pick",
    "DEFAULT_WEIGHT",
    "parse_weight",
    "parse_weights",
    "trait_label",
]
