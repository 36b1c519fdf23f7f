"""All Pydantic models for traitforge.

- collection.py: Collection specs, combinations, generation results
"""

from .collection import (
    # Spec
    CollectionMeta,
    CollectionSpec,
    # Combinations
    Trait,
    Combination,
    # Results
    GenerationStats,
    GenerationResult,
    LayerDetails,
    CollectionDetails,
)

__all__ = [
    "CollectionMeta",
    "CollectionSpec",
    "Trait",
    "Combination",
    "GenerationStats",
    "GenerationResult",
    "LayerDetails",
    "CollectionDetails",
]
