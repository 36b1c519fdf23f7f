"""Collection spec, combination and result models for traitforge.

A CollectionSpec describes what to generate: the collection identity, where
the trait folders live, which layers to stack (in order) and how many items
to produce. Combinations and GenerationResult are what the engine hands to
downstream rendering and metadata writers.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Collection Spec
# =============================================================================


class CollectionMeta(BaseModel):
    """Identity of the collection, copied into every metadata record."""

    name: str = Field(description="Collection name, e.g. 'Space Cats'")
    description: str = ""
    external_url: str = ""


class CollectionSpec(BaseModel):
    """Complete blueprint for one generation run."""

    meta: CollectionMeta
    traits_folder: str = Field(
        default="./traits",
        description="Folder holding one sub-folder of options per layer",
    )
    layers: list[str] = Field(
        description="Layer identifiers, bottom of the stack first"
    )
    count: int = Field(gt=0, description="Number of items to generate")
    start_at: int = Field(default=0, ge=0, description="Index of the first item")
    image_extension: str = Field(
        default="png", description="Extension of the rendered artifact"
    )

    @field_validator("layers")
    @classmethod
    def _layers_unique(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one layer is required")
        seen: set[str] = set()
        dupes: list[str] = []
        for layer in v:
            if layer in seen:
                dupes.append(layer)
            seen.add(layer)
        if dupes:
            raise ValueError(f"Duplicate layers: {', '.join(dupes)}")
        return v

    def traits_path(self, base: Path | None = None) -> Path:
        """Resolve traits_folder, relative to ``base`` when it is relative."""
        path = Path(self.traits_folder)
        if base is not None and not path.is_absolute():
            return base / path
        return path

    def to_yaml(self, path: Path | str) -> None:
        path = Path(path)
        data = self.model_dump(mode="json")
        with open(path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "CollectionSpec":
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Collection spec must be a mapping: {path}")
        return cls.model_validate(data)


# =============================================================================
# Combinations
# =============================================================================


class Trait(BaseModel):
    """One (layer, option) pair of a combination."""

    layer: str
    option: str


class Combination(BaseModel):
    """One option per layer, in layer order."""

    traits: list[Trait]

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> "Combination":
        return cls(traits=[Trait(layer=layer, option=option) for layer, option in pairs])

    @property
    def options(self) -> list[str]:
        return [t.option for t in self.traits]

    def pairs(self) -> list[tuple[str, str]]:
        return [(t.layer, t.option) for t in self.traits]

    def key(self, separator: str = ";") -> str:
        """Canonical uniqueness key: option names joined in layer order."""
        return separator.join(self.options)

    def get(self, layer: str) -> str | None:
        for t in self.traits:
            if t.layer == layer:
                return t.option
        return None


# =============================================================================
# Results
# =============================================================================


class GenerationStats(BaseModel):
    """Counters collected over one generation run."""

    attempts: int = 0
    duplicate_rejections: int = 0
    budget_rejections: int = 0
    # layer -> options excluded after reaching their quota, in order
    exclusions: dict[str, list[str]] = Field(default_factory=dict)
    # layer -> option -> accepted count
    option_counts: dict[str, dict[str, int]] = Field(default_factory=dict)


class GenerationResult(BaseModel):
    """Accepted combinations plus run metadata and stats."""

    combinations: list[Combination]
    meta: dict[str, Any] = Field(default_factory=dict)
    stats: GenerationStats = Field(default_factory=GenerationStats)


class LayerDetails(BaseModel):
    layer: str
    option_count: int
    zero_weight_options: list[str] = Field(default_factory=list)


class CollectionDetails(BaseModel):
    """Summary of a collection and its layers."""

    name: str
    count: int
    start_at: int
    traits_folder: str
    layers: list[LayerDetails]
    total_combinations: int
    drawable_combinations: int

    @property
    def feasible(self) -> bool:
        return self.count <= self.drawable_combinations
