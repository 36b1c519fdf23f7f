"""Rarity budget accounting.

Every (layer, option) pair gets a quota derived from the option's weight and
the target collection size:

    quota = ceil(weight * target_count / base)

where ``base`` depends on the budget basis:

- "pool": the summed weight of the candidate pool offered for the layer at
  draw time (exclusions already removed)
- "absolute": 100, so the weight reads as a percentage of the collection and
  an unweighted option is uncapped

An option whose accepted count has reached its quota is exhausted. Exhausted
options are excluded from the layer's future pools for the rest of the run.
Exclusions only grow.
"""

import logging
from collections import Counter
from typing import Literal

from .weights import EXTENSION_DELIMITER, WEIGHT_DELIMITER, parse_weight, parse_weights

logger = logging.getLogger(__name__)

BudgetBasis = Literal["pool", "absolute"]
BUDGET_BASES: tuple[str, ...] = ("pool", "absolute")

ABSOLUTE_BASE = 100


class RarityBudget:
    """Per-layer quotas, occurrence counters and exclusion sets for one run.

    Not thread-safe on its own; GenerationSession serializes access.
    """

    def __init__(
        self,
        target_count: int,
        basis: BudgetBasis = "pool",
        weight_delimiter: str = WEIGHT_DELIMITER,
        extension_delimiter: str = EXTENSION_DELIMITER,
    ) -> None:
        if target_count <= 0:
            raise ValueError(f"target_count must be positive, got {target_count}")
        if basis not in BUDGET_BASES:
            raise ValueError(
                f"Unknown budget basis: {basis!r}. Expected one of {BUDGET_BASES}"
            )
        self.target_count = target_count
        self.basis = basis
        self.weight_delimiter = weight_delimiter
        self.extension_delimiter = extension_delimiter
        self._counts: dict[str, Counter] = {}
        self._excluded: dict[str, set[str]] = {}

    def weight(self, option: str) -> int:
        return parse_weight(option, self.weight_delimiter, self.extension_delimiter)

    def weights(self, options: list[str]) -> list[int]:
        return parse_weights(options, self.weight_delimiter, self.extension_delimiter)

    def _base(self, pool: list[str]) -> int:
        if self.basis == "absolute":
            return ABSOLUTE_BASE
        return sum(self.weights(pool))

    def max_allowed(self, layer: str, option: str, pool: list[str]) -> int:
        """Quota for ``option`` given the pool it was offered from.

        ``layer`` is accepted for symmetry with the other lookups; quotas
        depend only on the option's weight and the pool.
        """
        base = self._base(pool)
        if base <= 0:
            return 0
        # Integer ceiling division keeps quotas exact
        return -(-self.weight(option) * self.target_count // base)

    def current_count(self, layer: str, option: str) -> int:
        """Number of accepted combinations using ``option`` for ``layer``."""
        return self._counts.get(layer, Counter())[option]

    def is_exhausted(self, layer: str, option: str, pool: list[str]) -> bool:
        return self.current_count(layer, option) >= self.max_allowed(
            layer, option, pool
        )

    def exclude(self, layer: str, option: str) -> None:
        """Remove ``option`` from every future pool for ``layer``."""
        excluded = self._excluded.setdefault(layer, set())
        if option not in excluded:
            excluded.add(option)
            logger.debug("Excluded exhausted option %r from layer %r", option, layer)

    def excluded(self, layer: str) -> frozenset[str]:
        return frozenset(self._excluded.get(layer, ()))

    def available(self, layer: str, options: list[str]) -> list[str]:
        """Filter ``options`` down to the ones still eligible for ``layer``."""
        excluded = self._excluded.get(layer)
        if not excluded:
            return list(options)
        return [o for o in options if o not in excluded]

    def record(self, traits: list[tuple[str, str]]) -> None:
        """Count an accepted combination given as (layer, option) pairs."""
        for layer, option in traits:
            self._counts.setdefault(layer, Counter())[option] += 1

    def counts(self) -> dict[str, dict[str, int]]:
        """Snapshot of occurrence counts, layer → option → count."""
        return {layer: dict(counter) for layer, counter in self._counts.items()}

    def layer_capacity(self, layer: str, options: list[str]) -> int:
        """Most items a layer can fill before every option is exhausted.

        Uses the full pool, i.e. the quotas before any exclusion.
        """
        return sum(self.max_allowed(layer, o, options) for o in options)
