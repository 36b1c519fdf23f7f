"""Combination generator: the orchestrating sampling loop.

A GenerationSession owns all mutable state of one run (accepted keys, the
rarity budget, stats) and hands out one accepted Combination per call. Each
call loops through two states:

- SAMPLING: draw one option per layer from the layer's eligible pool, then
  reject the draw if its key was already accepted or if any drawn option has
  reached its quota (exhausted options are excluded from future pools)
- ACCEPTED: record the key and counts, exclude options that just reached
  their quota, return the combination

The loop gives up after ``max_attempts`` consecutive rejections, and fails
immediately when some layer has no eligible option left.
"""

import json
import logging
import random
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.models import (
    CollectionDetails,
    CollectionSpec,
    Combination,
    GenerationResult,
    GenerationStats,
    LayerDetails,
)
from ..utils.callbacks import ItemProgressCallback
from .budget import BudgetBasis, RarityBudget
from .candidates import (
    CandidateProvider,
    DirectoryCandidateProvider,
    total_combinations,
)
from .errors import GenerationError, InfeasibleConfigurationError, NoCandidatesError
from .sampler import weighted_pick
from .weights import EXTENSION_DELIMITER, WEIGHT_DELIMITER, parse_weight

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10_000
KEY_SEPARATOR = ";"


class GenerationSession:
    """State and sampling loop for one generation run.

    Thread-safe: next_combination() holds a lock for the whole draw/check/
    record cycle, so concurrent callers cannot both accept the same key or
    push an option past its quota.
    """

    def __init__(
        self,
        provider: CandidateProvider,
        layers: list[str],
        target_count: int,
        rng: random.Random | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        key_separator: str = KEY_SEPARATOR,
        basis: BudgetBasis = "pool",
        weight_delimiter: str = WEIGHT_DELIMITER,
        extension_delimiter: str = EXTENSION_DELIMITER,
    ) -> None:
        if not layers:
            raise ValueError("At least one layer is required")
        if max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")

        self.provider = provider
        self.layers = list(layers)
        self.target_count = target_count
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.key_separator = key_separator
        self.budget = RarityBudget(
            target_count,
            basis=basis,
            weight_delimiter=weight_delimiter,
            extension_delimiter=extension_delimiter,
        )
        self.stats = GenerationStats()

        self._accepted_keys: set[str] = set()
        self._accepted: list[Combination] = []
        self._lock = threading.Lock()
        self._preflight_total: int | None = None

    # ── Read-only views ──

    @property
    def accepted(self) -> list[Combination]:
        return list(self._accepted)

    @property
    def accepted_count(self) -> int:
        return len(self._accepted)

    def has_key(self, key: str) -> bool:
        return key in self._accepted_keys

    @property
    def done(self) -> bool:
        return len(self._accepted) >= self.target_count

    # ── Preflight ──

    def preflight(self) -> int:
        """Verify the run can complete before drawing anything.

        Returns:
            Number of possible combinations, counting only options with
            a positive weight

        Raises:
            InfeasibleConfigurationError: If a layer has no candidates or no
                positive weight, the target exceeds the possible combinations,
                or a layer's quotas cannot cover the target count
        """
        for layer in self.layers:
            options = self.provider.list_options(layer)
            if not options:
                raise InfeasibleConfigurationError(
                    f"Layer '{layer}' has no trait options",
                    target_count=self.target_count,
                    layer=layer,
                )
            if sum(self.budget.weights(options)) <= 0:
                raise InfeasibleConfigurationError(
                    f"Layer '{layer}' has {len(options)} option(s) but all weights are zero",
                    target_count=self.target_count,
                    layer=layer,
                )
            capacity = self.budget.layer_capacity(layer, options)
            if capacity < self.target_count:
                raise InfeasibleConfigurationError(
                    f"Layer '{layer}' rarity quotas allow at most {capacity} items, "
                    f"but {self.target_count} were requested",
                    target_count=self.target_count,
                    layer=layer,
                )

        # Zero-weight options are never drawn
        total = total_combinations(
            self.provider, self.layers, keep=lambda o: self.budget.weight(o) > 0
        )

        if self.target_count > total:
            raise InfeasibleConfigurationError(
                f"Requested number of items ({self.target_count}) exceeds the "
                f"total possible combinations ({total})",
                target_count=self.target_count,
                total_combinations=total,
            )

        self._preflight_total = total
        logger.info(
            "Preflight ok: %d of %d possible combinations across %d layers",
            self.target_count,
            total,
            len(self.layers),
        )
        return total

    # ── Sampling loop ──

    def _pool(self, layer: str) -> list[str]:
        return self.budget.available(layer, self.provider.list_options(layer))

    def _draw(self) -> tuple[list[tuple[str, str]], dict[str, list[str]]]:
        """One SAMPLING pass: an option per layer, plus the pools drawn from."""
        pairs: list[tuple[str, str]] = []
        pools: dict[str, list[str]] = {}
        for layer in self.layers:
            pool = self._pool(layer)
            weights = self.budget.weights(pool)
            try:
                option = weighted_pick(pool, weights, self.rng)
            except NoCandidatesError as e:
                raise InfeasibleConfigurationError(
                    f"Every option of layer '{layer}' is exhausted after "
                    f"{len(self._accepted)} of {self.target_count} items",
                    target_count=self.target_count,
                    layer=layer,
                    attempts=self.stats.attempts,
                ) from e
            pairs.append((layer, option))
            pools[layer] = pool
        return pairs, pools

    def _exhausted(
        self, pairs: list[tuple[str, str]], pools: dict[str, list[str]]
    ) -> list[tuple[str, str]]:
        return [
            (layer, option)
            for layer, option in pairs
            if self.budget.is_exhausted(layer, option, pools[layer])
        ]

    def _exclude(self, layer: str, option: str) -> None:
        if option in self.budget.excluded(layer):
            return
        self.budget.exclude(layer, option)
        self.stats.exclusions.setdefault(layer, []).append(option)

    def next_combination(self) -> Combination:
        """Draw until a unique, within-budget combination is found.

        Raises:
            GenerationError: If the target count has already been reached
            InfeasibleConfigurationError: If a layer runs out of options or
                ``max_attempts`` consecutive draws are rejected
        """
        with self._lock:
            if self.done:
                raise GenerationError(
                    f"All {self.target_count} combinations have already been generated"
                )

            for _ in range(self.max_attempts):
                self.stats.attempts += 1
                pairs, pools = self._draw()
                combination = Combination.from_pairs(pairs)
                key = combination.key(self.key_separator)

                if key in self._accepted_keys:
                    self.stats.duplicate_rejections += 1
                    logger.debug("Rejected duplicate combination %s", key)
                    continue

                exhausted = self._exhausted(pairs, pools)
                if exhausted:
                    self.stats.budget_rejections += 1
                    for layer, option in exhausted:
                        logger.debug(
                            "Too many '%s' in layer '%s': count=%d max=%d",
                            option,
                            layer,
                            self.budget.current_count(layer, option),
                            self.budget.max_allowed(layer, option, pools[layer]),
                        )
                        self._exclude(layer, option)
                    continue

                self._accepted_keys.add(key)
                self._accepted.append(combination)
                self.budget.record(pairs)
                # Options that just hit their quota leave the pool right away
                for layer, option in self._exhausted(pairs, pools):
                    self._exclude(layer, option)
                return combination

            raise InfeasibleConfigurationError(
                f"Gave up after {self.max_attempts} consecutive rejected draws "
                f"({len(self._accepted)} of {self.target_count} items generated)",
                target_count=self.target_count,
                total_combinations=self._preflight_total,
                attempts=self.max_attempts,
            )

    def run(self, on_progress: ItemProgressCallback | None = None) -> list[Combination]:
        """Preflight, then generate every remaining combination."""
        if self._preflight_total is None:
            self.preflight()
        while not self.done:
            self.next_combination()
            if on_progress:
                on_progress(len(self._accepted), self.target_count)
        return self.accepted

    def snapshot_stats(self) -> GenerationStats:
        stats = self.stats.model_copy(deep=True)
        stats.option_counts = self.budget.counts()
        return stats


# =============================================================================
# Collection-level entry points
# =============================================================================


def provider_for_spec(
    spec: CollectionSpec,
    base_dir: Path | None = None,
    cache: bool = True,
) -> DirectoryCandidateProvider:
    """Directory provider reading the collection's traits folder."""
    return DirectoryCandidateProvider(spec.traits_path(base_dir), cache=cache)


def collection_details(
    spec: CollectionSpec,
    provider: CandidateProvider,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> CollectionDetails:
    """Summarize a collection: layers, option counts, possible combinations."""

    def drawable(option: str) -> bool:
        return parse_weight(option, weight_delimiter, extension_delimiter) > 0

    layers = []
    for layer in spec.layers:
        options = provider.list_options(layer)
        layers.append(
            LayerDetails(
                layer=layer,
                option_count=len(options),
                zero_weight_options=[o for o in options if not drawable(o)],
            )
        )
    return CollectionDetails(
        name=spec.meta.name,
        count=spec.count,
        start_at=spec.start_at,
        traits_folder=spec.traits_folder,
        layers=layers,
        total_combinations=total_combinations(provider, spec.layers),
        drawable_combinations=total_combinations(provider, spec.layers, keep=drawable),
    )


def generate_collection(
    spec: CollectionSpec,
    provider: CandidateProvider | None = None,
    seed: int | None = None,
    on_progress: ItemProgressCallback | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    basis: BudgetBasis = "pool",
    key_separator: str = KEY_SEPARATOR,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> GenerationResult:
    """
    Generate every combination a CollectionSpec asks for.

    Args:
        spec: The collection to generate
        provider: Candidate source (defaults to the collection's traits folder)
        seed: Random seed for reproducibility (None = random)
        on_progress: Optional callback(current, total) for progress updates
        max_attempts: Consecutive rejected draws tolerated per item
        basis: Rarity quota basis, "pool" or "absolute"

    Returns:
        GenerationResult with combinations in generation order, metadata and stats

    Raises:
        InfeasibleConfigurationError: If the collection cannot be completed
    """
    if seed is None:
        seed = random.randint(0, 2**31 - 1)
    rng = random.Random(seed)

    session = GenerationSession(
        provider or provider_for_spec(spec),
        spec.layers,
        spec.count,
        rng=rng,
        max_attempts=max_attempts,
        key_separator=key_separator,
        basis=basis,
        weight_delimiter=weight_delimiter,
        extension_delimiter=extension_delimiter,
    )
    total = session.preflight()
    combinations = session.run(on_progress=on_progress)

    meta: dict[str, Any] = {
        "collection": spec.meta.name,
        "count": len(combinations),
        "start_at": spec.start_at,
        "layers": list(spec.layers),
        "total_combinations": total,
        "basis": basis,
        "seed": seed,
        "generated_at": datetime.now().isoformat(),
    }
    return GenerationResult(
        combinations=combinations, meta=meta, stats=session.snapshot_stats()
    )


def save_json(result: GenerationResult, path: Path | str) -> None:
    """Save a generation result (combinations, meta, stats) to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2)


def load_json(path: Path | str) -> GenerationResult:
    with open(path) as f:
        return GenerationResult.model_validate(json.load(f))
