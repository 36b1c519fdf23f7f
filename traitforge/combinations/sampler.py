"""Weighted random selection over a candidate pool.

Weights are normalized to percentages summing to 100 with exact proportional
scaling; no per-item rounding is applied. A uniform draw in [0, 100) is then
matched against the cumulative percentages, and the first bucket whose
cumulative value meets or exceeds the draw wins.
"""

import random

from .errors import NoCandidatesError


def normalize_weights(weights: list[float]) -> list[float]:
    """Scale weights to percentages that sum to 100.

    Raises:
        NoCandidatesError: If the list is empty or every weight is zero.
    """
    total = sum(weights)
    if not weights or total <= 0:
        raise NoCandidatesError("No candidates with a positive weight")
    return [w / total * 100 for w in weights]


def weighted_pick(
    names: list[str],
    weights: list[float],
    rng: random.Random,
) -> str:
    """
    Draw one name with probability proportional to its weight.

    Args:
        names: Candidate names, in pool order
        weights: Non-negative weights aligned with names
        rng: Random number generator (seeded for reproducibility)

    Returns:
        The selected name

    Raises:
        NoCandidatesError: If there is nothing to pick from
        ValueError: If names and weights differ in length or a weight is negative
    """
    if not names:
        raise NoCandidatesError("No candidates available")
    if len(names) != len(weights):
        raise ValueError(
            f"Got {len(names)} names but {len(weights)} weights"
        )
    if any(w < 0 for w in weights):
        raise ValueError(f"Weights must be non-negative, got {weights}")

    percentages = normalize_weights(weights)
    draw = rng.random() * 100

    cumulative = 0.0
    last_positive = None
    for name, pct in zip(names, percentages):
        if pct <= 0:
            continue
        cumulative += pct
        last_positive = name
        if draw <= cumulative:
            return name

    # Float drift can leave the cumulative total a hair under 100
    return last_positive
