"""Exceptions raised by the combination engine."""


class GenerationError(Exception):
    """Raised when combination generation fails."""

    pass


class InfeasibleConfigurationError(GenerationError):
    """Raised when the collection cannot be completed as configured.

    Covers a target count above the number of possible combinations, a layer
    with no usable candidates, and a run in which retries stop making progress.
    """

    def __init__(
        self,
        message: str,
        *,
        target_count: int | None = None,
        total_combinations: int | None = None,
        layer: str | None = None,
        attempts: int | None = None,
    ):
        super().__init__(message)
        self.target_count = target_count
        self.total_combinations = total_combinations
        self.layer = layer
        self.attempts = attempts


class NoCandidatesError(GenerationError):
    """Raised when a draw is requested from an empty candidate pool."""

    pass
