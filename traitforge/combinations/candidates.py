"""Candidate providers: where the trait options for each layer come from.

A provider maps a layer identifier to the ordered list of option names for
that layer. Read failures never raise; they are logged and surface as an
empty list, which the generator's preflight reports as infeasible.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class CandidateProvider(Protocol):
    """Anything that can list the options of a layer."""

    def list_options(self, layer: str) -> list[str]: ...


class DirectoryCandidateProvider:
    """Reads options from ``<traits_folder>/<layer>/``.

    Regular files only, dot-files skipped, sorted by name. With ``cache=True``
    each layer is read once per provider; otherwise every call hits the disk.
    """

    def __init__(self, traits_folder: Path | str, cache: bool = True) -> None:
        self.traits_folder = Path(traits_folder)
        self.cache = cache
        self._cache: dict[str, list[str]] = {}

    def layer_path(self, layer: str) -> Path:
        return self.traits_folder / layer

    def list_options(self, layer: str) -> list[str]:
        if self.cache and layer in self._cache:
            return list(self._cache[layer])

        path = self.layer_path(layer)
        try:
            with os.scandir(path) as entries:
                options = sorted(
                    entry.name
                    for entry in entries
                    if entry.is_file() and not entry.name.startswith(".")
                )
        except OSError as exc:
            logger.error("Error reading trait folder %s: %s", path, exc)
            options = []

        if self.cache:
            self._cache[layer] = options
        return list(options)

    def clear_cache(self) -> None:
        self._cache.clear()


class StaticCandidateProvider:
    """Serves options from an in-memory mapping of layer → option names."""

    def __init__(self, options: dict[str, list[str]]) -> None:
        self._options = {layer: list(names) for layer, names in options.items()}

    def list_options(self, layer: str) -> list[str]:
        if layer not in self._options:
            logger.error("Unknown layer %r", layer)
            return []
        return list(self._options[layer])


def total_combinations(
    provider: CandidateProvider,
    layers: list[str],
    keep: Callable[[str], bool] | None = None,
) -> int:
    """Product of candidate-list lengths over all layers.

    With ``keep``, only options for which it returns True are counted.
    """
    total = 1
    for layer in layers:
        options = provider.list_options(layer)
        if keep is not None:
            options = [o for o in options if keep(o)]
        total *= len(options)
    return total
