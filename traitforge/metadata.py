"""Metadata records for generated items.

Each accepted combination becomes one JSON record:

    {
      "name": "Space Cats #12",
      "description": "...",
      "image": "12.png",
      "external_url": "...",
      "attributes": [{"trait_type": "background", "value": "blue"}, ...]
    }

Attributes are built 1:1 from the combination in layer order. The value is
the option label, i.e. the file name without weight suffix or extension.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .combinations.weights import EXTENSION_DELIMITER, WEIGHT_DELIMITER, trait_label
from .core.models import CollectionSpec, Combination, GenerationResult
from .utils.callbacks import ItemProgressCallback

logger = logging.getLogger(__name__)


def build_attributes(
    combination: Combination,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> list[dict[str, str]]:
    return [
        {
            "trait_type": t.layer,
            "value": trait_label(t.option, weight_delimiter, extension_delimiter),
        }
        for t in combination.traits
    ]


def build_metadata(
    combination: Combination,
    index: int,
    spec: CollectionSpec,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> dict[str, Any]:
    """Metadata record for the item at ``index`` (already offset by start_at)."""
    return {
        "name": f"{spec.meta.name} #{index}",
        "description": spec.meta.description,
        "image": f"{index}.{spec.image_extension}",
        "external_url": spec.meta.external_url,
        "attributes": build_attributes(
            combination, weight_delimiter, extension_delimiter
        ),
    }


def write_metadata(
    result: GenerationResult,
    spec: CollectionSpec,
    output_folder: Path | str,
    on_progress: ItemProgressCallback | None = None,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> list[Path]:
    """Write ``<index>.json`` for every combination in ``result``.

    Returns:
        Paths written, in generation order
    """
    out_dir = Path(output_folder)
    out_dir.mkdir(parents=True, exist_ok=True)

    total = len(result.combinations)
    paths: list[Path] = []
    for i, combination in enumerate(result.combinations):
        index = i + spec.start_at
        record = build_metadata(
            combination, index, spec, weight_delimiter, extension_delimiter
        )
        path = out_dir / f"{index}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)
        logger.debug("JSON metadata: %s", path)
        paths.append(path)
        if on_progress:
            on_progress(i + 1, total)
    return paths
