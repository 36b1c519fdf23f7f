"""Weight parsing for trait option names.

Option names may carry a weight after a delimiter, in front of the file
extension:

    gold#10.png   -> 10
    silver.png    -> DEFAULT_WEIGHT

Weights are read as integers. Anything that does not parse falls back to
DEFAULT_WEIGHT instead of raising.
"""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 100
WEIGHT_DELIMITER = "#"
EXTENSION_DELIMITER = "."

_LEADING_INT = re.compile(r"\s*(\d+)")


def parse_weight(
    name: str,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> int:
    """Extract the weight encoded in an option name.

    Examples:
        "gold#10.png" → 10
        "gold#10" → 10
        "silver.png" → 100
        "gold#abc.png" → 100 (malformed, falls back)
    """
    if weight_delimiter not in name:
        return DEFAULT_WEIGHT

    _, _, suffix = name.partition(weight_delimiter)
    token = suffix.split(extension_delimiter, 1)[0]
    match = _LEADING_INT.match(token)
    if match is None:
        logger.debug(
            "Malformed weight in %r, using default %d", name, DEFAULT_WEIGHT
        )
        return DEFAULT_WEIGHT
    return int(match.group(1))


def parse_weights(
    names: list[str],
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> list[int]:
    """Parse the weight of every name in order."""
    return [parse_weight(n, weight_delimiter, extension_delimiter) for n in names]


def trait_label(
    name: str,
    weight_delimiter: str = WEIGHT_DELIMITER,
    extension_delimiter: str = EXTENSION_DELIMITER,
) -> str:
    """Human-facing value of an option: the name without weight or extension.

    Examples:
        "gold#10.png" → "gold"
        "silver.png" → "silver"
        "noext" → "noext"
    """
    if weight_delimiter in name:
        return name.partition(weight_delimiter)[0]
    stem, sep, _ = name.rpartition(extension_delimiter)
    # Dot-files and names without an extension keep their full text
    if not sep or not stem:
        return name
    return stem
