"""Configuration management for traitforge.

Three config groups:
- generation: engine tuning (retry bound, rarity quota basis, candidate caching)
- format: option-name conventions (weight/extension delimiters, key separator)
- defaults: CLI defaults (output folder, image extension)

Config resolution order (highest priority first):
1. Programmatic (TraitforgeConfig constructed in code)
2. Environment variables (TRAITFORGE_MAX_ATTEMPTS, TRAITFORGE_BUDGET_BASIS, etc.)
   Invalid values are logged and ignored.
3. Config file (~/.config/traitforge/config.json, managed by `traitforge config`)
4. Hardcoded defaults

Collection specs (layers, count, traits folder) live in per-collection YAML
files, not here.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "traitforge"
CONFIG_FILE = CONFIG_DIR / "config.json"


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class GenerationConfig:
    """Combination engine tuning.

    - max_attempts: consecutive rejected draws tolerated before giving up
    - budget_basis: "pool" (weights relative to the offered pool) or
      "absolute" (weights are percentages of the collection)
    - cache_candidates: read each layer folder once per run
    """

    max_attempts: int = 10_000
    budget_basis: str = "pool"
    cache_candidates: bool = True


@dataclass
class FormatConfig:
    """Option-name conventions, e.g. ``gold#10.png``."""

    weight_delimiter: str = "#"
    extension_delimiter: str = "."
    key_separator: str = ";"


@dataclass
class DefaultsConfig:
    """CLI default settings."""

    output_folder: str = "./output"
    image_extension: str = "png"


# =============================================================================
# Main config class
# =============================================================================


@dataclass
class TraitforgeConfig:
    """Top-level traitforge configuration.

    Construct programmatically for package use, or load from config file for CLI use.

    Examples:
        # Package use: no files needed
        config = TraitforgeConfig(generation=GenerationConfig(max_attempts=500))

        # CLI use: loads from ~/.config/traitforge/config.json
        config = TraitforgeConfig.load()
    """

    generation: GenerationConfig = field(default_factory=GenerationConfig)
    format: FormatConfig = field(default_factory=FormatConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls) -> "TraitforgeConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: Env var overrides
        if val := os.environ.get("TRAITFORGE_MAX_ATTEMPTS"):
            try:
                parsed = int(val)
            except ValueError:
                parsed = 0
            if parsed > 0:
                config.generation.max_attempts = parsed
            else:
                logger.warning("Invalid TRAITFORGE_MAX_ATTEMPTS=%r, ignoring", val)
        if val := os.environ.get("TRAITFORGE_BUDGET_BASIS"):
            if val in ("pool", "absolute"):
                config.generation.budget_basis = val
            else:
                logger.warning("Invalid TRAITFORGE_BUDGET_BASIS=%r, ignoring", val)
        if val := os.environ.get("TRAITFORGE_CACHE_CANDIDATES"):
            config.generation.cache_candidates = val.lower() in ("1", "true", "yes")
        if val := os.environ.get("TRAITFORGE_WEIGHT_DELIMITER"):
            config.format.weight_delimiter = val
        if val := os.environ.get("TRAITFORGE_EXTENSION_DELIMITER"):
            config.format.extension_delimiter = val
        if val := os.environ.get("TRAITFORGE_KEY_SEPARATOR"):
            config.format.key_separator = val
        if val := os.environ.get("TRAITFORGE_OUTPUT_FOLDER"):
            config.defaults.output_folder = val
        if val := os.environ.get("TRAITFORGE_IMAGE_EXTENSION"):
            config.defaults.image_extension = val

        # config.json values are not validated by the layers above
        max_attempts = config.generation.max_attempts
        if not isinstance(max_attempts, int) or max_attempts <= 0:
            logger.warning(
                "max_attempts must be a positive integer, got %r; using %d",
                max_attempts,
                GenerationConfig.max_attempts,
            )
            config.generation.max_attempts = GenerationConfig.max_attempts

        return config

    def save(self) -> None:
        """Save config to ~/.config/traitforge/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "generation": asdict(self.generation),
            "format": asdict(self.format),
            "defaults": asdict(self.defaults),
        }


# =============================================================================
# Config dict application
# =============================================================================


def _apply_dict(config: TraitforgeConfig, data: dict) -> None:
    """Apply a dict of values onto a TraitforgeConfig."""
    for section in ("generation", "format", "defaults"):
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for k, v in values.items():
            if hasattr(target, k):
                setattr(target, k, v)


# =============================================================================
# Global config singleton
# =============================================================================

_config: TraitforgeConfig | None = None


def get_config() -> TraitforgeConfig:
    """Get the global TraitforgeConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = TraitforgeConfig.load()
    return _config


def configure(config: TraitforgeConfig) -> None:
    """Set the global TraitforgeConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
