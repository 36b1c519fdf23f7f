"""traitforge: weighted, unique trait combinations for generative collections."""

__version__ = "0.1.0"
