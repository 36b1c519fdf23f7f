"""Core models shared across traitforge."""
