"""Stable generated identifiers for instance names and fallback secrets."""
