"""Presentation layer: human-readable rendering of resolution results."""
