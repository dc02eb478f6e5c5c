"""Shared utilities: time grid, identifiers, validation, logging."""
