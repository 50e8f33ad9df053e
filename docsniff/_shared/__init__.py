"""Shared infrastructure (logging, Problem Details, error codes) for docsniff."""
