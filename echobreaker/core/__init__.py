"""Core collection components."""
