"""Shared pricing model, persistence, settings and paths."""
