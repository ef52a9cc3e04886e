"""Shared helpers for the speech client."""
