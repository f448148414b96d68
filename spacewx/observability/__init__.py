"""Logging and metrics for SpaceWx."""
