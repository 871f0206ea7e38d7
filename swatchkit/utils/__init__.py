"""Logging, metrics and id helpers."""
