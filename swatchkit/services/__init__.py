"""Palette extraction services."""
