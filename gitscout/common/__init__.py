"""Shared helpers used across gitscout packages."""
