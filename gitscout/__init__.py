"""Fetch and merge GitHub activity for a set of accounts over a date window."""

from __future__ import annotations

__version__ = "0.1.0"
