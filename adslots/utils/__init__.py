"""Utility helpers for adslots."""
