"""Packaged data files (festival registry)."""
