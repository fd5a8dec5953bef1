"""Utility modules for GitPanel."""
