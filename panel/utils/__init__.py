"""Helpers shared by API handlers."""
