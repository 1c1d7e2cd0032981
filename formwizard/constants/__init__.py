"""Shared constants for the form wizard."""
