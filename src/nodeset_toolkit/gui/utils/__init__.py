"""Helpers for the Qt front end."""
