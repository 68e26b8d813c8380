"""Shared services package."""
