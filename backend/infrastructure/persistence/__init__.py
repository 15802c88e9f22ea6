"""Catalog persistence: JSON snapshot repository."""
