"""Presentation layer: REST API."""
