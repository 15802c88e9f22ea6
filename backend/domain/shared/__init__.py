"""Shared kernel: base entity, value objects and exceptions."""
