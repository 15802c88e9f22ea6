"""Infrastructure layer: concrete data-access capabilities."""
