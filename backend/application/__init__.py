"""Application layer: DTOs, mappers, query services and background tasks."""
