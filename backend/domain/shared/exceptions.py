"""
Domain Exceptions.

Custom exceptions for domain-level errors raised by the catalog engine.
Every exception carries a stable ``code`` used by the API layer to pick
an HTTP status, and a ``details`` dict that is safe to serialize.
"""

from typing import Optional, Any, Dict, Iterable


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DOMAIN_ERROR"
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        """Serializable representation used in reports and task results."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class EntityNotFoundException(DomainException):
    """Raised when a requested root entity is absent from the graph."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} with id '{entity_id}' not found",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": str(entity_id)}
        )


class ValidationException(DomainException):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class CycleDetectedException(DomainException):
    """Raised when BOM expansion revisits a node or exceeds the depth bound."""

    def __init__(self, path: Iterable[Any], max_depth: Optional[int] = None):
        path = [str(node) for node in path]
        if max_depth is not None:
            message = f"BOM recursion exceeded maximum depth {max_depth}"
        else:
            message = "Circular reference detected in BOM structure"
        super().__init__(
            message=message,
            code="CYCLE_DETECTED",
            details={"path": path, "max_depth": max_depth}
        )


class InvalidRecipeDetailException(DomainException):
    """Raised for a recipe row whose ingredient reference is malformed."""

    def __init__(self, recipe_detail_id: Any, reason: str):
        super().__init__(
            message=f"Recipe detail '{recipe_detail_id}' is invalid: {reason}",
            code="INVALID_RECIPE_DETAIL",
            details={"recipe_detail_id": str(recipe_detail_id), "reason": reason}
        )


class UnknownFacetFieldException(DomainException):
    """Raised when a filter names a field the engine does not know."""

    def __init__(self, field: str, known_fields: Optional[Iterable[str]] = None):
        super().__init__(
            message=f"Unknown field '{field}'",
            code="UNKNOWN_FACET_FIELD",
            details={"field": field, "known_fields": sorted(known_fields or [])}
        )


class DeadlineExceededException(DomainException):
    """Raised when a caller deadline expired before a unit of work started."""

    def __init__(self, unit: str):
        super().__init__(
            message=f"Deadline exceeded before '{unit}'",
            code="DEADLINE_EXCEEDED",
            details={"unit": unit}
        )
