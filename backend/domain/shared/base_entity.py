"""
Base Entity class for all domain entities.

Entities have identity and lifecycle.
Two entities are equal if they are of the same type and have the same ID.
Catalog rows are addressed by integer ids assigned by the system of record.
"""

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(eq=False, kw_only=True)
class Entity(ABC):
    """
    Base class for all domain entities.

    Entities are objects that have a distinct identity that runs through time
    and different representations. They are defined by their identity, not their attributes.
    """

    id: int

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"


@dataclass(eq=False, kw_only=True)
class AuditableEntity(Entity):
    """
    Entity with the audit columns every catalog table carries.

    ``status`` is the soft-delete flag: inactive rows are kept by the
    system of record but never loaded into an entity graph.
    """

    status: bool = True
    company_id: Optional[int] = None
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status

    def belongs_to(self, company_id: Optional[int]) -> bool:
        """Check tenant ownership; ``None`` means every company."""
        return company_id is None or self.company_id == company_id
