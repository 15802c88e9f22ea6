"""
Catalog Domain - Repository Interfaces (Ports).

The engine never talks to a database. It depends on this narrow
data-access capability, implemented in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Type, TypeVar

T = TypeVar("T")


class CatalogRepository(ABC):
    """Read-only access to catalog rows, addressed by entity type."""

    @abstractmethod
    def fetch_by_id(self, entity_type: Type[T], entity_id: int) -> Optional[T]:
        """Get one row by id, or None."""
        pass

    @abstractmethod
    def fetch_all(self, entity_type: Type[T]) -> List[T]:
        """Get every row of a type, in id order."""
        pass

    @abstractmethod
    def fetch_where(self, entity_type: Type[T], predicate: Callable[[T], bool]) -> List[T]:
        """Get the rows of a type matching ``predicate``, in id order."""
        pass
