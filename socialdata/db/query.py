from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

ASCENDING = "asc"
DESCENDING = "desc"

_MISSING = object()


def get_field(data: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path inside a document, or _MISSING"""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


@dataclass(frozen=True)
class Query:
    """Equality filters, one optional ordering, optional limit"""
    collection: str
    filters: Tuple[Tuple[str, Any], ...] = ()
    order_field: Optional[str] = None
    direction: str = ASCENDING
    max_results: Optional[int] = None

    def where(self, field_path: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + ((field_path, value),))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "Query":
        if direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"Invalid order direction: {direction}")
        return replace(self, order_field=field_path, direction=direction)

    def limit(self, count: int) -> "Query":
        if count < 0:
            raise ValueError("Limit must be non-negative")
        return replace(self, max_results=count)

    def matches(self, data: Dict[str, Any]) -> bool:
        for field_path, value in self.filters:
            if get_field(data, field_path) != value:
                return False
        # Documents without the order field never appear in an ordered result
        if self.order_field and get_field(data, self.order_field) is _MISSING:
            return False
        return True

    def apply(self, snapshots: List["Snapshot"]) -> List["Snapshot"]:
        """Filter, order and trim snapshots given in insertion order"""
        results = [snapshot for snapshot in snapshots if self.matches(snapshot.data)]

        if self.order_field:
            # sort() is stable, so ties keep insertion order
            results.sort(
                key=lambda snapshot: get_field(snapshot.data, self.order_field),
                reverse=self.direction == DESCENDING,
            )

        if self.max_results is not None:
            results = results[:self.max_results]

        return results


@dataclass
class Snapshot:
    """A document as read from the store"""
    collection: str
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, field_path: str, default: Any = None) -> Any:
        value = get_field(self.data, field_path)
        return default if value is _MISSING else value
