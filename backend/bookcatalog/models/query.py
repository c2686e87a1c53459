"""
Book Catalog — Query Criteria
===============================

What:  Filter criteria for list queries, and the assembled find query
       (criteria + pagination + sort) handed to the repository.
How:   Each Query converts to a MongoDB filter fragment; FindQuery folds
       all criteria into a single filter document.

Operator mapping:
    =   → {"field": value}
    <   → {"field": {"$lt": value}}
    >   → {"field": {"$gt": value}}
    <=  → {"field": {"$lte": value}}
    >=  → {"field": {"$gte": value}}
    !=  → {"field": {"$ne": value}}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

DEFAULT_PAGE_SIZE = 10


class QueryOperator(str, Enum):
    EQUALS = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN_OR_EQUAL = ">="
    DOES_NOT_EQUAL = "!="


_MONGO_OPERATORS = {
    QueryOperator.LESS_THAN: "$lt",
    QueryOperator.GREATER_THAN: "$gt",
    QueryOperator.LESS_THAN_OR_EQUAL: "$lte",
    QueryOperator.GREATER_THAN_OR_EQUAL: "$gte",
    QueryOperator.DOES_NOT_EQUAL: "$ne",
}


@dataclass(frozen=True)
class Query:
    """A single filter criterion: `field operator value`."""

    field: str
    operator: QueryOperator
    value: Any

    def to_filter(self) -> Dict[str, Any]:
        if self.operator is QueryOperator.EQUALS:
            return {self.field: self.value}
        return {self.field: {_MONGO_OPERATORS[self.operator]: self.value}}


@dataclass
class FindQuery:
    """
    Everything the repository needs to run a list query.

    Criteria on the same field are merged, so `rating >= 1` and
    `rating < 3` become {"rating": {"$gte": 1, "$lt": 3}}. An equality
    criterion replaces anything else on its field.
    """

    criteria: List[Query] = field(default_factory=list)
    skip: int = 0
    limit: int = DEFAULT_PAGE_SIZE
    sort: List[Tuple[str, int]] = field(default_factory=lambda: [("_id", 1)])

    def filters(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for criterion in self.criteria:
            fragment = criterion.to_filter()[criterion.field]
            existing = merged.get(criterion.field)
            if isinstance(fragment, dict) and isinstance(existing, dict):
                existing.update(fragment)
            else:
                merged[criterion.field] = dict(fragment) if isinstance(fragment, dict) else fragment
        return merged
