"""
Neural Query Descriptors

Immutable descriptions of ``neural`` query clauses. They are serialized into
the search request body and evaluated by the search engine; they cannot be
executed in-process.

Wire format::

    {"neural": {"<field>": {"query_text": ..., "model_id": ..., "k": ...,
                            "ef_search": ..., "filter": ...}}}

optionally wrapped in a ``nested`` clause with ``inner_hits``.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..core.errors import UnsupportedQueryError

QueryClause = Dict[str, Any]


class WireQuery(ABC):
    """
    Base for query descriptors that only exist on the wire.
    """

    @abstractmethod
    def to_dict(self) -> QueryClause:
        ...

    def to_local_query(self) -> Any:
        raise UnsupportedQueryError(
            f"{type(self).__name__} cannot be executed locally; send it to the search engine."
        )


@dataclass(frozen=True)
class NeuralQuery(WireQuery):
    field: str
    query_text: str
    model_id: str
    k: int
    ef_search: Optional[int] = None
    # Compared by value, left out of the hash.
    filter: Optional[QueryClause] = dataclasses.field(default=None, hash=False)
    boost: float = 1.0

    def __post_init__(self) -> None:
        if not self.field or not self.query_text or not self.model_id:
            raise ValueError("field, query_text and model_id must be non-blank.")
        if self.k < 1:
            raise ValueError(f"k must be >= 1: {self.k}")

    def to_dict(self) -> QueryClause:
        body: Dict[str, Any] = {
            "query_text": self.query_text,
            "model_id": self.model_id,
            "k": self.k,
        }
        if self.ef_search is not None:
            body["ef_search"] = self.ef_search
        if self.filter is not None:
            body["filter"] = to_clause(self.filter)
        if self.boost != 1.0:
            body["boost"] = self.boost
        return {"neural": {self.field: body}}


@dataclass(frozen=True)
class NestedNeuralQuery(WireQuery):
    """
    Neural query over chunk vectors stored in a nested field.
    """

    path: str
    query: NeuralQuery
    inner_hits_size: int = 1
    score_mode: str = "max"

    def to_dict(self) -> QueryClause:
        return {
            "nested": {
                "path": self.path,
                "query": self.query.to_dict(),
                "score_mode": self.score_mode,
                "inner_hits": {
                    "size": self.inner_hits_size,
                    "_source": False,
                },
            }
        }


AnyQuery = Union[QueryClause, WireQuery]


def to_clause(query: AnyQuery) -> QueryClause:
    """
    Serialize a compiled query (plain clause dict or descriptor) for the wire.
    """
    if isinstance(query, WireQuery):
        return query.to_dict()
    if isinstance(query, dict):
        return {key: _to_value(value) for key, value in query.items()}
    raise TypeError(f"Unsupported query type: {type(query).__name__}")


def _to_value(value: Any) -> Any:
    if isinstance(value, (WireQuery, dict)):
        return to_clause(value)
    if isinstance(value, list):
        return [_to_value(item) for item in value]
    return value
