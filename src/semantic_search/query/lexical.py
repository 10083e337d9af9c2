"""
Lexical Query Building

Converts parsed query nodes into OpenSearch full-text clauses. This is the
fallback path used whenever a node is not replaced by a neural query.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..constants import DEFAULT_FIELD, DEFAULT_FIELD_BOOSTS
from .neural import QueryClause
from .parser import RangeNode


class QueryContext:
    """
    Per-compilation bookkeeping: which field/text pairs were searched and
    which texts should be highlighted.
    """

    def __init__(self, query_string: str) -> None:
        self.query_string = query_string
        self.field_logs: Dict[str, List[str]] = {}
        self.highlighted_queries: List[str] = []

    def add_field_log(self, field: str, text: str) -> None:
        self.field_logs.setdefault(field, []).append(text)

    def add_highlighted_query(self, text: str) -> None:
        if text not in self.highlighted_queries:
            self.highlighted_queries.append(text)


class LexicalQueryBuilder:
    def __init__(
        self,
        default_field_boosts: Optional[Mapping[str, float]] = None,
        default_field: str = DEFAULT_FIELD,
    ) -> None:
        self.default_field_boosts = dict(default_field_boosts or DEFAULT_FIELD_BOOSTS)
        self.default_field = default_field

    def term(self, context: QueryContext, field: str, text: str, boost: float = 1.0) -> QueryClause:
        context.add_field_log(field, text)
        context.add_highlighted_query(text)
        if field == self.default_field:
            return self._over_default_fields("match", text, boost)
        return {"match": {field: {"query": text, "boost": boost}}}

    def phrase(
        self,
        context: QueryContext,
        field: str,
        texts: Sequence[str],
        boost: float = 1.0,
    ) -> QueryClause:
        text = " ".join(texts)
        context.add_field_log(field, text)
        context.add_highlighted_query(text)
        if field == self.default_field:
            return self._over_default_fields("match_phrase", text, boost)
        return {"match_phrase": {field: {"query": text, "slop": 0, "boost": boost}}}

    def range(self, context: QueryContext, node: RangeNode) -> QueryClause:
        bounds: Dict[str, Any] = {}
        if node.lower is not None:
            bounds["gte" if node.include_lower else "gt"] = node.lower
        if node.upper is not None:
            bounds["lte" if node.include_upper else "lt"] = node.upper
        context.add_field_log(node.field, f"{node.lower or '*'} TO {node.upper or '*'}")
        return {"range": {node.field: bounds}}

    def _over_default_fields(self, kind: str, text: str, boost: float) -> QueryClause:
        should = [
            {kind: {field: {"query": text, "boost": weight * boost}}}
            for field, weight in self.default_field_boosts.items()
        ]
        return {"bool": {"should": should}}
