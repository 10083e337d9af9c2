"""
Query String Parser

A deliberately small lexical parser for search-box query strings. It knows:

- bare terms:            ``fess``            -> TermNode(_default)
- quoted phrases:        ``"open source"``   -> PhraseNode(_default)
- field qualifiers:      ``title:fess``, ``title:"open source"``
- ranges:                ``content_length:[100 TO *]``, ``{a TO b}``

Terms are split on whitespace only; there are no analyzers, boolean
operators or fuzzy/wildcard syntax. Qualifiers on unknown fields are kept as
plain text so that URLs and the like still search the default field.

Filters registered with ``add_filter`` see the raw string before parsing and
may rewrite it. Each filter receives ``(query, chain)`` and must call
``chain(query)`` to continue.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..constants import DEFAULT_FIELD

_RANGE_RE = re.compile(r"^([\[{])\s*(\S+)\s+TO\s+(\S+)\s*([\]}])$")


@dataclass(frozen=True)
class TermNode:
    field: str
    text: str
    boost: float = 1.0


@dataclass(frozen=True)
class PhraseNode:
    field: str
    terms: Tuple[str, ...]
    boost: float = 1.0


@dataclass(frozen=True)
class RangeNode:
    field: str
    lower: Optional[str]
    upper: Optional[str]
    include_lower: bool = True
    include_upper: bool = True


QueryNode = Union[TermNode, PhraseNode, RangeNode]
ParseChain = Callable[[str], List[QueryNode]]
QueryFilter = Callable[[str, ParseChain], List[QueryNode]]


class QueryParser:
    def __init__(
        self,
        search_fields: Iterable[str] = (),
        default_field: str = DEFAULT_FIELD,
    ) -> None:
        self.search_fields = frozenset(search_fields)
        self.default_field = default_field
        self._filters: List[QueryFilter] = []

    def add_filter(self, query_filter: QueryFilter) -> None:
        self._filters.append(query_filter)

    def parse(self, query: str) -> List[QueryNode]:
        """
        Run the filter chain and parse the resulting string.
        """
        return self._chain(0)(query)

    def _chain(self, position: int) -> ParseChain:
        if position >= len(self._filters):
            return self._parse
        query_filter = self._filters[position]
        next_chain = self._chain(position + 1)
        return lambda query: query_filter(query, next_chain)

    # ------------------------------------------------------------------
    # Tokenizing
    # ------------------------------------------------------------------

    def _parse(self, query: str) -> List[QueryNode]:
        nodes: List[QueryNode] = []
        pos = 0
        length = len(query)
        while pos < length:
            if query[pos].isspace():
                pos += 1
                continue

            if query[pos] == '"':
                text, pos = self._read_quoted(query, pos)
                node = self._phrase(self.default_field, text)
                if node is not None:
                    nodes.append(node)
                continue

            field, rest_pos = self._read_qualifier(query, pos)
            if field is not None:
                node, pos = self._read_qualified(query, field, rest_pos)
                if node is not None:
                    nodes.append(node)
                continue

            end = pos
            while end < length and not query[end].isspace():
                end += 1
            nodes.append(TermNode(self.default_field, query[pos:end]))
            pos = end
        return nodes

    def _read_qualifier(self, query: str, pos: int) -> Tuple[Optional[str], int]:
        colon = query.find(":", pos)
        if colon <= pos:
            return None, pos
        name = query[pos:colon]
        if name not in self.search_fields or colon + 1 >= len(query):
            return None, pos
        if query[colon + 1].isspace():
            return None, pos
        return name, colon + 1

    def _read_qualified(self, query: str, field: str, pos: int) -> Tuple[Optional[QueryNode], int]:
        if query[pos] == '"':
            text, end = self._read_quoted(query, pos)
            return self._phrase(field, text), end

        if query[pos] in "[{":
            close = query.find("]" if query[pos] == "[" else "}", pos)
            if close != -1:
                match = _RANGE_RE.match(query[pos:close + 1])
                if match:
                    open_b, lower, upper, close_b = match.groups()
                    return (
                        RangeNode(
                            field=field,
                            lower=None if lower == "*" else lower,
                            upper=None if upper == "*" else upper,
                            include_lower=open_b == "[",
                            include_upper=close_b == "]",
                        ),
                        close + 1,
                    )

        end = pos
        while end < len(query) and not query[end].isspace():
            end += 1
        return TermNode(field, query[pos:end]), end

    @staticmethod
    def _read_quoted(query: str, pos: int) -> Tuple[str, int]:
        close = query.find('"', pos + 1)
        if close == -1:
            return query[pos + 1:], len(query)
        return query[pos + 1:close], close + 1

    @staticmethod
    def _phrase(field: str, text: str) -> Optional[PhraseNode]:
        terms = tuple(text.split())
        if not terms:
            return None
        return PhraseNode(field, terms)
