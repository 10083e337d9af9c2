"""
Query Commands

Compiles parsed query nodes into search engine clauses in two stages:

1. ``decide`` returns a neural query descriptor when the node searches the
   unified default field, a request context is active and the helper can
   build a neural query; otherwise it returns ``DEFER``.
2. On ``DEFER`` the lexical builder converts the node exactly as it would
   without semantic search.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from ..constants import DEFAULT_FIELD
from .lexical import LexicalQueryBuilder, QueryContext
from .neural import AnyQuery, WireQuery
from .parser import PhraseNode, QueryNode, RangeNode, TermNode

if TYPE_CHECKING:
    from ..helper import SemanticSearchHelper

logger = logging.getLogger("semantic.query")


class _Defer:
    def __repr__(self) -> str:
        return "DEFER"


DEFER = _Defer()

Decision = Union[WireQuery, _Defer]


def decide(helper: "SemanticSearchHelper", field: str, text: str) -> Decision:
    if field != DEFAULT_FIELD or helper.get_context() is None:
        return DEFER
    query = helper.new_neural_query(text)
    if query is None:
        return DEFER
    return query


class _SemanticCommand:
    def __init__(
        self,
        helper: "SemanticSearchHelper",
        lexical: Optional[LexicalQueryBuilder] = None,
    ) -> None:
        self.helper = helper
        self.lexical = lexical or LexicalQueryBuilder()

    def _accept(self, context: QueryContext, field: str, text: str, query: WireQuery) -> WireQuery:
        context.add_field_log(field, text)
        context.add_highlighted_query(text)
        logger.debug("NeuralQuery: %s", query)
        return query


class TermQueryCommand(_SemanticCommand):
    def execute(self, context: QueryContext, node: TermNode) -> AnyQuery:
        decision = decide(self.helper, node.field, node.text)
        if decision is DEFER:
            return self.lexical.term(context, node.field, node.text, node.boost)
        return self._accept(context, node.field, node.text, decision)


class PhraseQueryCommand(_SemanticCommand):
    def execute(self, context: QueryContext, node: PhraseNode) -> AnyQuery:
        text = " ".join(node.terms)
        decision = decide(self.helper, node.field, text)
        if decision is DEFER:
            return self.lexical.phrase(context, node.field, node.terms, node.boost)
        return self._accept(context, node.field, text, decision)


class QueryCompiler:
    """
    Compile a list of parsed nodes into one query clause.

    Several nodes are combined with ``bool.must``; an empty query matches all
    documents.
    """

    def __init__(
        self,
        helper: "SemanticSearchHelper",
        lexical: Optional[LexicalQueryBuilder] = None,
    ) -> None:
        self.lexical = lexical or LexicalQueryBuilder()
        self.term_command = TermQueryCommand(helper, self.lexical)
        self.phrase_command = PhraseQueryCommand(helper, self.lexical)

    def compile(self, context: QueryContext, nodes: Sequence[QueryNode]) -> AnyQuery:
        clauses: List[AnyQuery] = [self._compile_node(context, node) for node in nodes]
        if not clauses:
            return {"match_all": {}}
        if len(clauses) == 1:
            return clauses[0]
        return {"bool": {"must": clauses}}

    def _compile_node(self, context: QueryContext, node: QueryNode) -> AnyQuery:
        if isinstance(node, PhraseNode):
            return self.phrase_command.execute(context, node)
        if isinstance(node, TermNode):
            return self.term_command.execute(context, node)
        if isinstance(node, RangeNode):
            return self.lexical.range(context, node)
        raise TypeError(f"Unsupported query node: {type(node).__name__}")
