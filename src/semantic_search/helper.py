"""
Semantic Search Helper

Central wiring point of the semantic search layer:

- registers the index template rewrite rules,
- registers the pre-parse query rewrite on the query parser,
- builds neural query descriptors from the current configuration,
- owns the request context store.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ConfigSnapshot, ConfigStore
from .constants import DEFAULT_CHUNK_SIZE, DEFAULT_PAGE_SIZE
from .context import RequestContext, RequestContextStore
from .engine import rewriters
from .engine.templates import IndexTemplate
from .query.neural import NestedNeuralQuery, NeuralQuery, WireQuery
from .query.parser import ParseChain, QueryParser

logger = logging.getLogger("semantic.helper")


class SemanticSearchHelper:
    def __init__(
        self,
        config_store: ConfigStore,
        context_store: Optional[RequestContextStore] = None,
    ) -> None:
        self.config_store = config_store
        self.context_store = context_store or RequestContextStore()
        self._registered = False

    @property
    def config(self) -> ConfigSnapshot:
        return self.config_store.snapshot

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def init(
        self,
        template: Optional[IndexTemplate] = None,
        parser: Optional[QueryParser] = None,
    ) -> None:
        """
        Register the template rewrite rules and the query filter.

        Registration happens once per helper; later calls are ignored.
        """
        if self._registered:
            logger.debug("SemanticSearchHelper is already initialized.")
            return
        self._registered = True

        if template is not None:
            template.add_setting_rewrite_rule(
                lambda s: rewriters.rewrite_settings(s, self.config)
            )
            template.add_mapping_rewrite_rule(
                lambda s: rewriters.rewrite_mapping(s, self.config)
            )

        if parser is not None:
            self.attach_query_filter(parser)

    def attach_query_filter(self, parser: QueryParser) -> None:
        """
        Register the pre-parse quote rewrite on ``parser``.
        """
        parser.add_filter(self._query_filter)

    def _query_filter(self, query: str, chain: ParseChain):
        return chain(self.rewrite_query(query))

    # ------------------------------------------------------------------
    # Pre-parse rewrite
    # ------------------------------------------------------------------

    def rewrite_query(self, query: Optional[str]) -> Optional[str]:
        """
        Quote an unquoted multi-token query so that it is parsed as a phrase.

        The query is left alone when it is blank, already contains a quote,
        has no whitespace, qualifies a searchable field (``title:...``), or
        no model is configured.
        """
        if not query or not query.strip() or '"' in query:
            return query
        if not any(ch.isspace() for ch in query):
            return query

        config = self.config
        for field in config.search_fields:
            if f"{field}:" in query:
                return query

        if not config.model_id:
            return query

        return f'"{query}"'

    # ------------------------------------------------------------------
    # Neural query construction
    # ------------------------------------------------------------------

    def new_neural_query(self, text: Optional[str]) -> Optional[WireQuery]:
        """
        Build the neural query for ``text``.

        Returns
        -------
        Optional[WireQuery]
            ``None`` when the model id, the vector field or the text is blank.
            A ``NestedNeuralQuery`` when chunk vectors live in a nested field,
            otherwise a ``NeuralQuery``.
        """
        config = self.config
        model_id = config.model_id
        field = config.vector_field
        if not model_id or not field or not text or not text.strip():
            return None

        nested_field = config.nested_field
        target = f"{nested_field}.{field}" if nested_field else field

        query = NeuralQuery(
            field=target,
            query_text=" ".join(text.split()),
            model_id=model_id,
            k=self._page_size(),
            ef_search=config.param_ef_search,
        )
        if not nested_field:
            return query

        return NestedNeuralQuery(
            path=nested_field,
            query=query,
            inner_hits_size=config.chunk_size or DEFAULT_CHUNK_SIZE,
        )

    def _page_size(self) -> int:
        context = self.get_context()
        params = context.params if context is not None else None
        get_page_size = getattr(params, "get_page_size", None)
        if get_page_size is None:
            return DEFAULT_PAGE_SIZE
        page_size = get_page_size()
        if page_size is None or page_size < 1:
            return DEFAULT_PAGE_SIZE
        return page_size

    # ------------------------------------------------------------------
    # Result floors
    # ------------------------------------------------------------------

    def get_min_score(self) -> Optional[float]:
        return self.config.min_score

    def get_min_content_length(self) -> Optional[int]:
        return self.config.min_content_length

    # ------------------------------------------------------------------
    # Request context
    # ------------------------------------------------------------------

    def create_context(self, query, params, caller=None) -> RequestContext:
        return self.context_store.create_context(query, params, caller)

    def get_context(self) -> Optional[RequestContext]:
        return self.context_store.get_context()

    def close_context(self) -> None:
        self.context_store.close_context()
