"""
Semantic Searcher

Entry point for one search call on the semantic path:

1. Wrap the caller's parameters (score floor, no geo/facet/highlight).
2. Append the content-length range clause when a floor is configured.
3. Publish the request context, then parse and compile the query. Nodes on
   the default field become neural queries; everything else stays lexical.
4. Execute the request body on the search engine.
5. Reconstruct matched chunks from the hits.

The request context is closed on every path, including errors, so pooled
worker threads never leak it into the next request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..auth.models import CallerIdentity
from ..config import ConfigSnapshot
from ..constants import CONTENT_LENGTH_FIELD, DEFAULT_PAGE_SIZE
from ..engine.client import SearchEngineClient
from ..helper import SemanticSearchHelper
from ..query.commands import QueryCompiler
from ..query.lexical import QueryContext
from ..query.neural import AnyQuery, NestedNeuralQuery, to_clause
from ..query.parser import QueryParser
from .params import SearchRequestParams, SearchRequestParamsWrapper
from .results import SearchResult, parse_search_hits, total_hits

logger = logging.getLogger("semantic.searcher")


class SemanticSearcher:
    def __init__(
        self,
        helper: SemanticSearchHelper,
        engine: SearchEngineClient,
        index_name: str,
        parser: Optional[QueryParser] = None,
        compiler: Optional[QueryCompiler] = None,
    ) -> None:
        self.helper = helper
        self.engine = engine
        self.index_name = index_name
        if parser is None:
            parser = QueryParser(helper.config.search_fields)
            helper.attach_query_filter(parser)
        self.parser = parser
        self.compiler = compiler or QueryCompiler(helper)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        params: SearchRequestParams,
        caller: Optional[CallerIdentity] = None,
    ) -> SearchResult:
        config = self.helper.config
        req_params = SearchRequestParamsWrapper(params, self.helper.get_min_score())
        query_string = self.augment_query(query)

        with self.helper.context_store.scoped(query, req_params, caller):
            context = QueryContext(query_string)
            nodes = self.parser.parse(query_string)
            compiled = self.compiler.compile(context, nodes)
            body = self.build_request_body(compiled, req_params, config)
            response = self.engine.search(self.index_name, body)

        return SearchResult(
            total=total_hits(response),
            documents=parse_search_hits(response, config),
            highlighted_queries=context.highlighted_queries,
        )

    def augment_query(self, query: str) -> str:
        """
        Append a ``content_length`` range clause when a minimum length is set.

        A multi-token query is quoted first so that the range clause stays an
        independent clause instead of becoming part of the phrase.
        """
        min_content_length = self.helper.get_min_content_length()
        if not query or not query.strip():
            return query
        if min_content_length is None or min_content_length < 0:
            return query
        if not self.is_searchable_field(CONTENT_LENGTH_FIELD):
            return query

        augmented = (
            f"{self.helper.rewrite_query(query)} "
            f"{CONTENT_LENGTH_FIELD}:[{min_content_length} TO *]"
        )
        logger.debug("append %s range query: %s", CONTENT_LENGTH_FIELD, augmented)
        return augmented

    def is_searchable_field(self, field: Optional[str]) -> bool:
        if not field:
            return False
        return field in self.helper.config.search_fields

    # ------------------------------------------------------------------
    # Request body
    # ------------------------------------------------------------------

    def build_request_body(
        self,
        query: AnyQuery,
        params: Any,
        config: ConfigSnapshot,
    ) -> Dict[str, Any]:
        clause = to_clause(query)

        filters: List[Dict[str, Any]] = [
            {"terms": {field: values}}
            for field, values in params.get_fields().items()
            if values
        ]
        geo_info = params.get_geo_info()
        if geo_info:
            filters.append(geo_info)
        if filters:
            clause = {"bool": {"must": [clause], "filter": filters}}

        body: Dict[str, Any] = {
            "query": clause,
            "from": params.get_start_position(),
            "size": params.get_page_size() or DEFAULT_PAGE_SIZE,
            "track_total_hits": True,
        }

        min_score = params.get_min_score()
        if min_score is not None:
            body["min_score"] = min_score

        source = list(params.get_response_fields() or config.response_fields)
        if source:
            if (
                config.chunk_field
                and config.chunk_field not in source
                and _has_nested_neural(query)
            ):
                source.append(config.chunk_field)
            body["_source"] = source

        sort = _parse_sort(params.get_sort())
        if sort:
            body["sort"] = sort

        highlight_info = params.get_highlight_info()
        if highlight_info:
            body["highlight"] = highlight_info

        facet_info = params.get_facet_info()
        if facet_info:
            body["aggs"] = facet_info

        return body


def _has_nested_neural(query: Any) -> bool:
    if isinstance(query, NestedNeuralQuery):
        return True
    if isinstance(query, dict):
        return any(_has_nested_neural(value) for value in query.values())
    if isinstance(query, list):
        return any(_has_nested_neural(item) for item in query)
    return False


def _parse_sort(sort: Optional[str]) -> List[Dict[str, str]]:
    """
    Parse ``"score.desc,title.asc"`` into an OpenSearch sort list.
    """
    if not sort:
        return []
    result = []
    for part in sort.split(","):
        part = part.strip()
        if not part:
            continue
        name, _, order = part.rpartition(".")
        if not name or order not in ("asc", "desc"):
            name, order = part, "asc"
        if name == "score":
            name = "_score"
        result.append({name: order})
    return result
