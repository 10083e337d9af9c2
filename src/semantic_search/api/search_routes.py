"""
Search Routes

Search-box endpoint. Queries on the default field are answered with neural
(vector) retrieval when a model is configured and fall back to lexical
search otherwise; callers see the same response shape either way.
"""

from fastapi import APIRouter, Depends, status
from typing import Annotated, Optional

from .models import SearchRequest, SearchResponse
from .dependencies import get_searcher
from ..auth.models import CallerIdentity
from ..auth.security import optional_caller
from ..search.params import SearchRequestParams
from ..search.searcher import SemanticSearcher

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "/",
    response_model=SearchResponse,
    summary="Hybrid lexical/neural search",
    status_code=status.HTTP_200_OK,
)
def search(
    req: SearchRequest,
    caller: Annotated[Optional[CallerIdentity], Depends(optional_caller)],
    searcher: Annotated[SemanticSearcher, Depends(get_searcher)],
) -> SearchResponse:
    """
    Run one search.

    This is a plain ``def`` route: FastAPI runs it on its worker threadpool,
    and the request context lives on that worker thread for the duration of
    the call.
    """
    params = SearchRequestParams(
        query=req.query,
        start_position=req.start,
        page_size=req.page_size,
        fields=req.fields,
        sort=req.sort,
        response_fields=req.response_fields,
    )

    result = searcher.search(req.query, params, caller)

    return SearchResponse(
        total=result.total,
        documents=result.documents,
        highlighted_queries=result.highlighted_queries,
    )
