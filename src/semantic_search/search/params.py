"""
Search Request Parameters

``SearchRequestParams`` carries what the caller asked for. Query compilation
and request building read it only through its ``get_*`` accessors, which is
what lets ``SearchRequestParamsWrapper`` adjust a request for the neural path
without copying or mutating the caller's object.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchRequestParams(BaseModel):
    query: str = ""
    fields: Dict[str, List[str]] = Field(default_factory=dict)
    conditions: Dict[str, List[str]] = Field(default_factory=dict)
    languages: List[str] = Field(default_factory=list)
    geo_info: Optional[Dict[str, Any]] = None
    facet_info: Optional[Dict[str, Any]] = None
    highlight_info: Optional[Dict[str, Any]] = None
    sort: Optional[str] = None
    start_position: int = Field(default=0, ge=0)
    page_size: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
    extra_queries: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    locale: Optional[str] = None
    request_type: str = "json"
    similar_doc_hash: Optional[str] = None
    min_score: Optional[float] = None
    response_fields: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def get_query(self) -> str:
        return self.query

    def get_fields(self) -> Dict[str, List[str]]:
        return self.fields

    def get_conditions(self) -> Dict[str, List[str]]:
        return self.conditions

    def get_languages(self) -> List[str]:
        return self.languages

    def get_geo_info(self) -> Optional[Dict[str, Any]]:
        return self.geo_info

    def get_facet_info(self) -> Optional[Dict[str, Any]]:
        return self.facet_info

    def get_highlight_info(self) -> Optional[Dict[str, Any]]:
        return self.highlight_info

    def get_sort(self) -> Optional[str]:
        return self.sort

    def get_start_position(self) -> int:
        return self.start_position

    def get_page_size(self) -> Optional[int]:
        return self.page_size

    def get_offset(self) -> int:
        return self.offset

    def get_extra_queries(self) -> List[str]:
        return self.extra_queries

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def get_locale(self) -> Optional[str]:
        return self.locale

    def get_type(self) -> str:
        return self.request_type

    def get_similar_doc_hash(self) -> Optional[str]:
        return self.similar_doc_hash

    def get_min_score(self) -> Optional[float]:
        return self.min_score

    def get_response_fields(self) -> List[str]:
        return self.response_fields


class SearchRequestParamsWrapper:
    """
    Read-only view of SearchRequestParams for the neural search path.

    - ``get_min_score`` returns the configured score floor.
    - Geo, facet and highlight requests are suppressed.
    - Everything else delegates to the wrapped parameters.
    """

    def __init__(
        self,
        parent: SearchRequestParams,
        min_score: Optional[float],
    ) -> None:
        self.parent = parent
        self.min_score = min_score

    def __repr__(self) -> str:
        return f"SearchRequestParamsWrapper(parent={self.parent!r}, min_score={self.min_score!r})"

    def get_query(self) -> str:
        return self.parent.get_query()

    def get_fields(self) -> Dict[str, List[str]]:
        return self.parent.get_fields()

    def get_conditions(self) -> Dict[str, List[str]]:
        return self.parent.get_conditions()

    def get_languages(self) -> List[str]:
        return self.parent.get_languages()

    def get_geo_info(self) -> None:
        return None

    def get_facet_info(self) -> None:
        return None

    def get_highlight_info(self) -> None:
        return None

    def get_sort(self) -> Optional[str]:
        return self.parent.get_sort()

    def get_start_position(self) -> int:
        return self.parent.get_start_position()

    def get_page_size(self) -> Optional[int]:
        return self.parent.get_page_size()

    def get_offset(self) -> int:
        return self.parent.get_offset()

    def get_extra_queries(self) -> List[str]:
        return self.parent.get_extra_queries()

    def get_attribute(self, name: str) -> Any:
        return self.parent.get_attribute(name)

    def get_locale(self) -> Optional[str]:
        return self.parent.get_locale()

    def get_type(self) -> str:
        return self.parent.get_type()

    def get_similar_doc_hash(self) -> Optional[str]:
        return self.parent.get_similar_doc_hash()

    def get_min_score(self) -> Optional[float]:
        return self.min_score

    def get_response_fields(self) -> List[str]:
        return self.parent.get_response_fields()
