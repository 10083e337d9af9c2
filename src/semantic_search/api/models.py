"""
API Models

Pydantic request/response models for the search and admin endpoints.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Search-box query plus paging and filter options.
    """
    query: str = Field(..., min_length=1)
    start: int = Field(default=0, ge=0)
    page_size: Optional[int] = Field(default=None, ge=1, le=1000)
    fields: Dict[str, List[str]] = Field(default_factory=dict)
    sort: Optional[str] = None
    response_fields: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class SearchResponse(BaseModel):
    total: int = Field(..., ge=0)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    highlighted_queries: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Admin Models
# ---------------------------------------------------------------------

class ReloadResponse(BaseModel):
    """
    Summary of the configuration after a reload.
    """
    status: str = "reloaded"
    model_id: Optional[str] = None
    vector_field: Optional[str] = None
    nested_field: Optional[str] = None
    neural_enabled: bool = False
    model_deployed: bool = False

    model_config = ConfigDict(extra="forbid", protected_namespaces=())


class TemplateRequest(BaseModel):
    """
    Index settings and mapping documents to run through the rewrite rules.
    """
    settings: Dict[str, Any]
    mapping: Dict[str, Any]

    model_config = ConfigDict(extra="forbid")


class TemplateResponse(BaseModel):
    settings: Dict[str, Any]
    mapping: Dict[str, Any]

    model_config = ConfigDict(extra="forbid")
