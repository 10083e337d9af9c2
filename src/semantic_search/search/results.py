"""
Search Result Reconstruction

Turns raw search engine hits into result documents. When chunk vectors are
stored in a nested field, the nested query reports the matching chunks as
inner hits; each inner hit carries the offset of its chunk within the
document. The document also stores the chunk texts as a parallel array, so
the matched passages can be stitched back together here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..config import ConfigSnapshot
from ..constants import CONTENT_DESCRIPTION_FIELD

logger = logging.getLogger("semantic.results")


class SearchResult(BaseModel):
    """
    One page of reconstructed hits.
    """

    total: int = Field(..., ge=0)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    highlighted_queries: List[str] = Field(default_factory=list)


def inner_hit_offsets(hit: Dict[str, Any], nested_field: str) -> Optional[List[Any]]:
    """
    Return the nested offsets of a hit's inner hits, or None if it has none.
    """
    inner = (hit.get("inner_hits") or {}).get(nested_field)
    if not inner:
        return None
    offsets = []
    for inner_hit in inner.get("hits", {}).get("hits", []):
        offsets.append((inner_hit.get("_nested") or {}).get("offset"))
    return offsets


def matched_chunks(chunks: Optional[List[Any]], offsets: List[Any]) -> List[str]:
    """
    Collect the chunks at ``offsets`` in first-match order.

    Offsets that are missing, not integers or out of bounds are skipped.
    """
    if not chunks:
        return []
    matched: List[str] = []
    seen = set()
    for offset in offsets:
        if not isinstance(offset, int) or isinstance(offset, bool):
            continue
        if offset < 0 or offset >= len(chunks):
            logger.debug("Chunk offset %s is out of bounds (%d chunks).", offset, len(chunks))
            continue
        if offset in seen:
            continue
        seen.add(offset)
        matched.append(chunks[offset])
    return matched


def reconstruct_hit(
    hit: Dict[str, Any],
    nested_field: Optional[str],
    chunk_field: Optional[str],
    description_field: str = CONTENT_DESCRIPTION_FIELD,
) -> Dict[str, Any]:
    """
    Build the result document for one hit.

    The document is the hit's ``_source`` plus ``_id`` and ``score``. When the
    hit carries inner hits for ``nested_field``, the stored chunk array is
    replaced by the matched chunks and the first match becomes the
    description.
    """
    doc: Dict[str, Any] = dict(hit.get("_source") or {})
    doc["_id"] = hit.get("_id")
    doc["score"] = hit.get("_score")

    if not nested_field or not chunk_field:
        return doc

    offsets = inner_hit_offsets(hit, nested_field)
    if offsets is None:
        return doc

    chunks = doc.pop(chunk_field, None)
    if chunks is not None and not isinstance(chunks, list):
        chunks = [chunks]

    matched = matched_chunks(chunks, offsets)
    if matched:
        doc[description_field] = matched[0]
    doc[chunk_field] = matched
    return doc


def parse_search_hits(response: Dict[str, Any], config: ConfigSnapshot) -> List[Dict[str, Any]]:
    hits = response.get("hits", {}).get("hits", [])
    return [
        reconstruct_hit(hit, config.nested_field, config.chunk_field)
        for hit in hits
    ]


def total_hits(response: Dict[str, Any]) -> int:
    total = response.get("hits", {}).get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)
