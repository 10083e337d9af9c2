"""
Index Template Rewriters

Rewrite rules applied to the host index template when it is materialized.
Templates are JSON documents; each rule parses the document, inserts new
entries immediately before an anchor key wherever that key occurs, and
serializes the result.

- ``rewrite_settings``: ``default_pipeline`` before ``"index"`` (only when a
  pipeline is configured) and ``"knn": true`` before ``"codec"``.
- ``rewrite_mapping``: a ``knn_vector`` property (flat) or a nested chunk
  property plus a non-indexed chunk text field before ``"content"``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import ConfigSnapshot
from ..constants import CONTENT_FIELD

logger = logging.getLogger("semantic.template")

Entries = List[Tuple[str, Any]]

SETTINGS_INDEX_ANCHOR = "index"
SETTINGS_CODEC_ANCHOR = "codec"
MAPPING_ANCHOR = CONTENT_FIELD


# ---------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------

def insert_before(node: Any, anchor: str, entries: Entries) -> Tuple[Any, int]:
    """
    Return a copy of ``node`` with ``entries`` inserted before every ``anchor`` key.

    Returns
    -------
    Tuple[Any, int]
        The rewritten tree and the number of anchors found.
    """
    if isinstance(node, list):
        items = []
        found = 0
        for item in node:
            rewritten, count = insert_before(item, anchor, entries)
            items.append(rewritten)
            found += count
        return items, found

    if not isinstance(node, dict):
        return node, 0

    result: Dict[str, Any] = {}
    found = 0
    for key, value in node.items():
        if key == anchor:
            found += 1
            for new_key, new_value in entries:
                result[new_key] = new_value
        rewritten, count = insert_before(value, anchor, entries)
        found += count
        result[key] = rewritten
    return result, found


def _rewrite(source: str, steps: List[Tuple[str, Entries]]) -> str:
    try:
        tree = json.loads(source)
    except ValueError:
        logger.warning("Template is not valid JSON, left unchanged.")
        return source

    total = 0
    for anchor, entries in steps:
        tree, found = insert_before(tree, anchor, entries)
        total += found

    if not total:
        return source
    return json.dumps(tree, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------

def rewrite_settings(source: str, snapshot: ConfigSnapshot) -> str:
    logger.debug("pipeline: %s", snapshot.pipeline)

    steps: List[Tuple[str, Entries]] = []
    if snapshot.pipeline:
        steps.append((SETTINGS_INDEX_ANCHOR, [("default_pipeline", snapshot.pipeline)]))
    steps.append((SETTINGS_CODEC_ANCHOR, [("knn", True)]))
    return _rewrite(source, steps)


# ---------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------

def knn_vector_property(snapshot: ConfigSnapshot) -> Dict[str, Any]:
    """
    Build the ``knn_vector`` property definition for the vector field.
    """
    return {
        "type": "knn_vector",
        "dimension": snapshot.dimension,
        "method": {
            "name": snapshot.method,
            "engine": snapshot.engine,
            "space_type": snapshot.space_type,
            "parameters": {
                "m": snapshot.param_m,
                "ef_construction": snapshot.param_ef_construction,
            },
        },
    }


def mapping_entries(snapshot: ConfigSnapshot) -> Optional[Entries]:
    if not snapshot.mapping_enabled:
        return None

    field = snapshot.vector_field
    if not snapshot.nested_field:
        return [(field, knn_vector_property(snapshot))]

    entries: Entries = [
        (
            snapshot.nested_field,
            {
                "type": "nested",
                "properties": {field: knn_vector_property(snapshot)},
            },
        )
    ]
    if snapshot.chunk_field:
        entries.append((snapshot.chunk_field, {"type": "text", "index": False}))
    return entries


def rewrite_mapping(source: str, snapshot: ConfigSnapshot) -> str:
    logger.debug(
        "field: %s, nested: %s, dimension: %s, method: %s, engine: %s",
        snapshot.vector_field,
        snapshot.nested_field,
        snapshot.dimension,
        snapshot.method,
        snapshot.engine,
    )

    entries = mapping_entries(snapshot)
    if entries is None:
        return source
    return _rewrite(source, [(MAPPING_ANCHOR, entries)])
