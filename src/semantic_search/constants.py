"""
Shared constants for the semantic search layer.

Field names mirror the host index schema; defaults mirror the host search
UI (page size) and the OpenSearch k-NN plugin (HNSW parameters).
"""

from typing import Final

# Unified default search field the lexical parser assigns to bare terms.
DEFAULT_FIELD: Final = "_default"

DEFAULT_PAGE_SIZE: Final = 20

CONTENT_FIELD: Final = "content"
TITLE_FIELD: Final = "title"
CONTENT_LENGTH_FIELD: Final = "content_length"
CONTENT_DESCRIPTION_FIELD: Final = "content_description"

DEFAULT_SPACE_TYPE: Final = "cosinesimil"
DEFAULT_PARAM_M: Final = 16
DEFAULT_PARAM_EF_CONSTRUCTION: Final = 100
DEFAULT_CHUNK_SIZE: Final = 1

# Lexical boosts applied when a bare term is expanded over the default fields.
DEFAULT_FIELD_BOOSTS: Final = {
    TITLE_FIELD: 0.5,
    CONTENT_FIELD: 0.05,
}
