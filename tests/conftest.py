import pytest

from semantic_search.config import ConfigStore, Settings
from semantic_search.context import RequestContextStore
from semantic_search.helper import SemanticSearchHelper


NEURAL_SETTINGS = {
    "model_id": "modelx",
    "vector_field": "content_vector",
}

NESTED_SETTINGS = {
    "model_id": "modelx",
    "vector_field": "knn",
    "nested_field": "content_nested",
    "chunk_field": "content_chunks",
    "chunk_size": "3",
}


@pytest.fixture
def make_store():
    """Build a loaded ConfigStore from keyword settings."""
    def _make(**values):
        store = ConfigStore(settings_factory=lambda: Settings(**values))
        store.load()
        return store
    return _make


@pytest.fixture
def make_helper(make_store):
    def _make(**values):
        return SemanticSearchHelper(make_store(**values), RequestContextStore())
    return _make
