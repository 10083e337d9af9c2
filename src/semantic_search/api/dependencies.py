"""
Component wiring for the API layer.

Each component is a process-wide singleton created on first use. Tests
replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from ..config import ConfigStore, get_settings
from ..engine.client import SearchEngineClient
from ..engine.templates import IndexTemplate
from ..helper import SemanticSearchHelper
from ..ml.lifecycle import ModelLifecycle
from ..query.parser import QueryParser
from ..search.searcher import SemanticSearcher


@lru_cache
def get_model_lifecycle() -> ModelLifecycle:
    return ModelLifecycle()


@lru_cache
def get_config_store() -> ConfigStore:
    return ConfigStore(deployer=get_model_lifecycle().ensure_deployed)


@lru_cache
def get_index_template() -> IndexTemplate:
    return IndexTemplate()


@lru_cache
def get_query_parser() -> QueryParser:
    return QueryParser(get_config_store().snapshot.search_fields)


@lru_cache
def get_helper() -> SemanticSearchHelper:
    helper = SemanticSearchHelper(get_config_store())
    helper.init(template=get_index_template(), parser=get_query_parser())
    return helper


@lru_cache
def get_searcher() -> SemanticSearcher:
    return SemanticSearcher(
        helper=get_helper(),
        engine=SearchEngineClient(),
        index_name=get_settings().index_name,
        parser=get_query_parser(),
    )
