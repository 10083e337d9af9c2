import pytest
from unittest.mock import MagicMock

from semantic_search.core.errors import SearchEngineError
from semantic_search.engine.client import SearchEngineClient
from semantic_search.search.params import SearchRequestParams
from semantic_search.search.searcher import SemanticSearcher

from conftest import NESTED_SETTINGS, NEURAL_SETTINGS


EMPTY_RESPONSE = {"hits": {"total": {"value": 0}, "hits": []}}


@pytest.fixture
def engine():
    mock = MagicMock(spec=SearchEngineClient)
    mock.search.return_value = EMPTY_RESPONSE
    return mock


def make_searcher(helper, engine):
    return SemanticSearcher(helper=helper, engine=engine, index_name="fess")


def sent_body(engine):
    index, body = engine.search.call_args.args
    assert index == "fess"
    return body


def test_neural_search_request_body(make_helper, engine):
    helper = make_helper(min_score="0.3", **NEURAL_SETTINGS)
    searcher = make_searcher(helper, engine)

    searcher.search("fess", SearchRequestParams(page_size=35, start_position=35))

    body = sent_body(engine)
    assert body["query"] == {
        "neural": {"content_vector": {"query_text": "fess", "model_id": "modelx", "k": 35}}
    }
    assert body["from"] == 35
    assert body["size"] == 35
    assert body["min_score"] == 0.3


def test_caller_highlight_and_facets_are_dropped(make_helper, engine):
    helper = make_helper(**NEURAL_SETTINGS)
    params = SearchRequestParams(
        highlight_info={"fields": {"content": {}}},
        facet_info={"label": {"terms": {"field": "label"}}},
        geo_info={"geo_distance": {"distance": "1km"}},
        min_score=5.0,
    )

    make_searcher(helper, engine).search("fess", params)

    body = sent_body(engine)
    assert "highlight" not in body
    assert "aggs" not in body
    assert "min_score" not in body
    assert "bool" not in body["query"]


def test_field_filters_and_sort(make_helper, engine):
    helper = make_helper(**NEURAL_SETTINGS)
    params = SearchRequestParams(fields={"label": ["docs"]}, sort="score.desc,title.asc")

    make_searcher(helper, engine).search("fess", params)

    body = sent_body(engine)
    assert body["query"]["bool"]["filter"] == [{"terms": {"label": ["docs"]}}]
    assert body["sort"] == [{"_score": "desc"}, {"title": "asc"}]


def test_chunk_field_added_to_source(make_helper, engine):
    helper = make_helper(**NESTED_SETTINGS)

    make_searcher(helper, engine).search("fess", SearchRequestParams(response_fields=["title"]))

    assert sent_body(engine)["_source"] == ["title", "content_chunks"]


def test_content_length_clause_appended(make_helper, engine):
    helper = make_helper(min_content_length="100", **NEURAL_SETTINGS)
    searcher = make_searcher(helper, engine)

    assert searcher.augment_query("open source") == '"open source" content_length:[100 TO *]'
    assert searcher.augment_query("fess") == "fess content_length:[100 TO *]"
    assert searcher.augment_query("") == ""


def test_content_length_clause_compiles_to_range(make_helper, engine):
    helper = make_helper(min_content_length="100", **NEURAL_SETTINGS)

    make_searcher(helper, engine).search("open source", SearchRequestParams())

    must = sent_body(engine)["query"]["bool"]["must"]
    assert must[0]["neural"]["content_vector"]["query_text"] == "open source"
    assert must[1] == {"range": {"content_length": {"gte": "100"}}}


def test_content_length_not_searchable(make_helper, engine):
    helper = make_helper(min_content_length="100", search_fields="title,content", **NEURAL_SETTINGS)

    assert make_searcher(helper, engine).augment_query("fess") == "fess"


def test_negative_content_length_is_ignored(make_helper, engine):
    helper = make_helper(min_content_length="-1", **NEURAL_SETTINGS)

    assert make_searcher(helper, engine).augment_query("fess") == "fess"


def test_lexical_fallback_without_model(make_helper, engine):
    helper = make_helper(vector_field="content_vector")

    make_searcher(helper, engine).search("fess", SearchRequestParams())

    assert sent_body(engine)["query"] == {
        "bool": {
            "should": [
                {"match": {"title": {"query": "fess", "boost": 0.5}}},
                {"match": {"content": {"query": "fess", "boost": 0.05}}},
            ]
        }
    }


def test_context_visible_during_search(make_helper, engine):
    helper = make_helper(**NEURAL_SETTINGS)
    seen = {}

    def capture(index, body):
        seen["context"] = helper.get_context()
        return EMPTY_RESPONSE

    engine.search.side_effect = capture

    make_searcher(helper, engine).search("fess", SearchRequestParams(page_size=5))

    assert seen["context"].query == "fess"
    assert seen["context"].params.get_page_size() == 5
    assert helper.get_context() is None


def test_context_closed_when_engine_fails(make_helper, engine):
    helper = make_helper(**NEURAL_SETTINGS)
    engine.search.side_effect = SearchEngineError("down")

    with pytest.raises(SearchEngineError):
        make_searcher(helper, engine).search("fess", SearchRequestParams())

    assert helper.get_context() is None
    assert len(helper.context_store) == 0


def test_result_documents_and_highlights(make_helper, engine):
    helper = make_helper(**NESTED_SETTINGS)
    engine.search.return_value = {
        "hits": {
            "total": {"value": 1},
            "hits": [
                {
                    "_id": "d1",
                    "_score": 2.0,
                    "_source": {"title": "Fess", "content_chunks": ["a", "b"]},
                    "inner_hits": {
                        "content_nested": {"hits": {"hits": [{"_nested": {"offset": 1}}]}}
                    },
                }
            ],
        }
    }

    result = make_searcher(helper, engine).search("fess", SearchRequestParams())

    assert result.total == 1
    assert result.documents[0]["content_description"] == "b"
    assert result.highlighted_queries == ["fess"]


def test_multi_token_query_becomes_one_neural_clause(make_helper, engine):
    helper = make_helper(**NEURAL_SETTINGS)

    make_searcher(helper, engine).search("This is Fess.", SearchRequestParams())

    assert sent_body(engine)["query"] == {
        "neural": {
            "content_vector": {
                "query_text": "This is Fess.",
                "model_id": "modelx",
                "k": 20,
            }
        }
    }


def test_chunk_field_not_fetched_for_lexical_fallback(make_helper, engine):
    helper = make_helper(
        vector_field="knn",
        nested_field="content_nested",
        chunk_field="content_chunks",
    )

    make_searcher(helper, engine).search("fess", SearchRequestParams(response_fields=["title"]))

    assert sent_body(engine)["_source"] == ["title"]
