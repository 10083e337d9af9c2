import json

from semantic_search.config import ConfigSnapshot
from semantic_search.engine import rewriters
from semantic_search.engine.templates import IndexTemplate
from semantic_search.helper import SemanticSearchHelper


SETTINGS_DOC = json.dumps({
    "index": {
        "codec": "best_compression",
        "number_of_shards": 1,
    }
})

MAPPING_DOC = json.dumps({
    "properties": {
        "title": {"type": "text"},
        "content": {"type": "text"},
        "url": {"type": "keyword"},
    }
})

MAPPING_CONFIG = {
    "vector_field": "content_vector",
    "dimension": 384,
    "method": "hnsw",
    "engine": "lucene",
}


def test_settings_knn_added_before_codec():
    out = json.loads(rewriters.rewrite_settings(SETTINGS_DOC, ConfigSnapshot()))

    keys = list(out["index"].keys())
    assert out["index"]["knn"] is True
    assert keys.index("knn") == keys.index("codec") - 1
    assert "default_pipeline" not in json.dumps(out)


def test_settings_pipeline_added_before_index():
    snapshot = ConfigSnapshot(pipeline="neural_pipeline")
    out = json.loads(rewriters.rewrite_settings(SETTINGS_DOC, snapshot))

    assert list(out.keys()) == ["default_pipeline", "index"]
    assert out["default_pipeline"] == "neural_pipeline"
    assert out["index"]["knn"] is True


def test_settings_without_anchor_left_unchanged():
    source = '{"analysis": {}}'
    assert rewriters.rewrite_settings(source, ConfigSnapshot()) == source


def test_invalid_json_left_unchanged():
    assert rewriters.rewrite_settings("not json", ConfigSnapshot()) == "not json"


def test_mapping_unchanged_when_incomplete():
    snapshot = ConfigSnapshot(vector_field="content_vector", dimension=384, method="hnsw")
    assert rewriters.rewrite_mapping(MAPPING_DOC, snapshot) == MAPPING_DOC


def test_mapping_flat_vector_field():
    snapshot = ConfigSnapshot(**MAPPING_CONFIG)
    out = json.loads(rewriters.rewrite_mapping(MAPPING_DOC, snapshot))

    props = out["properties"]
    assert list(props.keys()) == ["title", "content_vector", "content", "url"]
    assert props["content_vector"] == {
        "type": "knn_vector",
        "dimension": 384,
        "method": {
            "name": "hnsw",
            "engine": "lucene",
            "space_type": "cosinesimil",
            "parameters": {"m": 16, "ef_construction": 100},
        },
    }


def test_mapping_nested_chunk_fields():
    snapshot = ConfigSnapshot(
        nested_field="content_nested",
        chunk_field="content_chunks",
        param_m=32,
        **MAPPING_CONFIG,
    )
    out = json.loads(rewriters.rewrite_mapping(MAPPING_DOC, snapshot))

    props = out["properties"]
    assert list(props.keys()) == ["title", "content_nested", "content_chunks", "content", "url"]
    nested = props["content_nested"]
    assert nested["type"] == "nested"
    assert nested["properties"]["content_vector"]["method"]["parameters"]["m"] == 32
    assert props["content_chunks"] == {"type": "text", "index": False}


def test_rewrite_is_idempotent():
    snapshot = ConfigSnapshot(**MAPPING_CONFIG)
    once = rewriters.rewrite_mapping(MAPPING_DOC, snapshot)
    twice = rewriters.rewrite_mapping(once, snapshot)

    assert json.loads(once) == json.loads(twice)


def test_helper_registers_rules_once(make_store):
    store = make_store(
        vector_field="content_vector",
        dimension="384",
        method="hnsw",
        engine="lucene",
        pipeline="p1",
    )
    template = IndexTemplate()
    helper = SemanticSearchHelper(store)

    helper.init(template=template)
    helper.init(template=template)
    assert len(template._setting_rules) == 1
    assert len(template._mapping_rules) == 1

    settings_json, mapping_json = template.materialize(SETTINGS_DOC, MAPPING_DOC)
    assert json.loads(settings_json)["default_pipeline"] == "p1"
    assert "content_vector" in json.loads(mapping_json)["properties"]


def test_template_rules_run_in_order():
    template = IndexTemplate()
    template.add_mapping_rewrite_rule(lambda s: s + "a")
    template.add_mapping_rewrite_rule(lambda s: s + "b")

    settings_json, mapping_json = template.materialize("{}", "")

    assert settings_json == "{}"
    assert mapping_json == "ab"
