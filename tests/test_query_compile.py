from semantic_search.query.commands import DEFER, PhraseQueryCommand, QueryCompiler, decide
from semantic_search.query.lexical import LexicalQueryBuilder, QueryContext
from semantic_search.query.neural import NeuralQuery, to_clause
from semantic_search.query.parser import PhraseNode, QueryParser, RangeNode, TermNode

from conftest import NEURAL_SETTINGS


PHRASE_NEURAL = {
    "neural": {
        "content_vector": {
            "query_text": "This is Fess.",
            "model_id": "modelx",
            "k": 20,
        }
    }
}


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------

def test_parse_terms_phrases_and_ranges():
    parser = QueryParser(["title", "content_length"])

    nodes = parser.parse('fess "open source" title:search content_length:[100 TO *]')

    assert nodes == [
        TermNode("_default", "fess"),
        PhraseNode("_default", ("open", "source")),
        TermNode("title", "search"),
        RangeNode("content_length", "100", None),
    ]


def test_parse_unknown_qualifier_is_plain_term():
    parser = QueryParser(["title"])

    assert parser.parse("http://example.com") == [TermNode("_default", "http://example.com")]


def test_parse_exclusive_range_and_qualified_phrase():
    parser = QueryParser(["title", "size"])

    nodes = parser.parse('title:"open source" size:{1 TO 10}')

    assert nodes == [
        PhraseNode("title", ("open", "source")),
        RangeNode("size", "1", "10", include_lower=False, include_upper=False),
    ]


def test_parse_unterminated_quote():
    assert QueryParser().parse('"open source') == [PhraseNode("_default", ("open", "source"))]


def test_parser_filters_see_raw_query():
    parser = QueryParser()
    seen = []

    def upper(query, chain):
        seen.append(query)
        return chain(query.upper())

    parser.add_filter(upper)

    assert parser.parse("fess") == [TermNode("_default", "FESS")]
    assert seen == ["fess"]


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

def test_decide_defers_without_context(make_helper):
    helper = make_helper(**NEURAL_SETTINGS)

    assert decide(helper, "_default", "fess") is DEFER


def test_decide_defers_on_other_fields(make_helper):
    helper = make_helper(**NEURAL_SETTINGS)

    with helper.context_store.scoped("fess", None):
        assert decide(helper, "title", "fess") is DEFER


def test_phrase_command_builds_neural_query(make_helper):
    helper = make_helper(**NEURAL_SETTINGS)
    command = PhraseQueryCommand(helper)
    context = QueryContext('"This is Fess."')

    with helper.context_store.scoped("This is Fess.", None):
        query = command.execute(context, PhraseNode("_default", ("This", "is", "Fess.")))

    assert to_clause(query) == PHRASE_NEURAL
    assert context.highlighted_queries == ["This is Fess."]
    assert context.field_logs == {"_default": ["This is Fess."]}


def test_quoted_and_unquoted_query_compile_alike(make_helper):
    helper = make_helper(**NEURAL_SETTINGS)
    parser = QueryParser(helper.config.search_fields)
    helper.init(parser=parser)
    compiler = QueryCompiler(helper)

    for raw in ("This is Fess.", '"This is Fess."'):
        with helper.context_store.scoped(raw, None):
            compiled = compiler.compile(QueryContext(raw), parser.parse(raw))
        assert to_clause(compiled) == PHRASE_NEURAL


def test_phrase_falls_back_to_lexical_without_model(make_helper):
    helper = make_helper(vector_field="content_vector")
    compiler = QueryCompiler(helper)

    with helper.context_store.scoped("fess", None):
        compiled = compiler.compile(
            QueryContext('"This is Fess."'),
            [PhraseNode("_default", ("This", "is", "Fess."))],
        )

    assert compiled == {
        "bool": {
            "should": [
                {"match_phrase": {"title": {"query": "This is Fess.", "boost": 0.5}}},
                {"match_phrase": {"content": {"query": "This is Fess.", "boost": 0.05}}},
            ]
        }
    }


def test_compiler_mixes_neural_and_lexical(make_helper):
    helper = make_helper(**NEURAL_SETTINGS)
    compiler = QueryCompiler(helper)
    nodes = [
        TermNode("_default", "fess"),
        TermNode("title", "search"),
        RangeNode("content_length", "100", None),
    ]

    with helper.context_store.scoped("fess", None):
        compiled = compiler.compile(QueryContext("q"), nodes)

    must = compiled["bool"]["must"]
    assert isinstance(must[0], NeuralQuery)
    assert must[1] == {"match": {"title": {"query": "search", "boost": 1.0}}}
    assert must[2] == {"range": {"content_length": {"gte": "100"}}}


def test_compiler_empty_query_matches_all(make_helper):
    compiler = QueryCompiler(make_helper())

    assert compiler.compile(QueryContext(""), []) == {"match_all": {}}


def test_lexical_range_bounds():
    builder = LexicalQueryBuilder()
    context = QueryContext("q")

    clause = builder.range(context, RangeNode("size", "1", "10", include_lower=False))

    assert clause == {"range": {"size": {"gt": "1", "lte": "10"}}}
    assert context.field_logs == {"size": ["1 TO 10"]}
