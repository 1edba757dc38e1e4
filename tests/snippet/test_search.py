from snippet_manager.snippet import Snippet, filter_snippets


def _snippets():
    return [
        Snippet(id="1", title="Quick Sort", code="...", tags=["algo"]),
        Snippet(id="2", title="Fetch JSON", description="HTTP helper", code="...", tags=["web"]),
        Snippet(id="3", title="Binary search", code="...", tags=["Algo", "python"]),
    ]


def test_empty_term_returns_collection_in_order():
    snippets = _snippets()

    assert [s.id for s in filter_snippets(snippets, "")] == ["1", "2", "3"]
    assert [s.id for s in filter_snippets(snippets, None)] == ["1", "2", "3"]


def test_matches_title_description_and_tags_case_insensitively():
    snippets = _snippets()

    assert [s.id for s in filter_snippets(snippets, "SORT")] == ["1"]
    assert [s.id for s in filter_snippets(snippets, "http")] == ["2"]
    assert [s.id for s in filter_snippets(snippets, "ALGO")] == ["1", "3"]
    assert [s.id for s in filter_snippets(snippets, "search")] == ["3"]


def test_whitespace_term_is_matched_literally():
    snippets = [
        Snippet(id="1", title="Quick Sort", code="..."),
        Snippet(id="2", title="Fetch", code="..."),
    ]

    assert [s.id for s in filter_snippets(snippets, " ")] == ["1"]
    assert filter_snippets(snippets, "   ") == []


def test_code_is_not_searched():
    snippets = [Snippet(id="1", title="t", code="secret_function()")]

    assert filter_snippets(snippets, "secret") == []
