import pytest
from werkzeug.datastructures import MultiDict

from dashboard.utils.query_state import QueryState


def test_defaults_when_arguments_are_missing():
    assert QueryState.from_args({}) == QueryState(query="", page=1)


@pytest.mark.parametrize("page", ["abc", "", "0", "-4", "2.5", None])
def test_invalid_page_falls_back_to_first(page):
    assert QueryState.from_args({"page": page}).page == 1


def test_reads_query_and_page():
    state = QueryState.from_args(MultiDict({"query": "lee", "page": "3"}))
    assert state == QueryState(query="lee", page=3)


def test_changing_query_resets_page():
    state = QueryState(query="lee", page=4).with_query("amy")
    assert state == QueryState(query="amy", page=1)


def test_changing_page_keeps_query():
    state = QueryState(query="lee", page=1).with_page(5)
    assert state == QueryState(query="lee", page=5)


def test_empty_query_is_dropped_from_the_address():
    params = QueryState(query="", page=1).apply_to({"query": "old", "page": "7"})
    assert "query" not in params
    assert params["page"] == "1"


def test_unrelated_parameters_survive():
    params = MultiDict([("sort", "date"), ("tag", "a"), ("tag", "b")])
    merged = QueryState(query="x", page=2).apply_to(params)
    assert merged.getlist("tag") == ["a", "b"]
    assert merged["sort"] == "date"
    assert merged["query"] == "x"
    assert "page" not in params


def test_to_url_round_trips():
    state = QueryState(query="amy burns", page=2)
    url = state.to_url("/dashboard/invoices")
    assert url == "/dashboard/invoices?page=2&query=amy+burns"

    from urllib.parse import parse_qsl, urlsplit

    args = MultiDict(parse_qsl(urlsplit(url).query))
    assert QueryState.from_args(args) == state
