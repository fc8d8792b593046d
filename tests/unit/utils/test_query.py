import pytest
from urllib.parse import unquote

from sbclient.utils.query import (
    SPACES_ME_PATH,
    build_signature,
    encode_params,
    get_options_page,
    is_cdn_url,
    serialize_params,
)


def test_serialize_params_uses_brackets_for_lists_and_mappings():
    pairs = serialize_params({
        "by_uuids": ["a", "b"],
        "filter_query": {"component": {"in": "page"}},
        "version": "draft",
    })
    assert pairs == [
        ("by_uuids[]", "a"),
        ("by_uuids[]", "b"),
        ("filter_query[component][in]", "page"),
        ("version", "draft"),
    ]


def test_serialize_params_skips_none_and_renders_booleans():
    pairs = serialize_params({"cv": None, "is_startpage": True, "page": 2})
    assert pairs == [("is_startpage", "true"), ("page", "2")]


def test_encode_params_is_wire_ready():
    assert unquote(encode_params({"tags": ["x", "y"]})) == "tags[]=x&tags[]=y"
    assert encode_params({}) == ""
    assert encode_params(None) == ""


def test_signature_ignores_key_insertion_order():
    first = build_signature("/cdn/stories", {"version": "published", "token": "t", "starts_with": "blog/"})
    second = build_signature("/cdn/stories", {"starts_with": "blog/", "token": "t", "version": "published"})
    assert first == second


def test_signature_of_identical_requests_is_stable():
    params = {"version": "published", "by_uuids": ["a", "b"], "filter_query": {"a": 1, "b": 2}}
    assert build_signature("/cdn/stories", params) == build_signature("/cdn/stories", dict(params))


@pytest.mark.parametrize(
    "other_url, other_params",
    [
        ("/cdn/stories", {"version": "published", "by_uuids": ["b", "a"]}),  # array order
        ("/cdn/stories", {"version": "published", "by_uuids": ["a", "c"]}),  # value
        ("/cdn/stories", {"version": "draft", "by_uuids": ["a", "b"]}),
        ("/cdn/links", {"version": "published", "by_uuids": ["a", "b"]}),  # path
    ],
)
def test_signature_differs_for_different_requests(other_url, other_params):
    base = build_signature("/cdn/stories", {"version": "published", "by_uuids": ["a", "b"]})
    assert build_signature(other_url, other_params) != base


def test_signature_and_wire_format_share_the_serializer():
    params = {"by_uuids": ["a", "b"]}
    signature = unquote(build_signature("/cdn/stories", params))
    assert "params[by_uuids][]=a&params[by_uuids][]=b" in signature
    assert unquote(encode_params(params)) == "by_uuids[]=a&by_uuids[]=b"


def test_get_options_page_copies_params():
    params = {"version": "draft"}
    options = get_options_page(params, 25, 3)
    assert options == {"version": "draft", "per_page": 25, "page": 3}
    assert params == {"version": "draft"}


def test_is_cdn_url():
    assert is_cdn_url("/cdn/stories")
    assert is_cdn_url(SPACES_ME_PATH)
    assert not is_cdn_url("/spaces/123/stories")
