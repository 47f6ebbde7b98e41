import re

import pytest

from contentquery.collection.operators import matches
from contentquery.query.exceptions import InvalidQueryError


@pytest.fixture
def document():
    """Create a sample document for predicate testing."""
    return {
        "slug": "hello-world",
        "title": "Hello World",
        "date": "2021-03-04",
        "position": 3,
        "draft": False,
        "tags": ["intro", "python"],
        "author": {"name": "Ada", "role": "editor"},
    }


def test_equality(document):
    assert matches(document, {"slug": "hello-world"}) is True
    assert matches(document, {"slug": "other"}) is False


def test_equality_none_matches_missing(document):
    assert matches(document, {"missing": None}) is True


def test_top_level_keys_are_and(document):
    assert matches(document, {"slug": "hello-world", "draft": False}) is True
    assert matches(document, {"slug": "hello-world", "draft": True}) is False


@pytest.mark.parametrize("predicate, expected", [
    ({"position": {"$gt": 2}}, True),
    ({"position": {"$gte": 3}}, True),
    ({"position": {"$lt": 3}}, False),
    ({"position": {"$lte": 3}}, True),
    ({"position": {"$ne": 3}}, False),
    ({"position": {"$between": [1, 5]}}, True),
    ({"position": {"$in": [1, 2, 3]}}, True),
    ({"position": {"$nin": [1, 2, 3]}}, False),
    ({"date": {"$gte": "2021-01-01", "$lt": "2022-01-01"}}, True),
])
def test_comparison_operators(document, predicate, expected):
    assert matches(document, predicate) is expected


def test_comparison_with_incompatible_types(document):
    """Test comparing across types never matches."""
    assert matches(document, {"position": {"$gt": "a"}}) is False


def test_regex(document):
    assert matches(document, {"title": {"$regex": "^Hello"}}) is True
    assert matches(document, {"title": {"$regex": ["^hello", "i"]}}) is True
    assert matches(document, {"title": {"$regex": re.compile("world$")}}) is False


def test_contains_on_arrays(document):
    assert matches(document, {"tags": {"$contains": "python"}}) is True
    assert matches(document, {"tags": {"$contains": ["python", "go"]}}) is False
    assert matches(document, {"tags": {"$containsAny": ["go", "intro"]}}) is True
    assert matches(document, {"tags": {"$containsNone": ["go", "rust"]}}) is True


def test_contains_on_strings(document):
    assert matches(document, {"title": {"$contains": "World"}}) is True


def test_exists_size_type(document):
    assert matches(document, {"author": {"$exists": True}}) is True
    assert matches(document, {"missing": {"$exists": False}}) is True
    assert matches(document, {"tags": {"$size": 2}}) is True
    assert matches(document, {"position": {"$type": "number"}}) is True
    assert matches(document, {"draft": {"$type": "number"}}) is False


def test_dotted_paths(document):
    assert matches(document, {"author.name": "Ada"}) is True
    assert matches(document, {"author.missing.deep": {"$exists": False}}) is True


def test_logical_operators(document):
    assert matches(document, {"$or": [{"slug": "x"}, {"position": 3}]}) is True
    assert matches(document, {"$and": [{"slug": "hello-world"}, {"position": 4}]}) is False
    assert matches(document, {"$not": {"draft": True}}) is True
    assert matches(document, {"position": {"$not": {"$gt": 5}}}) is True


def test_full_text_operator(document):
    predicate = {"$fts": {"query": {"type": "match", "field": "title", "value": "wrld", "fuzziness": 1, "prefix_length": 1}}}
    assert matches(document, predicate) is True


def test_unknown_operator_raises(document):
    with pytest.raises(InvalidQueryError):
        matches(document, {"position": {"$near": 3}})


def test_unknown_logical_operator_raises(document):
    with pytest.raises(InvalidQueryError):
        matches(document, {"$xor": []})


def test_predicate_must_be_mapping(document):
    with pytest.raises(InvalidQueryError):
        matches(document, ["slug"])


def test_in_requires_list(document):
    with pytest.raises(InvalidQueryError):
        matches(document, {"position": {"$in": 3}})
