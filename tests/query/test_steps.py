import pytest

from contentquery.query.steps import First, Project, StripFields, Surround


@pytest.fixture
def documents():
    """Create an ordered result list A, B, T, C, D."""
    return [{"slug": slug, "title": slug.upper()} for slug in ["a", "b", "t", "c", "d"]]


def test_strip_fields():
    """Test StripFields drops the listed fields only."""
    step = StripFields(["text"])
    assert step([{"title": "x", "text": "body"}]) == [{"title": "x"}]


def test_project_keeps_document_order():
    """Test Project keeps keys in the document's own order."""
    step = Project(["title", "slug"])
    result = step([{"slug": "a", "date": 1, "title": "A"}])

    assert list(result[0].keys()) == ["slug", "title"]


def test_project_ignores_missing_keys():
    step = Project(["title", "missing"])
    assert step([{"title": "A"}]) == [{"title": "A"}]


def test_surround_two_before_one_after(documents):
    """Test window [A, B, C] around T."""
    result = Surround("t", before=2, after=1)(documents)
    assert [doc["slug"] for doc in result] == ["a", "b", "c"]


def test_surround_missing_slug(documents):
    """Test unknown slug yields before + after None slots."""
    assert Surround("zzz", before=1, after=2)(documents) == [None, None, None]


def test_surround_first_document(documents):
    """Test predecessors are padded with None at the start."""
    result = Surround("a", before=2, after=1)(documents)

    assert result[0] is None
    assert result[1] is None
    assert result[2]["slug"] == "b"


def test_surround_predecessors_are_right_aligned(documents):
    """Test the immediate predecessor sits at index before - 1."""
    result = Surround("b", before=3, after=0)(documents)
    assert result[:2] == [None, None]
    assert result[2]["slug"] == "a"


def test_surround_more_after_than_before(documents):
    """Test successors fill every slot from index before onward."""
    result = Surround("a", before=1, after=3)(documents)

    assert result[0] is None
    assert [doc["slug"] for doc in result[1:]] == ["b", "t", "c"]


def test_surround_zero_window(documents):
    assert Surround("t", before=0, after=0)(documents) == []


def test_surround_skips_none_entries():
    result = Surround("b", before=1, after=1)([None, {"slug": "b"}, {"slug": "c"}])
    assert result == [None, {"slug": "c"}]


def test_first():
    """Test First returns the first document or None."""
    assert First()([{"slug": "a"}, {"slug": "b"}]) == {"slug": "a"}
    assert First()([]) is None


def test_step_repr():
    assert repr(Surround("t", before=2, after=1)) == "Surround('t', before=2, after=1)"
