"""Tests for CLI main app."""

import json

import pytest
from typer.testing import CliRunner

from contentquery import __version__
from contentquery.cli.main import app

runner = CliRunner()


@pytest.fixture
def content_dir(tmp_path, monkeypatch):
    """Create a content directory and isolate configuration."""
    for key in ["CONTENTQUERY_DIR", "CONTENTQUERY_OUTPUT", "CONTENTQUERY_LIMIT",
                "CONTENTQUERY_SEARCH_FIELDS", "CONTENTQUERY_VERBOSE"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("contentquery.cli.config.CONFIG_LOCATIONS", [])

    articles = tmp_path / "articles"
    articles.mkdir()
    for index, slug in enumerate(["alpha", "bravo", "charlie", "delta"], start=1):
        (articles / f"{slug}.md").write_text(
            f"---\ntitle: {slug.title()}\nposition: {index}\n---\nAbout {slug}.\n"
        )
    return tmp_path


def invoke_json(content_dir, *args):
    result = runner.invoke(app, ["fetch", *args, "--dir", str(content_dir), "-o", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_cli_help():
    """Test that CLI help works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Query a directory of content documents" in result.stdout


def test_cli_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_fetch_json_sorted_and_limited(content_dir):
    """Test sort and limit options."""
    docs = invoke_json(content_dir, "articles", "--sort", "position:desc", "--limit", "2", "-k", "slug")
    assert docs == [{"slug": "delta"}, {"slug": "charlie"}]


def test_fetch_skip(content_dir):
    docs = invoke_json(content_dir, "articles", "--sort", "position", "--skip", "3", "-k", "slug")
    assert docs == [{"slug": "delta"}]


def test_fetch_where(content_dir):
    docs = invoke_json(content_dir, "articles", "--where", '{"position": {"$lte": 2}}', "-k", "title")
    assert [doc["title"] for doc in docs] == ["Alpha", "Bravo"]


def test_fetch_search(content_dir):
    """Test full-text search over the default search fields."""
    docs = invoke_json(content_dir, "articles", "--search", "charlee", "-k", "slug")
    assert docs == [{"slug": "charlie"}]


def test_fetch_search_field(content_dir):
    docs = invoke_json(content_dir, "articles", "--search", "Bravo", "--search-field", "title", "-k", "slug")
    assert docs == [{"slug": "bravo"}]


def test_fetch_surround(content_dir):
    """Test surround returns a window with null padding."""
    docs = invoke_json(
        content_dir, "articles", "--sort", "position", "--surround", "alpha",
        "--before", "1", "--after", "2", "-k", "title",
    )
    assert docs == [None, {"slug": "bravo", "title": "Bravo"}, {"slug": "charlie", "title": "Charlie"}]


def test_fetch_single_document(content_dir):
    doc = invoke_json(content_dir, "articles/alpha")
    assert doc["title"] == "Alpha"
    assert "text" not in doc


def test_fetch_missing_document_exit_code(content_dir):
    """Test a missing document exits with code 3."""
    result = runner.invoke(app, ["fetch", "articles/missing", "--dir", str(content_dir)])
    assert result.exit_code == 3
    assert "/articles/missing not found" in result.output


def test_fetch_invalid_limit(content_dir):
    result = runner.invoke(app, ["fetch", "articles", "--limit", "many", "--dir", str(content_dir)])
    assert result.exit_code == 1
    assert "limit must be an integer" in result.output


def test_fetch_invalid_where_json(content_dir):
    result = runner.invoke(app, ["fetch", "articles", "--where", "{bad", "--dir", str(content_dir)])
    assert result.exit_code == 2


def test_fetch_missing_content_dir(tmp_path, monkeypatch):
    monkeypatch.setattr("contentquery.cli.config.CONFIG_LOCATIONS", [])
    result = runner.invoke(app, ["fetch", "--dir", str(tmp_path / "nope")])
    assert result.exit_code == 2
    assert "Content directory not found" in result.output


def test_fetch_table_output(content_dir):
    result = runner.invoke(app, ["fetch", "articles", "-k", "slug", "-k", "title", "--dir", str(content_dir)])
    assert result.exit_code == 0
    assert "Documents" in result.stdout
    assert "alpha" in result.stdout


def test_fetch_uses_env_content_dir(content_dir, monkeypatch):
    """Test CONTENTQUERY_DIR is used when --dir is absent."""
    monkeypatch.setenv("CONTENTQUERY_DIR", str(content_dir))
    result = runner.invoke(app, ["fetch", "articles", "-o", "json", "-k", "slug", "--limit", "1"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"slug": "alpha"}]


def test_config_init_and_show(tmp_path, monkeypatch):
    monkeypatch.setattr("contentquery.cli.config.CONFIG_LOCATIONS", [])
    target = tmp_path / "config.json"

    result = runner.invoke(app, ["config-init", str(target)])
    assert result.exit_code == 0
    assert json.loads(target.read_text())["output"] == "table"

    again = runner.invoke(app, ["config-init", str(target)])
    assert again.exit_code == 1

    show = runner.invoke(app, ["config-show"])
    assert show.exit_code == 0
    assert "none (using defaults)" in show.stdout


def test_fetch_missing_document_with_surround_exit_code(content_dir):
    result = runner.invoke(app, ["fetch", "nope", "--surround", "alpha", "--dir", str(content_dir)])
    assert result.exit_code == 3
    assert "/nope not found" in result.output
