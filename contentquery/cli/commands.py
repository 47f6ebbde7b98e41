"""CLI commands for contentquery.

Each invocation loads the content directory, builds one query and fetches it.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from contentquery.cli.config import get_config, get_config_file, init_config
from contentquery.cli.formatting import format_documents
from contentquery.database import Database
from contentquery.query import QueryBuilder
from contentquery.query.exceptions import NotFoundError, QueryError

logger = logging.getLogger(__name__)


def parse_sort(value: str):
    """Split a 'field' or 'field:direction' sort option."""
    field, _, direction = value.partition(":")
    return field, direction or "asc"


def build_query(
    database: Database,
    path: str,
    only: Optional[List[str]] = None,
    where: Optional[str] = None,
    search: Optional[str] = None,
    search_field: Optional[str] = None,
    sort: Optional[List[str]] = None,
    limit: Optional[str] = None,
    skip: Optional[str] = None,
    surround: Optional[str] = None,
    before: int = 1,
    after: int = 1,
    deep: bool = False,
) -> QueryBuilder:
    """Translate command-line options into a chained QueryBuilder."""
    builder = database.query(path, deep=deep)

    if only:
        builder.only(only)
    if where:
        try:
            predicate = json.loads(where)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"--where must be JSON: {e}")
        builder.where(predicate)
    if search is not None:
        if search_field:
            builder.search(search_field, search)
        else:
            builder.search(search)
    for value in sort or []:
        field, direction = parse_sort(value)
        builder.sort_by(field, direction)
    if skip is not None:
        builder.skip(skip)
    if limit is not None:
        builder.limit(limit)
    if surround:
        builder.surround(surround, before=before, after=after)

    return builder


def fetch(
    path: str = typer.Argument("/", help="Content path (directory or document)"),
    only: Optional[List[str]] = typer.Option(None, "--only", "-k", help="Field to return (repeatable)"),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="Filter predicate as JSON"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Full-text search query"),
    search_field: Optional[str] = typer.Option(None, "--search-field", help="Restrict search to a field"),
    sort: Optional[List[str]] = typer.Option(None, "--sort", help="Sort as field or field:desc (repeatable)"),
    limit: Optional[str] = typer.Option(None, "--limit", "-l", help="Maximum documents to return"),
    skip: Optional[str] = typer.Option(None, "--skip", help="Number of documents to skip"),
    surround: Optional[str] = typer.Option(None, "--surround", help="Return neighbours of this slug"),
    before: int = typer.Option(1, "--before", help="Neighbours before the surrounded slug"),
    after: int = typer.Option(1, "--after", help="Neighbours after the surrounded slug"),
    deep: Optional[bool] = typer.Option(None, "--deep", help="Include subdirectories"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output format (table or json)"),
    content_dir: Optional[str] = typer.Option(None, "--dir", "-d", help="Content directory"),
    verbose: Optional[bool] = typer.Option(None, "--verbose", help="Enable debug logging"),
) -> None:
    """Query content documents.

    Example:
        $ contentquery fetch articles --sort date:desc --limit 5
        $ contentquery fetch articles --search "hello world" -k title -k slug
        $ contentquery fetch articles --surround my-post --before 1 --after 1
    """
    config = get_config({
        "content_dir": content_dir,
        "output": output,
        "deep": deep,
        "verbose": verbose,
    })

    if config["verbose"]:
        logging.basicConfig(level=logging.DEBUG)

    if limit is None and config["limit"] is not None:
        limit = str(config["limit"])

    try:
        database = Database(
            config["content_dir"],
            options={"full_text_search_fields": config["full_text_search_fields"]},
        )
    except QueryError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(2)

    try:
        builder = build_query(
            database,
            path,
            only=only,
            where=where,
            search=search,
            search_field=search_field,
            sort=sort,
            limit=limit,
            skip=skip,
            surround=surround,
            before=before,
            after=after,
            deep=config["deep"],
        )
        result = asyncio.run(builder.fetch())
    except NotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(3)
    except typer.BadParameter:
        raise
    except QueryError as e:
        typer.echo(f"❌ Error: {str(e)}", err=True)
        raise typer.Exit(1)

    typer.echo(format_documents(result, config["output"]))


def config_show() -> None:
    """Show the effective configuration and where it was loaded from."""
    config_file = get_config_file()
    typer.echo(f"Config file: {config_file or 'none (using defaults)'}")
    typer.echo(json.dumps(get_config(), indent=2))


def config_init(
    config_path: Optional[Path] = typer.Argument(None, help="Where to write the config file"),
) -> None:
    """Write a configuration file with default values."""
    target = config_path or Path.home() / ".contentquery" / "config.json"
    if target.exists():
        typer.echo(f"⚠️  Config file already exists at {target}", err=True)
        raise typer.Exit(1)

    if not init_config(target):
        typer.echo(f"❌ Could not write config file at {target}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✅ Configuration written to {target}")
