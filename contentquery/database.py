"""Content database: loads a directory of content files into a collection.

Each logical dataset (a directory or a single document) is queried through
its own QueryBuilder obtained from Database.query().
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import yaml

from contentquery.collection import Collection
from contentquery.query import First, QueryBuilder, QueryBuilderOptions
from contentquery.query.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".md", ".json", ".yaml", ".yml"}

FRONT_MATTER_PATTERN = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
HEADING_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


def normalize_path(*parts: str) -> str:
    """Join path parts into a '/'-rooted content path."""
    segments = [segment for part in parts for segment in str(part).split("/") if segment]
    return "/" + "/".join(segments)


def parse_markdown(content: str) -> Dict[str, Any]:
    """Parse a markdown file into front matter fields plus a text body."""
    document: Dict[str, Any] = {}
    body = content

    match = FRONT_MATTER_PATTERN.match(content)
    if match:
        front_matter = yaml.safe_load(match.group(1)) or {}
        if not isinstance(front_matter, dict):
            raise ValueError("Front matter must be a mapping")
        document.update(front_matter)
        body = content[match.end():]

    if "title" not in document:
        heading = HEADING_PATTERN.search(body)
        if heading:
            document["title"] = heading.group(1)

    document["text"] = body.strip()
    return document


def parse_data(content: Any) -> Dict[str, Any]:
    """Turn decoded JSON/YAML content into a document."""
    if content is None:
        return {}
    if isinstance(content, dict):
        return dict(content)
    if isinstance(content, list):
        return {"body": content}
    raise ValueError(f"Unsupported content type: {type(content).__name__}")


def _timestamp(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()


class Database:
    """In-memory content database built from a content directory."""

    def __init__(
        self,
        content_dir: Union[str, Path],
        options: Optional[Union[QueryBuilderOptions, Mapping[str, Any]]] = None,
    ):
        """Initialize and load the content directory.

        Args:
            content_dir: Root directory holding content files
            options: Options passed to every QueryBuilder

        Raises:
            ConfigurationError: If content_dir is not a directory
        """
        self.content_dir = Path(content_dir)
        if not self.content_dir.is_dir():
            raise ConfigurationError(f"Content directory not found: {self.content_dir}")

        self.options = QueryBuilderOptions.from_value(options)
        self.items = Collection("items")
        self.skipped: List[Path] = []
        self.load()

    def _iter_files(self) -> Iterator[Path]:
        for file_path in sorted(self.content_dir.rglob("*")):
            if not file_path.is_file() or file_path.suffix not in SUPPORTED_EXTENSIONS:
                continue
            # Hidden files and directories are not content
            relative = file_path.relative_to(self.content_dir)
            if any(part.startswith(".") for part in relative.parts):
                continue
            yield file_path

    def load(self) -> int:
        """Load every content file into the collection.

        Returns:
            Number of documents loaded
        """
        loaded = 0
        for file_path in self._iter_files():
            try:
                self.items.insert(self.load_file(file_path))
                loaded += 1
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Skipping {file_path}: {e}")
                self.skipped.append(file_path)

        logger.info(f"Loaded {loaded} documents from {self.content_dir}")
        return loaded

    def load_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one content file into a document."""
        content = file_path.read_text(encoding="utf-8")

        if file_path.suffix == ".md":
            document = parse_markdown(content)
        elif file_path.suffix == ".json":
            document = parse_data(json.loads(content))
        else:
            document = parse_data(yaml.safe_load(content))

        relative = file_path.relative_to(self.content_dir)
        directory = normalize_path(*relative.parent.parts)
        stat = file_path.stat()

        document.update({
            "dir": directory,
            "path": normalize_path(directory, file_path.stem),
            "slug": file_path.stem,
            "extension": file_path.suffix,
            "created_at": _timestamp(stat.st_ctime),
            "updated_at": _timestamp(stat.st_mtime),
        })
        return document

    @staticmethod
    def _subtree_predicate(path: str) -> Dict[str, Any]:
        return {"$regex": f"^{re.escape(path)}(/|$)"}

    def is_directory(self, path: str) -> bool:
        """Check whether a content path is a directory holding documents."""
        if path == "/":
            return True
        return self.items.count({"dir": self._subtree_predicate(path)}) > 0

    def query(self, *path_parts: str, deep: bool = False) -> QueryBuilder:
        """Create a QueryBuilder for a directory or a single document.

        Args:
            path_parts: Path segments, e.g. ("articles",) or ("articles", "hello")
            deep: Include documents in subdirectories of a directory path

        Returns:
            QueryBuilder bound to the dataset
        """
        path = normalize_path(*path_parts)
        is_directory = self.is_directory(path)

        if not is_directory:
            # Missing documents surface as NotFoundError on fetch
            handle = self.items.chain().find({"path": path})
            postprocess = [First()]
        elif deep and path != "/":
            handle = self.items.chain().find({"dir": self._subtree_predicate(path)})
            postprocess = []
        elif deep:
            handle = self.items.chain()
            postprocess = []
        else:
            handle = self.items.chain().find({"dir": path})
            postprocess = []

        logger.debug(f"Query {path} (directory={is_directory}, deep={deep})")
        return QueryBuilder(handle, path=path, postprocess=postprocess, options=self.options)
