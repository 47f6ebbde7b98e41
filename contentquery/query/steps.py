from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence


class PostprocessStep(ABC):
    """Abstract base class for transforms applied to fetched documents."""

    @abstractmethod
    def apply(self, data):
        """Transform the output of the previous step."""
        pass

    def __call__(self, data):
        return self.apply(data)


class StripFields(PostprocessStep):
    """Remove fields from every document."""

    def __init__(self, fields: Iterable[str]):
        """Initialize with list of fields to drop."""
        self.fields = list(fields)

    def apply(self, data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {key: value for key, value in document.items() if key not in self.fields}
            for document in data
        ]

    def __repr__(self) -> str:
        return f"StripFields({self.fields!r})"


class Project(PostprocessStep):
    """Reduce every document to the selected keys, in document order."""

    def __init__(self, keys: Iterable[str]):
        """Initialize with list of keys to keep."""
        self.keys = list(keys)

    def apply(self, data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {key: value for key, value in document.items() if key in self.keys}
            for document in data
        ]

    def __repr__(self) -> str:
        return f"Project({self.keys!r})"


class Surround(PostprocessStep):
    """Replace the results with the neighbours of the document with a slug.

    The output always has ``before + after`` entries. Positions
    ``[0, before)`` hold the preceding documents, the immediate predecessor
    last; positions ``[before, before + after)`` hold the following
    documents, the immediate successor first. Missing neighbours are None.
    """

    def __init__(self, slug: str, before: int = 1, after: int = 1):
        self.slug = slug
        self.before = before
        self.after = after

    def apply(self, data: Sequence[Dict[str, Any]]) -> List[Optional[Dict[str, Any]]]:
        window: List[Optional[Dict[str, Any]]] = [None] * (self.before + self.after)

        index = next(
            (i for i, document in enumerate(data)
             if document is not None and document.get("slug") == self.slug),
            -1,
        )
        if index == -1:
            return window

        previous = data[max(0, index - self.before):index]
        following = data[index + 1:index + 1 + self.after]

        # Right-align predecessors against the target
        for offset, document in enumerate(reversed(previous)):
            window[self.before - 1 - offset] = document
        for offset, document in enumerate(following):
            window[self.before + offset] = document

        return window

    def __repr__(self) -> str:
        return f"Surround({self.slug!r}, before={self.before}, after={self.after})"


class First(PostprocessStep):
    """Collapse the results to their first document, or None when empty."""

    def apply(self, data: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return data[0] if data else None

    def __repr__(self) -> str:
        return "First()"
