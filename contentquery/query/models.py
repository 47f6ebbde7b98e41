from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

DEFAULT_FULL_TEXT_SEARCH_FIELDS = ["title", "description", "slug", "text"]


@dataclass
class QueryBuilderOptions:
    """Static configuration shared by every builder of a database."""

    full_text_search_fields: List[str] = field(default_factory=list)

    @classmethod
    def from_value(
        cls, value: Optional[Union["QueryBuilderOptions", Mapping[str, Any]]]
    ) -> "QueryBuilderOptions":
        """Coerce None, a mapping or an options instance into options.

        Mappings may use either ``full_text_search_fields`` or the
        camel-cased ``fullTextSearchFields`` key.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value

        fields = value.get("full_text_search_fields", value.get("fullTextSearchFields"))
        if fields is None:
            return cls()
        if isinstance(fields, str):
            fields = [fields]
        return cls(full_text_search_fields=list(fields))
