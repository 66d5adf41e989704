"""Dotted attribute selectors and walking them through values and schemas."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List

from ctitools.schema import Schema


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass
class AttributeSelector:
    """A path of attribute names; an empty path selects the root."""

    path: List[str] = field(default_factory=list)

    def walk_json(self, value: Any) -> Any:
        """Follow the path through nested mappings and return what it selects."""
        current = value
        for token in self.path:
            if not isinstance(current, dict):
                raise LookupError(
                    f"cannot descend via {_quote(token)} into {type(current).__name__}"
                )
            if token not in current:
                raise LookupError(f"key {_quote(token)} not found")
            current = current[token]
        return current

    def walk_schema(self, schema: Schema) -> Schema:
        """Follow the path through schema properties and return the selected schema."""
        current = schema
        for token in self.path:
            if current.properties is None:
                raise LookupError(
                    f"cannot descend via {_quote(token)} into {type(current).__name__}"
                )
            if token not in current.properties:
                raise LookupError(f"key {_quote(token)} not found")
            current = current.properties[token]
        return current


def parse_attribute_selector(query: str) -> AttributeSelector:
    """Turn ``"foo.bar.baz"`` into a selector of ``["foo", "bar", "baz"]``."""
    if query == "":
        return AttributeSelector(path=[])
    parts = query.split(".")
    for position, part in enumerate(parts):
        if part == "":
            raise ValueError(f"empty token at position {position}")
    return AttributeSelector(path=parts)