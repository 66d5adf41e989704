"""Collection of CTI annotations from a schema, keyed by GJSON-style path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ctitools.schema import Schema


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


@dataclass
class Annotations:
    """CTI annotations attached to one location of a schema."""

    id: Optional[bool] = None
    l10n: Optional[bool] = None
    asset: Optional[bool] = None
    overridable: Optional[bool] = None
    reference: Any = None
    schema: Any = None
    meta: str = ""
    display_name: Optional[bool] = None
    description: Optional[bool] = None
    property_names: Optional[Dict[str, Any]] = None

    def read_reference(self) -> List[Any]:
        """Return the referenced identifiers as a list; a bare flag yields none."""
        return _as_list(self.reference)

    def read_cti_schema(self) -> List[Any]:
        """Return the identifiers named by cti.schema as a list."""
        return _as_list(self.schema)


class AnnotationsCollector:
    """Walks a schema and gathers its CTI annotations by path."""

    def __init__(self) -> None:
        self._annotations: Dict[str, Annotations] = {}

    def collect(self, schema: Schema) -> Dict[str, Annotations]:
        """Return the annotations of ``schema`` keyed by path, starting at ``.``."""
        self._annotations = {}
        self.visit(".", schema)
        return self._annotations

    def visit(self, path: str, schema: Schema) -> None:
        self._collect_annotations(path, schema)
        if schema.is_any_of():
            self.visit_any_of(path, schema)
        elif schema.type == "object":
            self.visit_object(path, schema)
        elif schema.type == "array":
            self.visit_array(path, schema)

    def visit_object(self, path: str, schema: Schema) -> None:
        if path != ".":
            path += "."
        for children in (schema.properties, schema.pattern_properties):
            for key, child in (children or {}).items():
                self.visit(path + key, child)

    def visit_array(self, path: str, schema: Schema) -> None:
        path += "#" if path == "." else ".#"
        if schema.items is not None:
            self.visit(path, schema.items)

    def visit_any_of(self, path: str, schema: Schema) -> None:
        for member in schema.any_of or []:
            self.visit(path, member)

    def _collect_annotations(self, path: str, schema: Schema) -> None:
        item = self._annotations.get(path) or Annotations()
        changed = False
        for attr, value in (
            ("id", schema.cti_id),
            ("l10n", schema.cti_l10n),
            ("asset", schema.cti_asset),
            ("overridable", schema.cti_overridable),
            ("reference", schema.cti_reference),
            ("schema", schema.cti_schema),
            ("display_name", schema.cti_display_name),
            ("description", schema.cti_description),
            ("property_names", schema.cti_property_names),
        ):
            if value is not None:
                setattr(item, attr, value)
                changed = True
        if schema.cti_meta:
            item.meta = schema.cti_meta
            changed = True
        if changed:
            self._annotations[path] = item