"""Compatibility checks between old and new schemas, values and annotations.

Each check returns the list of findings.  Findings of ``Severity.ERROR`` make a
change incompatible.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ctitools.annotations import Annotations
from ctitools.schema import Schema


class Severity(IntEnum):
    """How serious a compatibility finding is."""

    ERROR = 0
    WARNING = 1
    INFO = 2

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Message:
    """One compatibility finding."""

    severity: Severity
    message: str


def _fmt(value: Any) -> str:
    """Render a value the way compatibility messages show it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_fmt(item) for item in value) + "]"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{key}:{_fmt(item)}" for key, item in value.items()) + "]"
    return str(value)


def _not_subset(new: Sequence[Any], old: Sequence[Any]) -> bool:
    """Return True if some member of ``new`` is not among ``old``."""
    return any(item not in old for item in new)


def _type_name(schema: Schema) -> str:
    if schema.type:
        return schema.type
    if schema.is_ref():
        return "ref"
    if schema.is_any():
        return "any"
    if schema.is_any_of():
        return "anyOf"
    return ""


class _Findings:
    def __init__(self) -> None:
        self.messages: List[Message] = []

    def error(self, text: str) -> None:
        self.messages.append(Message(Severity.ERROR, text))

    def warning(self, text: str) -> None:
        self.messages.append(Message(Severity.WARNING, text))

    def facet(self, path: str, name: str, old: Any, new: Any, absent: Any = None) -> None:
        """Report a removed or changed facet; ``absent`` is the facet's unset value."""
        if old == absent:
            return
        if new == absent:
            self.error(f"`{path}` removed '{name}' field")
        elif old != new:
            self.error(f"`{path}` has different {name}: `{_fmt(old)}` -> `{_fmt(new)}`")


def compare_schemas(old: Schema, new: Schema, path: str = "$") -> List[Message]:
    """Check that ``new`` keeps every constraint that ``old`` places on values."""
    findings = _Findings()
    _traverse(findings, old, new, path)
    return findings.messages


def _traverse(out: _Findings, old: Schema, new: Schema, path: str) -> None:
    old_type, new_type = _type_name(old), _type_name(new)
    if old_type != new_type:
        out.error(f"`{path}` type mismatch: `{old_type}` -> `{new_type}`")
        return

    if old.enum is not None and new.enum is None:
        out.error(f"`{path}` removed 'enum' field")
    elif old.enum is not None and new.enum is not None:
        if _not_subset(new.enum, old.enum):
            out.error(
                f"`{path}.enum` has different enum values: `{_fmt(old.enum)}` -> `{_fmt(new.enum)}`"
            )

    if old_type == "object":
        _check_object(out, old, new, path)
    elif old_type == "array":
        _check_array(out, old, new, path)
    elif old_type == "string":
        out.facet(path, "format", old.format, new.format, "")
        out.facet(path, "pattern", old.pattern, new.pattern, "")
        out.facet(path, "minLength", old.min_length, new.min_length)
        out.facet(path, "maxLength", old.max_length, new.max_length)
    elif old_type in ("integer", "number"):
        out.facet(path, "minimum", old.minimum, new.minimum, "")
        out.facet(path, "maximum", old.maximum, new.maximum, "")
        out.facet(path, "multipleOf", old.multiple_of, new.multiple_of, "")
    elif old_type == "anyOf":
        _check_any_of(out, old, new, path)


def _check_object(out: _Findings, old: Schema, new: Schema, path: str) -> None:
    required: List[str] = []
    if old.required is not None and new.required is None:
        out.error(f"`{path}` removed 'required' field")
    elif old.required is not None and new.required is not None:
        required = list(old.required)
        if _not_subset(new.required, required):
            out.error(
                f"`{path}.required` has different required properties: "
                f"`{_fmt(old.required)}` -> `{_fmt(new.required)}`"
            )

    out.facet(path, "maxProperties", old.max_properties, new.max_properties)
    out.facet(path, "minProperties", old.min_properties, new.min_properties)

    if old.properties is not None and new.properties is None:
        out.error(f"`{path}` removed 'properties' field")
    elif old.properties is not None and new.properties is not None:
        for key, old_child in old.properties.items():
            child_path = f"{path}.{key}"
            new_child = new.properties.get(key)
            if new_child is None:
                if key in required:
                    out.error(f"required property `{child_path}` was removed")
                continue
            _traverse(out, old_child, new_child, child_path)

    if old.pattern_properties is not None and new.pattern_properties is None:
        out.error(f"`{path}` removed 'patternProperties' field")
    elif old.pattern_properties is not None and new.pattern_properties is not None:
        for key, old_child in old.pattern_properties.items():
            child_path = f"{path}.{key}"
            new_child = new.pattern_properties.get(key)
            if new_child is None:
                out.error(f"pattern property {child_path} was removed")
                continue
            _traverse(out, old_child, new_child, child_path)


def _check_array(out: _Findings, old: Schema, new: Schema, path: str) -> None:
    if old.items is not None and new.items is None:
        out.error(f"`{path}` removed 'items' field")
        return
    if old.items is not None and new.items is not None:
        _traverse(out, old.items, new.items, f"{path}.items")

    out.facet(path, "minItems", old.min_items, new.min_items)
    out.facet(path, "maxItems", old.max_items, new.max_items)
    out.facet(path, "uniqueItems", old.unique_items, new.unique_items)


def _check_any_of(out: _Findings, old: Schema, new: Schema, path: str) -> None:
    if old.any_of is None or new.any_of is None:
        return
    for index, old_member in enumerate(old.any_of):
        member_path = f"{path}.anyOf[{index}]"
        if index >= len(new.any_of):
            out.error(f"`{member_path}` was removed")
            continue
        _traverse(out, old_member, new.any_of[index], member_path)


def _value_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def compare_values(old: Any, new: Any, path: str = "$") -> List[Message]:
    """Check that the JSON-like value ``new`` keeps everything ``old`` holds.

    Raises ``ValueError`` where ``old`` holds a value and ``new`` holds none.
    """
    findings = _Findings()
    _compare_values(findings, old, new, path)
    return findings.messages


def _compare_values(out: _Findings, old: Any, new: Any, path: str) -> None:
    if old is not None and new is None:
        raise ValueError("new values cannot be nil if old values are not nil")
    if old is None or new is None:
        return

    if isinstance(old, dict):
        if not isinstance(new, dict):
            out.error(f"`{path}` is not an object: `{_fmt(old)}` -> `{_fmt(new)}`")
            return
        for key, old_value in old.items():
            child_path = f"{path}.{key}"
            if key not in new:
                out.error(f"`{child_path}` key was removed")
                continue
            try:
                _compare_values(out, old_value, new[key], child_path)
            except ValueError as err:
                raise ValueError(
                    f"check values compatibility for key {child_path}: {err}"
                ) from err
    elif isinstance(old, list):
        if not isinstance(new, list):
            out.error(f"`{path}` is not an array: `{_fmt(old)}` -> `{_fmt(new)}`")
            return
        if len(old) != len(new):
            out.error(
                f"mismatching number of elements in {path}: {len(old)} -> {len(new)}"
            )
            return
        for index, (old_value, new_value) in enumerate(zip(old, new)):
            try:
                _compare_values(out, old_value, new_value, f"{path}[{index}]")
            except ValueError as err:
                raise ValueError(
                    f"check values compatibility for index {index}: {err}"
                ) from err
    else:
        if _value_kind(old) != _value_kind(new):
            out.error(
                f"value type mismatch in {path}: "
                f"{type(old).__name__} -> {type(new).__name__}"
            )
            return
        if old != new:
            out.error(f"`{path}` has different value: `{_fmt(old)}` -> `{_fmt(new)}`")


def compare_annotations(
    old: Optional[Mapping[str, Annotations]],
    new: Optional[Mapping[str, Annotations]],
) -> List[Message]:
    """Check that annotations keyed by path keep their meaning in ``new``.

    Raises ``ValueError`` where ``old`` is given and ``new`` is not.
    """
    if old is not None and new is None:
        raise ValueError("new values cannot be nil if old values are not nil")
    if old is None or new is None:
        return []

    out = _Findings()
    for path, old_ann in old.items():
        new_ann = new.get(path)
        if new_ann is None:
            out.warning(f"annotations key `{path}` not found")
            continue

        if old_ann.reference is not None and new_ann.reference is not None:
            old_refs = old_ann.read_reference()
            new_refs = new_ann.read_reference()
            if _not_subset(new_refs, old_refs):
                out.error(
                    f"`{path}` cti.reference has different values: "
                    f"`{_fmt(old_refs)}` -> `{_fmt(new_refs)}`"
                )

        if old_ann.meta != new_ann.meta:
            out.error(f"`{path}` cti.meta mismatch: `{old_ann.meta}` -> `{new_ann.meta}`")

        flags: Dict[str, str] = {
            "id": "cti.id",
            "asset": "cti.asset",
            "l10n": "cti.l10n",
            "overridable": "cti.overridable",
        }
        for attr, label in flags.items():
            old_flag, new_flag = getattr(old_ann, attr), getattr(new_ann, attr)
            if old_flag is not None and new_flag is not None and old_flag != new_flag:
                out.error(
                    f"`{path}` {label} mismatch: `{_fmt(old_flag)}` -> `{_fmt(new_flag)}`"
                )

        if old_ann.schema is not None and new_ann.schema is not None:
            old_schemas = old_ann.read_cti_schema()
            new_schemas = new_ann.read_cti_schema()
            if _not_subset(new_schemas, old_schemas):
                out.error(
                    f"`{path}` cti.schema has different values: "
                    f"`{_fmt(old_schemas)}` -> `{_fmt(new_schemas)}`"
                )
    return out.messages