"""Full compatibility check between two versions of a CTI package.

Packages and entities are taken by shape:

* a package has ``parsed`` (bool), ``package_id`` (str) and ``entities``, a
  mapping of CTI identifier to entity;
* every entity has ``cti`` (str), ``annotations`` (a mapping of path to
  ``Annotations`` or None) and an ``expression()`` method returning its parsed
  ``Expression``;
* an entity type also has ``schema``, ``traits_schema``, ``traits`` and
  ``traits_annotations``; an entity instance has ``values`` instead.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ctitools.annotations import Annotations
from ctitools.expression import Expression
from ctitools.schema import Schema
from ctitools.schema_checks import (
    Message,
    Severity,
    compare_annotations,
    compare_schemas,
    compare_values,
)


class CompatibilityError(Exception):
    """Raised when two packages or entities cannot be compared at all."""


class Entity(Protocol):
    cti: str
    annotations: Optional[Mapping[str, Annotations]]

    def expression(self) -> Expression: ...


class Package(Protocol):
    parsed: bool
    package_id: str
    entities: Mapping[str, Entity]


@dataclass(frozen=True, eq=False)
class Context:
    """The pair of entities a group of findings is about; compared by identity."""

    old_entity: Any
    new_entity: Any

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Context)
            and self.old_entity is other.old_entity
            and self.new_entity is other.new_entity
        )

    def __hash__(self) -> int:
        return hash((id(self.old_entity), id(self.new_entity)))


@dataclass
class EntityDiff:
    """Changes found in one entity."""

    entity: Any
    messages: List[str] = field(default_factory=list)


def decrement_minor_version(expression: Optional[Expression]) -> Optional[Expression]:
    """Return a copy of ``expression`` whose last node has the previous minor version.

    Returns None for a missing or empty expression.  The original is left intact.
    """
    if expression is None or expression.head is None:
        return None
    clone = copy.deepcopy(expression)
    tail = clone.tail()
    if tail.version.minor is not None:
        tail.version.minor -= 1
    return clone


def _is_entity_type(entity: Any) -> bool:
    return hasattr(entity, "schema")


def _is_entity_instance(entity: Any) -> bool:
    return hasattr(entity, "values") and not _is_entity_type(entity)


class CompatibilityChecker:
    """Checks that a new package keeps full compatibility with an old one."""

    def __init__(self) -> None:
        self.new_entities: List[Any] = []
        self.removed_entities: List[Any] = []
        self.modified_entities: List[EntityDiff] = []
        self.messages: Dict[Context, List[Message]] = {}
        self.passed = False

    def _add(self, ctx: Context, messages: List[Message]) -> None:
        for message in messages:
            if message.severity is Severity.ERROR:
                self.passed = False
            self.messages.setdefault(ctx, []).append(message)

    def check_packages(self, old_package: Optional[Package], new_package: Optional[Package]) -> None:
        """Compare every entity of the two packages and record the findings."""
        if old_package is None or new_package is None:
            raise CompatibilityError("packages cannot be nil")
        if not old_package.parsed or not new_package.parsed:
            raise CompatibilityError("packages must be parsed before checking compatibility")
        if old_package.package_id != new_package.package_id:
            raise CompatibilityError(
                f"package IDs do not match: `{old_package.package_id}` -> `{new_package.package_id}`"
            )

        self.passed = True
        old_index, new_index = old_package.entities, new_package.entities

        for cti, old_entity in old_index.items():
            new_entity = new_index.get(cti)
            if new_entity is None:
                self.removed_entities.append(old_entity)
                continue
            try:
                self.check_entities(old_entity, new_entity)
            except CompatibilityError as err:
                raise CompatibilityError(f"failed to check compatibility of {cti}: {err}") from err

        for cti, new_entity in new_index.items():
            if cti in old_index:
                continue
            self.new_entities.append(new_entity)

            try:
                expression = new_entity.expression()
            except ValueError as err:
                raise CompatibilityError(f"get expression for new object {cti}: {err}") from err
            tail = expression.tail() if expression is not None else None
            if tail is None or tail.version.minor is None:
                continue

            previous_expression = decrement_minor_version(expression)
            if previous_expression is None:
                raise CompatibilityError(f"clone expression for new object {cti}")
            previous = new_index.get(str(previous_expression))
            if previous is None:
                continue
            try:
                self.check_entities(previous, new_entity)
            except CompatibilityError as err:
                raise CompatibilityError(
                    f"failed to check compatibility between {previous.cti} and {new_entity.cti}: {err}"
                ) from err

    def check_entities(self, old_entity: Any, new_entity: Any) -> None:
        """Compare two versions of one entity and record the findings."""
        if old_entity is None or new_entity is None:
            raise CompatibilityError("entities cannot be nil")
        ctx = Context(old_entity, new_entity)

        if _is_entity_type(old_entity):
            if not _is_entity_type(new_entity):
                raise CompatibilityError(f"entity {old_entity.cti} is not a valid EntityType")
            self._check_schema(ctx, old_entity.schema, new_entity.schema, "schema")
            self._check_schema(ctx, old_entity.traits_schema, new_entity.traits_schema, "traits schema")
            try:
                self._add(ctx, compare_values(old_entity.traits, new_entity.traits, "$"))
            except ValueError as err:
                raise CompatibilityError(f"failed to check traits compatibility: {err}") from err
            try:
                self._add(
                    ctx,
                    compare_annotations(old_entity.traits_annotations, new_entity.traits_annotations),
                )
            except ValueError as err:
                raise CompatibilityError(
                    f"failed to check traits annotations compatibility: {err}"
                ) from err
        elif _is_entity_instance(old_entity):
            if not _is_entity_instance(new_entity):
                raise CompatibilityError(f"entity {old_entity.cti} is not a valid EntityInstance")
            try:
                self._add(ctx, compare_values(old_entity.values, new_entity.values, "$"))
            except ValueError as err:
                raise CompatibilityError(f"failed to check values compatibility: {err}") from err
        else:
            raise CompatibilityError(f"invalid entity type: {type(old_entity).__name__}")

        try:
            self._add(ctx, compare_annotations(old_entity.annotations, new_entity.annotations))
        except ValueError as err:
            raise CompatibilityError(f"failed to check annotations compatibility: {err}") from err

    def _check_schema(
        self, ctx: Context, old: Optional[Schema], new: Optional[Schema], label: str
    ) -> None:
        if old is not None and new is None:
            raise CompatibilityError(
                f"failed to check {label} compatibility: "
                "new schema cannot be nil if old schema is not nil"
            )
        if old is None or new is None:
            return
        try:
            old_start, _ = old.get_ref_schema()
        except ValueError as err:
            self._add(ctx, [Message(Severity.ERROR, f"failed to extract old schema definition: {err}")])
            return
        try:
            new_start, _ = new.get_ref_schema()
        except ValueError as err:
            self._add(ctx, [Message(Severity.ERROR, f"failed to extract new schema definition: {err}")])
            return
        self._add(ctx, compare_schemas(old_start, new_start, "$"))

    def report(self) -> str:
        """Render the findings grouped by the entities they are about."""
        if not self.messages:
            return "No compatibility issues found."
        lines: List[str] = []
        for ctx, messages in self.messages.items():
            old_cti, new_cti = ctx.old_entity.cti, ctx.new_entity.cti
            lines.append(new_cti if old_cti == new_cti else f"{old_cti} -> {new_cti}")
            lines.extend(f"- [{msg.severity}] {msg.message}" for msg in messages)
            lines.append("")
        return "\n".join(lines) + "\n"