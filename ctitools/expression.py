"""Cross-domain Typed Identifier (CTI) expressions: structure, rendering, matching and interpolation."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List, Mapping, Optional, Sequence

WILDCARD = "*"
INHERITANCE_SEPARATOR = "~"
CTI_PREFIX = "cti."


class ExpressionError(ValueError):
    """Raised when an expression cannot be matched, parsed or interpolated."""


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def is_wildcard(name: str) -> bool:
    """Return True if a vendor or package name is the wildcard."""
    return name == WILDCARD


def ends_with_wildcard(name: str) -> bool:
    """Return True if an entity name ends with the wildcard."""
    return name.endswith(WILDCARD)


@dataclass
class Version:
    """Entity version; a part set to None is absent."""

    major: Optional[int] = None
    minor: Optional[int] = None
    has_major_wildcard: bool = False
    has_minor_wildcard: bool = False

    def has_wildcard(self) -> bool:
        return self.has_major_wildcard or self.has_minor_wildcard

    def __str__(self) -> str:
        if self.has_major_wildcard:
            return WILDCARD
        if self.major is None:
            return ""
        text = str(self.major)
        if self.minor is None and not self.has_minor_wildcard:
            return text
        if self.has_minor_wildcard:
            return f"{text}.{WILDCARD}"
        return f"{text}.{self.minor}"


def new_version(major: int, minor: int) -> Version:
    """Build a complete version."""
    return Version(major=major, minor=minor)


def new_partial_version(major: int) -> Version:
    """Build a version holding only the major part."""
    return Version(major=major)


@dataclass
class Node:
    """One complete chunk of an expression: vendor.package.entity.vMAJOR.MINOR."""

    vendor: str = ""
    package: str = ""
    entity_name: str = ""
    version: Version = field(default_factory=Version)
    dynamic_parameter_name: str = ""
    child: Optional["Node"] = None

    def has_wildcard(self) -> bool:
        return (
            is_wildcard(self.vendor)
            or is_wildcard(self.package)
            or ends_with_wildcard(self.entity_name)
            or self.version.has_wildcard()
        )

    def has_dynamic_parameters(self) -> bool:
        return self.dynamic_parameter_name != ""

    def __str__(self) -> str:
        if self.dynamic_parameter_name:
            return "$" + self.dynamic_parameter_name
        if is_wildcard(self.vendor):
            return self.vendor
        if is_wildcard(self.package):
            return f"{self.vendor}.{self.package}"
        if ends_with_wildcard(self.entity_name):
            return f"{self.vendor}.{self.package}.{self.entity_name}"
        return f"{self.vendor}.{self.package}.{self.entity_name}.v{self.version}"


@dataclass
class QueryAttributeValue:
    """Value of a query attribute: the raw text and, if it is a CTI, its expression."""

    raw: str = ""
    expression: Optional["Expression"] = None

    def is_expression(self) -> bool:
        expr = self.expression
        return expr is not None and (expr.head is not None or bool(expr.query_attributes))


@dataclass
class QueryAttribute:
    """A name/value pair of a CTI query."""

    name: str
    value: QueryAttributeValue = field(default_factory=QueryAttributeValue)


def match_query_attributes(first: Sequence[QueryAttribute], second: Sequence[QueryAttribute]) -> bool:
    """Return True if every attribute of ``first`` is found in ``second`` with a matching value."""
    for attr in first:
        other = next((candidate for candidate in second if candidate.name == attr.name), None)
        if other is None:
            return False
        left, right = attr.value, other.value
        if not left.is_expression() and not right.is_expression():
            if left.raw != right.raw:
                return False
            continue
        if not (left.is_expression() and right.is_expression()):
            return False
        try:
            matched = left.expression.match(right.expression)
        except ExpressionError as err:
            raise ExpressionError(f"match query attribute {_quote(attr.name)}: {err}") from err
        if not matched:
            return False
    return True


Parser = Callable[[str], "Expression"]


@dataclass
class Expression:
    """A parsed CTI expression.

    ``parser`` is used to parse dynamic parameter values during interpolation;
    it must not itself accept dynamic parameters.
    """

    head: Optional[Node] = None
    query_attributes: List[QueryAttribute] = field(default_factory=list)
    attribute_selector: str = ""
    anonymous_entity_uuid: Optional[uuid.UUID] = None
    parser: Optional[Parser] = field(default=None, compare=False, repr=False)

    def _nodes(self) -> Iterator[Node]:
        node = self.head
        while node is not None:
            yield node
            node = node.child

    def tail(self) -> Optional[Node]:
        last = None
        for last in self._nodes():
            pass
        return last

    def has_wildcard(self) -> bool:
        return any(node.has_wildcard() for node in self._nodes())

    def has_anonymous_entity(self) -> bool:
        return self.anonymous_entity_uuid is not None

    def has_query_attributes(self) -> bool:
        return bool(self.query_attributes)

    def has_dynamic_parameters(self) -> bool:
        if any(node.has_dynamic_parameters() for node in self._nodes()):
            return True
        return any(
            attr.value.is_expression() and attr.value.expression.has_dynamic_parameters()
            for attr in self.query_attributes
        )

    def get_query_attribute_value(self, name: str) -> Optional[QueryAttributeValue]:
        """Return the value of the named query attribute, or None if absent."""
        return next((attr.value for attr in self.query_attributes if attr.name == name), None)

    def __str__(self) -> str:
        parts: List[str] = []
        for index, node in enumerate(self._nodes()):
            parts.append(CTI_PREFIX if index == 0 else INHERITANCE_SEPARATOR)
            parts.append(str(node))

        if self.anonymous_entity_uuid is not None:
            parts.append(INHERITANCE_SEPARATOR + str(self.anonymous_entity_uuid))

        if self.query_attributes:
            rendered = []
            for attr in self.query_attributes:
                text = str(attr.value.expression) if attr.value.is_expression() else attr.value.raw
                escaped = text.replace('"', '\\"')
                rendered.append(f'{attr.name}="{escaped}"')
            parts.append("[" + ",".join(rendered) + "]")

        if self.attribute_selector:
            parts.append("@" + self.attribute_selector)

        return "".join(parts)

    def match(self, other: "Expression") -> bool:
        """Report whether this expression matches ``other``."""
        return self._match(other, ignore_query=False)

    def match_ignore_query(self, other: "Expression") -> bool:
        """Report whether this expression matches ``other``, ignoring query attributes."""
        return self._match(other, ignore_query=True)

    @staticmethod
    def _match_node(first: Node, second: Node) -> Optional[bool]:
        """Return the verdict for a node pair, or None to go on to the children."""
        if is_wildcard(first.vendor):
            return True
        if first.vendor != second.vendor:
            return False

        if is_wildcard(first.package):
            return True
        if first.package != second.package:
            return False

        if ends_with_wildcard(first.entity_name):
            # The prefix keeps its trailing dot; the version follows the entity name.
            prefix = first.entity_name[:-1]
            return (second.entity_name + ".").startswith(prefix)
        if first.entity_name != second.entity_name:
            return False

        version1, version2 = first.version, second.version
        if version1.has_major_wildcard:
            return True
        if version1.major is None:
            return None
        if version1.major != version2.major:
            return False
        if version1.has_minor_wildcard:
            return True
        if version1.minor is None:
            return None
        if version1.minor != version2.minor:
            return False
        return None

    def _match(self, other: "Expression", ignore_query: bool) -> bool:
        if self.attribute_selector:
            raise ExpressionError("matching of CTI with attribute selector is not supported")
        if other.attribute_selector:
            raise ExpressionError("matching against CTI with attribute selector is not supported")
        if other.has_wildcard():
            raise ExpressionError("matching against CTI with wildcard is not supported")

        node1, node2 = self.head, other.head
        while node1 is not None and node2 is not None:
            verdict = self._match_node(node1, node2)
            if verdict is not None:
                return verdict
            node1, node2 = node1.child, node2.child

        if node1 is None and node2 is None:
            if self.anonymous_entity_uuid != other.anonymous_entity_uuid:
                return False
            if not ignore_query and not match_query_attributes(
                self.query_attributes, other.query_attributes
            ):
                return False
            return True

        if node1 is not None:
            return False

        return not (
            self.anonymous_entity_uuid is not None
            or (not ignore_query and self.has_query_attributes())
        )

    def interpolate_dynamic_parameter_values(self, values: Mapping[str, str]) -> "Expression":
        """Return a new expression with dynamic parameters replaced by parsed ``values``."""
        head: Optional[Node] = None
        prev: Optional[Node] = None

        def attach(node: Node) -> None:
            nonlocal head, prev
            if head is None:
                head = prev = node
                return
            prev.child = node
            prev = node

        for current in self._nodes():
            name = current.dynamic_parameter_name
            if not name:
                attach(
                    Node(
                        vendor=current.vendor,
                        package=current.package,
                        entity_name=current.entity_name,
                        version=replace(current.version),
                    )
                )
                continue

            if name not in values:
                raise ExpressionError(f"dynamic parameter values do not have {_quote(name)} key")
            value = values[name]

            is_complete = value.startswith(CTI_PREFIX)
            to_parse = value if is_complete else CTI_PREFIX + value

            if self.parser is None:
                raise ExpressionError(
                    f"parse value {_quote(value)} of dynamic parameter {_quote(name)} as CTI: "
                    "no parser is available"
                )
            try:
                parsed = self.parser(to_parse)
            except ValueError as err:
                raise ExpressionError(
                    f"parse value {_quote(value)} of dynamic parameter {_quote(name)} as CTI: {err}"
                ) from err

            if not is_complete:
                attach(parsed.head)
                continue

            if head is not None:
                prefix = Expression(head=head)
                try:
                    matched = prefix.match(parsed)
                except ExpressionError as err:
                    raise ExpressionError(
                        f"match {_quote(str(prefix))} and value {_quote(value)} "
                        f"of dynamic parameter {_quote(name)}: {err}"
                    ) from err
                if not matched:
                    raise ExpressionError(
                        f"{_quote(str(prefix))} and value {_quote(value)} "
                        f"of dynamic parameter {_quote(name)} are not matched"
                    )
            head = parsed.head
            prev = parsed.tail()

        attributes = []
        for attr in self.query_attributes:
            interpolated: Optional[Expression] = None
            if attr.value.is_expression():
                try:
                    interpolated = attr.value.expression.interpolate_dynamic_parameter_values(values)
                except ExpressionError as err:
                    raise ExpressionError(
                        f"interpolate dynamic parameters for attribute {_quote(attr.name)}: {err}"
                    ) from err
            attributes.append(
                QueryAttribute(
                    name=attr.name,
                    value=QueryAttributeValue(raw=attr.value.raw, expression=interpolated),
                )
            )

        return Expression(head=head, query_attributes=attributes)