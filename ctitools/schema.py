"""JSON schema nodes carrying CTI annotations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

_DEFINITIONS_PREFIX = "#/definitions/"


@dataclass
class Schema:
    """A JSON schema node with the CTI annotation keywords attached to it.

    Keys of ``properties`` and ``pattern_properties`` keep their insertion order.
    Numeric bounds that JSON keeps as numbers of any precision are held as text.
    """

    type: str = ""
    ref: str = ""
    properties: Optional[Dict[str, "Schema"]] = None
    pattern_properties: Optional[Dict[str, "Schema"]] = None
    items: Optional["Schema"] = None
    any_of: Optional[List["Schema"]] = None
    enum: Optional[List[Any]] = None
    required: Optional[List[str]] = None
    definitions: Optional[Dict[str, "Schema"]] = None

    max_properties: Optional[int] = None
    min_properties: Optional[int] = None
    max_items: Optional[int] = None
    min_items: Optional[int] = None
    unique_items: Optional[bool] = None
    max_length: Optional[int] = None
    min_length: Optional[int] = None

    format: str = ""
    pattern: str = ""
    minimum: str = ""
    maximum: str = ""
    multiple_of: str = ""

    cti_cti: Any = None
    cti_id: Optional[bool] = None
    cti_l10n: Optional[bool] = None
    cti_asset: Optional[bool] = None
    cti_overridable: Optional[bool] = None
    cti_reference: Any = None
    cti_schema: Any = None
    cti_meta: str = ""
    cti_display_name: Optional[bool] = None
    cti_description: Optional[bool] = None
    cti_property_names: Optional[Dict[str, Any]] = None

    def is_ref(self) -> bool:
        """Return True if the node is a reference to another schema."""
        return self.ref != ""

    def is_any_of(self) -> bool:
        """Return True if the node is a union of member schemas."""
        return bool(self.any_of)

    def is_any(self) -> bool:
        """Return True if the node places no constraint on its value."""
        return (
            self.type == ""
            and not self.is_ref()
            and not self.is_any_of()
            and self.enum is None
            and self.properties is None
            and self.pattern_properties is None
            and self.items is None
        )

    def get_ref_schema(self) -> Tuple["Schema", str]:
        """Resolve a top-level reference into ``definitions``.

        Returns the schema the node stands for and the name of the definition,
        which is empty when the node is not a reference.
        """
        if not self.is_ref():
            return self, ""
        if not self.ref.startswith(_DEFINITIONS_PREFIX):
            raise ValueError(f"unsupported reference {json.dumps(self.ref)}")
        name = self.ref[len(_DEFINITIONS_PREFIX):]
        target = (self.definitions or {}).get(name)
        if target is None:
            raise ValueError(f"definition {json.dumps(name)} not found")
        return target, name