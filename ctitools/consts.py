"""Annotation names and access modifiers used by CTI metadata."""

from __future__ import annotations

from enum import Enum


class AccessModifier(str, Enum):
    """Access level of an entity."""

    PUBLIC = "public"
    """Anyone may reference the entity."""
    PROTECTED = "protected"
    """Any package of the same vendor may reference the entity."""
    PRIVATE = "private"
    """Only the same package may reference the entity."""

    def integer(self) -> int:
        """Return a rank for comparison: public < protected < private."""
        return _ACCESS_RANK.get(self, -1)


_ACCESS_RANK = {
    AccessModifier.PUBLIC: 0,
    AccessModifier.PROTECTED: 1,
    AccessModifier.PRIVATE: 2,
}

CTI = "cti.cti"
FINAL = "cti.final"
ACCESS = "cti.access"
ACCESS_FIELD = "cti.access_field"
RESILIENT = "cti.resilient"
ID = "cti.id"
L10N = "cti.l10n"
DISPLAY_NAME = "cti.display_name"
DESCRIPTION = "cti.description"
ASSET = "cti.asset"
OVERRIDABLE = "cti.overridable"
REFERENCE = "cti.reference"
SCHEMA = "cti.schema"
META = "cti.meta"
PROPERTY_NAMES = "cti.propertyNames"

TRAITS = "cti-traits"