"""Cross-domain Typed Identifiers (CTI): expressions, schema annotations, compatibility checks and archivers."""

__version__ = "0.1.0"