"""Generate struct and enum declarations from a runtime type registry, and fetch metadata."""

__version__ = "0.1.0"