"""Manifest deserialization adapters."""

from .manifest_parser import ManifestParseError, parse_manifest

__all__ = ["ManifestParseError", "parse_manifest"]
