"""Deserialization of `swift package dump-package` output."""

import logging

from pydantic import ValidationError

from ...domain.models import Manifest, TestBridgeError

logger = logging.getLogger(__name__)


class ManifestParseError(TestBridgeError):
    """Raised when a manifest dump is not valid JSON or misses required fields."""

    pass


def parse_manifest(data: str | bytes) -> Manifest:
    """
    Parse a JSON manifest dump into a ``Manifest``.

    Unknown keys are ignored; only names, roles, paths and dependencies of
    targets are kept.

    Raises:
        ManifestParseError: If ``data`` is not a valid manifest dump
    """
    if not data or not data.strip():
        raise ManifestParseError("Manifest dump is empty")

    try:
        manifest = Manifest.model_validate_json(data)
    except ValidationError as e:
        logger.debug("Invalid manifest dump: %s", e)
        raise ManifestParseError(f"Invalid manifest dump: {e}") from e

    logger.debug("Parsed manifest %r with %d target(s)", manifest.name, len(manifest.targets))
    return manifest
