"""Package discovery adapters."""

from .package_provider import FileDiskPackageProvider

__all__ = ["FileDiskPackageProvider"]
