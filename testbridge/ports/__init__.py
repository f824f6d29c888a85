"""
Port interfaces for the testbridge system.

This module contains the interface definitions using Python Protocols
to define contracts between the application layer and adapters.
"""

from .filesystem_port import FileSystemPort
from .package_provider_port import PackageProviderPort
from .toolchain_port import ToolchainPort

__all__ = [
    "FileSystemPort",
    "PackageProviderPort",
    "ToolchainPort",
]
