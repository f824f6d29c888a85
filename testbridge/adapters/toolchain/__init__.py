"""Toolchain adapters."""

from .swift_toolchain import SwiftToolchain, ToolchainError

__all__ = ["SwiftToolchain", "ToolchainError"]
