"""Configuration management for testbridge."""

from .loader import ConfigLoader, ConfigurationError, load_config
from .models import (
    ConcurrencyConfig,
    ConfirmationMode,
    EmitImportDeclarationsMode,
    FileGenConfig,
    GotoTestFileConfig,
    TestBridgeConfig,
    ToolchainConfig,
)

__all__ = [
    "ConcurrencyConfig",
    "ConfigLoader",
    "ConfigurationError",
    "ConfirmationMode",
    "EmitImportDeclarationsMode",
    "FileGenConfig",
    "GotoTestFileConfig",
    "TestBridgeConfig",
    "ToolchainConfig",
    "load_config",
]
