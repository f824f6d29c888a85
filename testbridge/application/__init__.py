"""
Application layer: path resolution, mapping and the operations built on it.

Use cases depend only on the ports; adapters are injected by the CLI.
"""

from .navigation_usecase import NavigationUseCase
from .suggest_test_files import SuggestTestFilesUseCase, suggest_test_files

__all__ = ["NavigationUseCase", "SuggestTestFilesUseCase", "suggest_test_files"]
