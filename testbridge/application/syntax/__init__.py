"""Swift syntax helpers used to build test scaffolds."""

from .import_detection import detect_module_imports
from .swift_file_builder import SwiftFileBuilder

__all__ = ["SwiftFileBuilder", "detect_module_imports"]
