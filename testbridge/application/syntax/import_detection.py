"""Lightweight detection of the modules a Swift file imports."""

from __future__ import annotations

import re

# import Foundation / import Foo.Bar;
MODULE_IMPORT_PATTERN = re.compile(r"\bimport[ \t]+(\w+(?:\.\w+)*)[ \t]*(?:;|$)", re.MULTILINE)
# import struct Foundation.URL
SYMBOL_IMPORT_PATTERN = re.compile(
    r"\bimport[ \t]+(?:typealias|struct|class|enum|protocol|let|var|func)[ \t]+(\w+)(?:\.\w+)+"
)


def detect_module_imports(contents: str) -> list[str]:
    """
    Return the module names imported by a Swift file, in file order.

    Symbol imports (``import struct Foo.Bar``) report their module (``Foo``).
    Duplicate imports are reported as many times as they appear.
    """
    found: list[tuple[int, str]] = []

    for match in MODULE_IMPORT_PATTERN.finditer(contents):
        found.append((match.start(), match.group(1)))
    for match in SYMBOL_IMPORT_PATTERN.finditer(contents):
        found.append((match.start(), match.group(1)))

    found.sort(key=lambda pair: pair[0])
    return [module for _, module in found]
