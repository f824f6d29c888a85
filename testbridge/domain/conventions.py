"""
Path conventions of the package layout.

Directory names are listed in the order of preference the package manager
uses when a target does not declare an explicit path, relative to the
package root.
"""

from typing import Final

# Conventional roots probed for non-test targets.
SOURCE_SEARCH_PATHS: Final[tuple[str, ...]] = (
    "Sources",
    "Source",
    "src",
    "srcs",
)

# Conventional roots probed for test targets. The package manager also accepts
# test targets placed under the source roots.
TEST_SEARCH_PATHS: Final[tuple[str, ...]] = (
    "Tests",
    "Sources",
    "Source",
    "src",
    "srcs",
)

DEFAULT_MANIFEST_FILE_NAME: Final = "Package.swift"

# Suffix shared by test target names and test file stems.
TEST_SUFFIX: Final = "Tests"

SOURCE_FILE_EXTENSION: Final = ".swift"

# Module imported by the generated test file scaffold.
TEST_FRAMEWORK_MODULE: Final = "XCTest"
TEST_CASE_BASE_CLASS: Final = "XCTestCase"

# Token written in place of a target name that could not be deduced.
TARGET_NAME_PLACEHOLDER: Final = "<#TargetName#>"

# Placeholder for the file stem in filename heuristic search patterns.
SEARCH_PATTERN_PLACEHOLDER: Final = "$1"
