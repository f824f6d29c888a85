"""Path resolution and source/test mapping for manifest-described packages."""

from .package_paths import PackagePathsContext, compute_path_for_target
from .source_test_mapper import SourceToTestFileMapper

__all__ = ["PackagePathsContext", "SourceToTestFileMapper", "compute_path_for_target"]
