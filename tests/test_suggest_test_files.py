"""
Tests for the suggest test files use case.

This module tests scaffold rendering, import emission modes, per-file
diagnostics and cooperative cancellation of batches.
"""

import pytest

from testbridge.application.concurrency import CancellationToken, OperationCancelledError
from testbridge.application.dependency_graph import TargetDependencyGraph
from testbridge.application.suggest_test_files import (
    SuggestTestFilesUseCase,
    render_test_file,
    select_emitted_imports,
    suggest_test_files,
)
from testbridge.config.models import (
    ConcurrencyConfig,
    EmitImportDeclarationsMode,
    FileGenConfig,
    TestBridgeConfig,
)
from testbridge.domain.models import DiagnosticKind, SuggestTestFilesResult, TargetRole
from tests.conftest import (
    PACKAGE_ROOT,
    StaticPackageProvider,
    VirtualFileSystem,
    make_manifest,
    make_package,
    make_target,
)


def config_with_imports(mode: EmitImportDeclarationsMode) -> TestBridgeConfig:
    return TestBridgeConfig(file_gen=FileGenConfig(emit_import_declarations=mode))


class TestRenderTestFile:
    def test_scaffold(self):
        contents = render_test_file("ATests", "Target")

        assert contents == (
            "import XCTest\n"
            "\n"
            "@testable import Target\n"
            "\n"
            "class ATests: XCTestCase {\n"
            "\n"
            "}\n"
        )

    def test_imports_follow_testable_import(self):
        contents = render_test_file("ATests", "Target", ["Foundation", "Utils"])

        assert contents == (
            "import XCTest\n"
            "\n"
            "@testable import Target\n"
            "import Foundation\n"
            "import Utils\n"
            "\n"
            "class ATests: XCTestCase {\n"
            "\n"
            "}\n"
        )

    def test_unknown_target_uses_placeholder(self):
        contents = render_test_file("CTests", None)

        assert "@testable import <#TargetName#>\n" in contents


class TestSelectEmittedImports:
    @pytest.fixture
    def manifest(self):
        return make_manifest(
            make_target("Utils"),
            make_target("Core", dependencies=["Utils"]),
            make_target("App", TargetRole.EXECUTABLE, dependencies=["Core"]),
        )

    def test_always(self, manifest):
        graph = TargetDependencyGraph(manifest)
        detected = ["Foundation", "Utils"]

        result = select_emitted_imports(
            EmitImportDeclarationsMode.ALWAYS, detected, manifest.targets[1], graph
        )

        assert result == ["Foundation", "Utils"]

    def test_never(self, manifest):
        graph = TargetDependencyGraph(manifest)

        result = select_emitted_imports(
            EmitImportDeclarationsMode.NEVER, ["Utils"], manifest.targets[1], graph
        )

        assert result == []

    def test_explicit_dependencies_include_transitive(self, manifest):
        graph = TargetDependencyGraph(manifest)
        app = manifest.targets[2]

        result = select_emitted_imports(
            EmitImportDeclarationsMode.EXPLICIT_DEPENDENCIES_ONLY,
            ["Foundation", "Utils", "Core", "Utils"],
            app,
            graph,
        )

        assert result == ["Utils", "Core", "Utils"]

    def test_explicit_dependencies_without_target(self, manifest):
        graph = TargetDependencyGraph(manifest)

        result = select_emitted_imports(
            EmitImportDeclarationsMode.EXPLICIT_DEPENDENCIES_ONLY, ["Utils"], None, graph
        )

        assert result == []


class TestSuggestTestFilesUseCase:
    """Batch proposal of test files."""

    @pytest.fixture
    def file_system(self):
        fs = VirtualFileSystem()
        fs.add_file(PACKAGE_ROOT / "Package.swift")
        fs.add_file(
            PACKAGE_ROOT / "Sources/Target/A.swift",
            "import Foundation\nimport Utils\n\nstruct A {}\n",
        )
        fs.add_file(PACKAGE_ROOT / "Sources/Target/A+Ext.swift", "extension A {}\n")
        fs.add_file(PACKAGE_ROOT / "Sources/Target/Sub/B.swift")
        fs.add_file(PACKAGE_ROOT / "Sources/C.swift")
        fs.add_file(PACKAGE_ROOT / "Sources/Utils/Utils.swift")
        fs.add_file(PACKAGE_ROOT / "Tests/TargetTests/Sub/BTests.swift")
        return fs

    @pytest.fixture
    def manifest(self):
        return make_manifest(
            make_target("Utils"),
            make_target("Target", dependencies=["Utils"]),
            make_target("TargetTests", TargetRole.TEST, dependencies=["Target"]),
        )

    async def make_use_case(self, file_system, manifest, config=None):
        package = await make_package(file_system, manifest)
        provider = StaticPackageProvider(package)
        return SuggestTestFilesUseCase(provider, file_system, config), provider

    @pytest.mark.asyncio
    async def test_descriptor_for_source_file(self, file_system, manifest):
        use_case, _ = await self.make_use_case(file_system, manifest)
        source = PACKAGE_ROOT / "Sources/Target/A.swift"

        result = await use_case.suggest_test_files([source])

        assert result.diagnostics == []
        (descriptor,) = result.test_files
        assert descriptor.name == "ATests.swift"
        assert descriptor.path == PACKAGE_ROOT / "Tests/TargetTests/ATests.swift"
        assert descriptor.original_file == source
        assert descriptor.exists_on_disk is False
        assert descriptor.suggested_imports == ["Foundation", "Utils"]
        assert descriptor.contents == (
            "import XCTest\n"
            "\n"
            "@testable import Target\n"
            "import Utils\n"
            "\n"
            "class ATests: XCTestCase {\n"
            "\n"
            "}\n"
        )

    @pytest.mark.asyncio
    async def test_always_emits_every_import(self, file_system, manifest):
        config = config_with_imports(EmitImportDeclarationsMode.ALWAYS)
        use_case, _ = await self.make_use_case(file_system, manifest, config)

        result = await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/Target/A.swift"])

        assert "@testable import Target\nimport Foundation\nimport Utils\n" in (
            result.test_files[0].contents
        )

    @pytest.mark.asyncio
    async def test_never_emits_imports(self, file_system, manifest):
        config = config_with_imports(EmitImportDeclarationsMode.NEVER)
        use_case, _ = await self.make_use_case(file_system, manifest, config)

        result = await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/Target/A.swift"])

        descriptor = result.test_files[0]
        assert "import Utils" not in descriptor.contents
        assert descriptor.suggested_imports == ["Foundation", "Utils"]

    @pytest.mark.asyncio
    async def test_existing_test_file(self, file_system, manifest):
        use_case, _ = await self.make_use_case(file_system, manifest)

        result = await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/Target/Sub/B.swift"])

        descriptor = result.test_files[0]
        assert descriptor.path == PACKAGE_ROOT / "Tests/TargetTests/Sub/BTests.swift"
        assert descriptor.exists_on_disk is True

    @pytest.mark.asyncio
    async def test_special_characters_in_file_name(self, file_system, manifest):
        use_case, _ = await self.make_use_case(file_system, manifest)

        result = await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/Target/A+Ext.swift"])

        descriptor = result.test_files[0]
        assert descriptor.name == "A+ExtTests.swift"
        assert descriptor.path == PACKAGE_ROOT / "Tests/TargetTests/A+ExtTests.swift"
        assert "class A_ExtTests: XCTestCase {" in descriptor.contents

    @pytest.mark.asyncio
    async def test_file_without_target_name(self, file_system, manifest):
        use_case, _ = await self.make_use_case(file_system, manifest)

        result = await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/C.swift"])

        descriptor = result.test_files[0]
        assert descriptor.path == PACKAGE_ROOT / "Tests/CTests.swift"
        assert "@testable import <#TargetName#>" in descriptor.contents

    @pytest.mark.asyncio
    async def test_mixed_batch_keeps_input_order(self, file_system, manifest):
        use_case, _ = await self.make_use_case(file_system, manifest)
        outside = PACKAGE_ROOT.parent / "Loose/Script.swift"
        test_file = PACKAGE_ROOT / "Tests/TargetTests/Sub/BTests.swift"

        result = await use_case.suggest_test_files(
            [
                PACKAGE_ROOT / "Sources/Target/A.swift",
                test_file,
                outside,
                PACKAGE_ROOT / "Sources/Target/Sub/B.swift",
            ]
        )

        assert [d.original_file.name for d in result.test_files] == ["A.swift", "B.swift"]
        assert [(d.kind, d.source_file) for d in result.diagnostics] == [
            (DiagnosticKind.FILE_NOT_IN_SOURCES_FOLDER, test_file),
            (DiagnosticKind.PACKAGE_MANIFEST_NOT_FOUND, outside),
        ]

    @pytest.mark.asyncio
    async def test_package_cache_is_warmed_once_per_directory(self, file_system, manifest):
        use_case, provider = await self.make_use_case(file_system, manifest)
        files = [
            PACKAGE_ROOT / "Sources/Target/A.swift",
            PACKAGE_ROOT / "Sources/Target/A+Ext.swift",
            PACKAGE_ROOT / "Sources/Target/Sub/B.swift",
        ]

        await use_case.suggest_test_files(files)

        # Two distinct directories warm the cache, then every file is resolved.
        assert len(provider.requested) == 2 + len(files)

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, file_system, manifest):
        use_case, provider = await self.make_use_case(file_system, manifest)
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            await use_case.suggest_test_files([PACKAGE_ROOT / "Sources/Target/A.swift"], token)

        assert exc_info.value.partial_result == SuggestTestFilesResult()
        assert provider.requested == []

    @pytest.mark.asyncio
    async def test_cancelled_mid_batch_returns_partial_result(self, file_system, manifest):
        token = CancellationToken()

        class CancellingFileSystem(VirtualFileSystem):
            async def read_text(self, path):
                token.cancel()
                return await super().read_text(path)

        fs = CancellingFileSystem()
        fs.files = dict(file_system.files)
        fs.directories = set(file_system.directories)
        config = TestBridgeConfig(concurrency=ConcurrencyConfig(max_concurrent_files=1))
        use_case, _ = await self.make_use_case(fs, manifest, config)

        with pytest.raises(OperationCancelledError) as exc_info:
            await use_case.suggest_test_files(
                [
                    PACKAGE_ROOT / "Sources/Target/A.swift",
                    PACKAGE_ROOT / "Sources/Target/Sub/B.swift",
                ],
                token,
            )

        partial = exc_info.value.partial_result
        assert [d.original_file.name for d in partial.test_files] == ["A.swift"]

    @pytest.mark.asyncio
    async def test_convenience_function(self, file_system, manifest):
        package = await make_package(file_system, manifest)

        result = await suggest_test_files(
            [PACKAGE_ROOT / "Sources/Target/A.swift"],
            StaticPackageProvider(package),
            file_system,
        )

        assert [d.name for d in result.test_files] == ["ATests.swift"]

    @pytest.mark.asyncio
    async def test_missing_manifest(self):
        fs = VirtualFileSystem()
        source = fs.add_file("/elsewhere/Sources/Lib/Lib.swift")
        use_case = SuggestTestFilesUseCase(StaticPackageProvider(), fs)

        result = await use_case.suggest_test_files([source])

        assert result.test_files == []
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.PACKAGE_MANIFEST_NOT_FOUND]
        assert result.diagnostics[0].message == "Cannot find Package.swift manifest for the file"
