"""Tests for parsing `swift package dump-package` output."""

import json

import pytest

from testbridge.adapters.manifest import ManifestParseError, parse_manifest
from testbridge.domain.models import TargetRole

DUMP = {
    "name": "Kit",
    "toolsVersion": {"_version": "5.9.0"},
    "dependencies": [{"sourceControl": [{"identity": "swift-collections"}]}],
    "platforms": [{"platformName": "macos", "version": "13.0"}],
    "targets": [
        {
            "name": "Kit",
            "type": "regular",
            "dependencies": [
                {"byName": ["Models", None]},
                {"product": ["Collections", "swift-collections", None, None]},
            ],
            "resources": [],
            "settings": [],
        },
        {"name": "Models", "type": "regular", "path": "Sources/Shared/Models"},
        {"name": "kit-cli", "type": "executable", "dependencies": [{"target": ["Kit", None]}]},
        {"name": "KitTests", "type": "test", "dependencies": [{"byName": ["Kit", None]}]},
    ],
}


class TestParseManifest:
    def test_targets(self):
        manifest = parse_manifest(json.dumps(DUMP))

        assert manifest.name == "Kit"
        assert manifest.tools_version.version == "5.9.0"
        assert [t.name for t in manifest.targets] == ["Kit", "Models", "kit-cli", "KitTests"]
        assert [t.role for t in manifest.targets] == [
            TargetRole.REGULAR,
            TargetRole.REGULAR,
            TargetRole.EXECUTABLE,
            TargetRole.TEST,
        ]

    def test_explicit_path(self):
        manifest = parse_manifest(json.dumps(DUMP))

        assert manifest.target_named("Models").explicit_path == "Sources/Shared/Models"
        assert manifest.target_named("Kit").explicit_path is None

    def test_dependency_names(self):
        manifest = parse_manifest(json.dumps(DUMP))

        assert manifest.target_named("Kit").dependency_names == ["Models", "Collections"]
        assert manifest.target_named("kit-cli").dependency_names == ["Kit"]

    def test_package_dependencies_are_kept(self):
        manifest = parse_manifest(json.dumps(DUMP).encode())

        assert manifest.dependencies == DUMP["dependencies"]

    def test_minimal_dump(self):
        manifest = parse_manifest('{"name": "Empty"}')

        assert manifest.targets == []
        assert manifest.tools_version is None

    @pytest.mark.parametrize("data", ["", "   \n", b""])
    def test_empty_dump(self, data):
        with pytest.raises(ManifestParseError, match="empty"):
            parse_manifest(data)

    def test_invalid_json(self):
        with pytest.raises(ManifestParseError, match="Invalid manifest dump"):
            parse_manifest("error: root manifest not found")

    def test_unknown_target_type(self):
        dump = {"name": "Kit", "targets": [{"name": "Kit", "type": "library"}]}

        with pytest.raises(ManifestParseError):
            parse_manifest(json.dumps(dump))

    def test_duplicate_target_names(self):
        dump = {
            "name": "Kit",
            "targets": [{"name": "Kit", "type": "regular"}, {"name": "Kit", "type": "test"}],
        }

        with pytest.raises(ManifestParseError, match="Duplicate target name: Kit"):
            parse_manifest(json.dumps(dump))
