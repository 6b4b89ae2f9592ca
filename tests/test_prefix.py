"""Tests for prefixPattern resolution."""
import json

import pytest
from pathlib import Path

from pantry.prefix import (
    PrefixResolver,
    extract_field,
    find_closest_match,
    parse_prefix_pattern,
)


PATTERN = ".claude-plugin/plugin.json@name"


def _plugin(root: Path, name: str, manifest: dict) -> Path:
    manifest_path = root / name / ".claude-plugin" / "plugin.json"
    manifest_path.parent.mkdir(parents=True)
    manifest_path.write_text(json.dumps(manifest))
    commands = root / name / "commands"
    commands.mkdir()
    command = commands / "run.md"
    command.write_text("# Run")
    return command


class TestParsePrefixPattern:
    """Tests for splitting glob and field path."""

    # When pattern has several @, should split at the last one
    def test_last_at(self):
        assert parse_prefix_pattern("a@b/plugin.json@meta.name") == ("a@b/plugin.json", "meta.name")

    # When pattern has no @, should return None
    def test_no_at(self):
        assert parse_prefix_pattern("plugin.json") is None


class TestHelpers:
    """Tests for closest-match and field extraction."""

    # When several matches exist, should prefer the one sharing the longest path
    def test_closest_match(self):
        matches = [Path("/r/other/p.json"), Path("/r/mine/p.json")]
        assert find_closest_match(matches, Path("/r/mine/commands/x.md")) == Path("/r/mine/p.json")

    # When there are no matches, should return None
    def test_closest_match_empty(self):
        assert find_closest_match([], Path("/r/x.md")) is None

    # When field is nested, should follow the dotted path
    def test_extract_nested(self, tmp_path):
        manifest = tmp_path / "p.json"
        manifest.write_text(json.dumps({"meta": {"name": "tools"}, "version": 2}))
        assert extract_field(manifest, "meta.name") == "tools"

    # When field is not a string, should return empty
    def test_extract_non_string(self, tmp_path):
        manifest = tmp_path / "p.json"
        manifest.write_text(json.dumps({"version": 2}))
        assert extract_field(manifest, "version") == ""

    # When file is not JSON, should return empty
    def test_extract_invalid_json(self, tmp_path):
        manifest = tmp_path / "p.json"
        manifest.write_text("{oops")
        assert extract_field(manifest, "name") == ""


class TestPrefixResolver:
    """Tests for walking up to find the prefix source."""

    # When a plugin manifest sits above the file, should use its name
    def test_resolves_from_ancestor(self, tmp_path):
        command = _plugin(tmp_path, "tools", {"name": "tools-plugin"})
        resolver = PrefixResolver()
        assert resolver.resolve(command, PATTERN, tmp_path) == "tools-plugin"

    # When sibling plugins exist, each file should get its own plugin's name
    def test_sibling_plugins(self, tmp_path):
        a = _plugin(tmp_path, "a", {"name": "alpha"})
        b = _plugin(tmp_path, "b", {"name": "beta"})
        resolver = PrefixResolver()
        assert resolver.resolve(a, PATTERN, tmp_path) == "alpha"
        assert resolver.resolve(b, PATTERN, tmp_path) == "beta"

    # When no manifest exists inside the root, should return empty
    def test_stops_at_root(self, tmp_path):
        outer_manifest = tmp_path / ".claude-plugin" / "plugin.json"
        outer_manifest.parent.mkdir()
        outer_manifest.write_text(json.dumps({"name": "outside"}))
        root = tmp_path / "root"
        command = root / "commands" / "x.md"
        command.parent.mkdir(parents=True)
        command.write_text("# X")

        assert PrefixResolver().resolve(command, PATTERN, root) == ""

    # When resolved once, should serve the directory from cache
    def test_cached(self, tmp_path):
        command = _plugin(tmp_path, "tools", {"name": "first"})
        resolver = PrefixResolver()
        assert resolver.resolve(command, PATTERN, tmp_path) == "first"

        (tmp_path / "tools" / ".claude-plugin" / "plugin.json").write_text(json.dumps({"name": "second"}))
        assert resolver.resolve(command, PATTERN, tmp_path) == "first"

        resolver.clear()
        assert resolver.resolve(command, PATTERN, tmp_path) == "second"

    # When the cache is full, oldest directory should be evicted
    def test_bounded_cache(self, tmp_path):
        resolver = PrefixResolver(max_size=2)
        for name in ("a", "b", "c"):
            resolver.resolve(_plugin(tmp_path, name, {"name": name}), PATTERN, tmp_path)
        assert len(resolver._cache) == 2

    # When the glob is absolute, should resolve to empty instead of raising
    def test_absolute_glob(self, tmp_path):
        command = _plugin(tmp_path, "tools", {"name": "tools"})
        manifest = tmp_path / "tools" / ".claude-plugin" / "plugin.json"

        assert PrefixResolver().resolve(command, f"{manifest}@name", tmp_path) == ""
