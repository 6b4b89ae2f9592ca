"""Tests for template resolution and the content helpers it relies on."""
import pytest

from pantry.templates import (
    TemplateContext,
    extract_raw_frontmatter,
    get_basename,
    get_dirname,
    parse_first_heading,
    parse_first_line,
    parse_frontmatter,
    parse_json_content,
    resolve_json_path,
    resolve_template,
)


COMMAND_MD = """---
description: Commit staged changes
argument-hint: [message]
model: "sonnet"
---

# Commit helper

Body text.
"""


def _context(**kwargs) -> TemplateContext:
    defaults = {
        'basename': 'commit',
        'file_path': '/home/u/.claude/plugins/tools/commands/commit.md',
        'dirname': 'commands',
    }
    defaults.update(kwargs)
    return TemplateContext(**defaults)


class TestResolveTemplate:
    """Tests for placeholder substitution."""

    # When template uses basename and dirname, should substitute both
    def test_basename_and_dirname(self):
        assert resolve_template("{dirname}/{basename}", _context()) == "commands/commit"

    # When template uses {dirname:N}, should walk N levels up
    def test_dirname_levels(self):
        ctx = _context()
        assert resolve_template("{dirname:1}", ctx) == "commands"
        assert resolve_template("{dirname:2}", ctx) == "tools"

    # When frontmatter key exists, should use its value
    def test_frontmatter_value(self):
        ctx = _context(frontmatter={'description': 'Commit staged changes'})
        assert resolve_template("{frontmatter@description}", ctx) == "Commit staged changes"

    # When frontmatter key is missing, should resolve to empty
    def test_frontmatter_missing(self):
        assert resolve_template("{frontmatter@nope}", _context()) == ""

    # When the primary side is empty, should use the fallback
    def test_fallback(self):
        ctx = _context(heading='Commit helper')
        assert resolve_template("{frontmatter@description}|{heading}", ctx) == "Commit helper"

    # When the primary side resolves, should ignore the fallback
    def test_fallback_not_used(self):
        ctx = _context(frontmatter={'description': 'From frontmatter'}, heading='Heading')
        assert resolve_template("{frontmatter@description}|{heading}", ctx) == "From frontmatter"

    # When template has {prefix}, should substitute the resolved prefix
    def test_prefix(self):
        ctx = _context(prefix='tools')
        assert resolve_template("{prefix}:{basename}", ctx) == "tools:commit"

    # When JSON data is absent, {json@...} should stay literal
    def test_json_literal_without_data(self):
        assert resolve_template("{json@name}", _context()) == "{json@name}"

    # When JSON data is present, {json@path} should resolve nested values
    def test_json_path(self):
        ctx = _context(json_data={'user': {'name': 'alice', 'tags': ['a', 'b']}})
        assert resolve_template("{json@user.name}", ctx) == "alice"
        assert resolve_template("{json@user.tags[-1]}", ctx) == "b"

    # When parents are present, {json:1@path} should read the direct parent
    def test_parent_json(self):
        ctx = _context(json_data={'name': 'alice'}, parents=[{'team': 'core'}])
        assert resolve_template("{json@name} ({json:1@team})", ctx) == "alice (core)"

    # When parent level is out of range, should resolve to empty
    def test_parent_out_of_range(self):
        ctx = _context(json_data={}, parents=[{'team': 'core'}])
        assert resolve_template("{json:2@team}", ctx) == ""

    # When template has {filepath}, should substitute the full path
    def test_filepath(self):
        ctx = _context()
        assert resolve_template("{filepath}", ctx) == ctx.file_path


class TestJsonPath:
    """Tests for resolve_json_path rendering."""

    # When value is an object, should render compact JSON
    def test_object_value(self):
        assert resolve_json_path({'a': {'b': 1}}, 'a') == '{"b":1}'

    # When value is a boolean, should render lowercase
    def test_boolean(self):
        assert resolve_json_path({'on': True, 'off': False}, 'on') == 'true'
        assert resolve_json_path({'on': True, 'off': False}, 'off') == 'false'

    # When value is missing or null, should render empty
    def test_missing(self):
        assert resolve_json_path({'a': None}, 'a') == ''
        assert resolve_json_path({'a': 1}, 'b.c') == ''

    # When index is out of range, should render empty
    def test_index_out_of_range(self):
        assert resolve_json_path({'items': [1]}, 'items[3]') == ''

    # When value is an integral float, should drop the fraction
    def test_integral_float(self):
        assert resolve_json_path({'n': 3.0}, 'n') == '3'
        assert resolve_json_path({'n': 2.5}, 'n') == '2.5'


class TestContentHelpers:
    """Tests for frontmatter, heading and path helpers."""

    # When content has frontmatter, should read single-line key/value pairs
    def test_parse_frontmatter(self):
        fm = parse_frontmatter(COMMAND_MD)
        assert fm['description'] == 'Commit staged changes'
        assert fm['argument-hint'] == '[message]'
        assert fm['model'] == 'sonnet'

    # When content has no frontmatter, should return empty dict
    def test_no_frontmatter(self):
        assert parse_frontmatter("# Just a heading\n") == {}

    # When extracting raw frontmatter, should return the block text
    def test_raw_frontmatter(self):
        raw = extract_raw_frontmatter(COMMAND_MD)
        assert raw.startswith('description: Commit staged changes')
        assert '---' not in raw

    # When frontmatter precedes the heading, should still find the heading
    def test_first_heading_after_frontmatter(self):
        assert parse_first_heading(COMMAND_MD) == 'Commit helper'

    # When there is no "# " heading, should return empty
    def test_no_heading(self):
        assert parse_first_heading("## Second level only\n") == ''

    # When content starts with blank lines, first line should skip them
    def test_first_line(self):
        assert parse_first_line("\n\n  hello world  \nnext") == 'hello world'

    # When file has several extensions, basename should drop only the last
    def test_basename(self):
        assert get_basename('/a/b/archive.tar.gz') == 'archive.tar'
        assert get_basename('/a/b/commit.md') == 'commit'

    # When level exceeds the path depth, dirname should be empty
    def test_dirname_too_deep(self):
        assert get_dirname('a/b.md', 1) == 'a'
        assert get_dirname('a/b.md', 5) == ''

    # When JSON content is an array, should return None
    def test_json_content_non_object(self):
        assert parse_json_content('[1, 2]') is None
        assert parse_json_content('{"a": 1}') == {'a': 1}

    # When JSON content is malformed, should raise
    def test_json_content_malformed(self):
        with pytest.raises(ValueError):
            parse_json_content('{not json')
