"""
Test suite for configuration loading and validation.

Covers:
1. YAML, TOML and JSON loading
2. Defaults merging
3. Type and value checks per section
4. Path containment for configured files
5. Strict loading
"""

import json

import pytest

from linkmender.core.config import (
    DEFAULT_CONFIG,
    ConfigError,
    ConfigValidationError,
    ensure_list,
    load_config,
    load_config_strict,
    merge_with_defaults,
    validate_and_load_config,
    validate_config_schema,
    validate_positive_int,
)


YAML_CONFIG = """project:
  root: .
  navigation_file: SUMMARY.md
fixes:
  auto_fix_confidence: medium
"""

TOML_CONFIG = """[project]
root = "."

[link_checker]
check_anchors = false
exclude_dirs = ["build"]
"""


class TestLoadConfig:
    """Test reading config files by extension."""

    def test_yaml(self, tmp_path):
        """YAML files are parsed with safe_load."""
        path = tmp_path / "linkmender.yaml"
        path.write_text(YAML_CONFIG)

        config = load_config(path)
        assert config['fixes']['auto_fix_confidence'] == 'medium'
        assert config['project']['navigation_file'] == 'SUMMARY.md'

    def test_toml(self, tmp_path):
        path = tmp_path / "linkmender.toml"
        path.write_text(TOML_CONFIG)

        config = load_config(path)
        assert config['link_checker']['check_anchors'] is False
        assert config['link_checker']['exclude_dirs'] == ["build"]

    def test_json(self, tmp_path):
        path = tmp_path / "linkmender.json"
        path.write_text(json.dumps({'fixes': {'add_redirects': False}}))

        assert load_config(path) == {'fixes': {'add_redirects': False}}

    def test_empty_yaml_is_empty_config(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")

        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[project]")

        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)

    def test_parse_error(self, tmp_path):
        """Malformed files raise ValueError naming the format."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="JSON parse error"):
            load_config(path)


class TestMergeWithDefaults:
    """Test defaults overlay."""

    def test_empty_config_gives_defaults(self):
        assert merge_with_defaults({}) == DEFAULT_CONFIG
        assert merge_with_defaults(None) == DEFAULT_CONFIG

    def test_section_keys_overlaid(self):
        merged = merge_with_defaults({'fixes': {'auto_fix_confidence': 'low'}})

        assert merged['fixes'] == {'auto_fix_confidence': 'low', 'add_redirects': True}
        assert merged['project']['navigation_file'] == 'SUMMARY.md'

    def test_defaults_not_mutated(self):
        merged = merge_with_defaults({})
        merged['link_checker']['exclude_dirs'].append('extra')

        assert 'extra' not in DEFAULT_CONFIG['link_checker']['exclude_dirs']


class TestSchemaValidation:
    """Test validate_config_schema checks."""

    def test_valid_config(self, tmp_path):
        """A valid config returns merged values with an absolute root."""
        result = validate_config_schema({'fixes': {'auto_fix_confidence': 'medium'}}, project_root=tmp_path)

        assert result
        assert result.errors == []
        assert result.validated_config['project']['root'] == str(tmp_path.resolve())
        assert result.validated_config['fixes']['auto_fix_confidence'] == 'medium'

    def test_unknown_confidence_rejected(self, tmp_path):
        result = validate_config_schema({'fixes': {'auto_fix_confidence': 'certain'}}, project_root=tmp_path)

        assert not result.is_valid
        assert result.errors[0].startswith('[fixes.auto_fix_confidence]')
        assert result.validated_config == {}

    def test_missing_root_directory(self, tmp_path):
        result = validate_config_schema({'project': {'root': 'missing'}}, project_root=tmp_path)

        assert not result.is_valid
        assert 'Directory does not exist' in result.errors[0]

    def test_missing_root_allowed_without_path_checks(self, tmp_path):
        result = validate_config_schema({'project': {'root': 'missing'}}, project_root=tmp_path,
                                        check_paths=False)

        assert result.is_valid

    def test_navigation_file_traversal_rejected(self, tmp_path):
        """Configured files must stay within the project root."""
        result = validate_config_schema({'project': {'navigation_file': '../../etc/passwd'}},
                                        project_root=tmp_path)

        assert not result.is_valid
        assert result.errors[0].startswith('[project.navigation_file]')

    def test_string_false_is_warning(self, tmp_path):
        result = validate_config_schema({'link_checker': {'check_anchors': 'false'}}, project_root=tmp_path)

        assert result.is_valid
        assert any('link_checker.check_anchors' in w for w in result.warnings)

    def test_non_bool_is_error(self, tmp_path):
        result = validate_config_schema({'fixes': {'add_redirects': 1}}, project_root=tmp_path)

        assert not result.is_valid

    def test_exclude_dirs_string_coerced(self, tmp_path):
        result = validate_config_schema({'link_checker': {'exclude_dirs': 'build'}}, project_root=tmp_path)

        assert result.is_valid
        assert result.validated_config['link_checker']['exclude_dirs'] == ['build']

    def test_bad_log_level(self, tmp_path):
        result = validate_config_schema({'logging': {'level': 'LOUD'}}, project_root=tmp_path)

        assert not result.is_valid

    def test_section_must_be_mapping(self, tmp_path):
        result = validate_config_schema({'fixes': ['high']}, project_root=tmp_path)

        assert not result.is_valid
        assert result.errors[0].startswith('[fixes]')

    def test_unknown_section_warns(self, tmp_path):
        result = validate_config_schema({'extras': {}}, project_root=tmp_path)

        assert result.is_valid
        assert result.warnings == ['[extras] Unknown section is ignored']

    def test_all_errors_collected(self, tmp_path):
        """Validation reports every problem, not just the first."""
        result = validate_config_schema({
            'link_checker': {'max_file_size': 0},
            'fixes': {'auto_fix_confidence': 'never'},
            'logging': {'level': 'LOUD'},
        }, project_root=tmp_path)

        assert len(result.errors) == 3


class TestHelpers:
    """Test the small validation helpers."""

    def test_ensure_list(self):
        assert ensure_list(None, 'k') == []
        assert ensure_list(['a'], 'k') == ['a']
        assert ensure_list('a', 'k') == ['a']

    def test_ensure_list_rejects_other_types(self):
        with pytest.raises(ConfigError):
            ensure_list(42, 'k')

    def test_validate_positive_int(self):
        assert validate_positive_int(5, 'k') == 5
        for bad in (0, -1, True, '5'):
            with pytest.raises(ConfigError):
                validate_positive_int(bad, 'k')


class TestLoadAndValidate:
    """Test file-level loading with validation."""

    def test_relative_root_resolved_against_file(self, tmp_path):
        (tmp_path / "docs").mkdir()
        path = tmp_path / "linkmender.yaml"
        path.write_text("project:\n  root: docs\n")

        config, result = validate_and_load_config(path)

        assert config == {'project': {'root': 'docs'}}
        assert result.validated_config['project']['root'] == str((tmp_path / "docs").resolve())

    def test_parse_error_is_invalid_result(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("project: [unclosed\n")

        config, result = validate_and_load_config(path)

        assert config == {}
        assert not result.is_valid
        assert result.errors[0].startswith('[config_file] YAML parse error')

    def test_strict_raises(self, tmp_path):
        path = tmp_path / "linkmender.yaml"
        path.write_text("fixes:\n  auto_fix_confidence: sometimes\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config_strict(path)
        assert len(exc_info.value.errors) == 1

    def test_strict_returns_merged(self, tmp_path):
        path = tmp_path / "linkmender.yaml"
        path.write_text(YAML_CONFIG)

        config = load_config_strict(path)
        assert config['fixes']['auto_fix_confidence'] == 'medium'
        assert config['link_checker']['check_anchors'] is True
