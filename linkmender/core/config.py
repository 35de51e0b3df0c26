"""
Configuration loading and validation for Link Mender.

Config files may be YAML, TOML or JSON. Every section is optional; missing
keys fall back to DEFAULT_CONFIG:

    project:
      root: "."
      navigation_file: SUMMARY.md
      redirects_file: .gitbook.yaml
    link_checker:
      path: null              # subdirectory to scan, null for the whole tree
      exclude_dirs: [node_modules, _book, dist, .git]
      check_anchors: true
      max_file_size: 10485760
    fixes:
      auto_fix_confidence: high   # high | medium | low
      add_redirects: true
    logging:
      level: INFO
      log_file: null

Validation collects every problem instead of stopping at the first one:
    config, result = validate_and_load_config(path)
    result.log_warnings().raise_if_invalid()
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .confidence import parse_confidence
from .fileio import MAX_FILE_SIZE_BYTES
from .file_index import DEFAULT_EXCLUDE_DIRS
from .paths import PathSecurityError, validate_path_contained

logger = logging.getLogger(__name__)

MAX_CONFIG_FILE_SIZE = 10 * 1024 * 1024
MAX_ARRAY_SIZE = 10000
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

DEFAULT_CONFIG: Dict[str, Any] = {
    'project': {
        'root': '.',
        'navigation_file': 'SUMMARY.md',
        'redirects_file': '.gitbook.yaml',
    },
    'link_checker': {
        'path': None,
        'exclude_dirs': list(DEFAULT_EXCLUDE_DIRS),
        'check_anchors': True,
        'max_file_size': MAX_FILE_SIZE_BYTES,
    },
    'fixes': {
        'auto_fix_confidence': 'high',
        'add_redirects': True,
    },
    'logging': {
        'level': 'INFO',
        'log_file': None,
    },
}


class ConfigError(Exception):
    """Configuration error for a single key, with context."""

    def __init__(self, key: str, message: str, value: Any = None, suggestion: str = None):
        self.key = key
        self.value = value
        self.suggestion = suggestion
        full_message = f"Config error at '{key}': {message}"
        if value is not None:
            full_message += f" (got: {value!r})"
        if suggestion:
            full_message += f". Suggestion: {suggestion}"
        super().__init__(full_message)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails with one or more errors."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []
        message = f"Configuration validation failed with {len(errors)} error(s):\n"
        message += "\n".join(f"  - {err}" for err in errors[:20])
        if len(errors) > 20:
            message += f"\n  ... and {len(errors) - 20} more errors"
        super().__init__(message)


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    validated_config: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_if_invalid(self) -> 'ConfigCheckResult':
        """Raise ConfigValidationError if validation failed."""
        if not self.is_valid:
            raise ConfigValidationError(self.errors, self.warnings)
        return self

    def log_warnings(self) -> 'ConfigCheckResult':
        for warning in self.warnings:
            logger.warning(f"Config warning: {warning}")
        return self


def merge_with_defaults(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Overlay user config on DEFAULT_CONFIG, section by section.

    Unknown sections and keys are kept as given.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in (config or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def ensure_list(value: Any, key_name: str, coerce_string: bool = True) -> List[Any]:
    """
    Ensure value is a list, optionally wrapping a single string.

    A string where a list is expected would otherwise be iterated character
    by character.

    Raises:
        ConfigError: If value cannot be converted to a list
    """
    if value is None:
        return []

    if isinstance(value, str):
        if coerce_string:
            logger.warning(
                f"Config '{key_name}': Expected list but got string '{value}'. "
                f"Converting to single-item list."
            )
            return [value]
        raise ConfigError(key_name, "Expected a list, got a string", value,
                          f"Use [\"{value}\"] for a single-item list")

    if isinstance(value, list):
        if len(value) > MAX_ARRAY_SIZE:
            raise ConfigError(key_name, f"List has {len(value)} items, exceeds limit of {MAX_ARRAY_SIZE}")
        return value

    raise ConfigError(key_name, f"Expected list, got {type(value).__name__}", value,
                      "Use list syntax: [item1, item2]")


def validate_positive_int(value: Any, key_name: str) -> int:
    """
    Raises:
        ConfigError: If value is not an integer greater than zero
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(key_name, f"Must be an integer, got {type(value).__name__}", value)
    if value <= 0:
        raise ConfigError(key_name, "Must be greater than zero", value)
    return value


def validate_config_schema(
    config: Dict[str, Any],
    project_root: Optional[Path] = None,
    check_paths: bool = True
) -> ConfigCheckResult:
    """
    Validate a configuration dictionary.

    Args:
        config: Configuration as loaded (defaults not yet applied)
        project_root: Directory relative project.root is resolved against
                      (defaults to cwd)
        check_paths: If True, verify that project.root exists

    Returns:
        ConfigCheckResult; validated_config is the merged config with
        project.root made absolute, or {} when invalid
    """
    errors: List[str] = []
    warnings: List[str] = []

    if project_root is None:
        project_root = Path.cwd()

    def add_error(key: str, msg: str, suggestion: str = None):
        full_msg = f"[{key}] {msg}"
        if suggestion:
            full_msg += f" | Suggestion: {suggestion}"
        errors.append(full_msg)

    def add_warning(key: str, msg: str):
        warnings.append(f"[{key}] {msg}")

    def section(name: str) -> Dict[str, Any]:
        value = config.get(name, {})
        if value is None:
            return {}
        if not isinstance(value, dict):
            add_error(name, f'Must be a section/dict, got {type(value).__name__}',
                      f'Use [{name}] in TOML or {name}: in YAML')
            return {}
        return value

    def check_bool(key: str, value: Any):
        if isinstance(value, str) and value.lower() in ('false', 'no', '0'):
            add_warning(key, f"String '{value}' is truthy. Use boolean false")
        elif not isinstance(value, bool):
            add_error(key, f'Must be a boolean, got {type(value).__name__}')

    def check_contained(key: str, value: Any, root: Path):
        if not isinstance(value, str):
            add_error(key, f'Must be a string, got {type(value).__name__}')
            return
        try:
            validate_path_contained(value, root)
        except PathSecurityError as e:
            add_error(key, str(e), 'Use a path within the project root')

    if config is None:
        config = {}
    if not isinstance(config, dict):
        add_error('config', f'Configuration must be a dictionary, got {type(config).__name__}',
                  'Use sections like [project] or YAML mappings')
        return ConfigCheckResult(is_valid=False, errors=errors, warnings=warnings)

    # =========================================================================
    # [project]
    # =========================================================================
    project = section('project')
    root_path = Path(project_root)

    if 'root' in project:
        root_val = project['root']
        if not isinstance(root_val, (str, Path)):
            add_error('project.root', f'Must be a string, got {type(root_val).__name__}',
                      'Use root = "path/to/project"')
        else:
            candidate = Path(os.path.expanduser(str(root_val)))
            if not candidate.is_absolute():
                candidate = Path(project_root) / candidate
            if check_paths and not candidate.is_dir():
                add_error('project.root', f"Directory does not exist: {root_val}",
                          'Create the directory or use an existing path')
            else:
                root_path = candidate

    for key in ('navigation_file', 'redirects_file'):
        if key in project:
            check_contained(f'project.{key}', project[key], root_path)

    # =========================================================================
    # [link_checker]
    # =========================================================================
    checker = section('link_checker')

    if checker.get('path') is not None:
        check_contained('link_checker.path', checker['path'], root_path)

    if 'exclude_dirs' in checker:
        try:
            dirs = ensure_list(checker['exclude_dirs'], 'link_checker.exclude_dirs')
            for i, d in enumerate(dirs):
                if not isinstance(d, str):
                    add_error(f'link_checker.exclude_dirs[{i}]', f'Must be string, got {type(d).__name__}')
            if isinstance(checker['exclude_dirs'], str):
                checker['exclude_dirs'] = dirs
        except ConfigError as e:
            add_error('link_checker.exclude_dirs', str(e))

    if 'check_anchors' in checker:
        check_bool('link_checker.check_anchors', checker['check_anchors'])

    if 'max_file_size' in checker:
        try:
            validate_positive_int(checker['max_file_size'], 'link_checker.max_file_size')
        except ConfigError as e:
            add_error('link_checker.max_file_size', str(e))

    # =========================================================================
    # [fixes]
    # =========================================================================
    fixes = section('fixes')

    if 'auto_fix_confidence' in fixes:
        try:
            parse_confidence(fixes['auto_fix_confidence'])
        except ValueError as e:
            add_error('fixes.auto_fix_confidence', str(e))

    if 'add_redirects' in fixes:
        check_bool('fixes.add_redirects', fixes['add_redirects'])

    # =========================================================================
    # [logging]
    # =========================================================================
    log_config = section('logging')

    if 'level' in log_config:
        level = log_config['level']
        if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
            add_error('logging.level', f"Invalid level {level!r}",
                      f'Use one of: {", ".join(VALID_LOG_LEVELS)}')

    if log_config.get('log_file') is not None and not isinstance(log_config['log_file'], str):
        add_error('logging.log_file', f"Must be a string, got {type(log_config['log_file']).__name__}")

    # =========================================================================
    # Unknown sections
    # =========================================================================
    for name in config:
        if name not in DEFAULT_CONFIG:
            add_warning(name, 'Unknown section is ignored')

    if errors:
        return ConfigCheckResult(is_valid=False, errors=errors, warnings=warnings)

    validated = merge_with_defaults(config)
    validated['project']['root'] = str(root_path.resolve())
    return ConfigCheckResult(is_valid=True, errors=errors, warnings=warnings, validated_config=validated)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a YAML, TOML or JSON config file.

    Returns:
        The parsed mapping (an empty file gives {})

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is too large, has an unsupported extension,
                    or cannot be parsed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    file_size = config_path.stat().st_size
    if file_size > MAX_CONFIG_FILE_SIZE:
        raise ValueError(f"Config file too large: {config_path} ({file_size:,} bytes). Maximum is 10MB.")

    suffix = config_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        import yaml
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"YAML parse error: {e}") from e

    elif suffix == '.toml':
        try:
            import tomllib
        except ImportError:
            import toml as tomllib
        try:
            config = tomllib.loads(config_path.read_text(encoding='utf-8'))
        except Exception as e:
            raise ValueError(f"TOML parse error: {e}") from e

    elif suffix == '.json':
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON parse error at line {e.lineno}: {e.msg}") from e

    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, .toml, or .json")

    return config if config is not None else {}


def validate_and_load_config(
    config_path: Union[str, Path],
    check_paths: bool = True
) -> Tuple[Dict[str, Any], ConfigCheckResult]:
    """
    Load and validate a configuration file.

    Relative paths in the file are resolved against the file's directory.
    Parse errors are returned as an invalid result rather than raised.

    Returns:
        (raw_config, result)

    Raises:
        FileNotFoundError: If the config file doesn't exist
    """
    config_path = Path(config_path)
    try:
        config = load_config(config_path)
    except ValueError as e:
        return {}, ConfigCheckResult(is_valid=False, errors=[f"[config_file] {e}"])

    result = validate_config_schema(config, project_root=config_path.parent, check_paths=check_paths)
    return config, result


def load_config_strict(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load config and raise immediately if validation fails.

    Returns:
        Validated configuration merged with defaults

    Raises:
        ConfigValidationError: If any validation errors occur
        FileNotFoundError: If config file doesn't exist
    """
    _, result = validate_and_load_config(config_path)
    result.log_warnings().raise_if_invalid()
    return result.validated_config
