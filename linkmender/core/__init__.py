"""
Link Mender Core - shared records, path handling, caches, config and logging.
"""

from .models import (
    AnchorCheck,
    BrokenLink,
    Confidence,
    FileHeadings,
    FileLinks,
    FixBatchResult,
    FixResult,
    FixSuggestion,
    HeadingInfo,
    LinkKind,
    NavigationEntry,
    NavigationStructure,
    ParsedLink,
    RedirectEntry,
    RedirectPair,
    ResolvedPath,
    SuggestedFix,
    SuggestionGroups,
    ValidationResult,
    ValidationStatus,
)
from .confidence import (
    confidence_rank,
    get_auto_fix_threshold,
    get_fix_action,
    meets_threshold,
    parse_confidence,
)
from .context import CheckContext
from .config import (
    DEFAULT_CONFIG,
    ConfigCheckResult,
    ConfigError,
    ConfigValidationError,
    load_config,
    load_config_strict,
    merge_with_defaults,
    validate_and_load_config,
    validate_config_schema,
)
from .paths import PathSecurityError, resolve_relative_link, to_relative_link
from .similarity import levenshtein_distance, normalized_similarity, path_segment_similarity

__all__ = [
    # Records
    'AnchorCheck',
    'BrokenLink',
    'Confidence',
    'FileHeadings',
    'FileLinks',
    'FixBatchResult',
    'FixResult',
    'FixSuggestion',
    'HeadingInfo',
    'LinkKind',
    'NavigationEntry',
    'NavigationStructure',
    'ParsedLink',
    'RedirectEntry',
    'RedirectPair',
    'ResolvedPath',
    'SuggestedFix',
    'SuggestionGroups',
    'ValidationResult',
    'ValidationStatus',

    # Confidence
    'confidence_rank',
    'get_auto_fix_threshold',
    'get_fix_action',
    'meets_threshold',
    'parse_confidence',

    # Context
    'CheckContext',

    # Config
    'DEFAULT_CONFIG',
    'ConfigCheckResult',
    'ConfigError',
    'ConfigValidationError',
    'load_config',
    'load_config_strict',
    'merge_with_defaults',
    'validate_and_load_config',
    'validate_config_schema',

    # Paths
    'PathSecurityError',
    'resolve_relative_link',
    'to_relative_link',

    # Similarity
    'levenshtein_distance',
    'normalized_similarity',
    'path_segment_similarity',
]
