"""
Link checking and fixing for a GitBook-style documentation tree.

LinkChecker runs the whole pipeline against one project:

    checker = LinkChecker(load_config_strict(Path("linkmender.yaml")))
    report = checker.check()
    if report.has_issues:
        batch = checker.fix(report)

check() parses the navigation file, validates every link (and anchor) in
the scanned Markdown files, and pairs each broken link with its best fix
suggestion. fix() applies the suggestions that meet the configured
confidence, plus any weaker ones an approve callback accepts, and records
redirects for the replaced paths.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from linkmender.core.confidence import get_fix_action
from linkmender.core.config import merge_with_defaults
from linkmender.core.context import CheckContext
from linkmender.core.file_index import get_markdown_files
from linkmender.core.fileio import read_file, sanitize_error_message
from linkmender.core.logger import ComponentLogger
from linkmender.core.models import (
    AnchorCheck,
    BrokenLink,
    FileLinks,
    FixBatchResult,
    FixSuggestion,
    NavigationEntry,
    SuggestedFix,
)
from linkmender.core.paths import validate_path_contained, validate_project_root
from linkmender.fixers.rewriter import apply_fixes_with_redirects
from linkmender.fixers.suggestions import find_all_fix_suggestions
from linkmender.parsers.markdown import parse_markdown_headings, parse_markdown_links
from linkmender.parsers.navigation import parse_navigation, validate_navigation_paths
from linkmender.parsers.redirects import load_redirect_table
from linkmender.validators.anchors import validate_all_anchors
from linkmender.validators.links import get_broken_links, get_validation_stats, validate_all_links


@dataclass(frozen=True)
class BrokenLinkDetail:
    """A broken link and its fix suggestion (None if nothing was found)."""
    broken: BrokenLink
    suggestion: Optional[FixSuggestion] = None


@dataclass
class CheckReport:
    """
    Result of a check run.

    Attributes:
        files_scanned: Markdown files parsed
        links_checked: Links validated (external links excluded)
        valid_links: Links whose target exists
        broken_links: Links with no target and no usable redirect
        redirect_available: Missing targets covered by a redirect
        broken_link_details: Each broken link with its suggestion
        anchor_issues: Failed anchor checks (when anchor checking is on)
        missing_navigation_targets: Navigation entries pointing nowhere
        errors: Files that could not be read
        timestamp: ISO format start time
        duration: Seconds taken
    """
    files_scanned: int = 0
    links_checked: int = 0
    valid_links: int = 0
    broken_links: int = 0
    redirect_available: int = 0
    broken_link_details: List[BrokenLinkDetail] = field(default_factory=list)
    anchor_issues: List[AnchorCheck] = field(default_factory=list)
    missing_navigation_targets: List[NavigationEntry] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    timestamp: str = ''
    duration: float = 0.0

    @property
    def has_issues(self) -> bool:
        return self.broken_links > 0 or bool(self.missing_navigation_targets)

    @property
    def fixable(self) -> List[BrokenLinkDetail]:
        return [d for d in self.broken_link_details if d.suggestion is not None]


class LinkChecker:
    """Check and fix cross-references in one documentation project."""

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Configuration dict; missing keys take DEFAULT_CONFIG
                    values. Relevant keys:
                    - project.root, project.navigation_file,
                      project.redirects_file
                    - link_checker.path, link_checker.exclude_dirs,
                      link_checker.check_anchors, link_checker.max_file_size
                    - fixes.auto_fix_confidence, fixes.add_redirects

        Raises:
            PathSecurityError: If the root is invalid or a configured file
                               lies outside it
            RedirectConfigError: If the redirect configuration is unreadable
        """
        self.config = merge_with_defaults(config)
        self.log = ComponentLogger('checker')

        project = self.config['project']
        checker_config = self.config['link_checker']

        self.project_root = validate_project_root(project['root'])
        self.navigation_path = validate_path_contained(project['navigation_file'], self.project_root)
        self.redirects_path = validate_path_contained(project['redirects_file'], self.project_root)

        self.scan_path = checker_config.get('path')
        self.check_anchors = checker_config.get('check_anchors', True)
        self.max_file_size = checker_config['max_file_size']

        self.context = CheckContext(
            self.project_root,
            parse_markdown_headings,
            load_redirect_table(self.redirects_path),
            exclude_dirs=checker_config['exclude_dirs'],
        )

    def _parse_documents(self, files: List[str], errors: List[str]) -> List[FileLinks]:
        parsed = []
        for relative in files:
            try:
                content = read_file(self.context.path(relative), self.max_file_size)
            except (OSError, ValueError) as e:
                message = sanitize_error_message(str(e), self.project_root)
                errors.append(f"{relative}: {message}")
                self.log.warning(f"Skipping unreadable file: {message}", file_path=relative, error_code='FS-01')
                continue
            parsed.append(parse_markdown_links(relative, content))
        return parsed

    def check(self) -> CheckReport:
        """
        Validate the project.

        Returns:
            CheckReport

        Raises:
            NavigationFileError: If the navigation file cannot be read
        """
        start_time = time.time()
        report = CheckReport(timestamp=datetime.now().isoformat())
        self.log.operation_start('check', file_path=self.project_root)

        self.context.clear_headings()

        structure = parse_navigation(self.navigation_path)
        report.missing_navigation_targets = validate_navigation_paths(structure, self.context.exists)
        for entry in report.missing_navigation_targets:
            self.log.warning(
                f"Navigation entry '{entry.title}' points to missing {entry.path}",
                file_path=self.navigation_path.name, line_number=entry.line, error_code='NAV-02',
            )

        files = get_markdown_files(self.project_root, self.scan_path, self.context.exclude_dirs)
        all_file_links = self._parse_documents(files, report.errors)
        report.files_scanned = len(all_file_links)

        results = validate_all_links(all_file_links, self.context)
        stats = get_validation_stats(results)
        report.links_checked = stats['total']
        report.valid_links = stats['valid']
        report.broken_links = stats['broken']
        report.redirect_available = stats['redirect_available']

        broken = get_broken_links(results)
        suggestions = find_all_fix_suggestions(broken, self.context)
        report.broken_link_details = [BrokenLinkDetail(b, suggestions[b]) for b in broken]

        for detail in report.broken_link_details:
            self.log.info(
                detail.broken.error,
                file_path=detail.broken.source_file,
                line_number=detail.broken.link.line,
                error_code='LNK-01',
            )

        if self.check_anchors:
            report.anchor_issues = [c for c in validate_all_anchors(results, self.context) if not c.valid]

        report.duration = time.time() - start_time
        self.log.operation_complete(
            'check',
            success=not report.has_issues,
            file_path=self.project_root,
        )
        return report

    def fix(
        self,
        report: Optional[CheckReport] = None,
        min_confidence: Optional[str] = None,
        approve: Optional[Callable[[SuggestedFix], bool]] = None
    ) -> FixBatchResult:
        """
        Apply fix suggestions.

        Suggestions at or above the auto-fix confidence are applied; weaker
        ones only if approve(suggested_fix) returns True.

        Args:
            report: Report from check() (a fresh check is run if None)
            min_confidence: Overrides fixes.auto_fix_confidence
            approve: Callback deciding on suggestions below the threshold

        Returns:
            FixBatchResult
        """
        if report is None:
            report = self.check()

        action_config = self.config
        if min_confidence is not None:
            action_config = {'fixes': {'auto_fix_confidence': min_confidence}}

        fixes: List[SuggestedFix] = []
        for detail in report.fixable:
            fix = SuggestedFix(detail.broken, detail.suggestion)
            action = get_fix_action(detail.suggestion, action_config)
            if action == 'auto_fix' or (action == 'review' and approve is not None and approve(fix)):
                fixes.append(fix)

        if not fixes:
            self.log.info("No fixes to apply")
            return FixBatchResult()

        add_redirects = bool(self.config['fixes'].get('add_redirects', True))
        batch = apply_fixes_with_redirects(fixes, self.context, add_redirects=add_redirects)

        # Rewritten files may carry different headings now
        self.context.clear_headings()

        self.log.operation_complete(
            'fix',
            success=batch.failed_count == 0,
            fixed=batch.fixed_count,
            failed=batch.failed_count,
        )
        return batch


def create_checker(project_root: Path, **overrides) -> LinkChecker:
    """
    Build a LinkChecker for a project with default settings.

    Keyword arguments override link_checker settings (path, exclude_dirs,
    check_anchors, max_file_size).
    """
    config = {'project': {'root': str(project_root)}, 'link_checker': dict(overrides)}
    return LinkChecker(config)
