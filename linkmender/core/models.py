"""
Value records shared by the parsing, validation and fixing stages.

Records produced by one stage are frozen and consumed, never mutated, by the
next. The one exception is FixResult.redirect_added, which is flipped after a
redirect append succeeds.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional


class LinkKind(str, Enum):
    """Classification assigned to a link once, at parse time."""
    INTERNAL = "internal"
    EXTERNAL = "external"
    ANCHOR_ONLY = "anchor-only"
    ASSET = "asset"


class ValidationStatus(str, Enum):
    """Outcome of validating a single link."""
    VALID = "valid"
    BROKEN = "broken"
    REDIRECT_AVAILABLE = "redirect-available"


class Confidence(str, Enum):
    """
    Confidence tier of a fix suggestion.

    Tiers form a total order (HIGH > MEDIUM > LOW); see
    linkmender.core.confidence for comparisons.
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ParsedLink:
    """
    A navigable link found in a Markdown document.

    Attributes:
        raw: Full matched source text (e.g. "[Guide](./guide.md#setup)")
        display_text: Link text (empty for HTML and data-ref links)
        target_path: Cleaned target without the anchor fragment
        anchor: Anchor fragment without the leading '#', if any
        line: 1-based line number
        column: 1-based column of the match start
        kind: LinkKind assigned at parse time
    """
    raw: str
    display_text: str
    target_path: str
    anchor: Optional[str]
    line: int
    column: int
    kind: LinkKind


@dataclass(frozen=True)
class HeadingInfo:
    """An ATX heading and the anchor id it exposes."""
    text: str
    id: str
    level: int
    line: int


@dataclass(frozen=True)
class FileLinks:
    """All links parsed from one document, keyed by project-relative path."""
    file_path: str
    links: List[ParsedLink] = field(default_factory=list)


@dataclass(frozen=True)
class FileHeadings:
    """All headings parsed from one document, keyed by project-relative path."""
    file_path: str
    headings: List[HeadingInfo] = field(default_factory=list)


@dataclass
class NavigationEntry:
    """
    A node of the navigation tree.

    Children are attached while the tree is being built; once
    parse_navigation returns, entries are treated as read-only.
    """
    title: str
    path: str
    line: int
    depth: int
    children: List["NavigationEntry"] = field(default_factory=list)


@dataclass
class NavigationStructure:
    """Forest of navigation entries plus every path in document order."""
    entries: List[NavigationEntry] = field(default_factory=list)
    all_paths: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RedirectEntry:
    """
    One `from: to` line of the redirect block.

    Attributes:
        from_path: Normalized source ("/" + raw_from)
        to_path: Normalized destination ("/" + raw_to, .md -> .html,
                 trailing /README.html collapsed to /)
        raw_from: Literal key text
        raw_to: Literal value text
        line: 1-based line number in the configuration file
    """
    from_path: str
    to_path: str
    raw_from: str
    raw_to: str
    line: int


class RedirectPair(NamedTuple):
    """A redirect to append, in raw `source: destination` form."""
    source: str
    destination: str


@dataclass(frozen=True)
class ResolvedPath:
    """Result of resolving a link target against the project tree."""
    resolved: str
    exists: bool
    original: str
    anchor: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one link from one source file.

    Attributes:
        source_file: Project-relative path of the document holding the link
        link: The parsed link
        status: ValidationStatus
        resolved_path: Resolved (possibly non-existent) project-relative target
        error: Description of the problem, for non-valid results
    """
    source_file: str
    link: ParsedLink
    status: ValidationStatus
    resolved_path: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BrokenLink(ValidationResult):
    """A ValidationResult narrowed to status=broken with a non-empty error."""

    def __post_init__(self):
        if self.status is not ValidationStatus.BROKEN:
            raise ValueError(f"BrokenLink requires status 'broken', got {self.status.value!r}")
        if not self.error:
            raise ValueError("BrokenLink requires a non-empty error")


@dataclass(frozen=True)
class AnchorCheck:
    """Outcome of validating the anchor fragment of a link."""
    source_file: str
    link: Optional[ParsedLink]
    valid: bool
    error: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FixSuggestion:
    """
    Best-guess replacement for a broken link.

    Attributes:
        confidence: Confidence tier
        suggested_path: Project-relative path the link should point to
        reason: Human-readable explanation
        redirect_entry: Redirect that produced the suggestion (tier 1 only)
    """
    confidence: Confidence
    suggested_path: str
    reason: str
    redirect_entry: Optional[RedirectEntry] = None


@dataclass(frozen=True)
class SuggestedFix:
    """A broken link paired with the suggestion chosen for it."""
    broken: BrokenLink
    suggestion: FixSuggestion


@dataclass
class SuggestionGroups:
    """Suggestions bucketed by confidence; `none` holds links without one."""
    high: List[SuggestedFix] = field(default_factory=list)
    medium: List[SuggestedFix] = field(default_factory=list)
    low: List[SuggestedFix] = field(default_factory=list)
    none: List[BrokenLink] = field(default_factory=list)


@dataclass
class FixResult:
    """
    Outcome of one attempted rewrite. Never partially successful.

    Attributes:
        source_file: Project-relative path of the rewritten document
        original_link: The link that was (or would have been) replaced
        new_path: Project-relative suggested path
        success: True if the line was rewritten and the file written
        error: Failure description when success is False
        redirect_added: Set after a matching redirect entry was appended
    """
    source_file: str
    original_link: ParsedLink
    new_path: str
    success: bool
    error: Optional[str] = None
    redirect_added: bool = False


@dataclass
class FixBatchResult:
    """Results of a fix batch plus the number of redirects appended."""
    results: List[FixResult] = field(default_factory=list)
    redirects_added: int = 0

    @property
    def fixed_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)
