"""
End-to-end tests for LinkChecker: check a small project, then fix it.
"""

import pytest

from linkmender.checker import LinkChecker, create_checker
from linkmender.core.models import Confidence
from linkmender.core.paths import PathSecurityError
from linkmender.parsers.navigation import NavigationFileError


PROJECT = {
    "SUMMARY.md": (
        "# Summary\n"
        "\n"
        "* [Intro](README.md)\n"
        "* [Guide](guide/setup.md)\n"
        "* [Gone](guide/gone.md)\n"
    ),
    "README.md": (
        "# Intro\n"
        "\n"
        "See [setup](guide/setup.md#install) and [old](old-page.md).\n"
        "\n"
        "A [typo](guide/setpu.md) link.\n"
    ),
    "guide/setup.md": (
        "# Setup\n"
        "\n"
        "## Install\n"
        "\n"
        "Back to [intro](../README.md#missing-anchor).\n"
    ),
    ".gitbook.yaml": "root: ./\n\nredirects:\n  old-page: guide/setup.md\n",
}


@pytest.fixture
def project(make_project):
    return make_project(PROJECT)


class TestCheck:
    """Test the check pipeline."""

    def test_report_counts(self, project):
        report = create_checker(project).check()

        assert report.files_scanned == 3
        assert report.links_checked == 7
        assert report.valid_links == 4
        assert report.broken_links == 2
        assert report.redirect_available == 1
        assert report.errors == []
        assert report.has_issues

    def test_broken_links_with_suggestions(self, project):
        report = create_checker(project).check()

        details = {d.broken.link.target_path: d for d in report.broken_link_details}
        assert set(details) == {"guide/gone.md", "guide/setpu.md"}
        assert details["guide/gone.md"].suggestion is None

        typo = details["guide/setpu.md"].suggestion
        assert typo.confidence is Confidence.MEDIUM
        assert typo.suggested_path == "guide/setup.md"
        assert [d.broken.link.target_path for d in report.fixable] == ["guide/setpu.md"]

    def test_anchor_issues(self, project):
        report = create_checker(project).check()

        assert len(report.anchor_issues) == 1
        issue = report.anchor_issues[0]
        assert issue.source_file == "guide/setup.md"
        assert issue.error == "Anchor not found: #missing-anchor in README.md"

    def test_anchor_checking_disabled(self, project):
        report = create_checker(project, check_anchors=False).check()

        assert report.anchor_issues == []

    def test_missing_navigation_targets(self, project):
        report = create_checker(project).check()

        assert [e.path for e in report.missing_navigation_targets] == ["guide/gone.md"]

    def test_scan_path_restricts_documents(self, project):
        report = create_checker(project, path="guide").check()

        assert report.files_scanned == 1
        assert report.links_checked == 1

    def test_oversized_files_reported_not_fatal(self, project):
        report = create_checker(project, max_file_size=10).check()

        assert report.files_scanned == 0
        assert len(report.errors) == 3
        assert all("<project>/" in error for error in report.errors)
        assert not any(str(project.resolve()) in error for error in report.errors)

    def test_missing_navigation_file_is_fatal(self, make_project):
        root = make_project({"README.md": "# Intro\n"})

        with pytest.raises(NavigationFileError):
            create_checker(root).check()


class TestSetup:
    """Test checker construction."""

    def test_invalid_root(self, tmp_path):
        with pytest.raises(PathSecurityError):
            create_checker(tmp_path / "missing")

    def test_navigation_outside_root(self, project):
        with pytest.raises(PathSecurityError):
            LinkChecker({'project': {'root': str(project), 'navigation_file': '../SUMMARY.md'}})


class TestFix:
    """Test applying suggestions."""

    def test_default_threshold_applies_nothing(self, project):
        """The typo suggestion is medium; the default auto-fix tier is high."""
        checker = create_checker(project)

        batch = checker.fix(checker.check())

        assert batch.results == []
        assert (project / "README.md").read_text(encoding="utf-8") == PROJECT["README.md"]

    def test_lowered_threshold_fixes_and_adds_redirect(self, project):
        checker = create_checker(project)

        batch = checker.fix(min_confidence="medium")

        assert batch.fixed_count == 1
        assert batch.redirects_added == 1
        assert batch.results[0].redirect_added
        assert "A [typo](./guide/setup.md) link." in (project / "README.md").read_text(encoding="utf-8")
        assert (project / ".gitbook.yaml").read_text(encoding="utf-8") == (
            "root: ./\n\nredirects:\n  old-page: guide/setup.md\n  guide/setpu: guide/setup.md\n"
        )

        report = checker.check()
        assert report.broken_links == 1
        assert report.redirect_available == 1

    def test_approve_callback(self, project):
        checker = create_checker(project)
        seen = []

        def approve(fix):
            seen.append(fix.broken.link.target_path)
            return True

        batch = checker.fix(approve=approve)

        assert seen == ["guide/setpu.md"]
        assert batch.fixed_count == 1

    def test_rejected_by_callback(self, project):
        checker = create_checker(project)

        batch = checker.fix(approve=lambda fix: False)

        assert batch.fixed_count == 0

    def test_redirects_disabled_by_config(self, project):
        checker = LinkChecker({
            'project': {'root': str(project)},
            'fixes': {'auto_fix_confidence': 'medium', 'add_redirects': False},
        })

        batch = checker.fix()

        assert batch.fixed_count == 1
        assert batch.redirects_added == 0
        assert "setpu" not in (project / ".gitbook.yaml").read_text(encoding="utf-8")
