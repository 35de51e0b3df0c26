"""
Tests for path utilities and similarity measures.
"""

import pytest

from linkmender.core.paths import (
    PathSecurityError,
    clean_link_path,
    has_redirect_conflict,
    html_to_md,
    is_asset_link,
    is_external_link,
    md_to_html,
    normalize_path,
    resolve_relative_link,
    to_relative_link,
    validate_path_contained,
    validate_project_root,
)
from linkmender.core.similarity import (
    levenshtein_distance,
    normalized_similarity,
    path_segment_similarity,
)


@pytest.fixture
def project(make_project):
    return make_project({
        "top.md": "# Top",
        "docs/a.md": "# A",
        "docs/guide.md": "# Guide",
        "docs/sub/README.md": "# Sub",
    })


class TestResolveRelativeLink:
    """Test link target resolution."""

    @pytest.mark.parametrize("target,expected", [
        ("guide.md", "docs/guide.md"),
        ("./guide.md", "docs/guide.md"),
        ("../top.md", "top.md"),
        ("/top.md", "top.md"),
        ("guide", "docs/guide.md"),
        ("sub", "docs/sub/README.md"),
        ("sub/", "docs/sub/README.md"),
    ])
    def test_existing_targets(self, project, target, expected):
        resolved = resolve_relative_link("docs/a.md", target, project)

        assert resolved.resolved == expected
        assert resolved.exists
        assert resolved.original == target

    def test_missing_target_keeps_plain_resolution(self, project):
        resolved = resolve_relative_link("docs/a.md", "nope", project)

        assert resolved.resolved == "docs/nope"
        assert not resolved.exists

    def test_anchor_split_off(self, project):
        resolved = resolve_relative_link("docs/a.md", "guide.md#setup", project)

        assert resolved.resolved == "docs/guide.md"
        assert resolved.anchor == "setup"

    def test_backslashes_normalized(self, project):
        resolved = resolve_relative_link("top.md", "docs\\guide.md", project)

        assert resolved.resolved == "docs/guide.md"


class TestPathHelpers:
    """Test the small path conversions."""

    @pytest.mark.parametrize("source,target,expected", [
        ("docs/a.md", "docs/guide.md", "./guide.md"),
        ("docs/a.md", "top.md", "../top.md"),
        ("a.md", "b/c.md", "./b/c.md"),
        ("docs/deep/x.md", "docs/other/y.md", "../other/y.md"),
    ])
    def test_to_relative_link(self, source, target, expected):
        assert to_relative_link(source, target) == expected

    def test_normalize_path(self):
        assert normalize_path("./a\\b/") == "a/b"

    def test_clean_link_path(self):
        assert clean_link_path("my%20file\\_name\\#1.md") == "my file_name#1.md"

    def test_md_html_conversion(self):
        assert md_to_html("/a/b.md") == "/a/b.html"
        assert md_to_html("/a/README.md") == "/a/"
        assert html_to_md("/a/b.html") == "/a/b.md"
        assert html_to_md("/a/index.html") == "/a/README.md"
        assert html_to_md("/a/") == "/a/README.md"

    def test_link_classification(self):
        assert is_external_link("HTTPS://example.com")
        assert is_external_link("tel:+123")
        assert not is_external_link("docs/http.md")
        assert is_asset_link("img/logo.SVG#frag")
        assert not is_asset_link("docs/page.md")

    def test_redirect_conflict(self, project):
        assert has_redirect_conflict("/top", "/elsewhere.html", project)
        assert not has_redirect_conflict("/top", "/top/README", project)
        assert not has_redirect_conflict("/missing", "/elsewhere.html", project)


class TestPathSecurity:
    """Test root and containment validation."""

    def test_root_must_exist(self, tmp_path):
        with pytest.raises(PathSecurityError):
            validate_project_root(tmp_path / "missing")

    def test_root_must_be_directory(self, tmp_path):
        file_path = tmp_path / "file.md"
        file_path.write_text("x")
        with pytest.raises(PathSecurityError):
            validate_project_root(file_path)

    def test_traversal_rejected(self, tmp_path):
        with pytest.raises(PathSecurityError):
            validate_path_contained("../outside.yaml", tmp_path)

    def test_contained_path_resolved(self, tmp_path):
        assert validate_path_contained("SUMMARY.md", tmp_path) == (tmp_path / "SUMMARY.md").resolve()


class TestSimilarity:
    """Test edit distance and similarity scores."""

    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_normalized_similarity(self):
        assert normalized_similarity("abc", "ABC") == 1.0
        assert normalized_similarity("", "") == 1.0
        assert normalized_similarity("abcd", "abcx") == 0.75

    def test_path_segment_similarity(self):
        assert path_segment_similarity("guide/setup.md", "guide/old/setup.md") == pytest.approx(2 / 3)
        assert path_segment_similarity("a/b.md", "c/d.md") == 0.0
        assert path_segment_similarity("", "") == 0.0
