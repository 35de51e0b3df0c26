"""
Tests for Markdown link and heading parsing.

Covers:
1. Anchor slug generation
2. Link extraction and classification
3. Fenced code block exclusion
4. Heading extraction with explicit ids
"""

import pytest

from linkmender.core.models import LinkKind
from linkmender.parsers.markdown import (
    compute_code_block_state,
    parse_markdown_headings,
    parse_markdown_links,
    slugify,
)


class TestSlugify:
    """Test heading text to anchor id conversion."""

    def test_punctuation_removed(self):
        assert slugify("Hello, World!") == "hello-world"

    def test_whitespace_and_hyphen_runs_collapse(self):
        assert slugify("  Step 2 -- Configure  ") == "step-2-configure"

    def test_empty_string(self):
        assert slugify("") == ""

    def test_unicode_letters_kept(self):
        assert slugify("Café Überblick") == "café-überblick"

    @pytest.mark.parametrize("text", [
        "Hello, World!",
        "  --Leading and trailing--  ",
        "API v2.0 (beta)",
        "already-a-slug",
        "Mixed_Case_With_Underscores",
    ])
    def test_idempotent(self, text):
        """Slugifying a slug changes nothing."""
        once = slugify(text)
        assert slugify(once) == once


class TestCodeBlockState:
    """Test fenced code block detection."""

    def test_fence_lines_and_contents_marked(self):
        lines = ["text", "```python", "code", "```", "after"]
        assert compute_code_block_state(lines) == [False, True, True, True, False]

    def test_tilde_fences(self):
        lines = ["~~~", "inside", "~~~", "outside"]
        assert compute_code_block_state(lines) == [True, True, True, False]

    def test_unterminated_fence_hides_rest(self):
        lines = ["before", "```", "a", "b"]
        assert compute_code_block_state(lines) == [False, True, True, True]


class TestParseLinks:
    """Test link extraction."""

    def test_standard_link_with_anchor(self):
        result = parse_markdown_links("docs/a.md", "See [Guide](./guide.md#setup) now.")

        assert result.file_path == "docs/a.md"
        assert len(result.links) == 1
        link = result.links[0]
        assert link.display_text == "Guide"
        assert link.target_path == "./guide.md"
        assert link.anchor == "setup"
        assert link.line == 1
        assert link.column == 5
        assert link.kind is LinkKind.INTERNAL
        assert link.raw == "[Guide](./guide.md#setup)"

    def test_external_links_dropped(self):
        content = "[Site](https://example.com) [Mail](mailto:a@b.c) [Ftp](FTP://host/file)"
        assert parse_markdown_links("a.md", content).links == []

    def test_angle_bracket_target(self):
        result = parse_markdown_links("a.md", "[Doc](<my doc.md>)")

        assert len(result.links) == 1
        assert result.links[0].target_path == "my doc.md"

    def test_nested_parentheses_in_target(self):
        result = parse_markdown_links("a.md", "[W](docs/foo_(bar).md)")

        assert [l.target_path for l in result.links] == ["docs/foo_(bar).md"]

    def test_html_and_data_ref_links(self):
        content = '<a class="x" href="other.md">Other</a>\n<div data-ref="ref.md"></div>'
        result = parse_markdown_links("a.md", content)

        assert [(l.target_path, l.line, l.display_text) for l in result.links] == [
            ("other.md", 1, ""),
            ("ref.md", 2, ""),
        ]

    def test_anchor_only_link(self):
        link = parse_markdown_links("a.md", "[Top](#top)").links[0]

        assert link.kind is LinkKind.ANCHOR_ONLY
        assert link.target_path == ""
        assert link.anchor == "top"

    def test_asset_link(self):
        link = parse_markdown_links("a.md", "![Diagram](images/flow.PNG)").links[0]

        assert link.kind is LinkKind.ASSET
        assert link.target_path == "images/flow.PNG"

    def test_targets_are_cleaned(self):
        link = parse_markdown_links("a.md", "[x](my%20file\\_name.md)").links[0]

        assert link.target_path == "my file_name.md"

    def test_links_in_code_blocks_ignored(self):
        content = "\n".join([
            "[Real](real.md)",
            "```",
            "[Fake](fake.md)",
            "```",
            "[Also real](also.md)",
        ])
        result = parse_markdown_links("a.md", content)

        assert [(l.target_path, l.line) for l in result.links] == [("real.md", 1), ("also.md", 5)]

    def test_multiple_links_per_line(self):
        result = parse_markdown_links("a.md", "[A](a.md) and [B](b.md)")

        assert [(l.target_path, l.column) for l in result.links] == [("a.md", 1), ("b.md", 15)]

    def test_reads_file_when_no_content(self, tmp_path):
        doc = tmp_path / "doc.md"
        doc.write_text("[A](a.md)\n", encoding="utf-8")

        result = parse_markdown_links(str(doc))
        assert [l.target_path for l in result.links] == ["a.md"]


class TestParseHeadings:
    """Test heading extraction."""

    def test_atx_headings(self):
        content = "# Title\n\ntext\n\n### Sub Section\n"
        headings = parse_markdown_headings("a.md", content).headings

        assert [(h.text, h.id, h.level, h.line) for h in headings] == [
            ("Title", "title", 1, 1),
            ("Sub Section", "sub-section", 3, 5),
        ]

    def test_explicit_id(self):
        heading = parse_markdown_headings("a.md", "## Install {#custom-id}").headings[0]

        assert heading.id == "custom-id"
        assert heading.text == "Install"

    def test_fenced_headings_ignored(self):
        content = "# Real\n```bash\n# not a heading\n```\n"
        headings = parse_markdown_headings("a.md", content).headings

        assert [h.id for h in headings] == ["real"]

    def test_seven_hashes_is_not_a_heading(self):
        assert parse_markdown_headings("a.md", "####### Too deep").headings == []

    def test_hash_without_space_is_not_a_heading(self):
        assert parse_markdown_headings("a.md", "#hashtag").headings == []
