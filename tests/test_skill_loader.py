"""Tests for skilllint.skills.skill_loader: frontmatter, markdown helpers, SkillLoader."""

import pytest

from skilllint.errors import FrontmatterError, SkillNotFoundError
from skilllint.skills.skill_loader import (
    SkillLoader,
    extract_delegations,
    extract_reference_links,
    extract_tables,
    parse_frontmatter,
    split_cells,
    split_sections,
)

from conftest import QUERY_CACHE_SKILL, write_skill


# ================================================================
# parse_frontmatter
# ================================================================

class TestParseFrontmatter:

    def test_parses_nested_metadata(self):
        fm, body = parse_frontmatter(QUERY_CACHE_SKILL)
        assert fm.error is None
        assert fm.get("name") == "query-cache"
        assert fm.nested("metadata.author") == "docs-team"
        assert fm.nested("metadata.version") == "1.0"
        assert fm.nested("metadata.source") is None
        assert body.lstrip().startswith("# Query Cache")

    def test_line_count_covers_both_delimiters(self):
        fm, _ = parse_frontmatter("---\nname: abcd\n---\nbody")
        assert fm.line_count == 3

    def test_must_start_with_delimiter(self):
        fm, body = parse_frontmatter("# Title\n---\nname: x\n---\n")
        assert fm.error == "YAML frontmatter must start with --- on line 1"
        assert body.startswith("# Title")

    def test_missing_closing_delimiter(self):
        fm, _ = parse_frontmatter("---\nname: abcd\ndescription: x\n")
        assert fm.error == "Invalid YAML frontmatter: missing closing ---"

    def test_closing_delimiter_may_have_trailing_spaces(self):
        fm, body = parse_frontmatter("---\nname: abcd\n---   \nbody")
        assert fm.error is None
        assert body == "body"

    def test_yaml_syntax_error(self):
        fm, _ = parse_frontmatter("---\nname: [unclosed\n---\n")
        assert fm.error.startswith("Invalid YAML frontmatter: ")

    def test_non_mapping(self):
        fm, _ = parse_frontmatter("---\n- a\n- b\n---\n")
        assert fm.error == "Invalid YAML frontmatter: expected a mapping"

    def test_empty_header_is_empty_mapping(self):
        fm, _ = parse_frontmatter("---\n---\nbody")
        assert fm.error is None
        assert fm.data == {}

    def test_flow_and_block_values(self):
        content = "---\ntags: [a, b]\ndescription: >\n  folded\n  text\n---\n"
        fm, _ = parse_frontmatter(content)
        assert fm.get("tags") == ["a", "b"]
        assert fm.get("description").strip() == "folded text"


# ================================================================
# Markdown helpers
# ================================================================

class TestMarkdownHelpers:

    def test_split_sections(self):
        body = "intro\n## Overview\nText.\n## Delegation\nUse `x-y`.\n"
        sections = split_sections(body)
        assert list(sections) == ["Overview", "Delegation"]
        assert sections["Overview"] == "Text."

    def test_split_sections_ignores_headings_in_code(self):
        body = "## Overview\n```md\n## Not a section\n```\n## Common Mistakes\nx"
        sections = split_sections(body)
        assert list(sections) == ["Overview", "Common Mistakes"]
        assert "## Not a section" in sections["Overview"]

    def test_extract_reference_links_unique_in_order(self):
        content = "[b](references/b.md) [a](references/a.md) [b again](references/b.md) [x](other/c.md)"
        assert extract_reference_links(content) == ["b.md", "a.md"]

    def test_split_cells_handles_escaped_pipes(self):
        assert split_cells("| a \\| b | c |") == ["a \\| b", "c"]
        assert split_cells("a | b") == ["a", "b"]

    def test_extract_tables_line_numbers(self):
        body = "\n| a | b |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |\n\ntext"
        tables = extract_tables(body, first_line=4)
        assert len(tables) == 1
        table = tables[0]
        assert table.header == ["a", "b"]
        assert table.rows == [["1", "2"], ["3", "4"]]
        assert table.line == 5

    def test_extract_tables_skips_code_blocks(self):
        body = "```md\n| a | b |\n|---|---|\n| 1 |\n```\n"
        assert extract_tables(body) == []

    def test_pipe_line_without_separator_is_not_a_table(self):
        assert extract_tables("a | b\nplain text\n") == []

    def test_extract_delegations(self):
        text = (
            "- Styling: use the `tailwind-css` skill\n"
            "- Tests: **e2e-testing**\n"
            "- Payments: stripe-billing skill\n"
            "- Runtime: the `bun` skill\n"
            "- See [deploy](../cloud-deploy/SKILL.md)\n"
            "- Run `npm install` first"
        )
        names = extract_delegations(text, known_skills={"e2e-testing"})
        assert set(names) == {"tailwind-css", "e2e-testing", "stripe-billing", "bun", "cloud-deploy"}

    def test_agents_and_commands_are_not_delegations(self):
        text = (
            "- **Code review**: Delegate to `code-reviewer` agent\n"
            "- Run `pnpm-lint` before committing\n"
            "- Query caching: use the `tanstack-query` skill"
        )
        assert extract_delegations(text) == ["tanstack-query"]

    def test_bare_name_counts_only_when_known(self):
        assert extract_delegations("- Server data: see **query-cache**") == []
        assert extract_delegations("- Server data: see **query-cache**", {"query-cache"}) == ["query-cache"]

    def test_extract_delegations_empty(self):
        assert extract_delegations(None) == []
        assert extract_delegations("Nothing to delegate.") == []


# ================================================================
# SkillLoader
# ================================================================

class TestSkillLoader:

    def test_load_skill_by_name(self, skills_dir):
        loader = SkillLoader(skills_dir)
        doc = loader.load_skill("query-cache")

        assert doc is not None
        assert doc.name == "query-cache"
        assert doc.author == "docs-team"
        assert doc.version == "1.0"
        assert doc.license == "MIT"
        assert doc.reference_links == ["invalidation.md"]
        assert [r.path.name for r in doc.references] == ["invalidation.md"]
        assert doc.references[0].title == "Invalidation"
        assert doc.references[0].tags == ["cache", "invalidation"]
        assert doc.delegations == ["form-state"]
        assert doc.section("common mistakes") is not None
        assert len(doc.tables) == 2

    def test_load_skill_by_path(self, skills_dir):
        loader = SkillLoader("/nonexistent")
        doc = loader.load_skill(skills_dir / "form-state")
        assert doc is not None
        assert doc.user_invocable is True
        assert doc.model_invocation_disabled is False
        assert doc.delegations == ["query-cache"]

    def test_load_skill_not_found(self, skills_dir):
        loader = SkillLoader(skills_dir)
        assert loader.load_skill("nonexistent") is None

    def test_load_skill_not_found_strict(self, skills_dir):
        loader = SkillLoader(skills_dir)
        with pytest.raises(SkillNotFoundError):
            loader.load_skill("nonexistent", strict=True)

    def test_strict_raises_on_bad_frontmatter(self, tmp_path):
        write_skill(tmp_path, "broken-skill", "no frontmatter here\n")
        loader = SkillLoader(tmp_path)

        assert loader.load_skill("broken-skill").frontmatter.error is not None
        with pytest.raises(FrontmatterError) as exc_info:
            loader.load_skill("broken-skill", strict=True)
        assert "must start with ---" in exc_info.value.message

    def test_list_skills_sorted(self, skills_dir):
        loader = SkillLoader(skills_dir)
        names = [doc.name for doc in loader.list_skills()]
        assert names == ["form-state", "query-cache"]

    def test_list_skills_ignores_dirs_without_skill_md(self, skills_dir):
        (skills_dir / "drafts").mkdir()
        (skills_dir / "README.md").write_text("# Skills", encoding="utf-8")
        loader = SkillLoader(skills_dir)
        assert len(loader.list_skills()) == 2

    def test_list_skills_missing_dir(self, tmp_path):
        assert SkillLoader(tmp_path / "missing").list_skills() == []

    def test_iter_reference_files_skips_partials(self, tmp_path):
        skill_dir = write_skill(
            tmp_path, "some-skill", "---\nname: some-skill\n---\n",
            references={"b.md": "x", "a.md": "x", "_partial.md": "x", "notes.txt": "x"},
        )
        names = [p.name for p in SkillLoader.iter_reference_files(skill_dir)]
        assert names == ["a.md", "b.md"]

    def test_to_dict(self, skills_dir):
        doc = SkillLoader(skills_dir).load_skill("query-cache")
        data = doc.to_dict()
        assert data["name"] == "query-cache"
        assert data["references"] == ["invalidation.md"]
        assert data["delegations"] == ["form-state"]
