"""Tests for skilllint.skills.registry: resolve_skill_dirs and SkillRegistry."""

from skilllint.skills.registry import SkillRegistry, resolve_skill_dirs

from conftest import make_skill_md, write_skill


class TestResolveSkillDirs:

    def test_no_args_lists_corpus(self, skills_dir):
        dirs = resolve_skill_dirs([], skills_dir)
        assert [d.name for d in dirs] == ["form-state", "query-cache"]
        assert all(d.is_absolute() for d in dirs)

    def test_no_args_missing_corpus(self, tmp_path):
        assert resolve_skill_dirs([], tmp_path / "missing") == []

    def test_skill_file(self, skills_dir):
        dirs = resolve_skill_dirs([skills_dir / "query-cache" / "SKILL.md"])
        assert dirs == [(skills_dir / "query-cache").resolve()]

    def test_reference_file_maps_to_its_skill(self, skills_dir):
        ref = skills_dir / "query-cache" / "references" / "invalidation.md"
        assert resolve_skill_dirs([ref]) == [(skills_dir / "query-cache").resolve()]

    def test_non_markdown_file_ignored(self, skills_dir):
        other = skills_dir / "query-cache" / "notes.txt"
        other.write_text("x", encoding="utf-8")
        assert resolve_skill_dirs([other]) == []

    def test_parent_directory_expands(self, skills_dir):
        dirs = resolve_skill_dirs([skills_dir])
        assert [d.name for d in dirs] == ["form-state", "query-cache"]

    def test_deduplicates_and_skips_missing(self, skills_dir):
        dirs = resolve_skill_dirs([
            skills_dir / "form-state",
            skills_dir / "form-state" / "SKILL.md",
            skills_dir / "does-not-exist",
        ])
        assert dirs == [(skills_dir / "form-state").resolve()]


class TestSkillRegistry:

    def test_indexes_skills(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        assert [doc.name for doc in registry.list_all()] == ["form-state", "query-cache"]
        assert registry.names() == {"form-state", "query-cache"}

    def test_get(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        assert registry.get("query-cache").author == "docs-team"
        assert registry.get("nonexistent") is None

    def test_descriptions(self, skills_dir):
        descriptions = SkillRegistry(skills_dir).descriptions()
        assert set(descriptions) == {"form-state", "query-cache"}
        assert descriptions["form-state"].startswith("Validates form input")

    def test_match_by_trigger_words(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        matched = registry.match("How do I invalidate stale query data?")
        assert [doc.name for doc in matched] == ["query-cache"]

    def test_match_by_name(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        matched = registry.match("open form-state please")
        assert matched[0].name == "form-state"

    def test_match_nothing(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        assert registry.match("") == []
        assert registry.match("zebra") == []

    def test_match_limit(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        matched = registry.match("query cache and form validation", limit=1)
        assert len(matched) == 1

    def test_match_limit_zero(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        assert registry.match("query cache and form validation", limit=0) == []

    def test_refresh(self, skills_dir):
        registry = SkillRegistry(skills_dir)
        assert len(registry.list_all()) == 2

        write_skill(skills_dir, "edge-deploy", make_skill_md("edge-deploy"))
        registry.refresh()
        assert len(registry.list_all()) == 3

    def test_duplicate_names_keep_first(self, skills_dir):
        # frontmatter name collides with an existing skill
        write_skill(skills_dir, "zz-copy", make_skill_md("query-cache"))
        registry = SkillRegistry(skills_dir)
        assert registry.get("query-cache").dir_name == "query-cache"
        assert len(registry.list_all()) == 2

    def test_delegation_graph(self, skills_dir):
        graph = SkillRegistry(skills_dir).delegation_graph()
        assert graph == {"form-state": ["query-cache"], "query-cache": ["form-state"]}

    def test_unknown_delegations(self, skills_dir):
        body = "## Delegation\n\nUse the `edge-functions` skill.\n"
        write_skill(skills_dir, "edge-deploy", make_skill_md("edge-deploy", body=body))
        missing = SkillRegistry(skills_dir).unknown_delegations()
        assert missing == {"edge-deploy": ["edge-functions"]}
