"""Shared pytest fixtures for skilllint tests."""

import textwrap

import pytest


QUERY_CACHE_SKILL = """\
---
name: query-cache
description: Caches server query results in the browser. Use for query caching, stale data, cache invalidation, prefetching, pagination, optimistic updates, mutations, devtools.
license: MIT
metadata:
  author: docs-team
  version: "1.0"
---

# Query Cache

## Overview

Keeps server state in a client-side cache.

## Quick Reference

| Task | API |
| --- | --- |
| Fetch | `useQuery` |
| Mutate | `useMutation` |

## Common Mistakes

| Mistake | Fix |
|---------|-----|
| Missing query key | Add a stable key |

```ts
const client = new QueryClient();
```

## Delegation

- Form validation: use the `form-state` skill

## References

- [Invalidation](references/invalidation.md)
"""

INVALIDATION_REF = """\
---
title: Invalidation
description: When and how to invalidate cached queries.
tags: [cache, invalidation]
---

# Invalidation

Call `invalidateQueries` after a mutation.
"""

FORM_STATE_SKILL = """\
---
name: form-state
description: Validates form input on the client. Use for form validation, field errors, schema resolvers, submit status, controlled inputs, wizard steps.
license: MIT
metadata:
  author: docs-team
  version: "2.1"
user-invocable: true
---

# Form State

## Overview

Client-side form validation.

## Common Mistakes

| Mistake | Fix |
| --- | --- |
| Validating on every keystroke | Validate on blur |

## Delegation

- Server data: see **query-cache**
"""


def write_skill(root, name, skill_md, references=None, extra_files=None):
    """Create ``root/<name>/SKILL.md`` (plus references/ and extra files)."""
    skill_dir = root / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(skill_md, encoding="utf-8")
    for ref_name, ref_content in (references or {}).items():
        refs_dir = skill_dir / "references"
        refs_dir.mkdir(exist_ok=True)
        (refs_dir / ref_name).write_text(ref_content, encoding="utf-8")
    for rel_path, content in (extra_files or {}).items():
        target = skill_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return skill_dir


def make_skill_md(name, description="Parses things. Use for parsing, tokens, grammars, lexers, syntax trees, errors.", body=None):
    """A minimal SKILL.md with the recommended sections."""
    if body is None:
        body = textwrap.dedent("""\
            ## Overview

            Text.

            ## Common Mistakes

            None yet.

            ## Delegation

            Nothing to delegate.
            """)
    return f"---\nname: {name}\ndescription: {description}\n---\n\n{body}"


@pytest.fixture
def skills_dir(tmp_path):
    """A temp corpus with two valid, cross-delegating skills."""
    root = tmp_path / "skills"
    write_skill(root, "query-cache", QUERY_CACHE_SKILL, references={"invalidation.md": INVALIDATION_REF})
    write_skill(root, "form-state", FORM_STATE_SKILL)
    return root


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path."""
    return str(tmp_path / "data" / "history.db")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SKILLLINT_* settings from the developer's shell out of tests."""
    for key in (
        "SKILLLINT_SKILLS_DIR",
        "SKILLLINT_CONFLICT_THRESHOLD",
        "SKILLLINT_HISTORY_DB",
        "SKILLLINT_WATCH_INTERVAL",
        "SKILLLINT_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
