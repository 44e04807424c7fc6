"""Tests for registry lookups."""

import pytest

from skillreg.core.errors import MissingReferenceError
from skillreg.schemas.document import Priority, SkillType


def test_get_by_name_and_alias(registry):
    assert registry.get("click-safe") is registry.get("safe-click")
    assert registry.canonical("write-e2e-test") == "generate-e2e-test"


def test_get_unknown_raises(registry):
    with pytest.raises(MissingReferenceError, match="unknown skill 'nope'"):
        registry.get("nope")
    assert registry.find("nope") is None


def test_filters(registry):
    composites = [s.name for s in registry.skills(type=SkillType.composite)]
    assert composites == ["diagnose-failure", "generate-e2e-test"]
    assertions = [s.name for s in registry.skills(category="assertions")]
    assert assertions == ["assert-text", "assert-visible"]


def test_categories(registry):
    assert registry.categories() == ["assertions", "interactions", "locators", "waits", "workflows"]


def test_implicit_skills(registry):
    names = [s.name for s in registry.implicit_skills()]
    assert names == ["assert-text", "assert-visible", "find-by-role", "wait-for-visible"]


def test_instructions_sorted_by_priority(registry):
    priorities = [d.priority for d in registry.instructions()]
    assert priorities == [Priority.critical, Priority.high, Priority.medium]


def test_instructions_for_skill_glob(registry):
    paths = [d.path for d in registry.instructions_for(skill="find-by-testid")]
    assert paths == ["qa-automation.instructions.md", "locators.instructions.md"]


def test_instructions_for_alias_uses_canonical_name(registry):
    paths = [d.path for d in registry.instructions_for(skill="debug-test")]
    assert "flaky-tests.instructions.md" in paths


def test_instructions_for_agent(registry):
    assert "flaky-tests.instructions.md" in [d.path for d in registry.instructions_for(agent="qa-runner")]
    assert "flaky-tests.instructions.md" not in [d.path for d in registry.instructions_for(agent="planner")]


def test_validate_passes_for_bundled_corpus(registry):
    registry.validate()
