"""Tests for parsing documents and loading the registry from disk."""

import pytest

from skillreg.core.errors import CycleError, MissingReferenceError, ParseError
from skillreg.core.loader import load_registry, parse_instruction, parse_skill
from skillreg.schemas.document import ActivationMode, Priority, SkillType


def test_parse_skill_reads_all_fields():
    text = """---
name: click-safe
description: Click when actionable.
version: 1.2.3
type: atomic
category: interactions
activation: implicit
aliases: [safe-click]
requires:
  knowledge: [actionability]
  tools: [playwright]
  skills: [wait-for-visible]
output:
  format: code-snippet
success-criteria:
  - No force clicks
---
# Click
"""
    skill = parse_skill(text, "click-safe/SKILL.md")
    assert skill.name == "click-safe"
    assert skill.version == "1.2.3"
    assert skill.type == SkillType.atomic
    assert skill.activation == ActivationMode.implicit
    assert skill.aliases == ["safe-click"]
    assert skill.requires.skills == ["wait-for-visible"]
    assert skill.requires.tools == ["playwright"]
    assert skill.output_format == "code-snippet"
    assert skill.success_criteria == ["No force clicks"]
    assert skill.body == "# Click"
    assert skill.source == "click-safe/SKILL.md"


def test_parse_skill_defaults():
    skill = parse_skill("---\nname: a\ndescription: d\ntype: atomic\noutput: markdown\n---\n")
    assert skill.version == "1.0.0"
    assert skill.activation == ActivationMode.explicit
    assert skill.category == "general"
    assert skill.output_format == "markdown"
    assert skill.composed_of == []


def test_missing_name_raises():
    with pytest.raises(ParseError) as exc:
        parse_skill("---\ndescription: d\ntype: atomic\n---\n", "x.md")
    assert exc.value.errors == ["name"]
    assert exc.value.source == "x.md"


def test_unknown_type_raises():
    with pytest.raises(ParseError) as exc:
        parse_skill("---\nname: a\ndescription: d\ntype: macro\n---\n")
    assert any(err.startswith("type:") for err in exc.value.errors)


@pytest.mark.parametrize(
    "field, value",
    [("activation", "sometimes"), ("aliases", "['Bad Alias']"), ("aliases", "['']")],
)
def test_invalid_enum_or_alias_raises(field, value):
    with pytest.raises(ParseError) as exc:
        parse_skill(f"---\nname: a\ndescription: d\ntype: atomic\n{field}: {value}\n---\n")
    assert any(err.startswith(f"{field}") for err in exc.value.errors)


def test_unknown_priority_raises():
    with pytest.raises(ParseError) as exc:
        parse_instruction("---\ndescription: d\npriority: urgent\n---\n", "x.instructions.md")
    assert any(err.startswith("priority:") for err in exc.value.errors)


@pytest.mark.parametrize("version", ["1.0", "v1.0.0", "latest"])
def test_malformed_version_raises(version):
    with pytest.raises(ParseError):
        parse_skill(f"---\nname: a\ndescription: d\ntype: atomic\nversion: '{version}'\n---\n")


def test_composite_without_parts_raises():
    with pytest.raises(ParseError, match="invalid skill metadata"):
        parse_skill("---\nname: a\ndescription: d\ntype: composite\n---\n")


def test_atomic_with_parts_raises():
    with pytest.raises(ParseError):
        parse_skill("---\nname: a\ndescription: d\ntype: atomic\ncomposed-of: [b]\n---\n")


def test_repeated_part_raises():
    with pytest.raises(ParseError):
        parse_skill("---\nname: a\ndescription: d\ntype: composite\ncomposed-of: [b, b]\n---\n")


def test_parse_instruction():
    text = """---
description: Baseline
version: 2.0.0
applies-to:
  agents: ["qa-*"]
priority: high
compliance:
  must-follow: [no sleeps]
  can-ignore: [page objects]
---
Body
"""
    doc = parse_instruction(text, "base.instructions.md")
    assert doc.path == "base.instructions.md"
    assert doc.priority == Priority.high
    assert doc.applies_to.agents == ["qa-*"]
    assert doc.applies_to.skills == ["*"]
    assert doc.compliance.must_follow == ["no sleeps"]
    assert doc.compliance.should_follow == []
    assert doc.compliance.can_ignore == ["page objects"]
    assert doc.body == "Body"


def test_bundled_corpus_loads(registry):
    assert len(registry) == 9
    assert {d.path for d in registry.instructions()} == {
        "qa-automation.instructions.md",
        "locators.instructions.md",
        "flaky-tests.instructions.md",
    }


def test_loading_is_repeatable(registry, guidance_dir):
    again = load_registry(guidance_dir)
    assert [s.model_dump() for s in again.skills()] == [s.model_dump() for s in registry.skills()]


def test_readme_files_are_ignored(corpus):
    corpus("a")
    (corpus.root / "skills" / "README.md").write_text("# Skills\n")
    registry = load_registry(corpus.root)
    assert len(registry) == 1


def test_file_without_front_matter_raises(corpus):
    corpus("a")
    (corpus.root / "skills" / "notes.md").write_text("# Notes\n")
    with pytest.raises(ParseError, match="notes.md"):
        load_registry(corpus.root)


def test_missing_skills_dir_raises(tmp_path):
    with pytest.raises(ParseError, match="skills directory not found"):
        load_registry(tmp_path)


def test_missing_instructions_dir_is_allowed(corpus):
    corpus("a")
    registry = load_registry(corpus.root)
    assert registry.instructions() == []


def test_duplicate_identifier_raises(corpus):
    corpus("a", aliases=["shared"])
    corpus("b", aliases=["shared"])
    with pytest.raises(ParseError, match="already used"):
        load_registry(corpus.root)


def test_dangling_reference_fails_at_load(corpus):
    corpus("flow", type="composite", **{"composed-of": ["a", "ghost"]})
    corpus("a")
    with pytest.raises(MissingReferenceError) as exc:
        load_registry(corpus.root)
    assert exc.value.identifier == "ghost"
    assert exc.value.referenced_by == "flow"


def test_dangling_requirement_fails_at_load(corpus):
    corpus("a", requires={"skills": ["ghost"]})
    with pytest.raises(MissingReferenceError):
        load_registry(corpus.root)


def test_self_reference_fails_at_load(corpus):
    corpus("loop", type="composite", **{"composed-of": ["loop"]})
    with pytest.raises(CycleError) as exc:
        load_registry(corpus.root)
    assert exc.value.path == ["loop", "loop"]


def test_mixed_composition_and_requirement_cycle_fails_at_load(corpus):
    corpus("flow", type="composite", **{"composed-of": ["step"]})
    corpus("step", requires={"skills": ["flow"]})
    with pytest.raises(CycleError) as exc:
        load_registry(corpus.root)
    assert exc.value.path == ["flow", "step", "flow"]
