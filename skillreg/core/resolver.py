from __future__ import annotations

from collections.abc import Callable, Iterator

import structlog

from skillreg.core.errors import CycleError, MissingReferenceError
from skillreg.core.registry import SkillRegistry
from skillreg.schemas.document import InstructionDocument, SkillDocument, SkillType

log = structlog.get_logger()


def resolve(registry: SkillRegistry, identifier: str) -> list[SkillDocument]:
    """Return the atomic skills a skill is composed of, transitively.

    Traversal is depth-first in declared ``composed-of`` order and the first
    occurrence of a skill wins, so the result is duplicate-free and stable
    across calls. An atomic skill resolves to itself.
    """
    root = registry.get(identifier)
    atoms: list[SkillDocument] = []
    seen: set[str] = set()

    def visit(skill: SkillDocument) -> None:
        if skill.type == SkillType.atomic:
            if skill.name not in seen:
                seen.add(skill.name)
                atoms.append(skill)

    _walk(registry, root, lambda s: s.composed_of, visit)
    return atoms


def resolve_requirements(registry: SkillRegistry, identifier: str) -> list[SkillDocument]:
    """Return the skills a skill requires through ``requires.skills``, transitively.

    Depth-first, duplicate-free, and excluding the starting skill itself.
    """
    root = registry.get(identifier)
    required: list[SkillDocument] = []
    seen: set[str] = {root.name}

    def visit(skill: SkillDocument) -> None:
        if skill.name not in seen:
            seen.add(skill.name)
            required.append(skill)

    _walk(registry, root, lambda s: s.requires.skills, visit)
    return required


def check_acyclic(registry: SkillRegistry, identifier: str) -> None:
    """Raise CycleError if a skill reaches itself through any mix of
    ``composed-of`` and ``requires.skills`` references."""
    _walk(registry, registry.get(identifier), lambda s: s.references, lambda s: None)


def _walk(
    registry: SkillRegistry,
    root: SkillDocument,
    edges: Callable[[SkillDocument], list[str]],
    visit: Callable[[SkillDocument], None],
) -> None:
    # `path` holds the skills on the current branch; revisiting one is a cycle.
    # `done` holds fully explored skills so shared subtrees are walked once.
    path: list[str] = []
    on_path: set[str] = set()
    done: set[str] = set()
    stack: list[tuple[SkillDocument, Iterator[str]]] = []

    def enter(skill: SkillDocument) -> None:
        path.append(skill.name)
        on_path.add(skill.name)
        visit(skill)
        stack.append((skill, iter(edges(skill))))

    enter(root)
    while stack:
        skill, refs = stack[-1]
        ref = next(refs, None)
        if ref is None:
            stack.pop()
            on_path.discard(path.pop())
            done.add(skill.name)
            continue
        child = registry.find(ref)
        if child is None:
            raise MissingReferenceError(ref, referenced_by=skill.name)
        if child.name in on_path:
            cycle = path[path.index(child.name) :] + [child.name]
            log.warning("resolver.cycle", path=cycle)
            raise CycleError(cycle)
        if child.name not in done:
            enter(child)


def build_context(registry: SkillRegistry, identifier: str, agent: str | None = None) -> str:
    """Render the guidance an agent should load for a skill as one Markdown document.

    Applicable instructions come first (by priority), then the skill itself,
    the skills it requires, and the atomic skills it resolves to.
    """
    skill = registry.get(identifier)
    instructions = registry.instructions_for(agent=agent, skill=skill.name)

    ordered: list[SkillDocument] = []
    for candidate in [skill, *resolve_requirements(registry, skill.name), *resolve(registry, skill.name)]:
        if all(candidate.name != s.name for s in ordered):
            ordered.append(candidate)

    sections: list[str] = []
    for doc in instructions:
        sections.append(f"<!-- instruction: {doc.path} -->\n{_render_instruction(doc)}")
    for s in ordered:
        sections.append(f"<!-- skill: {s.name}@{s.version} -->\n{_render_skill(s)}")

    log.debug(
        "resolver.context_built",
        skill=skill.name,
        agent=agent,
        instructions=len(instructions),
        skills=[s.name for s in ordered],
    )
    return "\n\n".join(sections) + "\n"


def _render_instruction(doc: InstructionDocument) -> str:
    lines = [doc.body.strip()] if doc.body.strip() else [f"# {doc.description}"]
    rules = [
        ("Must follow", doc.compliance.must_follow),
        ("Should follow", doc.compliance.should_follow),
    ]
    for title, items in rules:
        if items:
            lines.append(f"\n**{title}:**")
            lines.extend(f"- {item}" for item in items)
    return "\n".join(lines)


def _render_skill(skill: SkillDocument) -> str:
    lines = [skill.body.strip()] if skill.body.strip() else [f"# {skill.name}", skill.description]
    if skill.success_criteria:
        lines.append("\n**Success criteria:**")
        lines.extend(f"- {c}" for c in skill.success_criteria)
    return "\n".join(lines)
