from __future__ import annotations

from fnmatch import fnmatchcase

import structlog

from skillreg.core.errors import MissingReferenceError, ParseError
from skillreg.schemas.document import (
    ActivationMode,
    InstructionDocument,
    SkillDocument,
    SkillType,
)

log = structlog.get_logger()


class SkillRegistry:
    """In-memory index of skill and instruction documents.

    Skills are reachable by name or by any alias. Registration is the only
    mutation; once load_registry() has validated the graph the registry is
    treated as read-only.
    """

    def __init__(self) -> None:
        self._skills: dict[str, SkillDocument] = {}
        self._index: dict[str, str] = {}
        self._instructions: dict[str, InstructionDocument] = {}

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._index

    def register_skill(self, skill: SkillDocument) -> None:
        for identifier in skill.identifiers:
            owner = self._index.get(identifier)
            if owner is not None:
                raise ParseError(
                    f"identifier {identifier!r} is already used by skill {owner!r}",
                    skill.source,
                )
        self._skills[skill.name] = skill
        for identifier in skill.identifiers:
            self._index[identifier] = skill.name

    def register_instruction(self, doc: InstructionDocument) -> None:
        if doc.path in self._instructions:
            raise ParseError("instruction document registered twice", doc.path)
        self._instructions[doc.path] = doc

    # -- skills ---------------------------------------------------------

    def find(self, identifier: str) -> SkillDocument | None:
        name = self._index.get(identifier)
        return self._skills[name] if name is not None else None

    def get(self, identifier: str) -> SkillDocument:
        """Look a skill up by name or alias. Raises MissingReferenceError."""
        skill = self.find(identifier)
        if skill is None:
            raise MissingReferenceError(identifier)
        return skill

    def canonical(self, identifier: str) -> str:
        return self.get(identifier).name

    def skills(
        self, type: SkillType | None = None, category: str | None = None
    ) -> list[SkillDocument]:
        found = [
            s
            for s in self._skills.values()
            if (type is None or s.type == type) and (category is None or s.category == category)
        ]
        return sorted(found, key=lambda s: s.name)

    def categories(self) -> list[str]:
        return sorted({s.category for s in self._skills.values()})

    def implicit_skills(self) -> list[SkillDocument]:
        return [s for s in self.skills() if s.activation == ActivationMode.implicit]

    # -- instructions ---------------------------------------------------

    def instruction(self, path: str) -> InstructionDocument | None:
        return self._instructions.get(path)

    def instructions(self) -> list[InstructionDocument]:
        return sorted(self._instructions.values(), key=lambda d: d.sort_key)

    def instructions_for(
        self, agent: str | None = None, skill: str | None = None
    ) -> list[InstructionDocument]:
        """Instructions whose applies-to globs match the agent and/or skill.

        A skill given by alias is matched under its canonical name.
        """
        if skill is not None:
            skill = self.canonical(skill)
        return [
            doc
            for doc in self.instructions()
            if _matches(agent, doc.applies_to.agents) and _matches(skill, doc.applies_to.skills)
        ]

    # -- validation -----------------------------------------------------

    def validate(self) -> None:
        """Check the closed-world property, then acyclicity of every skill
        over composition, requirements, and both combined.

        Raises the first MissingReferenceError or CycleError encountered.
        """
        from skillreg.core.resolver import check_acyclic, resolve, resolve_requirements

        for skill in self.skills():
            for ref in skill.references:
                if ref not in self._index:
                    log.warning("registry.dangling_reference", skill=skill.name, reference=ref)
                    raise MissingReferenceError(ref, referenced_by=skill.name)

        for skill in self.skills():
            resolve(self, skill.name)
            resolve_requirements(self, skill.name)
            check_acyclic(self, skill.name)

        log.info(
            "registry.validated",
            skills=len(self._skills),
            instructions=len(self._instructions),
        )


def _matches(value: str | None, patterns: list[str]) -> bool:
    if value is None:
        return True
    return any(fnmatchcase(value, p) for p in patterns)
