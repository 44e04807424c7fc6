from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$")
NAME_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class SkillType(StrEnum):
    atomic = "atomic"
    composite = "composite"


class ActivationMode(StrEnum):
    implicit = "implicit"
    explicit = "explicit"


class Priority(StrEnum):
    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


PRIORITY_ORDER = {Priority.critical: 0, Priority.high: 1, Priority.medium: 2, Priority.low: 3}


def _check_semver(value: str) -> str:
    value = str(value)
    if not SEMVER_RE.match(value):
        raise ValueError(f"{value!r} is not a semantic version (MAJOR.MINOR.PATCH)")
    return value


def _check_name(value: str) -> str:
    if not NAME_RE.match(value):
        raise ValueError(f"{value!r} must be lowercase words joined by hyphens")
    return value


class _FrontMatter(BaseModel):
    # Front-matter keys are hyphenated ("composed-of"); python names are not.
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Requirements(_FrontMatter):
    knowledge: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)


class SkillDocument(_FrontMatter):
    name: str
    description: str
    version: str = "1.0.0"
    type: SkillType
    category: str = "general"
    activation: ActivationMode = ActivationMode.explicit
    aliases: list[str] = Field(default_factory=list)
    requires: Requirements = Field(default_factory=Requirements)
    output_format: str | None = Field(default=None, alias="output")
    success_criteria: list[str] = Field(default_factory=list, alias="success-criteria")
    composed_of: list[str] = Field(default_factory=list, alias="composed-of")

    body: str = ""
    source: str | None = Field(default=None, exclude=True)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("aliases")
    @classmethod
    def _valid_aliases(cls, value: list[str]) -> list[str]:
        for alias in value:
            _check_name(alias)
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _valid_version(cls, value: Any) -> str:
        return _check_semver(value)

    @field_validator("output_format", mode="before")
    @classmethod
    def _flatten_output(cls, value: Any) -> Any:
        # Accept both `output: markdown` and `output: {format: markdown}`.
        if isinstance(value, dict):
            return value.get("format")
        return value

    @model_validator(mode="after")
    def _check_composition(self) -> "SkillDocument":
        if self.type == SkillType.composite and not self.composed_of:
            raise ValueError("composite skills must list at least one skill in composed-of")
        if self.type == SkillType.atomic and self.composed_of:
            raise ValueError("atomic skills cannot declare composed-of")
        seen: set[str] = set()
        for ref in self.composed_of:
            if ref in seen:
                raise ValueError(f"composed-of lists {ref!r} more than once")
            seen.add(ref)
        return self

    @property
    def identifiers(self) -> list[str]:
        return [self.name, *self.aliases]

    @property
    def references(self) -> list[str]:
        """Every skill identifier this document points at, composition first."""
        return [*self.composed_of, *self.requires.skills]


class Applicability(_FrontMatter):
    agents: list[str] = Field(default_factory=lambda: ["*"])
    skills: list[str] = Field(default_factory=lambda: ["*"])


class Compliance(_FrontMatter):
    must_follow: list[str] = Field(default_factory=list, alias="must-follow")
    should_follow: list[str] = Field(default_factory=list, alias="should-follow")
    can_ignore: list[str] = Field(default_factory=list, alias="can-ignore")


class InstructionDocument(_FrontMatter):
    path: str
    description: str
    version: str = "1.0.0"
    category: str = "general"
    applies_to: Applicability = Field(default_factory=Applicability, alias="applies-to")
    priority: Priority = Priority.medium
    compliance: Compliance = Field(default_factory=Compliance)

    body: str = ""

    @field_validator("version", mode="before")
    @classmethod
    def _valid_version(cls, value: Any) -> str:
        return _check_semver(value)

    @property
    def sort_key(self) -> tuple[int, str]:
        return PRIORITY_ORDER[self.priority], self.path


class SkillSummary(BaseModel):
    name: str
    description: str
    version: str
    type: SkillType
    category: str
    activation: ActivationMode
    aliases: list[str] = Field(default_factory=list)

    @classmethod
    def of(cls, skill: SkillDocument) -> "SkillSummary":
        return cls(
            name=skill.name,
            description=skill.description,
            version=skill.version,
            type=skill.type,
            category=skill.category,
            activation=skill.activation,
            aliases=list(skill.aliases),
        )


class InstructionSummary(BaseModel):
    path: str
    description: str
    category: str
    priority: Priority

    @classmethod
    def of(cls, doc: InstructionDocument) -> "InstructionSummary":
        return cls(
            path=doc.path,
            description=doc.description,
            category=doc.category,
            priority=doc.priority,
        )


class ResolutionResponse(BaseModel):
    skill: str
    skills: list[str]
