from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import ValidationError

from skillreg.core.errors import ParseError
from skillreg.core.frontmatter import split_frontmatter
from skillreg.core.registry import SkillRegistry
from skillreg.schemas.document import InstructionDocument, SkillDocument

log = structlog.get_logger()

IGNORED_FILES = {"readme.md"}


def parse_skill(text: str, source: str | None = None) -> SkillDocument:
    meta, body = split_frontmatter(text, source)
    if "name" not in meta:
        raise ParseError("missing required field", source, ["name"])
    try:
        return SkillDocument.model_validate({**meta, "body": body, "source": source})
    except ValidationError as e:
        raise ParseError("invalid skill metadata", source, _describe(e)) from e


def parse_instruction(text: str, path: str) -> InstructionDocument:
    meta, body = split_frontmatter(text, path)
    try:
        return InstructionDocument.model_validate({**meta, "path": path, "body": body})
    except ValidationError as e:
        raise ParseError("invalid instruction metadata", path, _describe(e)) from e


def load_skills(skills_dir: Path) -> list[SkillDocument]:
    """Parse every Markdown document below skills_dir, in path order."""
    if not skills_dir.is_dir():
        raise ParseError("skills directory not found", str(skills_dir))

    skills = []
    for path in _markdown_files(skills_dir):
        skill = parse_skill(path.read_text(encoding="utf-8"), str(path))
        log.debug("loader.skill_loaded", skill=skill.name, type=skill.type, path=str(path))
        skills.append(skill)
    return skills


def load_instructions(instructions_dir: Path) -> list[InstructionDocument]:
    """Parse every Markdown document below instructions_dir.

    Paths are recorded relative to instructions_dir with POSIX separators.
    """
    if not instructions_dir.is_dir():
        log.warning("instructions directory not found", path=str(instructions_dir))
        return []

    docs = []
    for path in _markdown_files(instructions_dir):
        rel = path.relative_to(instructions_dir).as_posix()
        doc = parse_instruction(path.read_text(encoding="utf-8"), rel)
        log.debug("loader.instruction_loaded", path=rel, priority=doc.priority)
        docs.append(doc)
    return docs


def load_registry(
    root: Path | None = None,
    skills_dir: Path | None = None,
    instructions_dir: Path | None = None,
) -> SkillRegistry:
    """Build and validate a registry from a guidance directory.

    `root` supplies the default `skills/` and `instructions/` subdirectories;
    explicit directories win. The reference graph is checked before the
    registry is returned, so callers never see dangling or cyclic skills.
    Re-running against unchanged files yields an equal registry.
    """
    if root is None and skills_dir is None:
        from skillreg.config import settings

        root = Path(settings.guidance_dir)
        skills_dir = root / settings.skills_subdir
        instructions_dir = instructions_dir or root / settings.instructions_subdir

    if skills_dir is None:
        skills_dir = root / "skills"
    if instructions_dir is None and root is not None:
        instructions_dir = root / "instructions"

    registry = SkillRegistry()
    for skill in load_skills(skills_dir):
        registry.register_skill(skill)
    if instructions_dir is not None:
        for doc in load_instructions(instructions_dir):
            registry.register_instruction(doc)

    registry.validate()
    log.info(
        "loader.complete",
        skills=len(registry),
        instructions=len(registry.instructions()),
        path=str(skills_dir),
    )
    return registry


def _markdown_files(directory: Path) -> list[Path]:
    return [
        p
        for p in sorted(directory.rglob("*.md"))
        if p.is_file() and p.name.lower() not in IGNORED_FILES
    ]


def _describe(error: ValidationError) -> list[str]:
    described = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "document"
        described.append(f"{field}: {err['msg']}")
    return described
