from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from skillreg.core.errors import CycleError, MissingReferenceError
from skillreg.core.registry import SkillRegistry
from skillreg.core.resolver import build_context, resolve, resolve_requirements
from skillreg.dependencies import get_registry
from skillreg.schemas.document import (
    ResolutionResponse,
    SkillDocument,
    SkillSummary,
    SkillType,
)

log = structlog.get_logger()

router = APIRouter()

Registry = Annotated[SkillRegistry, Depends(get_registry)]


@router.get("", response_model=list[SkillSummary])
async def list_skills(
    registry: Registry,
    type: SkillType | None = Query(default=None),
    category: str | None = Query(default=None),
):
    return [SkillSummary.of(s) for s in registry.skills(type=type, category=category)]


@router.get("/{identifier}", response_model=SkillDocument, response_model_by_alias=False)
async def get_skill(identifier: str, registry: Registry):
    try:
        return registry.get(identifier)
    except MissingReferenceError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))


@router.get("/{identifier}/resolve", response_model=ResolutionResponse)
async def resolve_skill(identifier: str, registry: Registry):
    """Atomic skills the given skill is composed of, in declared order."""
    try:
        skill = registry.get(identifier)
        atoms = resolve(registry, skill.name)
    except MissingReferenceError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except CycleError as e:
        log.error("skills.resolve.cycle", skill=identifier, path=e.path)
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return ResolutionResponse(skill=skill.name, skills=[s.name for s in atoms])


@router.get("/{identifier}/requirements", response_model=ResolutionResponse)
async def skill_requirements(identifier: str, registry: Registry):
    try:
        skill = registry.get(identifier)
        required = resolve_requirements(registry, skill.name)
    except MissingReferenceError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except CycleError as e:
        log.error("skills.requirements.cycle", skill=identifier, path=e.path)
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return ResolutionResponse(skill=skill.name, skills=[s.name for s in required])


@router.get("/{identifier}/context", response_class=PlainTextResponse)
async def skill_context(
    identifier: str,
    registry: Registry,
    agent: str | None = Query(default=None),
):
    """Markdown bundle of instructions and skills to load for this skill."""
    try:
        body = build_context(registry, identifier, agent=agent)
    except MissingReferenceError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except CycleError as e:
        log.error("skills.context.cycle", skill=identifier, path=e.path)
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return PlainTextResponse(body, media_type="text/markdown")
