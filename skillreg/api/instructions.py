from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from skillreg.core.errors import MissingReferenceError
from skillreg.core.registry import SkillRegistry
from skillreg.dependencies import get_registry
from skillreg.schemas.document import InstructionDocument, InstructionSummary

router = APIRouter()


@router.get("", response_model=list[InstructionSummary])
async def list_instructions(
    registry: Annotated[SkillRegistry, Depends(get_registry)],
    agent: str | None = Query(default=None),
    skill: str | None = Query(default=None),
):
    """Instructions applicable to an agent and/or skill, highest priority first."""
    try:
        docs = registry.instructions_for(agent=agent, skill=skill)
    except MissingReferenceError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    return [InstructionSummary.of(d) for d in docs]


@router.get("/{path:path}", response_model=InstructionDocument, response_model_by_alias=False)
async def get_instruction(path: str, registry: Annotated[SkillRegistry, Depends(get_registry)]):
    doc = registry.instruction(path)
    if doc is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"unknown instruction {path!r}")
    return doc
