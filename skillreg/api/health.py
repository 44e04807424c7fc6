from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from skillreg.core.registry import SkillRegistry
from skillreg.dependencies import get_registry

router = APIRouter()


@router.get("/health")
async def health(registry: Annotated[SkillRegistry, Depends(get_registry)]):
    return {
        "status": "ok",
        "skills": len(registry),
        "instructions": len(registry.instructions()),
    }
