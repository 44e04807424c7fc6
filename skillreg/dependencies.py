from __future__ import annotations

from fastapi import HTTPException, Request, status

from skillreg.core.registry import SkillRegistry


def get_registry(request: Request) -> SkillRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Skill registry is not loaded")
    return registry
