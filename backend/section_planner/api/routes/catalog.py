from fastapi import APIRouter, Depends

from section_planner.core.config import Settings, get_settings
from section_planner.schemas.catalog import DEFAULT_SUBJECTS, Subject

router = APIRouter()


@router.get("/default", response_model=list[Subject])
def default_catalog() -> list[Subject]:
    return DEFAULT_SUBJECTS


@router.get("/policy")
def scheduling_policy(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "default_balancing_strategy": settings.default_balancing_strategy,
        "afternoon_block": settings.afternoon_block,
        "morning_mismatch_penalty": settings.morning_mismatch_penalty,
        "afternoon_mismatch_penalty": settings.afternoon_mismatch_penalty,
    }
