from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from section_planner.api.deps import get_scheduling_policy
from section_planner.core.config import Settings, get_settings
from section_planner.core.exceptions import ConfigurationError
from section_planner.schemas.catalog import Subject, SubjectConfig
from section_planner.schemas.scheduling import (
    ManualOverrideRequest,
    OverrideValidation,
    PreassignmentCheckResponse,
    ScheduleRequest,
    ScheduleResult,
)
from section_planner.services.catalog import (
    CatalogContext,
    SchedulingPolicy,
    build_catalog_context,
    build_conflict_index,
)
from section_planner.services.overrides import apply_manual_override, validate_manual_override
from section_planner.services.preassignment import detect_preassignment_conflict
from section_planner.services.scheduler import schedule_students

router = APIRouter()
logger = logging.getLogger(__name__)


def load_context(
    subjects: list[Subject],
    config: dict[int, SubjectConfig] | None,
    policy: SchedulingPolicy,
) -> CatalogContext:
    try:
        return build_catalog_context(subjects, config, policy=policy)
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc


@router.post("/preassignments/check", response_model=PreassignmentCheckResponse)
def check_preassignments(
    payload: ScheduleRequest,
    policy: SchedulingPolicy = Depends(get_scheduling_policy),
) -> PreassignmentCheckResponse:
    context = load_context(payload.subjects, payload.schedule_config, policy)
    preassignments = {
        student.code: student.preassigned_sections for student in payload.students if student.preassigned_sections
    }
    conflict = detect_preassignment_conflict(
        preassignments,
        context,
        {student.code: student.name for student in payload.students},
        {student.code: student.subjects for student in payload.students},
    )
    return PreassignmentCheckResponse(conflict=conflict)


@router.post("/run", response_model=ScheduleResult)
def run_schedule(
    payload: ScheduleRequest,
    settings: Settings = Depends(get_settings),
    policy: SchedulingPolicy = Depends(get_scheduling_policy),
) -> ScheduleResult:
    context = load_context(payload.subjects, payload.schedule_config, policy)
    strategy = payload.balancing_strategy or settings.default_balancing_strategy
    logger.info(
        "Schedule run requested | students=%s subjects=%s conflicts=%s strategy=%s",
        len(payload.students),
        len(payload.subjects),
        len(payload.conflict_pairs),
        strategy,
    )
    return schedule_students(
        payload.students,
        [(pair.first, pair.second) for pair in payload.conflict_pairs],
        context,
        strategy,
    )


@router.post("/overrides/validate", response_model=OverrideValidation)
def validate_override(payload: ManualOverrideRequest) -> OverrideValidation:
    record = payload.result.student_assignments.get(payload.student_code)
    return validate_manual_override(
        payload.student_code,
        payload.new_sections,
        payload.result.sections,
        build_conflict_index((pair.first, pair.second) for pair in payload.conflict_pairs),
        current_section_ids=record.sections if record else None,
    )


@router.post("/overrides/apply", response_model=ScheduleResult)
def apply_override(payload: ManualOverrideRequest) -> ScheduleResult:
    record = payload.result.student_assignments.get(payload.student_code)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student {payload.student_code} has no assignment to edit",
        )
    validation = validate_manual_override(
        payload.student_code,
        payload.new_sections,
        payload.result.sections,
        build_conflict_index((pair.first, pair.second) for pair in payload.conflict_pairs),
        current_section_ids=record.sections,
    )
    if not validation.is_valid:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=validation.message)
    return apply_manual_override(payload.result, payload.student_code, payload.new_sections)
