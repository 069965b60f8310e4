from fastapi import APIRouter, Depends

from section_planner.api.deps import get_scheduling_policy
from section_planner.api.routes.scheduling import load_context
from section_planner.schemas.io import (
    ConflictParseRequest,
    ConflictParseResponse,
    RosterParseRequest,
    RosterParseResponse,
)
from section_planner.schemas.scheduling import ConflictPair
from section_planner.services.catalog import SchedulingPolicy, parse_conflict_pairs
from section_planner.services.roster_import import parse_roster_rows

router = APIRouter()


@router.post("/roster/parse", response_model=RosterParseResponse)
def parse_roster(
    payload: RosterParseRequest,
    policy: SchedulingPolicy = Depends(get_scheduling_policy),
) -> RosterParseResponse:
    context = load_context(payload.subjects, None, policy)
    students = parse_roster_rows(payload.rows, context)
    return RosterParseResponse(
        students=students,
        total_enrollments=sum(len(student.subjects) for student in students),
    )


@router.post("/conflicts/parse", response_model=ConflictParseResponse)
def parse_conflicts(payload: ConflictParseRequest) -> ConflictParseResponse:
    pairs, errors = parse_conflict_pairs(payload.text)
    return ConflictParseResponse(
        pairs=[ConflictPair(first=first, second=second) for first, second in pairs],
        errors=errors,
    )
