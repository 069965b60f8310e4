from __future__ import annotations

from collections.abc import Mapping
import logging
from time import perf_counter

from section_planner.core.exceptions import PreassignmentConflictError
from section_planner.schemas.catalog import Section
from section_planner.schemas.scheduling import (
    BalancingStrategy,
    ScheduleResult,
    ScheduleStats,
    Student,
    StudentAssignment,
    UnassignedStudentInfo,
)
from section_planner.services.catalog import (
    CatalogContext,
    ConflictIndex,
    build_conflict_index,
    build_sections,
)
from section_planner.services.diagnostics import diagnose_failure
from section_planner.services.preassignment import apply_preassignments, detect_preassignment_conflict
from section_planner.services.search import STRICT, find_valid_assignments, select_best_assignment

logger = logging.getLogger(__name__)


def schedule_remaining(
    students: list[Student],
    sections: dict[str, Section],
    conflict_index: ConflictIndex,
    context: CatalogContext,
    strategy: BalancingStrategy,
    *,
    skip_codes: set[str] | None = None,
    student_code_to_name: Mapping[str, str] | None = None,
) -> tuple[list[UnassignedStudentInfo], int]:
    """Greedily seat each student in input order.

    Each student's search, scoring and commit completes before the next
    student is looked at, so earlier students see emptier sections. Students
    in ``skip_codes`` are left alone; without it, every student carrying
    preassigned sections is assumed to be seated by ``apply_preassignments``.
    """
    if skip_codes is None:
        skip_codes = {student.code for student in students if student.preassigned_sections}
    names = student_code_to_name if student_code_to_name is not None else {s.code: s.name for s in students}
    unassigned: list[UnassignedStudentInfo] = []
    combinations_checked = 0

    for student in students:
        if student.code in skip_codes:
            continue
        subject_ids = context.resolve_subject_ids(student.subjects)
        if not subject_ids:
            logger.debug("Student %s has no configured subjects; skipping", student.code)
            continue

        candidates = find_valid_assignments(subject_ids, student.code, conflict_index, sections, context, STRICT)
        combinations_checked += len(candidates)

        if not candidates:
            diagnosis = diagnose_failure(student.code, subject_ids, conflict_index, sections, context, names)
            logger.info("Student %s unassigned | type=%s", student.code, diagnosis.type.value)
            unassigned.append(diagnosis)
            continue

        section_sizes = {section_id: len(section.students) for section_id, section in sections.items()}
        best = select_best_assignment(candidates, section_sizes, student.preference, context, strategy)
        for section_id in best.values():
            sections[section_id].students.append(student.code)

    return unassigned, combinations_checked


def assemble_result(
    students: list[Student],
    sections: dict[str, Section],
    unassigned: list[UnassignedStudentInfo],
    combinations_checked: int,
) -> ScheduleResult:
    names = {student.code: student.name for student in students}
    courses = {student.code: student.course for student in students}

    sections_by_student: dict[str, list[str]] = {}
    for section_id, section in sections.items():
        for code in section.students:
            sections_by_student.setdefault(code, []).append(section_id)

    student_assignments: dict[str, StudentAssignment] = {}
    for code, section_ids in sections_by_student.items():
        course = courses.get(code)
        # Students without a known course are still seated but get no record.
        if course:
            student_assignments[code] = StudentAssignment(
                code=code,
                name=names.get(code) or "Unknown",
                course=course,
                sections=sorted(section_ids),
            )

    stats = ScheduleStats(
        total_students=len(students),
        total_enrollments=sum(len(student.subjects) for student in students),
        assigned_students=len(sections_by_student),
        unassigned_students_count=len(unassigned),
        combinations_checked=combinations_checked,
    )
    return ScheduleResult(
        sections=sections,
        unassigned_students=unassigned,
        student_assignments=student_assignments,
        student_code_to_name=names,
        stats=stats,
    )


def schedule_students(
    students: list[Student],
    conflict_pairs: list[tuple[str, str]],
    context: CatalogContext,
    strategy: BalancingStrategy,
) -> ScheduleResult:
    started = perf_counter()
    names = {student.code: student.name for student in students}
    preassignments = {
        student.code: list(student.preassigned_sections) for student in students if student.preassigned_sections
    }

    conflict = detect_preassignment_conflict(
        preassignments,
        context,
        names,
        {student.code: list(student.subjects) for student in students},
    )
    if conflict is not None:
        raise PreassignmentConflictError(conflict.model_dump())

    sections = build_sections(context)
    conflict_index = build_conflict_index(conflict_pairs)
    placed = apply_preassignments(sections, preassignments, conflict_index, names)

    unassigned, combinations_checked = schedule_remaining(
        students,
        sections,
        conflict_index,
        context,
        strategy,
        skip_codes=placed,
        student_code_to_name=names,
    )
    result = assemble_result(students, sections, unassigned, combinations_checked)

    logger.info(
        "Scheduling finished | strategy=%s students=%s assigned=%s unassigned=%s combinations=%s elapsed_ms=%.1f",
        strategy,
        result.stats.total_students,
        result.stats.assigned_students,
        result.stats.unassigned_students_count,
        result.stats.combinations_checked,
        (perf_counter() - started) * 1000,
    )
    return result
