from __future__ import annotations

from collections.abc import Mapping
import logging

from section_planner.schemas.catalog import Section, section_id_for
from section_planner.schemas.scheduling import DiagnosisType, SubstitutionSuggestion, UnassignedStudentInfo
from section_planner.services.catalog import CatalogContext, ConflictIndex
from section_planner.services.search import (
    BLOCKS_ONLY,
    IGNORE_CONFLICTS,
    STRICT,
    Assignment,
    find_valid_assignments,
)

logger = logging.getLogger(__name__)


def _fully_booked_subject(
    subject_ids: list[int],
    sections: Mapping[str, Section],
    context: CatalogContext,
) -> int | None:
    for subject_id in subject_ids:
        if subject_id not in context.config:
            continue
        first = sections.get(section_id_for(subject_id, 1))
        second = sections.get(section_id_for(subject_id, 2))
        if first is not None and second is not None and first.is_full and second.is_full:
            return subject_id
    return None


def _identical_block_subjects(subject_ids: list[int], context: CatalogContext) -> list[str]:
    flagged: list[int] = []
    for i, first_id in enumerate(subject_ids):
        for second_id in subject_ids[i + 1:]:
            first = context.config.get(first_id)
            second = context.config.get(second_id)
            if first is None or second is None:
                continue
            if {first.s1_block, first.s2_block} == {second.s1_block, second.s2_block}:
                for subject_id in (first_id, second_id):
                    if subject_id not in flagged:
                        flagged.append(subject_id)
    flagged.sort(key=subject_ids.index)
    return context.subject_names(flagged)


def _common_blocking_students(
    potential_schedules: list[Assignment],
    student_conflicts: set[str],
    sections: Mapping[str, Section],
) -> set[str]:
    blocking_sets: list[set[str]] = []
    for schedule in potential_schedules:
        blocking: set[str] = set()
        for section_id in schedule.values():
            section = sections.get(section_id)
            if section is None:
                continue
            blocking.update(code for code in section.students if code in student_conflicts)
        if blocking:
            blocking_sets.append(blocking)

    if not blocking_sets:
        return set()
    return set.intersection(*blocking_sets)


def suggest_substitution(
    student_code: str,
    subject_ids: list[int],
    conflict_index: ConflictIndex,
    sections: Mapping[str, Section],
    context: CatalogContext,
) -> SubstitutionSuggestion | None:
    """Find the first single-subject swap that makes the student schedulable."""
    alternatives = [subject.id for subject in context.subjects if subject.id not in subject_ids]
    for dropped in subject_ids:
        remaining = [subject_id for subject_id in subject_ids if subject_id != dropped]
        for added in alternatives:
            candidates = find_valid_assignments(
                remaining + [added], student_code, conflict_index, sections, context, STRICT
            )
            if candidates:
                return SubstitutionSuggestion(
                    drop_subject=context.subject_name(dropped),
                    add_subject=context.subject_name(added),
                )
    return None


def diagnose_failure(
    student_code: str,
    subject_ids: list[int],
    conflict_index: ConflictIndex,
    sections: Mapping[str, Section],
    context: CatalogContext,
    student_code_to_name: Mapping[str, str],
) -> UnassignedStudentInfo:
    """Explain why the strict search found nothing for this student.

    Checks run in a fixed order: a subject with both sections full, then an
    intrinsically impossible block layout, then peers who block every otherwise
    open schedule. Anything else is reported as UNKNOWN.
    """
    subject_names = context.subject_names(subject_ids)

    full_subject = _fully_booked_subject(subject_ids, sections, context)
    if full_subject is not None:
        name = context.subject_name(full_subject)
        return UnassignedStudentInfo(
            student_code=student_code,
            type=DiagnosisType.capacity,
            reason=f"Capacity conflict: both sections of '{name}' are full.",
            subjects=subject_names,
            conflicting_subjects=[name],
        )

    structural = find_valid_assignments(subject_ids, student_code, conflict_index, sections, context, BLOCKS_ONLY)
    if not structural:
        conflicting = _identical_block_subjects(subject_ids, context)
        return UnassignedStudentInfo(
            student_code=student_code,
            type=DiagnosisType.schedule,
            reason="Schedule conflict: this combination of subjects cannot fit into the available blocks.",
            subjects=subject_names,
            conflicting_subjects=conflicting or list(subject_names),
        )

    potential = find_valid_assignments(subject_ids, student_code, conflict_index, sections, context, IGNORE_CONFLICTS)
    blockers = _common_blocking_students(potential, conflict_index.get(student_code, set()), sections)
    if blockers:
        ordered = sorted(blockers)
        labels = ", ".join(f"{student_code_to_name.get(code) or 'Unknown'} ({code})" for code in ordered)
        reason = f"Peer conflict: every possible schedule is blocked by a conflict with {labels}."
        suggestion = suggest_substitution(student_code, subject_ids, conflict_index, sections, context)
        if suggestion is not None:
            reason += (
                f" Suggested fix: replacing '{suggestion.drop_subject}' with "
                f"'{suggestion.add_subject}' could resolve the conflict."
            )
        return UnassignedStudentInfo(
            student_code=student_code,
            type=DiagnosisType.conflict,
            reason=reason,
            subjects=subject_names,
            blocking_students=ordered,
            suggestion=suggestion,
        )

    logger.warning("No diagnosis pattern matched for student %s (%d subjects)", student_code, len(subject_ids))
    return UnassignedStudentInfo(
        student_code=student_code,
        type=DiagnosisType.unknown,
        reason="Could not be assigned because of an unavoidable conflict.",
        subjects=subject_names,
    )
