from __future__ import annotations

from collections.abc import Mapping
import logging

from section_planner.schemas.catalog import Section, parse_section_id
from section_planner.schemas.scheduling import OverrideValidation, ScheduleResult
from section_planner.services.catalog import ConflictIndex

logger = logging.getLogger(__name__)


def validate_manual_override(
    student_code: str,
    new_section_ids: list[str],
    sections: Mapping[str, Section],
    conflict_index: ConflictIndex,
    current_section_ids: list[str] | None = None,
) -> OverrideValidation:
    """Check a hand-picked set of sections for one student.

    With ``current_section_ids`` the new sections must cover exactly the
    subjects of the student's current assignment, one section each.
    """
    if current_section_ids is not None and len(new_section_ids) != len(current_section_ids):
        return OverrideValidation(
            is_valid=False,
            message=f"Expected {len(current_section_ids)} sections, got {len(new_section_ids)}.",
        )

    unknown = [section_id for section_id in new_section_ids if section_id not in sections]
    if unknown:
        return OverrideValidation(is_valid=False, message=f"Unknown section(s): {', '.join(unknown)}.")

    chosen_subjects: set[int] = set()
    for section_id in new_section_ids:
        section = sections[section_id]
        if section.subject_id in chosen_subjects:
            return OverrideValidation(
                is_valid=False,
                message=f"Subject '{section.subject_name}' is given more than one section.",
            )
        chosen_subjects.add(section.subject_id)

    if current_section_ids is not None:
        for section_id in current_section_ids:
            parsed = parse_section_id(section_id)
            if parsed is None or parsed[0] in chosen_subjects:
                continue
            current = sections.get(section_id)
            label = current.subject_name if current is not None else f"subject id {parsed[0]}"
            return OverrideValidation(is_valid=False, message=f"No section selected for '{label}'.")

    used_blocks: set[int] = set()
    for section_id in new_section_ids:
        block = sections[section_id].block
        if block in used_blocks:
            return OverrideValidation(
                is_valid=False,
                message=f"Schedule conflict: two subjects share block {block}.",
            )
        used_blocks.add(block)

    student_conflicts = conflict_index.get(student_code, set())
    for section_id in new_section_ids:
        section = sections[section_id]
        others = [code for code in section.students if code != student_code]
        if len(others) >= section.capacity:
            return OverrideValidation(
                is_valid=False,
                message=f"Section {section_id} is full (capacity: {section.capacity}).",
            )
        if any(code in student_conflicts for code in others):
            return OverrideValidation(is_valid=False, message=f"Peer conflict in section {section_id}.")

    return OverrideValidation(is_valid=True, message="The new assignment is valid.")


def apply_manual_override(result: ScheduleResult, student_code: str, new_section_ids: list[str]) -> ScheduleResult:
    """Return a copy of ``result`` with the student moved to ``new_section_ids``.

    The input result is left untouched so callers can keep it for undo.
    """
    record = result.student_assignments.get(student_code)
    if record is None:
        logger.warning("Manual override ignored: student %s has no assignment record", student_code)
        return result

    updated = result.model_copy(deep=True)
    for section_id in record.sections:
        section = updated.sections.get(section_id)
        if section is not None:
            section.students = [code for code in section.students if code != student_code]
    for section_id in new_section_ids:
        section = updated.sections.get(section_id)
        if section is not None:
            section.students.append(student_code)

    updated.student_assignments[student_code] = record.model_copy(update={"sections": sorted(new_section_ids)})
    logger.info("Manual override applied | student=%s sections=%s", student_code, ",".join(sorted(new_section_ids)))
    return updated
