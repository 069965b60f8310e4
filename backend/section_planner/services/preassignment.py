from __future__ import annotations

from collections.abc import Mapping
import logging

from section_planner.core.exceptions import PreassignmentError, PreassignmentErrorKind
from section_planner.schemas.catalog import Section
from section_planner.schemas.scheduling import PreassignmentConflictInfo
from section_planner.services.catalog import CatalogContext, ConflictIndex

logger = logging.getLogger(__name__)


def _label(code: str, names: Mapping[str, str]) -> str:
    return f"{names.get(code) or 'Unknown'} ({code})"


def detect_preassignment_conflict(
    preassignments: Mapping[str, list[str]],
    context: CatalogContext,
    student_code_to_name: Mapping[str, str] | None = None,
    enrollments: Mapping[str, list[str]] | None = None,
) -> PreassignmentConflictInfo | None:
    names = student_code_to_name or {}
    enrolled = enrollments or {}
    for student_code, section_ids in preassignments.items():
        by_block: dict[int, list[str]] = {}
        for section_id in section_ids:
            block = context.block_for_section(section_id)
            if block is None:
                continue
            by_block.setdefault(block, []).append(section_id)

        for block, colliding in by_block.items():
            if len(colliding) > 1:
                return PreassignmentConflictInfo(
                    student_code=student_code,
                    student_name=names.get(student_code) or "Unknown",
                    conflicting_block=block,
                    conflicting_sections=colliding,
                    all_preassigned_sections=list(section_ids),
                    enrollments=list(enrolled.get(student_code, [])),
                )
    return None


def apply_preassignments(
    sections: dict[str, Section],
    preassignments: Mapping[str, list[str]],
    conflict_index: ConflictIndex,
    student_code_to_name: Mapping[str, str] | None = None,
) -> set[str]:
    """Seat students with fixed sections before the search runs.

    Capacity and unknown ids are checked while placing; peer conflicts are
    checked in a second pass once every fixed student is seated. Returns the
    set of placed student codes.
    """
    names = student_code_to_name or {}
    placed: set[str] = set()

    for student_code, section_ids in preassignments.items():
        for section_id in section_ids:
            section = sections.get(section_id)
            if section is None:
                raise PreassignmentError(
                    f"Student {_label(student_code, names)} has an invalid preassigned section "
                    f"'{section_id}' that does not exist.",
                    PreassignmentErrorKind.unknown_section,
                    details={"student_code": student_code, "section_id": section_id},
                )
            if section.is_full:
                raise PreassignmentError(
                    f"Cannot preassign student {_label(student_code, names)} to section {section_id} "
                    "because it is full.",
                    PreassignmentErrorKind.capacity_full,
                    details={"student_code": student_code, "section_id": section_id},
                )
            section.students.append(student_code)
        placed.add(student_code)

    for student_code, section_ids in preassignments.items():
        student_conflicts = conflict_index.get(student_code, set())
        if not student_conflicts:
            continue
        for section_id in section_ids:
            for other_code in sections[section_id].students:
                if other_code != student_code and other_code in student_conflicts:
                    raise PreassignmentError(
                        f"Peer conflict in preassigned data: {_label(student_code, names)} and "
                        f"{_label(other_code, names)} cannot share section {section_id}.",
                        PreassignmentErrorKind.conflict,
                        details={
                            "student_code": student_code,
                            "other_student_code": other_code,
                            "section_id": section_id,
                        },
                    )

    logger.debug("Placed %d preassigned students", len(placed))
    return placed
