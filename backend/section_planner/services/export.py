from __future__ import annotations

import pandas as pd

from section_planner.schemas.catalog import Subject
from section_planner.schemas.scheduling import ScheduleResult

EXPORT_KINDS = ("assignments", "unassigned", "sections")


def assignments_frame(result: ScheduleResult, subjects: list[Subject]) -> pd.DataFrame:
    """One row per assigned student, one column per subject holding the section id."""
    subject_columns = [subject.name for subject in subjects]
    rows: list[dict[str, str]] = []
    for record in result.student_assignments.values():
        row = {"Code": record.code, "Name": record.name, "Course": record.course}
        for section_id in record.sections:
            section = result.sections.get(section_id)
            if section is not None:
                row[section.subject_name] = section_id
        rows.append(row)
    frame = pd.DataFrame(rows, columns=["Code", "Name", "Course", *subject_columns])
    return frame.fillna("")


def unassigned_frame(result: ScheduleResult) -> pd.DataFrame:
    rows = [
        {
            "Code": info.student_code,
            "Name": result.student_code_to_name.get(info.student_code, ""),
            "Type": info.type.value,
            "Reason": info.reason,
            "Enrolled Subjects": "; ".join(info.subjects),
        }
        for info in result.unassigned_students
    ]
    return pd.DataFrame(rows, columns=["Code", "Name", "Type", "Reason", "Enrolled Subjects"])


def sections_frame(result: ScheduleResult) -> pd.DataFrame:
    rows: list[dict[str, object]] = []
    for section_id in sorted(result.sections):
        section = result.sections[section_id]
        members = sorted(
            section.students,
            key=lambda code: (result.student_code_to_name.get(code) or code).lower(),
        )
        for code in members:
            record = result.student_assignments.get(code)
            rows.append(
                {
                    "Section": section_id,
                    "Subject": section.subject_name,
                    "Block": section.block,
                    "Code": code,
                    "Name": result.student_code_to_name.get(code, ""),
                    "Course": record.course if record else "",
                }
            )
    return pd.DataFrame(rows, columns=["Section", "Subject", "Block", "Code", "Name", "Course"])


def export_csv(kind: str, result: ScheduleResult, subjects: list[Subject]) -> str:
    if kind == "assignments":
        frame = assignments_frame(result, subjects)
    elif kind == "unassigned":
        frame = unassigned_frame(result)
    elif kind == "sections":
        frame = sections_frame(result)
    else:
        raise ValueError(f"Unsupported export kind '{kind}'")
    return frame.to_csv(index=False)
