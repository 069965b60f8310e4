from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from section_planner.schemas.catalog import Section, Subject, SubjectConfig


BalancingStrategy = Literal["speed", "equitable"]
TimePreference = Literal["morning", "afternoon"]


class DiagnosisType(str, Enum):
    capacity = "CAPACITY"
    schedule = "SCHEDULE"
    conflict = "CONFLICT"
    unknown = "UNKNOWN"


def normalize_student_code(value: str) -> str:
    return (value or "").strip().upper()


class Student(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    name: str = ""
    course: str | None = None
    subjects: list[str] = Field(default_factory=list)
    preference: TimePreference | None = None
    preassigned_sections: list[str] = Field(default_factory=list)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return normalize_student_code(str(value))

    @field_validator("course", mode="before")
    @classmethod
    def blank_course_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        course = str(value).strip()
        return course or None

    @field_validator("subjects")
    @classmethod
    def dedupe_subjects(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for item in value:
            name = item.strip()
            if name:
                seen.setdefault(name, None)
        return list(seen)

    @field_validator("preassigned_sections")
    @classmethod
    def strip_sections(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()]


class SubstitutionSuggestion(BaseModel):
    drop_subject: str
    add_subject: str


class UnassignedStudentInfo(BaseModel):
    student_code: str
    type: DiagnosisType
    reason: str
    subjects: list[str]
    conflicting_subjects: list[str] = Field(default_factory=list)
    blocking_students: list[str] = Field(default_factory=list)
    suggestion: SubstitutionSuggestion | None = None


class StudentAssignment(BaseModel):
    code: str
    name: str
    course: str
    sections: list[str]


class ScheduleStats(BaseModel):
    total_students: int = 0
    total_enrollments: int = 0
    assigned_students: int = 0
    unassigned_students_count: int = 0
    combinations_checked: int = 0


class ScheduleResult(BaseModel):
    sections: dict[str, Section]
    unassigned_students: list[UnassignedStudentInfo]
    student_assignments: dict[str, StudentAssignment]
    student_code_to_name: dict[str, str]
    stats: ScheduleStats


class PreassignmentConflictInfo(BaseModel):
    student_code: str
    student_name: str
    conflicting_block: int
    conflicting_sections: list[str]
    all_preassigned_sections: list[str]
    enrollments: list[str]


class ConflictPair(BaseModel):
    first: str
    second: str

    @field_validator("first", "second", mode="before")
    @classmethod
    def normalize_codes(cls, value: str) -> str:
        return normalize_student_code(str(value))


class ScheduleRequest(BaseModel):
    subjects: list[Subject] = Field(min_length=1)
    schedule_config: dict[int, SubjectConfig] | None = None
    students: list[Student] = Field(default_factory=list)
    conflict_pairs: list[ConflictPair] = Field(default_factory=list)
    balancing_strategy: BalancingStrategy | None = None

    @model_validator(mode="after")
    def validate_unique_students(self) -> "ScheduleRequest":
        codes = [student.code for student in self.students]
        if len(codes) != len(set(codes)):
            raise ValueError("Student codes must be unique")
        return self


class PreassignmentCheckResponse(BaseModel):
    conflict: PreassignmentConflictInfo | None = None


class OverrideValidation(BaseModel):
    is_valid: bool
    message: str


class ManualOverrideRequest(BaseModel):
    result: ScheduleResult
    student_code: str
    new_sections: list[str] = Field(min_length=1)
    conflict_pairs: list[ConflictPair] = Field(default_factory=list)

    @field_validator("student_code", mode="before")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return normalize_student_code(str(value))
