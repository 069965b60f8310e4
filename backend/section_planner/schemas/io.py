from __future__ import annotations

from pydantic import BaseModel, Field

from section_planner.schemas.catalog import Subject
from section_planner.schemas.scheduling import ConflictPair, ScheduleResult, Student


class RosterParseRequest(BaseModel):
    subjects: list[Subject] = Field(min_length=1)
    rows: list[list[str]] = Field(min_length=1)


class RosterParseResponse(BaseModel):
    students: list[Student]
    total_enrollments: int


class ConflictParseRequest(BaseModel):
    text: str = Field(default="", max_length=200_000)


class ConflictParseResponse(BaseModel):
    pairs: list[ConflictPair]
    errors: list[str]


class ExportRequest(BaseModel):
    subjects: list[Subject] = Field(min_length=1)
    result: ScheduleResult
