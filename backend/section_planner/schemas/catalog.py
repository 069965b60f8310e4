from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


class SubjectConfig(BaseModel):
    s1_block: int = Field(ge=1)
    s2_block: int = Field(ge=1)
    capacity: int = Field(ge=1)

    @model_validator(mode="after")
    def validate_distinct_blocks(self) -> "SubjectConfig":
        if self.s1_block == self.s2_block:
            raise ValueError("s1_block and s2_block must be different")
        return self


class Subject(SubjectConfig):
    id: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Subject name cannot be blank")
        return name

    def to_config(self) -> SubjectConfig:
        return SubjectConfig(s1_block=self.s1_block, s2_block=self.s2_block, capacity=self.capacity)


ScheduleConfig = dict[int, SubjectConfig]


class Section(BaseModel):
    id: str
    subject_id: int
    subject_name: str
    slot: int = Field(ge=1, le=2)
    block: int
    capacity: int
    students: list[str] = Field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return len(self.students) >= self.capacity


def section_id_for(subject_id: int, slot: int) -> str:
    return f"{subject_id}.{slot}"


def parse_section_id(section_id: str) -> tuple[int, int] | None:
    """Split ``"4.2"`` into ``(4, 2)``; returns None for malformed ids."""
    subject_part, _, slot_part = section_id.strip().partition(".")
    if not subject_part.isdigit() or slot_part not in {"1", "2"}:
        return None
    return int(subject_part), int(slot_part)


def config_from_subjects(subjects: list[Subject]) -> ScheduleConfig:
    return {subject.id: subject.to_config() for subject in subjects}


DEFAULT_SUBJECTS: list[Subject] = [
    Subject(id=1, name="3EM PROBAB. Y ESTAD.", capacity=35, s1_block=1, s2_block=2),
    Subject(id=2, name="3EM LECTURA Y ESCRITURA", capacity=35, s1_block=1, s2_block=2),
    Subject(id=3, name="3EM GEOG. TERRITORIO", capacity=35, s1_block=1, s2_block=3),
    Subject(id=4, name="3EM QUIMICA", capacity=35, s1_block=1, s2_block=3),
    Subject(id=5, name="3EM BIOL. ECOSISTEMAS", capacity=35, s1_block=2, s2_block=3),
    Subject(id=6, name="3EM PROM. ESTILOS", capacity=35, s1_block=2, s2_block=3),
]
