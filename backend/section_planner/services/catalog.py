from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging

from section_planner.core.config import Settings
from section_planner.core.exceptions import ConfigurationError
from section_planner.schemas.catalog import (
    ScheduleConfig,
    Section,
    Subject,
    SubjectConfig,
    config_from_subjects,
    parse_section_id,
    section_id_for,
)
from section_planner.schemas.scheduling import normalize_student_code

logger = logging.getLogger(__name__)

ConflictIndex = dict[str, set[str]]


@dataclass(frozen=True)
class SchedulingPolicy:
    afternoon_block: int = 3
    morning_mismatch_penalty: int = 10
    afternoon_mismatch_penalty: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingPolicy":
        return cls(
            afternoon_block=settings.afternoon_block,
            morning_mismatch_penalty=settings.morning_mismatch_penalty,
            afternoon_mismatch_penalty=settings.afternoon_mismatch_penalty,
        )


@dataclass(frozen=True)
class CatalogContext:
    """Immutable view of the subject catalog shared by every engine operation."""

    subjects: tuple[Subject, ...]
    config: Mapping[int, SubjectConfig]
    policy: SchedulingPolicy = field(default_factory=SchedulingPolicy)
    by_id: Mapping[int, Subject] = field(init=False)
    by_name: Mapping[str, Subject] = field(init=False)

    def __post_init__(self) -> None:
        by_id: dict[int, Subject] = {}
        by_name: dict[str, Subject] = {}
        for subject in self.subjects:
            if subject.id in by_id:
                raise ConfigurationError(f"Duplicate subject id {subject.id}")
            if subject.name in by_name:
                raise ConfigurationError(f"Duplicate subject name '{subject.name}'")
            by_id[subject.id] = subject
            by_name[subject.name] = subject
        object.__setattr__(self, "by_id", by_id)
        object.__setattr__(self, "by_name", by_name)

    def subject_name(self, subject_id: int) -> str:
        subject = self.by_id.get(subject_id)
        return subject.name if subject else f"Unknown subject id {subject_id}"

    def subject_names(self, subject_ids: Iterable[int]) -> list[str]:
        return [self.subject_name(subject_id) for subject_id in subject_ids]

    def resolve_subject_ids(self, names: Iterable[str]) -> list[int]:
        """Map subject names to ids in order, dropping duplicates and unknown names."""
        resolved: list[int] = []
        for name in names:
            subject = self.by_name.get(name.strip())
            if subject is not None and subject.id not in resolved:
                resolved.append(subject.id)
        return resolved

    def block_for_slot(self, subject_id: int, slot: int) -> int | None:
        config = self.config.get(subject_id)
        if config is None:
            return None
        return config.s1_block if slot == 1 else config.s2_block

    def block_for_section(self, section_id: str) -> int | None:
        parsed = parse_section_id(section_id)
        if parsed is None:
            return None
        return self.block_for_slot(*parsed)

    def is_afternoon(self, block: int) -> bool:
        return block == self.policy.afternoon_block


def build_catalog_context(
    subjects: list[Subject],
    config: ScheduleConfig | None = None,
    *,
    policy: SchedulingPolicy | None = None,
) -> CatalogContext:
    resolved_config = dict(config) if config is not None else config_from_subjects(subjects)
    return CatalogContext(
        subjects=tuple(subjects),
        config=resolved_config,
        policy=policy or SchedulingPolicy(),
    )


def build_sections(context: CatalogContext) -> dict[str, Section]:
    sections: dict[str, Section] = {}
    for subject in context.subjects:
        config = context.config.get(subject.id)
        if config is None:
            logger.debug("Subject %s has no section config; no sections created", subject.id)
            continue
        if config.s1_block == config.s2_block:
            raise ConfigurationError(
                f"Subject '{subject.name}' places both sections on block {config.s1_block}"
            )
        for slot, block in ((1, config.s1_block), (2, config.s2_block)):
            section_id = section_id_for(subject.id, slot)
            sections[section_id] = Section(
                id=section_id,
                subject_id=subject.id,
                subject_name=subject.name,
                slot=slot,
                block=block,
                capacity=config.capacity,
            )
    return sections


def build_conflict_index(pairs: Iterable[tuple[str, str]]) -> ConflictIndex:
    index: ConflictIndex = {}
    for first, second in pairs:
        a = normalize_student_code(first)
        b = normalize_student_code(second)
        if not a or not b:
            continue
        index.setdefault(a, set()).add(b)
        index.setdefault(b, set()).add(a)
    return index


def parse_conflict_pairs(text: str) -> tuple[list[tuple[str, str]], list[str]]:
    """Parse ``CODE_A, CODE_B`` lines.

    A trailing line holding a single code is treated as still being typed and is
    ignored rather than reported.
    """
    pairs: list[tuple[str, str]] = []
    errors: list[str] = []
    lines = text.split("\n")
    for index, line in enumerate(lines):
        codes = [normalize_student_code(code) for code in line.split(",")]
        codes = [code for code in codes if code]
        if not codes:
            continue
        is_last_line = index == len(lines) - 1
        if len(codes) == 2:
            pairs.append((codes[0], codes[1]))
        elif len(codes) > 2:
            errors.append(f"Line {index + 1}: expected 2 codes, found {len(codes)}.")
        elif not is_last_line:
            errors.append(f"Line {index + 1}: expected 2 codes, found 1.")
    return pairs, errors
