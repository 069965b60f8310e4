from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from section_planner.schemas.catalog import Section, section_id_for
from section_planner.schemas.scheduling import BalancingStrategy, TimePreference
from section_planner.services.catalog import CatalogContext, ConflictIndex

Assignment = dict[int, str]


@dataclass(frozen=True)
class SearchCapabilities:
    enforce_capacity: bool = True
    enforce_conflicts: bool = True


STRICT = SearchCapabilities()
IGNORE_CONFLICTS = SearchCapabilities(enforce_capacity=True, enforce_conflicts=False)
BLOCKS_ONLY = SearchCapabilities(enforce_capacity=False, enforce_conflicts=False)


def find_valid_assignments(
    subject_ids: list[int],
    student_code: str,
    conflict_index: ConflictIndex,
    sections: Mapping[str, Section],
    context: CatalogContext,
    capabilities: SearchCapabilities = STRICT,
) -> list[Assignment]:
    """Enumerate every section combination for ``subject_ids``.

    Subjects are expanded in list order and slot 1 is always tried before slot 2,
    so the output order is stable for identical inputs. Block uniqueness is
    always enforced; capacity and peer conflicts follow ``capabilities``.
    """
    results: list[Assignment] = []
    student_conflicts = conflict_index.get(student_code, set()) if capabilities.enforce_conflicts else set()
    current: Assignment = {}
    used_blocks: set[int] = set()

    def slot_is_open(section: Section) -> bool:
        if capabilities.enforce_capacity and len(section.students) >= section.capacity:
            return False
        if student_conflicts and any(occupant in student_conflicts for occupant in section.students):
            return False
        return True

    def backtrack(position: int) -> None:
        if position == len(subject_ids):
            results.append(dict(current))
            return

        subject_id = subject_ids[position]
        config = context.config.get(subject_id)
        if config is None:
            return

        for slot, block in ((1, config.s1_block), (2, config.s2_block)):
            if block in used_blocks:
                continue
            section = sections.get(section_id_for(subject_id, slot))
            if section is None or not slot_is_open(section):
                continue
            current[subject_id] = section.id
            used_blocks.add(block)
            backtrack(position + 1)
            used_blocks.discard(block)
            del current[subject_id]

    backtrack(0)
    return results


def assignment_cost(
    assignment: Assignment,
    section_sizes: Mapping[str, int],
    preference: TimePreference | None,
    context: CatalogContext,
    strategy: BalancingStrategy,
) -> int:
    if strategy == "equitable":
        cost = sum(section_sizes.get(section_id, 0) ** 2 for section_id in assignment.values())
    else:
        cost = sum(section_sizes.get(section_id, 0) for section_id in assignment.values())

    if preference is None:
        return cost

    policy = context.policy
    for section_id in assignment.values():
        block = context.block_for_section(section_id)
        if block is None:
            continue
        afternoon = context.is_afternoon(block)
        if preference == "morning" and afternoon:
            cost += policy.morning_mismatch_penalty
        elif preference == "afternoon" and not afternoon:
            cost += policy.afternoon_mismatch_penalty
    return cost


def select_best_assignment(
    candidates: list[Assignment],
    section_sizes: Mapping[str, int],
    preference: TimePreference | None,
    context: CatalogContext,
    strategy: BalancingStrategy,
) -> Assignment:
    """Return the cheapest candidate; ties keep the earliest enumerated one."""
    best = candidates[0]
    best_cost = assignment_cost(best, section_sizes, preference, context, strategy)
    for candidate in candidates[1:]:
        cost = assignment_cost(candidate, section_sizes, preference, context, strategy)
        if cost < best_cost:
            best, best_cost = candidate, cost
    return best
