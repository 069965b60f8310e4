from section_planner.services.catalog import (
    SchedulingPolicy,
    build_catalog_context,
    build_conflict_index,
    build_sections,
)
from section_planner.services.search import (
    BLOCKS_ONLY,
    IGNORE_CONFLICTS,
    assignment_cost,
    find_valid_assignments,
    select_best_assignment,
)
from tests.factories import make_subject


def test_enumerates_every_combination_in_slot_order(three_block_context):
    sections = build_sections(three_block_context)

    found = find_valid_assignments([1, 2], "S1", {}, sections, three_block_context)

    assert found == [
        {1: "1.1", 2: "2.2"},
        {1: "1.2", 2: "2.1"},
        {1: "1.2", 2: "2.2"},
    ]


def test_never_reuses_a_block(three_block_context):
    sections = build_sections(three_block_context)

    found = find_valid_assignments([1, 2, 3], "S1", {}, sections, three_block_context)

    assert found == [
        {1: "1.1", 2: "2.2", 3: "3.1"},
        {1: "1.2", 2: "2.1", 3: "3.2"},
    ]
    for assignment in found:
        blocks = [sections[section_id].block for section_id in assignment.values()]
        assert len(blocks) == len(set(blocks))


def test_full_sections_are_skipped():
    context = build_catalog_context([make_subject(1, 1, 2, capacity=1), make_subject(2, 1, 3, capacity=1)])
    sections = build_sections(context)
    sections["1.1"].students.append("OTHER")

    found = find_valid_assignments([1, 2], "S1", {}, sections, context)

    assert found == [{1: "1.2", 2: "2.1"}, {1: "1.2", 2: "2.2"}]


def test_conflicting_occupants_block_a_section(three_block_context):
    sections = build_sections(three_block_context)
    sections["2.2"].students.append("B")
    conflicts = build_conflict_index([("A", "B")])

    assert find_valid_assignments([1, 2], "A", conflicts, sections, three_block_context) == [{1: "1.2", 2: "2.1"}]
    # B's conflict set is irrelevant for a third student
    assert len(find_valid_assignments([1, 2], "C", conflicts, sections, three_block_context)) == 3


def test_relaxed_capabilities_share_block_semantics():
    context = build_catalog_context([make_subject(1, 1, 2, capacity=1), make_subject(2, 1, 3, capacity=1)])
    sections = build_sections(context)
    sections["1.2"].students.append("B")
    sections["2.1"].students.append("X")
    conflicts = build_conflict_index([("A", "B")])

    strict = find_valid_assignments([1, 2], "A", conflicts, sections, context)
    no_conflicts = find_valid_assignments([1, 2], "A", conflicts, sections, context, IGNORE_CONFLICTS)
    blocks_only = find_valid_assignments([1, 2], "A", conflicts, sections, context, BLOCKS_ONLY)

    assert strict == [{1: "1.1", 2: "2.2"}]
    assert no_conflicts == [{1: "1.1", 2: "2.2"}]
    assert blocks_only == [
        {1: "1.1", 2: "2.2"},
        {1: "1.2", 2: "2.1"},
        {1: "1.2", 2: "2.2"},
    ]


def test_subject_without_config_yields_nothing(three_block_context):
    sections = build_sections(three_block_context)

    assert find_valid_assignments([1, 99], "S1", {}, sections, three_block_context) == []


def test_missing_section_is_skipped(three_block_context):
    sections = build_sections(three_block_context)
    del sections["1.1"]

    assert find_valid_assignments([1], "S1", {}, sections, three_block_context) == [{1: "1.2"}]


def test_search_is_repeatable(three_block_context):
    sections = build_sections(three_block_context)
    sections["3.1"].students.extend(["X", "Y"])
    conflicts = build_conflict_index([("S1", "X")])

    first = find_valid_assignments([1, 2, 3], "S1", conflicts, sections, three_block_context)
    second = find_valid_assignments([1, 2, 3], "S1", conflicts, sections, three_block_context)

    assert first == second
    assert sections["3.1"].students == ["X", "Y"]


def test_speed_cost_is_linear_and_equitable_is_quadratic(three_block_context):
    sizes = {"1.1": 3, "2.2": 4}
    assignment = {1: "1.1", 2: "2.2"}

    assert assignment_cost(assignment, sizes, None, three_block_context, "speed") == 7
    assert assignment_cost(assignment, sizes, None, three_block_context, "equitable") == 25


def test_preference_penalties_are_asymmetric(three_block_context):
    # blocks 1 (morning) and 3 (afternoon)
    assignment = {1: "1.1", 2: "2.2"}

    assert assignment_cost(assignment, {}, "morning", three_block_context, "speed") == 10
    assert assignment_cost(assignment, {}, "afternoon", three_block_context, "speed") == 5
    assert assignment_cost(assignment, {}, None, three_block_context, "speed") == 0


def test_afternoon_block_follows_policy(three_block_subjects):
    context = build_catalog_context(three_block_subjects, policy=SchedulingPolicy(afternoon_block=1))

    assert assignment_cost({1: "1.1"}, {}, "morning", context, "speed") == 10
    assert assignment_cost({1: "1.2"}, {}, "morning", context, "speed") == 0


def test_ties_keep_enumeration_order(three_block_context):
    candidates = [{1: "1.1"}, {1: "1.2"}]

    best = select_best_assignment(candidates, {}, None, three_block_context, "speed")

    assert best == {1: "1.1"}


def test_equitable_breaks_linear_ties_toward_balance():
    context = build_catalog_context([make_subject(1, 1, 2, name="P"), make_subject(2, 2, 1, name="Q")])
    sizes = {"1.1": 6, "2.1": 0, "1.2": 3, "2.2": 3}
    sections = build_sections(context)
    candidates = find_valid_assignments([1, 2], "S1", {}, sections, context)

    assert candidates == [{1: "1.1", 2: "2.1"}, {1: "1.2", 2: "2.2"}]
    assert select_best_assignment(candidates, sizes, None, context, "speed") == {1: "1.1", 2: "2.1"}
    assert select_best_assignment(candidates, sizes, None, context, "equitable") == {1: "1.2", 2: "2.2"}
