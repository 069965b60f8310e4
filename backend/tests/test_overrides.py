import pytest

from section_planner.services.catalog import build_catalog_context, build_conflict_index
from section_planner.services.overrides import apply_manual_override, validate_manual_override
from section_planner.services.scheduler import schedule_students
from tests.factories import make_student, make_subject


@pytest.fixture
def result():
    context = build_catalog_context(
        [
            make_subject(1, 1, 2, capacity=2, name="Math"),
            make_subject(2, 1, 3, capacity=2, name="History"),
            make_subject(3, 2, 3, capacity=2, name="Biology"),
        ]
    )
    students = [
        make_student("A", ["Math", "History"]),
        make_student("B", ["Math"]),
        make_student("C", ["Math"]),
    ]
    return schedule_students(students, [], context, "speed")


def test_seed_assignments(result):
    assert result.student_assignments["A"].sections == ["1.1", "2.2"]
    assert result.sections["1.1"].students == ["A", "C"]
    assert result.sections["1.2"].students == ["B"]


def test_valid_move(result):
    outcome = validate_manual_override("A", ["1.2", "2.1"], result.sections, {})

    assert outcome.is_valid


def test_full_section_is_rejected(result):
    outcome = validate_manual_override("B", ["1.1"], result.sections, {})

    assert not outcome.is_valid
    assert outcome.message == "Section 1.1 is full (capacity: 2)."


def test_student_does_not_count_against_own_section(result):
    outcome = validate_manual_override("A", ["1.1", "2.2"], result.sections, {}, current_section_ids=["1.1", "2.2"])

    assert outcome.is_valid
    assert outcome.message == "The new assignment is valid."


def test_wrong_section_count_is_rejected(result):
    outcome = validate_manual_override("A", ["1.1"], result.sections, {}, current_section_ids=["1.1", "2.2"])

    assert not outcome.is_valid
    assert outcome.message == "Expected 2 sections, got 1."


def test_unknown_sections_are_rejected(result):
    outcome = validate_manual_override("A", ["1.1", "9.9"], result.sections, {})

    assert not outcome.is_valid
    assert "9.9" in outcome.message


def test_two_sections_of_one_subject_are_rejected(result):
    outcome = validate_manual_override("A", ["1.1", "1.2"], result.sections, {}, current_section_ids=["1.1", "2.2"])

    assert not outcome.is_valid
    assert outcome.message == "Subject 'Math' is given more than one section."

    without_record = validate_manual_override("A", ["1.1", "1.2"], result.sections, {})
    assert not without_record.is_valid


def test_every_current_subject_must_be_covered(result):
    outcome = validate_manual_override("A", ["1.2", "3.1"], result.sections, {}, current_section_ids=["1.1", "2.2"])

    assert not outcome.is_valid
    assert outcome.message == "No section selected for 'History'."


def test_shared_block_is_rejected(result):
    outcome = validate_manual_override("A", ["1.1", "2.1"], result.sections, {})

    assert outcome.message == "Schedule conflict: two subjects share block 1."


def test_peer_conflict_is_rejected(result):
    conflicts = build_conflict_index([("A", "B")])

    outcome = validate_manual_override("A", ["1.2", "2.1"], result.sections, conflicts)

    assert not outcome.is_valid
    assert outcome.message == "Peer conflict in section 1.2."


def test_apply_moves_the_student_and_leaves_the_input_intact(result):
    updated = apply_manual_override(result, "A", ["1.2", "2.1"])

    assert updated is not result
    assert updated.sections["1.1"].students == ["C"]
    assert updated.sections["1.2"].students == ["B", "A"]
    assert updated.sections["2.1"].students == ["A"]
    assert updated.sections["2.2"].students == []
    assert updated.student_assignments["A"].sections == ["1.2", "2.1"]
    assert result.sections["1.1"].students == ["A", "C"]
    assert result.student_assignments["A"].sections == ["1.1", "2.2"]


def test_apply_ignores_students_without_a_record(result):
    assert apply_manual_override(result, "ZZ", ["1.1"]) is result
