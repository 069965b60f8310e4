import io

import pandas as pd
import pytest

from section_planner.services.catalog import build_catalog_context
from section_planner.services.export import export_csv, sections_frame
from section_planner.services.scheduler import schedule_students
from tests.factories import make_student, make_subject

SUBJECTS = [make_subject(1, 1, 2, capacity=1, name="Math"), make_subject(2, 1, 3, name="History")]


@pytest.fixture
def result():
    students = [
        make_student("A1", ["Math", "History"], name="Zoe"),
        make_student("B2", ["Math"], name="Adam"),
        make_student("C3", ["Math"], name="Cleo"),
    ]
    return schedule_students(students, [], build_catalog_context(SUBJECTS), "speed")


def _read(text):
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


def test_assignments_export_has_one_column_per_subject(result):
    frame = _read(export_csv("assignments", result, SUBJECTS))

    assert list(frame.columns) == ["Code", "Name", "Course", "Math", "History"]
    row = frame[frame["Code"] == "A1"].iloc[0]
    assert row["Math"] == "1.1"
    assert row["History"] == "2.2"
    assert frame[frame["Code"] == "B2"].iloc[0]["History"] == ""


def test_unassigned_export(result):
    frame = _read(export_csv("unassigned", result, SUBJECTS))

    assert frame["Code"].tolist() == ["C3"]
    assert frame.iloc[0]["Type"] == "CAPACITY"
    assert frame.iloc[0]["Enrolled Subjects"] == "Math"


def test_section_lists_are_sorted_by_name(result):
    result.sections["2.2"].students = ["A1", "B2"]

    frame = sections_frame(result)

    rows = frame[frame["Section"] == "2.2"]
    assert rows["Name"].tolist() == ["Adam", "Zoe"]
    assert rows["Block"].tolist() == [3, 3]


def test_unknown_export_kind(result):
    with pytest.raises(ValueError):
        export_csv("grades", result, SUBJECTS)
