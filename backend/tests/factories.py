from section_planner.schemas.catalog import Subject
from section_planner.schemas.scheduling import Student


def make_subject(subject_id, s1_block, s2_block, capacity=30, name=None):
    return Subject(
        id=subject_id,
        name=name or f"Subject {subject_id}",
        capacity=capacity,
        s1_block=s1_block,
        s2_block=s2_block,
    )


def make_student(code, subjects, **kwargs):
    kwargs.setdefault("name", f"Student {code}")
    kwargs.setdefault("course", "3A")
    return Student(code=code, subjects=subjects, **kwargs)
