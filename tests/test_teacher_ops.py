import pytest

from schoolms.crud import admin as admin_ops
from schoolms.crud import student as student_ops
from schoolms.crud import teacher as teacher_ops
from schoolms.models.grade import CompletedCourseGrade, CurrentCourseGrade
from schoolms.models.user import UserType
from schoolms.schemas.result import FailureReason
from tests.helpers import (
    assert_counters_match_enrollments,
    create_account,
    create_course,
    num_students,
)


@pytest.fixture()
def classroom(db):
    teacher = create_account(db, "tsmith", UserType.TEACHER, "Terry Smith")
    alice = create_account(db, "1001", UserType.STUDENT, "Alice")
    bob = create_account(db, "1002", UserType.STUDENT, "Bob")
    create_course(db, 5001, "Algebra", capacity=10)
    assert admin_ops.assign_course_to_teacher(db, teacher, 5001)
    assert student_ops.enroll_in_course(db, bob, 5001)
    assert student_ops.enroll_in_course(db, alice, 5001)
    return {"teacher": teacher, "alice": alice, "bob": bob}


def _current(db, student_id, crn):
    return (
        db.query(CurrentCourseGrade)
        .filter(CurrentCourseGrade.student_id == student_id, CurrentCourseGrade.course_crn == crn)
        .one_or_none()
    )


def test_teacher_courses(db, classroom):
    create_course(db, 5002, "Biology")
    assert admin_ops.assign_course_to_teacher(db, classroom["teacher"], 5002)

    courses = teacher_ops.get_teacher_courses(db, classroom["teacher"])

    assert [(c.crn, c.num_students) for c in courses] == [(5001, 2), (5002, 0)]
    assert teacher_ops.teaches_course(db, classroom["teacher"], 5002)
    assert not teacher_ops.teaches_course(db, classroom["teacher"], 9999)


def test_course_students_in_enrollment_order(db, classroom):
    carol = create_account(db, "1003", UserType.STUDENT, "Carol")
    create_course(db, 5002, "Biology")
    assert student_ops.enroll_in_course(db, carol, 5002)
    assert student_ops.enroll_in_course(db, carol, 5001)
    assert teacher_ops.update_student_grade(db, classroom["bob"], 5001, 91.5)

    students = teacher_ops.get_course_students(db, 5001)

    # enrollment_order ties fall back to student id
    assert [(s.name, s.enrollment_order) for s in students] == [
        ("Alice", 1),
        ("Bob", 1),
        ("Carol", 2),
    ]
    assert students[0].grade is None
    assert students[1].grade == 91.5
    assert students[1].attendance == 0


def test_grade_upsert_touches_only_named_field(db, classroom):
    alice = classroom["alice"]

    result = teacher_ops.update_student_grade(db, alice, 5001, 80)
    assert result
    assert result.message == "Grade updated successfully"
    row = _current(db, alice, 5001)
    assert (row.grade, row.attendance) == (80, 0)

    assert teacher_ops.update_student_attendance(db, alice, 5001, 95)
    db.expire_all()
    row = _current(db, alice, 5001)
    assert (row.grade, row.attendance) == (80, 95)

    assert teacher_ops.update_student_grade(db, alice, 5001, 85)
    db.expire_all()
    row = _current(db, alice, 5001)
    assert (row.grade, row.attendance) == (85, 95)
    assert db.query(CurrentCourseGrade).count() == 1


def test_attendance_first_defaults_grade(db, classroom):
    assert teacher_ops.update_student_attendance(db, classroom["bob"], 5001, 60)
    row = _current(db, classroom["bob"], 5001)
    assert (row.grade, row.attendance) == (0, 60)


@pytest.mark.parametrize("value", [-1, 100.5, 250])
def test_out_of_range_values_rejected(db, classroom, value):
    grade = teacher_ops.update_student_grade(db, classroom["alice"], 5001, value)
    attendance = teacher_ops.update_student_attendance(db, classroom["alice"], 5001, value)

    assert grade.reason is FailureReason.INVALID
    assert attendance.reason is FailureReason.INVALID
    assert _current(db, classroom["alice"], 5001) is None


def test_bounds_are_inclusive(db, classroom):
    assert teacher_ops.update_student_grade(db, classroom["alice"], 5001, 0)
    assert teacher_ops.update_student_grade(db, classroom["alice"], 5001, 100)


def test_grade_requires_enrollment(db, classroom):
    outsider = create_account(db, "1003", UserType.STUDENT, "Carol")

    result = teacher_ops.update_student_grade(db, outsider, 5001, 70)

    assert result.reason is FailureReason.NOT_FOUND
    assert db.query(CurrentCourseGrade).count() == 0


def test_complete_course_moves_grade(db, classroom):
    alice = classroom["alice"]
    assert teacher_ops.update_student_grade(db, alice, 5001, 88)
    assert teacher_ops.update_student_attendance(db, alice, 5001, 97)

    result = teacher_ops.complete_course_for_student(db, alice, 5001)

    assert result
    assert result.message == "Course marked as completed for Alice"
    assert _current(db, alice, 5001) is None
    completed = student_ops.get_completed_courses(db, alice)
    assert [(c.crn, c.grade, c.attendance) for c in completed] == [(5001, 88, 97)]
    assert [c.crn for c in student_ops.get_current_courses(db, alice)] == []
    assert num_students(db, 5001) == 1
    assert_counters_match_enrollments(db)


def test_complete_without_grade_records_zeros(db, classroom):
    assert teacher_ops.complete_course_for_student(db, classroom["bob"], 5001)

    row = db.query(CompletedCourseGrade).one()
    assert (row.grade, row.attendance) == (0, 0)


def test_complete_twice(db, classroom):
    alice = classroom["alice"]
    assert teacher_ops.complete_course_for_student(db, alice, 5001)

    again = teacher_ops.complete_course_for_student(db, alice, 5001)

    assert again.reason is FailureReason.DUPLICATE
    assert db.query(CompletedCourseGrade).count() == 1
    assert num_students(db, 5001) == 1


def test_complete_requires_enrollment(db, classroom):
    outsider = create_account(db, "1003", UserType.STUDENT, "Carol")

    result = teacher_ops.complete_course_for_student(db, outsider, 5001)

    assert result.reason is FailureReason.NOT_FOUND
    assert db.query(CompletedCourseGrade).count() == 0
    assert num_students(db, 5001) == 2
