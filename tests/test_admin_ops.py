import threading

import pytest
from sqlalchemy.exc import ProgrammingError

from schoolms.core.errors import TransactionTimeout
from schoolms.crud import admin as admin_ops
from schoolms.crud import common
from schoolms.crud import student as student_ops
from schoolms.crud import teacher as teacher_ops
from schoolms.crud.accounts import authenticate_user
from schoolms.db.session import WRITE_GATE_KEY
from schoolms.models.course import Course, TeacherCourse
from schoolms.models.enrollment import CourseEnrollment
from schoolms.models.grade import CompletedCourseGrade, CurrentCourseGrade
from schoolms.models.user import Admin, Student, Teacher, User, UserType
from schoolms.schemas.result import FailureReason
from tests.helpers import (
    assert_counters_match_enrollments,
    create_account,
    create_course,
    num_students,
)


@pytest.fixture()
def school(db):
    """One teacher, two students and two courses."""
    return {
        "teacher": create_account(db, "tsmith", UserType.TEACHER, "Terry Smith"),
        "alice": create_account(db, "1001", UserType.STUDENT, "Alice"),
        "bob": create_account(db, "1002", UserType.STUDENT, "Bob"),
        "algebra": create_course(db, 5001, "Algebra", capacity=2),
        "biology": create_course(db, 5002, "Biology", capacity=10),
    }


def test_add_course_starts_empty(db):
    assert admin_ops.add_course(db, "Chemistry", 6001, 4.0, 25)
    course = db.query(Course).filter(Course.crn == 6001).one()
    assert course.num_students == 0
    assert course.course_size == 25


def test_add_course_duplicate_crn(db):
    assert admin_ops.add_course(db, "Chemistry", 6001, 4.0, 25)
    result = admin_ops.add_course(db, "Physics", 6001, 3.0, 10)
    assert not result
    assert result.reason is FailureReason.DUPLICATE
    assert "6001" in result.message
    assert db.query(Course.course_name).filter(Course.crn == 6001).scalar() == "Chemistry"


def test_add_course_rejects_bad_values(db):
    assert admin_ops.add_course(db, "  ", 6002, 3.0, 10).reason is FailureReason.INVALID
    assert admin_ops.add_course(db, "Art", 6003, 3.0, 0).reason is FailureReason.INVALID
    assert db.query(Course).count() == 0


def test_listings_are_sorted_and_counted(db, school):
    create_account(db, "1000", UserType.STUDENT, "Aaron")
    assert student_ops.enroll_in_course(db, school["alice"], 5001)
    assert student_ops.enroll_in_course(db, school["alice"], 5002)
    assert admin_ops.assign_course_to_teacher(db, school["teacher"], 5002)

    students = admin_ops.get_all_students(db)
    assert [s.name for s in students] == ["Aaron", "Alice", "Bob"]
    assert {s.name: s.enrolled_courses for s in students} == {"Aaron": 0, "Alice": 2, "Bob": 0}

    teachers = admin_ops.get_all_teachers(db)
    assert [(t.name, t.courses_teaching) for t in teachers] == [("Terry Smith", 1)]

    courses = admin_ops.get_all_courses(db)
    assert [(c.crn, c.instructor_name) for c in courses] == [
        (5001, "Not Assigned"),
        (5002, "Terry Smith"),
    ]
    assert courses[0].num_students == 1


def test_remove_course_cascades(db, school):
    alice = school["alice"]
    assert student_ops.enroll_in_course(db, alice, 5001)
    assert admin_ops.assign_course_to_teacher(db, school["teacher"], 5001)
    assert teacher_ops.update_student_grade(db, alice, 5001, 88)
    assert student_ops.enroll_in_course(db, school["bob"], 5001)
    assert teacher_ops.complete_course_for_student(db, school["bob"], 5001)

    assert admin_ops.remove_course(db, 5001)

    assert 5001 not in [c.crn for c in admin_ops.get_all_courses(db)]
    for model in (CourseEnrollment, TeacherCourse, CurrentCourseGrade, CompletedCourseGrade):
        assert db.query(model).filter(model.course_crn == 5001).count() == 0
    # other course untouched
    assert db.query(Course).filter(Course.crn == 5002).count() == 1


def test_remove_unknown_course_changes_nothing(db, school):
    result = admin_ops.remove_course(db, 9999)
    assert not result
    assert result.reason is FailureReason.NOT_FOUND
    assert db.query(Course).count() == 2


def test_remove_student_cascades_and_frees_seats(db, school):
    alice = school["alice"]
    assert student_ops.enroll_in_course(db, alice, 5001)
    assert student_ops.enroll_in_course(db, alice, 5002)
    assert teacher_ops.update_student_attendance(db, alice, 5001, 95)
    assert teacher_ops.complete_course_for_student(db, alice, 5002)

    assert admin_ops.remove_user(db, alice)

    for model in (CourseEnrollment, CurrentCourseGrade, CompletedCourseGrade):
        assert db.query(model).filter(model.student_id == alice).count() == 0
    assert db.query(Student).filter(Student.id == alice).count() == 0
    assert db.query(User).filter(User.id == alice).count() == 0
    assert num_students(db, 5001) == 0
    assert_counters_match_enrollments(db)


def test_remove_teacher_drops_assignments(db, school):
    teacher = school["teacher"]
    assert admin_ops.assign_course_to_teacher(db, teacher, 5001)

    assert admin_ops.remove_user(db, teacher)

    assert db.query(TeacherCourse).count() == 0
    assert db.query(Teacher).count() == 0
    assert authenticate_user(db, "tsmith", "password123") is None


def test_admin_cannot_be_removed(db, school):
    admin_id = create_account(db, "root", UserType.ADMIN, "Ada")

    result = admin_ops.remove_user(db, admin_id)

    assert not result
    assert result.reason is FailureReason.FORBIDDEN
    assert db.query(User).filter(User.id == admin_id).count() == 1
    assert db.query(Admin).filter(Admin.id == admin_id).count() == 1


def test_remove_unknown_user(db):
    result = admin_ops.remove_user(db, 424242)
    assert result.reason is FailureReason.NOT_FOUND


def test_assign_twice_keeps_one_row(db, school):
    teacher = school["teacher"]

    first = admin_ops.assign_course_to_teacher(db, teacher, 5001)
    second = admin_ops.assign_course_to_teacher(db, teacher, 5001)

    assert first
    assert not second
    assert second.reason is FailureReason.DUPLICATE
    assert (
        db.query(TeacherCourse)
        .filter(TeacherCourse.teacher_id == teacher, TeacherCourse.course_crn == 5001)
        .count()
        == 1
    )


def test_assignment_order_is_per_teacher_sequence(db, school):
    teacher = school["teacher"]
    other = create_account(db, "tjones", UserType.TEACHER, "Jo Jones")
    create_course(db, 5003, "Chemistry")

    assert admin_ops.assign_course_to_teacher(db, teacher, 5002)
    assert admin_ops.assign_course_to_teacher(db, teacher, 5001)
    assert admin_ops.assign_course_to_teacher(db, other, 5003)

    assignments = admin_ops.get_all_course_assignments(db)
    assert [(a.teacher_name, a.crn, a.course_order) for a in assignments] == [
        ("Jo Jones", 5003, 1),
        ("Terry Smith", 5002, 1),
        ("Terry Smith", 5001, 2),
    ]


def test_assign_unknown_teacher_or_course(db, school):
    assert admin_ops.assign_course_to_teacher(db, 424242, 5001).reason is FailureReason.NOT_FOUND
    assert admin_ops.assign_course_to_teacher(db, school["teacher"], 9999).reason is FailureReason.NOT_FOUND
    assert db.query(TeacherCourse).count() == 0


def test_unassign(db, school):
    teacher = school["teacher"]
    assert admin_ops.assign_course_to_teacher(db, teacher, 5001)

    assert admin_ops.unassign_course_from_teacher(db, teacher, 5001)
    again = admin_ops.unassign_course_from_teacher(db, teacher, 5001)
    assert again.reason is FailureReason.NOT_FOUND


def test_quick_add_hashes_passwords(db):
    assert admin_ops.add_student(db, "2001", "studentpw", "Stu", max_units=12.0)
    assert admin_ops.add_teacher(db, "tnew", "teacherpw", "Tea", max_courses=3)

    hashes = [h for (h,) in db.query(User.password_hash)]
    assert "studentpw" not in hashes
    assert "teacherpw" not in hashes

    assert authenticate_user(db, "2001", "studentpw").user_type is UserType.STUDENT
    assert authenticate_user(db, "tnew", "teacherpw").user_type is UserType.TEACHER
    assert db.query(Student.max_units).scalar() == 12.0
    teacher = db.query(Teacher).one()
    assert (teacher.max_courses, teacher.courses_taught) == (3, 0)


def test_quick_add_duplicate_username(db):
    assert admin_ops.add_student(db, "2001", "pw", "Stu")
    result = admin_ops.add_teacher(db, "2001", "pw", "Tea")
    assert result.reason is FailureReason.DUPLICATE
    assert db.query(Teacher).count() == 0


def test_write_gate_timeout(db, monkeypatch):
    monkeypatch.setattr(common, "TRANSACTION_GATE_TIMEOUT_SECONDS", 0.05)
    gate = db.info[WRITE_GATE_KEY]
    held = threading.Event()
    release = threading.Event()

    def hold_gate():
        with gate:
            held.set()
            release.wait(5)

    holder = threading.Thread(target=hold_gate)
    holder.start()
    assert held.wait(5)
    try:
        with pytest.raises(TransactionTimeout):
            admin_ops.add_course(db, "Physics", 7001, 3.0, 10)
    finally:
        release.set()
        holder.join()

    assert db.query(Course).count() == 0


def test_course_with_two_teachers_listed_once(db, school):
    other = create_account(db, "tjones", UserType.TEACHER, "Jo Jones")
    assert admin_ops.assign_course_to_teacher(db, school["teacher"], 5001)
    assert admin_ops.assign_course_to_teacher(db, other, 5001)

    courses = admin_ops.get_all_courses(db)

    assert [(c.crn, c.instructor_name) for c in courses] == [
        (5001, "Jo Jones"),
        (5002, "Not Assigned"),
    ]
    assert len(admin_ops.get_all_course_assignments(db)) == 2


def test_unassigned_course_order_is_not_reused(db, school):
    teacher = school["teacher"]
    assert admin_ops.assign_course_to_teacher(db, teacher, 5001)
    assert admin_ops.assign_course_to_teacher(db, teacher, 5002)
    assert admin_ops.unassign_course_from_teacher(db, teacher, 5002)

    assert admin_ops.assign_course_to_teacher(db, teacher, 5002)
    # failed attempts leave the sequence alone
    assert not admin_ops.assign_course_to_teacher(db, teacher, 5002)

    assignments = admin_ops.get_all_course_assignments(db)
    assert [(a.crn, a.course_order) for a in assignments] == [(5001, 1), (5002, 3)]


def test_listing_storage_error_returns_empty(db, school, monkeypatch):
    def broken_query(*entities, **kwargs):
        raise ProgrammingError("SELECT", {}, Exception("no such table"))

    monkeypatch.setattr(db, "query", broken_query)

    assert admin_ops.get_all_students(db) == []
    assert admin_ops.get_all_courses(db) == []


def test_remove_course_failing_midway_rolls_back(db, school, monkeypatch):
    assert student_ops.enroll_in_course(db, school["alice"], 5001)
    assert admin_ops.assign_course_to_teacher(db, school["teacher"], 5001)

    real_query = db.query
    calls = []

    def flaky_query(*entities, **kwargs):
        calls.append(entities)
        # enrollments are deleted, then the assignment delete fails
        if len(calls) == 2:
            raise ProgrammingError("DELETE", {}, Exception("disk I/O error"))
        return real_query(*entities, **kwargs)

    monkeypatch.setattr(db, "query", flaky_query)
    result = admin_ops.remove_course(db, 5001)
    monkeypatch.undo()

    assert not result
    assert result.reason is FailureReason.ERROR
    assert db.query(Course).filter(Course.crn == 5001).count() == 1
    assert db.query(CourseEnrollment).filter(CourseEnrollment.course_crn == 5001).count() == 1
    assert db.query(TeacherCourse).filter(TeacherCourse.course_crn == 5001).count() == 1
    assert num_students(db, 5001) == 1
