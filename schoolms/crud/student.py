import logging

from sqlalchemy import func, insert, select, update
from sqlalchemy.orm import Session

from schoolms.core.config import NOT_ASSIGNED
from schoolms.crud.common import read_only, transactional
from schoolms.models.course import Course, TeacherCourse
from schoolms.models.enrollment import CourseEnrollment
from schoolms.models.grade import CompletedCourseGrade, CurrentCourseGrade
from schoolms.models.user import Student, Teacher
from schoolms.schemas.course import AvailableCourse
from schoolms.schemas.enrollment import CompletedCourse, CurrentCourse
from schoolms.schemas.result import ActionResult, FailureReason

logger = logging.getLogger(__name__)


def update_course_student_count(
    db: Session, crn: int, delta: int, enforce_capacity: bool = False
) -> bool:
    """
    Shift ``courses.num_students`` by ``delta`` inside the caller's
    transaction. With ``enforce_capacity`` the update only applies while the
    course has room, so the capacity check and the increment are one
    statement. Returns False when no course row was updated.
    """
    courses = Course.__table__
    stmt = (
        update(courses)
        .where(courses.c.crn == crn)
        .values(num_students=courses.c.num_students + delta)
    )
    if enforce_capacity:
        stmt = stmt.where(courses.c.num_students + delta <= courses.c.course_size)
    return db.execute(stmt).rowcount > 0


def course_instructors(db: Session):
    """
    One instructor name per course, so listings that show the instructor
    keep one row per course even when several teachers are assigned.
    """
    return (
        db.query(
            TeacherCourse.course_crn.label("crn"),
            func.min(Teacher.name).label("name"),
        )
        .join(Teacher, Teacher.id == TeacherCourse.teacher_id)
        .group_by(TeacherCourse.course_crn)
        .subquery()
    )


@read_only("getting available courses")
def get_available_courses(db: Session, student_id: int) -> list[AvailableCourse]:
    """
    Courses open to the student: not already enrolled, not already
    completed, and not full. Ordered by course name.
    """
    enrolled = select(CourseEnrollment.course_crn).where(
        CourseEnrollment.student_id == student_id
    )
    completed = select(CompletedCourseGrade.course_crn).where(
        CompletedCourseGrade.student_id == student_id
    )

    instructors = course_instructors(db)

    rows = (
        db.query(
            Course.crn,
            Course.course_name,
            Course.credits,
            Course.course_size,
            Course.num_students,
            func.coalesce(instructors.c.name, NOT_ASSIGNED).label("instructor"),
        )
        .outerjoin(instructors, instructors.c.crn == Course.crn)
        .filter(
            Course.crn.not_in(enrolled),
            Course.crn.not_in(completed),
            Course.num_students < Course.course_size,
        )
        .order_by(Course.course_name.asc(), Course.crn.asc())
        .all()
    )

    return [
        AvailableCourse(
            crn=r.crn,
            course_name=r.course_name,
            credits=r.credits,
            course_size=r.course_size,
            num_students=r.num_students,
            instructor=r.instructor,
        )
        for r in rows
    ]


@read_only("getting current courses")
def get_current_courses(db: Session, student_id: int) -> list[CurrentCourse]:
    instructors = course_instructors(db)

    rows = (
        db.query(
            Course.crn,
            Course.course_name,
            Course.credits,
            CourseEnrollment.enrollment_order,
            CurrentCourseGrade.grade,
            CurrentCourseGrade.attendance,
            func.coalesce(instructors.c.name, NOT_ASSIGNED).label("instructor"),
        )
        .join(CourseEnrollment, CourseEnrollment.course_crn == Course.crn)
        .outerjoin(
            CurrentCourseGrade,
            (CurrentCourseGrade.course_crn == Course.crn)
            & (CurrentCourseGrade.student_id == CourseEnrollment.student_id),
        )
        .outerjoin(instructors, instructors.c.crn == Course.crn)
        .filter(CourseEnrollment.student_id == student_id)
        .order_by(CourseEnrollment.enrollment_order.asc())
        .all()
    )

    return [
        CurrentCourse(
            crn=r.crn,
            course_name=r.course_name,
            credits=r.credits,
            instructor=r.instructor,
            enrollment_order=r.enrollment_order,
            grade=r.grade,
            attendance=r.attendance,
        )
        for r in rows
    ]


@read_only("getting completed courses")
def get_completed_courses(db: Session, student_id: int) -> list[CompletedCourse]:
    rows = (
        db.query(
            Course.crn,
            Course.course_name,
            Course.credits,
            CompletedCourseGrade.grade,
            CompletedCourseGrade.attendance,
        )
        .join(CompletedCourseGrade, CompletedCourseGrade.course_crn == Course.crn)
        .filter(CompletedCourseGrade.student_id == student_id)
        .order_by(Course.course_name.asc(), Course.crn.asc())
        .all()
    )

    return [
        CompletedCourse(
            crn=r.crn,
            course_name=r.course_name,
            credits=r.credits,
            grade=r.grade,
            attendance=r.attendance,
        )
        for r in rows
    ]


def _next_enrollment_order(db: Session, student_id: int) -> int:
    # high-water mark on the student row; freed ordinals stay unused
    students = Student.__table__
    db.execute(
        update(students)
        .where(students.c.id == student_id)
        .values(last_enrollment_order=students.c.last_enrollment_order + 1)
    )
    return db.query(Student.last_enrollment_order).filter(Student.id == student_id).scalar()


@transactional("enrolling in course", conflict="Already enrolled in this course")
def enroll_in_course(db: Session, student_id: int, crn: int) -> ActionResult:
    """
    Enroll a student and bump the course counter in one transaction.

    Capacity is re-checked by the counter update itself, so two racing
    enrollments cannot both take the last seat.
    """
    course_name = db.query(Course.course_name).filter(Course.crn == crn).scalar()
    if course_name is None:
        logger.warning("Enroll failed, no course with CRN: %s", crn)
        return ActionResult.failure(FailureReason.NOT_FOUND, f"No course found with CRN {crn}")

    if db.query(Student.id).filter(Student.id == student_id).first() is None:
        logger.warning("Enroll failed, no student with ID: %s", student_id)
        return ActionResult.failure(
            FailureReason.NOT_FOUND, f"No student found with ID {student_id}"
        )

    already_completed = (
        db.query(CompletedCourseGrade.student_id)
        .filter(
            CompletedCourseGrade.student_id == student_id,
            CompletedCourseGrade.course_crn == crn,
        )
        .first()
        is not None
    )
    if already_completed:
        return ActionResult.failure(
            FailureReason.INVALID, f"{course_name} has already been completed"
        )

    db.execute(
        insert(CourseEnrollment.__table__).values(
            course_crn=crn,
            student_id=student_id,
            enrollment_order=_next_enrollment_order(db, student_id),
        )
    )

    if not update_course_student_count(db, crn, 1, enforce_capacity=True):
        logger.warning("Course %s is full, enrollment of %s rejected", crn, student_id)
        return ActionResult.failure(FailureReason.FULL, f"{course_name} is full")

    logger.info("Student %s enrolled in course %s", student_id, crn)
    return ActionResult.success(f"Successfully enrolled in {course_name}")


@transactional("dropping course")
def drop_course(db: Session, student_id: int, crn: int) -> ActionResult:
    removed = (
        db.query(CourseEnrollment)
        .filter(
            CourseEnrollment.student_id == student_id,
            CourseEnrollment.course_crn == crn,
        )
        .delete(synchronize_session=False)
    )
    if not removed:
        logger.warning("Drop failed, student %s not enrolled in %s", student_id, crn)
        return ActionResult.failure(
            FailureReason.NOT_FOUND, f"Not enrolled in course {crn}"
        )

    # may match nothing if no grade was recorded yet
    db.query(CurrentCourseGrade).filter(
        CurrentCourseGrade.student_id == student_id,
        CurrentCourseGrade.course_crn == crn,
    ).delete(synchronize_session=False)

    update_course_student_count(db, crn, -1)

    course_name = db.query(Course.course_name).filter(Course.crn == crn).scalar()
    logger.info("Student %s dropped course %s", student_id, crn)
    return ActionResult.success(f"Successfully dropped {course_name or crn}")
