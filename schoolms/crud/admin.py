import logging

from sqlalchemy import Integer, func, insert, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolms.core.config import (
    DEFAULT_COURSES_TAUGHT,
    DEFAULT_MAX_COURSES,
    DEFAULT_MAX_UNITS,
    NOT_ASSIGNED,
)
from schoolms.crud.accounts import create_user
from schoolms.crud.common import read_only, transactional
from schoolms.crud.student import course_instructors, update_course_student_count
from schoolms.models.course import Course, TeacherCourse
from schoolms.models.enrollment import CourseEnrollment
from schoolms.models.grade import CompletedCourseGrade, CurrentCourseGrade
from schoolms.models.user import Student, Teacher, User, UserType
from schoolms.schemas.course import CourseAssignmentInfo, CourseListing
from schoolms.schemas.result import ActionResult, FailureReason
from schoolms.schemas.user import StudentSummary, TeacherSummary

logger = logging.getLogger(__name__)


@read_only("loading students")
def get_all_students(db: Session) -> list[StudentSummary]:
    enrolled = (
        db.query(
            CourseEnrollment.student_id.label("student_id"),
            func.count().label("count"),
        )
        .group_by(CourseEnrollment.student_id)
        .subquery()
    )

    rows = (
        db.query(
            User.id,
            User.username,
            Student.name,
            func.coalesce(enrolled.c.count, 0).label("enrolled_courses"),
        )
        .join(Student, Student.id == User.id)
        .outerjoin(enrolled, enrolled.c.student_id == User.id)
        .filter(User.user_type == UserType.STUDENT)
        .order_by(Student.name.asc(), User.id.asc())
        .all()
    )

    return [
        StudentSummary(
            id=r.id,
            name=r.name,
            username=r.username,
            enrolled_courses=int(r.enrolled_courses or 0),
        )
        for r in rows
    ]


@read_only("loading teachers")
def get_all_teachers(db: Session) -> list[TeacherSummary]:
    teaching = (
        db.query(
            TeacherCourse.teacher_id.label("teacher_id"),
            func.count().label("count"),
        )
        .group_by(TeacherCourse.teacher_id)
        .subquery()
    )

    rows = (
        db.query(
            User.id,
            User.username,
            Teacher.name,
            func.coalesce(teaching.c.count, 0).label("courses_teaching"),
        )
        .join(Teacher, Teacher.id == User.id)
        .outerjoin(teaching, teaching.c.teacher_id == User.id)
        .filter(User.user_type == UserType.TEACHER)
        .order_by(Teacher.name.asc(), User.id.asc())
        .all()
    )

    return [
        TeacherSummary(
            id=r.id,
            name=r.name,
            username=r.username,
            courses_teaching=int(r.courses_teaching or 0),
        )
        for r in rows
    ]


@read_only("loading courses")
def get_all_courses(db: Session) -> list[CourseListing]:
    instructors = course_instructors(db)

    rows = (
        db.query(
            Course.crn,
            Course.course_name,
            Course.credits,
            Course.course_size.label("capacity"),
            Course.num_students,
            func.coalesce(instructors.c.name, NOT_ASSIGNED).label("instructor_name"),
        )
        .outerjoin(instructors, instructors.c.crn == Course.crn)
        .order_by(Course.course_name.asc(), Course.crn.asc())
        .all()
    )

    return [
        CourseListing(
            crn=r.crn,
            course_name=r.course_name,
            credits=r.credits,
            capacity=r.capacity,
            num_students=r.num_students,
            instructor_name=r.instructor_name,
        )
        for r in rows
    ]


@read_only("loading course assignments")
def get_all_course_assignments(db: Session) -> list[CourseAssignmentInfo]:
    rows = (
        db.query(
            TeacherCourse.teacher_id,
            Teacher.name.label("teacher_name"),
            Course.course_name,
            Course.crn,
            TeacherCourse.course_order,
        )
        .join(Teacher, Teacher.id == TeacherCourse.teacher_id)
        .join(Course, Course.crn == TeacherCourse.course_crn)
        .order_by(Teacher.name.asc(), TeacherCourse.course_order.asc())
        .all()
    )

    return [
        CourseAssignmentInfo(
            teacher_id=r.teacher_id,
            teacher_name=r.teacher_name,
            course_name=r.course_name,
            crn=r.crn,
            course_order=r.course_order,
        )
        for r in rows
    ]


@transactional("adding course")
def add_course(
    db: Session, course_name: str, crn: int, credits: float, capacity: int
) -> ActionResult:
    if not course_name or not course_name.strip():
        return ActionResult.failure(FailureReason.INVALID, "Course name is required")
    if capacity <= 0 or credits <= 0:
        return ActionResult.failure(
            FailureReason.INVALID, "Credits and capacity must be positive"
        )

    try:
        db.execute(
            insert(Course.__table__).values(
                crn=crn,
                course_name=course_name.strip(),
                credits=credits,
                course_size=capacity,
                num_students=0,
            )
        )
    except IntegrityError:
        logger.warning("Course with CRN %s already exists", crn)
        return ActionResult.failure(
            FailureReason.DUPLICATE, f"Course with CRN {crn} already exists"
        )

    logger.info("Course added successfully: %s (CRN: %s)", course_name, crn)
    return ActionResult.success(f"Course added successfully: {course_name}")


@transactional("removing course")
def remove_course(db: Session, crn: int) -> ActionResult:
    """
    Remove a course and everything that references it: enrollments,
    teacher assignments, current and completed grades. Nothing is removed
    when the CRN is unknown.
    """
    for model in (CourseEnrollment, TeacherCourse, CurrentCourseGrade, CompletedCourseGrade):
        db.query(model).filter(model.course_crn == crn).delete(synchronize_session=False)

    removed = db.query(Course).filter(Course.crn == crn).delete(synchronize_session=False)
    if not removed:
        logger.warning("No course found with CRN: %s", crn)
        return ActionResult.failure(FailureReason.NOT_FOUND, f"No course found with CRN {crn}")

    logger.info("Course removed successfully (CRN: %s)", crn)
    return ActionResult.success(f"Course {crn} removed")


def _remove_student_rows(db: Session, student_id: int) -> None:
    crns = [
        crn
        for (crn,) in db.query(CourseEnrollment.course_crn).filter(
            CourseEnrollment.student_id == student_id
        )
    ]
    for crn in crns:
        update_course_student_count(db, crn, -1)

    for model in (CourseEnrollment, CurrentCourseGrade, CompletedCourseGrade):
        db.query(model).filter(model.student_id == student_id).delete(
            synchronize_session=False
        )
    db.query(Student).filter(Student.id == student_id).delete(synchronize_session=False)


def _remove_teacher_rows(db: Session, teacher_id: int) -> None:
    db.query(TeacherCourse).filter(TeacherCourse.teacher_id == teacher_id).delete(
        synchronize_session=False
    )
    db.query(Teacher).filter(Teacher.id == teacher_id).delete(synchronize_session=False)


@transactional("removing user")
def remove_user(db: Session, user_id: int) -> ActionResult:
    """
    Remove a student or teacher together with their dependent rows.
    Administrators cannot be removed this way.
    """
    user_type = db.query(User.user_type).filter(User.id == user_id).scalar()
    if user_type is None:
        logger.warning("User not found with ID: %s", user_id)
        return ActionResult.failure(FailureReason.NOT_FOUND, f"No user found with ID {user_id}")

    if user_type is UserType.STUDENT:
        _remove_student_rows(db, user_id)
    elif user_type is UserType.TEACHER:
        _remove_teacher_rows(db, user_id)
    elif user_type is UserType.ADMIN:
        logger.warning("Cannot remove admin users (ID: %s)", user_id)
        return ActionResult.failure(
            FailureReason.FORBIDDEN, "Administrator accounts cannot be removed"
        )
    else:
        raise ValueError(f"unhandled user type: {user_type!r}")

    removed = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    if not removed:
        return ActionResult.failure(FailureReason.NOT_FOUND, f"No user found with ID {user_id}")

    logger.info("User removed successfully (ID: %s)", user_id)
    return ActionResult.success(f"User {user_id} removed")


@transactional("assigning course", conflict="Course already assigned to this teacher")
def assign_course_to_teacher(db: Session, teacher_id: int, crn: int) -> ActionResult:
    """
    Single INSERT ... SELECT: the row is written only when the teacher and
    course exist and the pair is not yet assigned, and ``course_order`` is
    taken from the teacher's high-water mark in the same statement. The
    unique constraint backs it up.
    """
    next_order = (
        select(Teacher.last_course_order + 1)
        .where(Teacher.id == teacher_id)
        .correlate(None)
        .scalar_subquery()
    )
    already_assigned = (
        select(TeacherCourse.id)
        .where(TeacherCourse.teacher_id == teacher_id, TeacherCourse.course_crn == crn)
        .correlate(None)
        .exists()
    )
    teacher_exists = select(Teacher.id).where(Teacher.id == teacher_id).correlate(None).exists()
    course_exists = select(Course.crn).where(Course.crn == crn).correlate(None).exists()

    source = select(
        literal(teacher_id, Integer),
        literal(crn, Integer),
        next_order,
    ).where(~already_assigned, teacher_exists, course_exists)

    result = db.execute(
        insert(TeacherCourse.__table__).from_select(
            ["teacher_id", "course_crn", "course_order"], source
        )
    )
    if result.rowcount:
        teachers = Teacher.__table__
        db.execute(
            update(teachers)
            .where(teachers.c.id == teacher_id)
            .values(last_course_order=teachers.c.last_course_order + 1)
        )
        logger.info("Course assigned successfully (Teacher ID: %s, CRN: %s)", teacher_id, crn)
        return ActionResult.success(f"Course {crn} assigned to teacher {teacher_id}")

    # nothing inserted; work out which condition failed
    if db.query(Teacher.id).filter(Teacher.id == teacher_id).first() is None:
        return ActionResult.failure(
            FailureReason.NOT_FOUND, f"No teacher found with ID {teacher_id}"
        )
    if db.query(Course.crn).filter(Course.crn == crn).first() is None:
        return ActionResult.failure(FailureReason.NOT_FOUND, f"No course found with CRN {crn}")

    logger.warning("Course already assigned to this teacher (Teacher ID: %s, CRN: %s)", teacher_id, crn)
    return ActionResult.failure(
        FailureReason.DUPLICATE, "Course already assigned to this teacher"
    )


@transactional("unassigning course")
def unassign_course_from_teacher(db: Session, teacher_id: int, crn: int) -> ActionResult:
    removed = (
        db.query(TeacherCourse)
        .filter(TeacherCourse.teacher_id == teacher_id, TeacherCourse.course_crn == crn)
        .delete(synchronize_session=False)
    )
    if not removed:
        logger.warning("No matching assignment found (Teacher ID: %s, CRN: %s)", teacher_id, crn)
        return ActionResult.failure(
            FailureReason.NOT_FOUND,
            f"No assignment of course {crn} to teacher {teacher_id}",
        )

    logger.info("Course unassigned successfully (Teacher ID: %s, CRN: %s)", teacher_id, crn)
    return ActionResult.success(f"Course {crn} unassigned from teacher {teacher_id}")


def add_student(
    db: Session,
    username: str,
    password: str,
    name: str,
    max_units: float = DEFAULT_MAX_UNITS,
) -> ActionResult:
    result = create_user(db, username, password, UserType.STUDENT, name, max_units=max_units)
    if result:
        return ActionResult.success(f"Student added successfully: {name}")
    return result


def add_teacher(
    db: Session,
    username: str,
    password: str,
    name: str,
    max_courses: int = DEFAULT_MAX_COURSES,
    courses_taught: int = DEFAULT_COURSES_TAUGHT,
) -> ActionResult:
    result = create_user(
        db,
        username,
        password,
        UserType.TEACHER,
        name,
        max_courses=max_courses,
        courses_taught=courses_taught,
    )
    if result:
        return ActionResult.success(f"Teacher added successfully: {name}")
    return result
