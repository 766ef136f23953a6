import logging

from sqlalchemy import insert, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from schoolms.core.config import GRADE_MAX, GRADE_MIN
from schoolms.crud.common import read_only, transactional
from schoolms.crud.student import update_course_student_count
from schoolms.models.course import Course, TeacherCourse
from schoolms.models.enrollment import CourseEnrollment
from schoolms.models.grade import CompletedCourseGrade, CurrentCourseGrade
from schoolms.models.user import Student
from schoolms.schemas.course import TeacherCourseInfo
from schoolms.schemas.gradebook import CourseStudentInfo
from schoolms.schemas.result import ActionResult, FailureReason

logger = logging.getLogger(__name__)


@read_only("getting teacher courses")
def get_teacher_courses(db: Session, teacher_id: int) -> list[TeacherCourseInfo]:
    rows = (
        db.query(
            Course.crn,
            Course.course_name,
            Course.credits,
            Course.course_size,
            Course.num_students,
        )
        .join(TeacherCourse, TeacherCourse.course_crn == Course.crn)
        .filter(TeacherCourse.teacher_id == teacher_id)
        .order_by(TeacherCourse.course_order.asc())
        .all()
    )

    return [
        TeacherCourseInfo(
            crn=r.crn,
            course_name=r.course_name,
            credits=r.credits,
            course_size=r.course_size,
            num_students=r.num_students,
        )
        for r in rows
    ]


@read_only("getting course students")
def get_course_students(db: Session, crn: int) -> list[CourseStudentInfo]:
    rows = (
        db.query(
            Student.id,
            Student.name,
            CourseEnrollment.enrollment_order,
            CurrentCourseGrade.grade,
            CurrentCourseGrade.attendance,
        )
        .join(CourseEnrollment, CourseEnrollment.student_id == Student.id)
        .outerjoin(
            CurrentCourseGrade,
            (CurrentCourseGrade.student_id == Student.id)
            & (CurrentCourseGrade.course_crn == CourseEnrollment.course_crn),
        )
        .filter(CourseEnrollment.course_crn == crn)
        .order_by(CourseEnrollment.enrollment_order.asc(), Student.id.asc())
        .all()
    )

    return [
        CourseStudentInfo(
            id=r.id,
            name=r.name,
            enrollment_order=r.enrollment_order,
            grade=r.grade,
            attendance=r.attendance,
        )
        for r in rows
    ]


@read_only("checking course assignment", default_factory=lambda: False)
def teaches_course(db: Session, teacher_id: int, crn: int) -> bool:
    return (
        db.query(TeacherCourse.id)
        .filter(TeacherCourse.teacher_id == teacher_id, TeacherCourse.course_crn == crn)
        .first()
        is not None
    )


def _is_enrolled(db: Session, student_id: int, crn: int) -> bool:
    return (
        db.query(CourseEnrollment.student_id)
        .filter(
            CourseEnrollment.student_id == student_id,
            CourseEnrollment.course_crn == crn,
        )
        .first()
        is not None
    )


def _upsert_current_grade(db: Session, student_id: int, crn: int, field: str, value: float):
    """
    Write one field of the (student, course) current grade row as a single
    statement; a new row gets 0 for the other field.
    """
    table = CurrentCourseGrade.__table__
    values = {"student_id": student_id, "course_crn": crn, "grade": 0.0, "attendance": 0.0}
    values[field] = value

    dialect = db.get_bind().dialect.name
    if dialect in ("sqlite", "postgresql"):
        dialect_insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        stmt = dialect_insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["student_id", "course_crn"],
            set_={field: getattr(stmt.excluded, field)},
        )
        return db.execute(stmt)
    if dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(**values)
        stmt = stmt.on_duplicate_key_update({field: getattr(stmt.inserted, field)})
        return db.execute(stmt)

    # no native upsert; runs under the write gate so the pair cannot race
    updated = db.execute(
        update(table)
        .where(table.c.student_id == student_id, table.c.course_crn == crn)
        .values({field: value})
    )
    if updated.rowcount:
        return updated
    return db.execute(insert(table).values(**values))


def _set_current_value(
    db: Session, student_id: int, crn: int, field: str, value: float
) -> ActionResult:
    label = field.capitalize()
    if value is None or not GRADE_MIN <= value <= GRADE_MAX:
        return ActionResult.failure(
            FailureReason.INVALID,
            f"{label} must be between {GRADE_MIN:g} and {GRADE_MAX:g}",
        )
    if not _is_enrolled(db, student_id, crn):
        logger.warning("Student %s is not enrolled in course %s", student_id, crn)
        return ActionResult.failure(
            FailureReason.NOT_FOUND,
            f"Student {student_id} is not enrolled in course {crn}",
        )

    _upsert_current_grade(db, student_id, crn, field, value)
    logger.info("%s for student %s in course %s set to %s", label, student_id, crn, value)
    return ActionResult.success(f"{label} updated successfully")


@transactional("updating student grade")
def update_student_grade(db: Session, student_id: int, crn: int, grade: float) -> ActionResult:
    return _set_current_value(db, student_id, crn, "grade", grade)


@transactional("updating student attendance")
def update_student_attendance(
    db: Session, student_id: int, crn: int, attendance: float
) -> ActionResult:
    return _set_current_value(db, student_id, crn, "attendance", attendance)


@transactional(
    "completing course for student",
    conflict="Course already completed for this student",
)
def complete_course_for_student(db: Session, student_id: int, crn: int) -> ActionResult:
    """
    Move a student's current grade into the completed record and end the
    enrollment, in one transaction.

    Missing grade/attendance values are recorded as 0. The course counter is
    decremented like a drop so the freed seat becomes available again.
    """
    current = (
        db.query(CurrentCourseGrade.grade, CurrentCourseGrade.attendance)
        .filter(
            CurrentCourseGrade.student_id == student_id,
            CurrentCourseGrade.course_crn == crn,
        )
        .first()
    )
    grade, attendance = (current.grade, current.attendance) if current else (0.0, 0.0)

    db.execute(
        insert(CompletedCourseGrade.__table__).values(
            student_id=student_id,
            course_crn=crn,
            grade=grade,
            attendance=attendance,
        )
    )

    db.query(CurrentCourseGrade).filter(
        CurrentCourseGrade.student_id == student_id,
        CurrentCourseGrade.course_crn == crn,
    ).delete(synchronize_session=False)

    removed = (
        db.query(CourseEnrollment)
        .filter(
            CourseEnrollment.student_id == student_id,
            CourseEnrollment.course_crn == crn,
        )
        .delete(synchronize_session=False)
    )
    if not removed:
        logger.warning("Complete failed, student %s not enrolled in %s", student_id, crn)
        return ActionResult.failure(
            FailureReason.NOT_FOUND,
            f"Student {student_id} is not enrolled in course {crn}",
        )

    update_course_student_count(db, crn, -1)

    name = db.query(Student.name).filter(Student.id == student_id).scalar()
    logger.info("Course %s completed for student %s", crn, student_id)
    return ActionResult.success(f"Course marked as completed for {name or student_id}")
