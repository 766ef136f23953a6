from sqlalchemy import func
from sqlalchemy.orm import Session

from schoolms.crud.accounts import create_user
from schoolms.crud.admin import add_course
from schoolms.models.course import Course
from schoolms.models.enrollment import CourseEnrollment
from schoolms.models.user import User, UserType

DEFAULT_PASSWORD = "password123"


def create_account(
    db: Session,
    username: str,
    user_type: UserType,
    name: str,
    password: str = DEFAULT_PASSWORD,
) -> int:
    result = create_user(db, username, password, user_type, name)
    assert result, result.message
    return db.query(User.id).filter(User.username == username).scalar()


def create_course(
    db: Session, crn: int, name: str, credits: float = 3.0, capacity: int = 30
) -> int:
    result = add_course(db, name, crn, credits, capacity)
    assert result, result.message
    return crn


def num_students(db: Session, crn: int) -> int:
    return db.query(Course.num_students).filter(Course.crn == crn).scalar()


def enrollment_count(db: Session, crn: int) -> int:
    return (
        db.query(func.count())
        .select_from(CourseEnrollment)
        .filter(CourseEnrollment.course_crn == crn)
        .scalar()
    )


def assert_counters_match_enrollments(db: Session) -> None:
    for crn, counter in db.query(Course.crn, Course.num_students).all():
        assert counter == enrollment_count(db, crn), f"course {crn} counter drifted"
