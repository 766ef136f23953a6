import logging

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolms.core.config import (
    DEFAULT_COURSES_TAUGHT,
    DEFAULT_MAX_COURSES,
    DEFAULT_MAX_UNITS,
)
from schoolms.core.security import dummy_verify, hash_password, verify_password
from schoolms.crud.common import read_only, transactional
from schoolms.models.user import Admin, Student, Teacher, User, UserType
from schoolms.schemas.result import ActionResult, FailureReason
from schoolms.schemas.user import UserRecord

logger = logging.getLogger(__name__)


def role_model(user_type: UserType):
    """Role table holding the name (and role fields) for a user type."""
    if user_type is UserType.STUDENT:
        return Student
    if user_type is UserType.TEACHER:
        return Teacher
    if user_type is UserType.ADMIN:
        return Admin
    raise ValueError(f"unhandled user type: {user_type!r}")


def _role_values(
    user_type: UserType,
    user_id: int,
    name: str,
    max_units: float,
    max_courses: int,
    courses_taught: int,
) -> dict:
    if user_type is UserType.STUDENT:
        return {"id": user_id, "name": name, "max_units": max_units}
    if user_type is UserType.TEACHER:
        return {
            "id": user_id,
            "name": name,
            "max_courses": max_courses,
            "courses_taught": courses_taught,
        }
    if user_type is UserType.ADMIN:
        return {"id": user_id, "name": name}
    raise ValueError(f"unhandled user type: {user_type!r}")


def _to_record(db: Session, user_id: int, username: str, user_type: UserType) -> UserRecord:
    model = role_model(user_type)
    name = db.query(model.name).filter(model.id == user_id).scalar()
    return UserRecord(id=user_id, username=username, name=name, user_type=user_type)


@read_only("checking username", default_factory=lambda: False)
def username_exists(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None


@read_only("loading user", default_factory=lambda: None)
def get_user_record(db: Session, username: str) -> UserRecord | None:
    row = (
        db.query(User.id, User.username, User.user_type)
        .filter(User.username == username)
        .first()
    )
    if row is None:
        return None
    return _to_record(db, row.id, row.username, row.user_type)


@read_only("authenticating user", default_factory=lambda: None)
def authenticate_user(db: Session, username: str, password: str) -> UserRecord | None:
    """
    Returns the user's record when the credentials match, otherwise None.
    Unknown usernames and wrong passwords are indistinguishable to callers.
    """
    row = (
        db.query(User.id, User.username, User.user_type, User.password_hash)
        .filter(User.username == username)
        .first()
    )
    if row is None:
        dummy_verify()
        return None
    if not verify_password(password, row.password_hash):
        return None
    return _to_record(db, row.id, row.username, row.user_type)


def create_user(
    db: Session,
    username: str,
    password: str,
    user_type: UserType | str,
    name: str,
    *,
    max_units: float = DEFAULT_MAX_UNITS,
    max_courses: int = DEFAULT_MAX_COURSES,
    courses_taught: int = DEFAULT_COURSES_TAUGHT,
) -> ActionResult:
    """
    Create a login plus its role row in one transaction.

    The user type is checked before any transaction is opened. A duplicate
    username is reported as a ``duplicate`` failure and nothing is written.
    """
    try:
        kind = UserType.parse(user_type)
    except ValueError:
        logger.warning("Invalid user type: %s", user_type)
        return ActionResult.failure(
            FailureReason.INVALID, f"Invalid user type: {user_type}"
        )

    return _insert_account(
        db,
        username,
        password,
        kind,
        name,
        max_units=max_units,
        max_courses=max_courses,
        courses_taught=courses_taught,
    )


@transactional("creating user")
def _insert_account(
    db: Session,
    username: str,
    password: str,
    kind: UserType,
    name: str,
    *,
    max_units: float,
    max_courses: int,
    courses_taught: int,
) -> ActionResult:
    try:
        result = db.execute(
            insert(User.__table__).values(
                username=username,
                password_hash=hash_password(password),
                user_type=kind,
            )
        )
    except IntegrityError:
        logger.warning("Username already exists: %s", username)
        return ActionResult.failure(
            FailureReason.DUPLICATE, f"Username '{username}' already exists"
        )

    user_id = result.inserted_primary_key[0]
    db.execute(
        insert(role_model(kind).__table__).values(
            **_role_values(kind, user_id, name, max_units, max_courses, courses_taught)
        )
    )

    logger.info("User created successfully with ID: %s (%s)", user_id, kind.value)
    return ActionResult.success(f"User '{username}' created successfully")
