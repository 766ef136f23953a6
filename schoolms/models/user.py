import enum

from sqlalchemy import Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolms.core.config import (
    DEFAULT_COURSES_TAUGHT,
    DEFAULT_MAX_COURSES,
    DEFAULT_MAX_UNITS,
)
from schoolms.db.base_class import Base


class UserType(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: "str | UserType") -> "UserType":
        """Case-insensitive lookup; raises ValueError for unknown types."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_type: Mapped[UserType] = mapped_column(
        Enum(
            UserType,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )


# Role tables share the users.id key (1:1 with User).


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True, autoincrement=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_units: Mapped[float] = mapped_column(
        Float, nullable=False, default=DEFAULT_MAX_UNITS
    )
    # highest enrollment_order handed out so far
    last_enrollment_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )


class Teacher(Base):
    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True, autoincrement=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_courses: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_MAX_COURSES
    )
    courses_taught: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_COURSES_TAUGHT
    )
    # highest course_order handed out so far
    last_course_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True, autoincrement=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
