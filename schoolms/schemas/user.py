from pydantic import BaseModel, Field, field_validator, model_validator

from schoolms.core.config import (
    DEFAULT_COURSES_TAUGHT,
    DEFAULT_MAX_COURSES,
    DEFAULT_MAX_UNITS,
    MIN_PASSWORD_LENGTH,
)
from schoolms.models.user import UserType


class UserRecord(BaseModel):
    id: int
    username: str
    name: str | None = None
    user_type: UserType

    class Config:
        from_attributes = True


class RegisterRequest(BaseModel):
    user_type: UserType
    name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)
    confirm_password: str

    @field_validator("user_type", mode="before")
    @classmethod
    def _lower_user_type(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("name", "username", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_form(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        # student usernames double as the student ID
        if self.user_type is UserType.STUDENT and not self.username.isdigit():
            raise ValueError("Student username must be numeric (Student ID)")
        return self


class StudentCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    max_units: float = Field(default=DEFAULT_MAX_UNITS, gt=0)


class TeacherCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    max_courses: int = Field(default=DEFAULT_MAX_COURSES, ge=0)
    courses_taught: int = Field(default=DEFAULT_COURSES_TAUGHT, ge=0)


class StudentSummary(BaseModel):
    id: int
    name: str
    username: str
    enrolled_courses: int


class TeacherSummary(BaseModel):
    id: int
    name: str
    username: str
    courses_teaching: int
