from pydantic import BaseModel, Field

from schoolms.core.config import GRADE_MAX, GRADE_MIN


class CourseStudentInfo(BaseModel):
    id: int
    name: str
    enrollment_order: int
    grade: float | None = None
    attendance: float | None = None


class GradeUpdate(BaseModel):
    grade: float = Field(ge=GRADE_MIN, le=GRADE_MAX)


class AttendanceUpdate(BaseModel):
    attendance: float = Field(ge=GRADE_MIN, le=GRADE_MAX)
