from pydantic import BaseModel


class EnrollmentCreate(BaseModel):
    crn: int


class CurrentCourse(BaseModel):
    crn: int
    course_name: str
    credits: float
    instructor: str
    enrollment_order: int
    grade: float | None = None
    attendance: float | None = None


class CompletedCourse(BaseModel):
    crn: int
    course_name: str
    credits: float
    grade: float
    attendance: float
